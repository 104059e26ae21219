import os
import sys
import re
import json
import datetime as dt
import logging
from pathlib import Path

from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError

from megafone.errors import ConfigError, OutputError

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

# ---------- Time helpers ----------

def now_local():
    return dt.datetime.now()

def today_iso() -> str:
    return now_local().strftime("%Y-%m-%d")

# ---------- Text helpers ----------

def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()

def truncate(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit]

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def validate_config(cfg: dict):
    schema = json.loads(load_file(str(SCHEMA_DIR / "config.schema.json")))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ConfigError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Logging ----------

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

def build_run_logger(name: str = "megafone.run") -> logging.Logger:
    """Console logger for one invocation; ``attach_log_file`` adds the file sink."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger(name)
    close_run_logger(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(getattr(logging, level, logging.INFO))
    ch.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    logger.addHandler(ch)
    return logger

def attach_log_file(logger: logging.Logger, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        raise OutputError(f"failed to open log file {path}: {e}") from e
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    logger.addHandler(fh)

def close_run_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

# ---------- Secret redaction ----------

def redact_secrets(s: str, extra: tuple = ()) -> str:
    """Redact sensitive information from strings for safe logging."""
    if not s:
        return s

    env_keys = ["OPENAI_API_KEY", "GITHUB_TOKEN"]

    redacted = s
    for v in [os.getenv(k) for k in env_keys] + list(extra):
        if v and len(v) > 3:
            redacted = redacted.replace(v, "***")

    redacted = re.sub(r"sk-[A-Za-z0-9_\-]{16,}", "sk-***", redacted)
    redacted = re.sub(r"ghp_[A-Za-z0-9]{36}", "ghp_***", redacted)

    return redacted
