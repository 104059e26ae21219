# megafone/prompt_loader.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from jinja2 import Environment, StrictUndefined

from megafone.errors import ConfigError
from megafone.models import TemplateSelection
from megafone.utils import load_file

PROMPT_DIR = Path(__file__).resolve().parent / "prompts"

_env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True, undefined=StrictUndefined)


@dataclass
class PostTemplate:
    """Style guide text plus the system message used for the drafting call."""

    system: str
    text: str
    source: str


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(load_file(str(path))) or {}
    except OSError as e:
        raise ConfigError(f"cannot read prompt file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML prompt file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"prompt file {path} must be a mapping")
    return data


def render_prompt(name: str, **context) -> tuple[str, str]:
    """Render a bundled ``prompts/<name>.yaml`` into (system, task)."""
    data = _read_yaml(PROMPT_DIR / f"{name}.yaml")
    sys_part = _env.from_string(data.get("system", "")).render(**context)
    task_part = _env.from_string(data.get("task", "")).render(**context)
    return sys_part.strip(), task_part.strip() + "\n"


def _from_file(path: Path, default_system: str) -> PostTemplate:
    if path.suffix.lower() in (".yaml", ".yml"):
        data = _read_yaml(path)
        return PostTemplate(
            system=(data.get("system") or default_system).strip(),
            text=(data.get("template") or "").strip(),
            source=str(path),
        )
    try:
        text = load_file(str(path))
    except OSError as e:
        raise ConfigError(f"failed to read prompt file {path}: {e}") from e
    return PostTemplate(system=default_system, text=text.strip(), source=str(path))


def load_template(selection: TemplateSelection, prompt_file: Optional[str] = None,
                  templates_dir: Optional[str] = None) -> PostTemplate:
    """Resolve the post template: explicit file, site templates dir, bundled default."""
    bundled = PROMPT_DIR / f"{selection.value}.yaml"
    default = _from_file(bundled, "")

    if prompt_file:
        return _from_file(Path(prompt_file).expanduser(), default.system)

    if templates_dir:
        base = Path(templates_dir).expanduser()
        for suffix in (".yaml", ".yml", ".txt", ".md"):
            candidate = base / f"{selection.value}{suffix}"
            if candidate.is_file():
                return _from_file(candidate, default.system)

    return default
