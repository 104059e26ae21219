"""Run settings: YAML config file, CLI overrides and site path checks."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from megafone.config.constants import DEFAULT_CONFIG
from megafone.errors import ConfigError
from megafone.utils import load_file, validate_config


@dataclass
class Settings:
    model: str = DEFAULT_CONFIG["model"]
    image_model: str = DEFAULT_CONFIG["image_model"]
    image_size: str = DEFAULT_CONFIG["image_size"]
    templates_dir: Optional[str] = DEFAULT_CONFIG["templates_dir"]
    research_max_tokens: int = DEFAULT_CONFIG["research_max_tokens"]
    research_max_chars: int = DEFAULT_CONFIG["research_max_chars"]
    draft_temperature: float = DEFAULT_CONFIG["draft_temperature"]


def load_settings(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Merge defaults, an optional YAML file and CLI overrides (highest wins)."""
    cfg: Dict[str, Any] = {}
    if config_path:
        try:
            cfg = yaml.safe_load(load_file(config_path)) or {}
        except OSError as e:
            raise ConfigError(f"cannot read config {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {config_path}: {e}") from e
        validate_config(cfg)

    for key, value in (overrides or {}).items():
        if value is not None:
            cfg[key] = value

    known = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in cfg.items() if k in known})


def resolve_site_path(site_source: Optional[str]) -> Path:
    """Return the absolute site root; it must contain a ``content`` directory."""
    if not site_source:
        print("\nNo Hugo site source path provided.")
        print("\nTo clone your Hugo site repository, run:")
        print("  git clone <your-hugo-site-repo-url> /path/to/hugo-site")
        print("\nThen use --site-source flag:")
        print("  megafone generate --topic <url> --site-source /path/to/hugo-site\n")
        raise ConfigError("Hugo site source path required (use --site-source)")

    root = Path(site_source).expanduser().resolve()
    if not root.exists():
        raise ConfigError(f"site-source does not exist: {root}")
    if not (root / "content").is_dir():
        raise ConfigError(f"path does not appear to be a Hugo site (no content/ directory): {root}")
    return root


def resolve_api_key(flag_value: Optional[str]) -> str:
    api_key = flag_value or os.getenv("OPENAI_API_KEY", "")
    if not api_key:
        raise ConfigError("OpenAI API key required (use --openai-key or OPENAI_API_KEY env var)")
    return api_key
