#!/usr/bin/env python3
"""Check a megafone YAML config against the bundled schema."""
import argparse, sys, pathlib

import yaml

from megafone.errors import ConfigError
from megafone.utils import validate_config


def main(argv=None):
    ap = argparse.ArgumentParser(description="Validate a megafone config file")
    ap.add_argument("--config", required=True)
    args = ap.parse_args(argv)
    cfg_path = pathlib.Path(args.config)
    try:
        cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
        validate_config(cfg)
    except (OSError, yaml.YAMLError, ConfigError) as e:
        print("[ERROR] Config invalid:", e)
        return 2
    print("[OK] Config valid:", cfg_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
