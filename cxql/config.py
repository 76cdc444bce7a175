"""CXQL config loader.

Reads cxql.config (YAML) from the project directory.
Caches result after first load. Call _reset_config() in tests.
"""

from __future__ import annotations

import copy
import os

import yaml

from cxql.errors import ConfigError
from cxql.parser import ParserOptions

CONFIG_FILENAME = "cxql.config"

_config = None

DEFAULTS = {
    "parser": {
        "legacy_connect": False,
    },
    "formatter": {
        "indent": 2,
    },
    "cli": {
        "output": "sexp",
    },
}

OUTPUT_FORMATS = ("sexp", "json")


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = copy.deepcopy(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _validate(config: dict) -> None:
    for section in DEFAULTS:
        if not isinstance(config.get(section), dict):
            raise ConfigError(f"{section} must be a mapping, got {config.get(section)!r}")
    indent = config["formatter"]["indent"]
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
        raise ConfigError(f"formatter.indent must be a non-negative integer, got {indent!r}")
    if config["cli"]["output"] not in OUTPUT_FORMATS:
        raise ConfigError(
            f"cli.output must be one of {', '.join(OUTPUT_FORMATS)}, got {config['cli']['output']!r}"
        )


def get_config(config_dir: str | None = None) -> dict:
    """Load and return the CXQL config, caching after first call."""
    global _config
    if _config is not None:
        return _config

    if config_dir is None:
        config_dir = os.getcwd()

    config_path = os.path.join(config_dir, CONFIG_FILENAME)

    if os.path.exists(config_path):
        with open(config_path, encoding="utf-8") as f:
            try:
                user_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"{config_path}: invalid YAML: {e}") from e
        if user_config and isinstance(user_config, dict):
            config = _deep_merge(DEFAULTS, user_config)
        else:
            config = copy.deepcopy(DEFAULTS)
    else:
        config = copy.deepcopy(DEFAULTS)

    _validate(config)
    _config = config
    return _config


def parser_options(config: dict | None = None) -> ParserOptions:
    """Build ParserOptions from the ``parser`` section of the config."""
    if config is None:
        config = get_config()
    return ParserOptions(legacy_connect=bool(config["parser"]["legacy_connect"]))


def _reset_config():
    """Clear cached config. Call this in tests."""
    global _config
    _config = None
