"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. Settings defaults   -- the field defaults in settings.py
  2. config/config.yaml  -- hydration tuning and the classification tables
  3. .env file / environment variables -- only the values actually set

``_deep_merge`` does recursive merging:

    base = {"hydration": {"batch_size": 4}}
    overrides = {"hydration": {"on_startup": False}}
    result = {"hydration": {"batch_size": 4, "on_startup": False}}
"""

from pathlib import Path
from typing import Any

import yaml

from transmog_catalog.config.game_data import CLASS_KEYWORDS, GLADIATOR_HINTS
from transmog_catalog.config.settings import Settings
from transmog_catalog.utils.errors import ConfigurationError

# YAML key under ``hydration`` -> Settings field.
_HYDRATION_FIELDS: dict[str, str] = {
    "batch_size": "hydration_batch_size",
    "batch_delay_ms": "hydration_batch_delay_ms",
    "persist_every": "hydration_persist_every",
    "on_startup": "hydration_on_startup",
    "interval_hours": "hydration_interval_hours",
}


def load_config(path: str | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge it with environment-based Settings.

    Settings defaults sit below the YAML file; values that were explicitly
    set through the environment or ``.env`` override it.

    Args:
        path: Path to the YAML configuration file. Defaults to
            ``settings.config_file``.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file exists but cannot be parsed.
    """
    if settings is None:
        settings = Settings()

    config_path = Path(path or settings.config_file)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                message=f"Could not parse {config_path}: {exc}"
            ) from exc
    else:
        yaml_config = {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(message=f"{config_path} must contain a mapping")

    defaults = {
        "hydration": {key: getattr(settings, field) for key, field in _HYDRATION_FIELDS.items()}
    }
    env_overrides = {
        "hydration": {
            key: getattr(settings, field)
            for key, field in _HYDRATION_FIELDS.items()
            if field in settings.model_fields_set
        }
    }

    config: dict = {}
    _deep_merge(config, defaults)
    _deep_merge(config, yaml_config)
    _deep_merge(config, env_overrides)
    return config


def hydration_options(config: dict) -> dict[str, Any]:
    """Pipeline and scheduler keyword arguments from the ``hydration`` section."""
    section = config.get("hydration") or {}
    try:
        return {
            "batch_size": int(section["batch_size"]),
            "batch_delay_ms": int(section["batch_delay_ms"]),
            "persist_every": int(section["persist_every"]),
            "on_startup": bool(section["on_startup"]),
            "interval_hours": float(section["interval_hours"]),
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(message=f"Invalid hydration config: {exc}") from exc


def load_classification_tables(config: dict) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    """Return ``(class_keywords, gladiator_hints)`` with YAML overrides applied.

    A class listed under ``classification.class_keywords`` replaces that
    class's built-in keyword list; classes not mentioned keep the defaults.
    Dictionary order of the built-in table is preserved so keyword ties
    resolve the same way with or without overrides.
    """
    section = config.get("classification") or {}

    keywords = {cls: list(words) for cls, words in CLASS_KEYWORDS.items()}
    for cls, words in (section.get("class_keywords") or {}).items():
        if not isinstance(words, list):
            raise ConfigurationError(
                message=f"classification.class_keywords.{cls} must be a list"
            )
        keywords[cls] = [str(w).lower() for w in words]

    hints = {hint: list(classes) for hint, classes in GLADIATOR_HINTS.items()}
    for hint, classes in (section.get("gladiator_hints") or {}).items():
        if not isinstance(classes, list):
            raise ConfigurationError(
                message=f"classification.gladiator_hints.{hint} must be a list"
            )
        hints[str(hint).lower()] = [str(c) for c in classes]

    return keywords, hints


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
