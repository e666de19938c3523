"""Configuration module -- exports Settings, load_config, and a module-level singleton."""

from transmog_catalog.config.loader import (
    hydration_options,
    load_classification_tables,
    load_config,
)
from transmog_catalog.config.settings import Settings

settings = Settings()

__all__ = [
    "Settings",
    "hydration_options",
    "load_classification_tables",
    "load_config",
    "settings",
]
