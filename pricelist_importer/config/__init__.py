"""Configuration loading (YAML + JSON schema validation)."""

from .loader import DEFAULT_CONFIG_PATH, ConfigError, load_config

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "load_config",
]
