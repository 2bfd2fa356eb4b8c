"""Configuration management for Cluster Ideas."""

from .loader import Config, default_config_path, load_config, save_config
from .models import ConfigModel, DisplayConfig, PostgresConfig

__all__ = [
    "Config",
    "ConfigModel",
    "DisplayConfig",
    "PostgresConfig",
    "default_config_path",
    "load_config",
    "save_config",
]
