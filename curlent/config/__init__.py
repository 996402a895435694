"""Configuration loading for curlent."""

from curlent.config.config import ConfigManager, default_config_path

__all__ = ["ConfigManager", "default_config_path"]
