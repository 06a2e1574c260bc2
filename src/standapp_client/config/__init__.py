"""Configuration module for the Stand App client."""

from .logger_config import setup_logging
from .settings import ClientConfig, ConfigManager, get_config_manager, get_current_config

__all__ = ["ClientConfig", "ConfigManager", "get_config_manager", "get_current_config", "setup_logging"]
