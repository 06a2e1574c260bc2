"""Configuration management for the Stand App client.

This module provides the client configuration with environment variable
overrides, and a small manager the presentation layer can hold on to.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_SERVER_ADDRESS = "http://10.0.2.2:5000"  # Android emulator host loopback
DEFAULT_RELEASE_FEED_URL = "https://api.github.com/repos/standapp/standapp-mobile/releases/latest"


@dataclass
class ClientConfig:
    """Complete Stand App client configuration."""

    # Server settings
    default_server_address: str = DEFAULT_SERVER_ADDRESS
    request_timeout_seconds: float = 30.0

    # Local persistence
    data_dir: Path = field(default_factory=lambda: Path.home() / ".standapp")
    store_filename: str = "preferences.json"

    # Session settings
    default_role: str = "Betrachter"

    # Update check
    current_version: str = "1.0.0"
    release_feed_url: str = DEFAULT_RELEASE_FEED_URL
    update_check_delay_seconds: float = 3.0

    # Logging
    log_level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_rotation: str = "1 MB"
    log_retention: str = "7 days"

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_filename

    @property
    def log_file_path(self) -> Path:
        return self.data_dir / "logs" / "standapp.log"

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if server_url := os.getenv("STANDAPP_SERVER_URL"):
            self.default_server_address = server_url

        if data_dir := os.getenv("STANDAPP_DATA_DIR"):
            self.data_dir = Path(data_dir)

        if feed_url := os.getenv("STANDAPP_RELEASE_FEED_URL"):
            self.release_feed_url = feed_url

        if delay := os.getenv("STANDAPP_UPDATE_CHECK_DELAY"):
            try:
                self.update_check_delay_seconds = float(delay)
            except ValueError:
                logger.warning(f"Invalid update check delay: {delay}")

        if timeout := os.getenv("STANDAPP_REQUEST_TIMEOUT"):
            try:
                self.request_timeout_seconds = float(timeout)
            except ValueError:
                logger.warning(f"Invalid request timeout: {timeout}")

        if log_level := os.getenv("STANDAPP_LOG_LEVEL"):
            self.log_level = log_level.upper()

        if log_to_file := os.getenv("STANDAPP_LOG_TO_FILE"):
            self.log_to_file = log_to_file.strip().lower() in ("1", "true", "yes", "on")

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.default_server_address:
            errors.append("Default server address is required")

        if not self.release_feed_url:
            errors.append("Release feed URL is required")

        if not self.default_role:
            errors.append("Default role is required")

        if self.request_timeout_seconds <= 0:
            errors.append("Request timeout must be positive")

        if self.update_check_delay_seconds < 0:
            errors.append("Update check delay must not be negative")

        return len(errors) == 0, errors


class ConfigManager:
    """Manages Stand App client configuration."""

    def __init__(self):
        self._config: Optional[ClientConfig] = None

    def load_config(self, **overrides) -> ClientConfig:
        """Load configuration with optional overrides.

        Args:
            **overrides: Field values replacing defaults and environment values

        Returns:
            Configured ClientConfig instance
        """
        config = ClientConfig()

        for name, value in overrides.items():
            if value is None:
                continue
            if not hasattr(config, name):
                raise TypeError(f"Unknown configuration field: {name}")
            setattr(config, name, value)

        self._config = config
        return config

    def get_config(self) -> Optional[ClientConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance, for the presentation layer
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def get_current_config() -> Optional[ClientConfig]:
    """Get the current configuration."""
    return _config_manager.get_config()
