"""Stand App client - session lifecycle and update checks for the Stand App."""

from .config import ClientConfig, get_config_manager
from .core import StandAppClient, create_client

__version__ = "1.0.0"

__all__ = ["ClientConfig", "StandAppClient", "create_client", "get_config_manager"]
