"""Stand App client composition root.

Builds every session component once at startup and hands them to the
presentation layer:
- Preference store and credential vault
- HTTP transport and session authenticator
- Auto-login orchestrator and interactive login controller
- Delayed update check
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from ..auth import AiohttpTransport, HttpTransport, SessionAuthenticator
from ..config import ClientConfig, get_config_manager, setup_logging
from ..credential import CredentialVault
from ..session import AutoLoginOrchestrator, AutoLoginResult, LoginController
from ..storage import JsonFileStore, KeyValueStore
from ..update import VersionGate
from ..update.checker import PromptCallback


class StandAppClient:
    """Session core of the Stand App, wired from one configuration."""

    def __init__(
        self,
        config: ClientConfig,
        store: Optional[KeyValueStore] = None,
        transport: Optional[HttpTransport] = None,
    ):
        """Initialize the client.

        Args:
            config: Client configuration
            store: Preference store; a JSON file under ``config.data_dir`` by default
            transport: HTTP transport; aiohttp by default
        """
        self.config = config

        self.store = store if store is not None else JsonFileStore(config.store_path)
        self.transport = transport if transport is not None else AiohttpTransport(timeout_seconds=config.request_timeout_seconds)

        self.vault = CredentialVault(self.store)
        self.authenticator = SessionAuthenticator(self.transport, default_role=config.default_role)
        self.auto_login = AutoLoginOrchestrator(self.vault, self.authenticator)
        self.login_controller = LoginController(
            self.vault,
            self.authenticator,
            auto_login=self.auto_login,
            default_server_address=config.default_server_address,
        )
        self.version_gate = VersionGate(
            self.transport,
            feed_url=config.release_feed_url,
            delay_seconds=config.update_check_delay_seconds,
        )

        logger.info(f"Initialized Stand App client (version {config.current_version})")

    async def start(self, on_update: Optional[PromptCallback] = None) -> Optional[AutoLoginResult]:
        """Schedule the update check, then run auto-login.

        The update delay counts from this call, and the check still runs when
        auto-login raises.

        Args:
            on_update: Called with the decision when an upgrade should be offered

        Returns:
            The auto-login result the presentation layer navigates on
        """
        logger.info("Starting Stand App client...")

        if on_update is not None:
            self.version_gate.schedule(self.config.current_version, on_update)

        return await self.auto_login.run()

    async def close(self) -> None:
        self.version_gate.cancel()
        await self.transport.close()
        logger.info("Stand App client closed")


def create_client(**overrides) -> StandAppClient:
    """Create a client from environment configuration, with logging set up.

    Args:
        **overrides: Configuration fields replacing defaults and environment values

    Returns:
        Configured Stand App client
    """
    config = get_config_manager().load_config(**overrides)

    is_valid, errors = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    setup_logging(config)
    return StandAppClient(config)
