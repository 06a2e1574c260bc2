"""Interactive login and logout for the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ..auth import LoginOutcome, LoginSuccess, SessionAuthenticator
from ..config.settings import DEFAULT_SERVER_ADDRESS
from ..credential import CredentialRecord, CredentialVault
from ..errors import ValidationError
from .auto_login import AutoLoginOrchestrator, Destination, destination_for


@dataclass(frozen=True)
class LoginForm:
    """Initial contents of the login form."""

    server_address: str
    username: str = ""
    password: str = ""


@dataclass(frozen=True)
class LoginResult:
    destination: Destination
    message: Optional[str] = None
    outcome: Optional[LoginOutcome] = None

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, LoginSuccess)


@dataclass(frozen=True)
class LogoutResult:
    success: bool
    message: str


class LoginController:
    """Runs user-initiated logins; every failure message is surfaced."""

    def __init__(
        self,
        vault: CredentialVault,
        authenticator: SessionAuthenticator,
        auto_login: Optional[AutoLoginOrchestrator] = None,
        default_server_address: str = DEFAULT_SERVER_ADDRESS,
    ):
        self.vault = vault
        self.authenticator = authenticator
        self.auto_login = auto_login
        self.default_server_address = default_server_address
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight or (self.auto_login is not None and self.auto_login.in_flight)

    async def initial_form(self) -> LoginForm:
        """Form prefilled from saved credentials, or the default server address."""
        record = await self.vault.load()
        if record is None:
            return LoginForm(server_address=self.default_server_address)
        return LoginForm(server_address=record.server_address, username=record.username, password=record.password)

    async def login(self, server_address: str, username: str, password: str) -> Optional[LoginResult]:
        """Log in with what the user typed.

        Returns:
            The result, or None when a login is already in progress
        """
        if self.busy:
            logger.debug("Login already in progress, ignoring")
            return None

        self._in_flight = True
        try:
            try:
                server_address, username, password = self.authenticator.validate_inputs(server_address, username, password)
            except ValidationError as e:
                return LoginResult(destination=Destination.LOGIN, message=e.message)

            outcome = await self.authenticator.authenticate(server_address, username, password)

            if isinstance(outcome, LoginSuccess):
                record = CredentialRecord(
                    server_address=server_address,
                    username=username,
                    password=password,
                    role=outcome.role,
                    session_token=outcome.session_token,
                )
                await self.vault.save(record)

            return LoginResult(destination=destination_for(outcome), message=outcome.message, outcome=outcome)

        finally:
            self._in_flight = False

    async def logout(self) -> LogoutResult:
        """Forget the saved credentials, then tell the server.

        The local purge happens even when the server cannot be reached.
        """
        record = await self.vault.load()
        await self.vault.clear()

        if record is None:
            return LogoutResult(success=True, message="Logged out.")

        success, message = await self.authenticator.logout(record.server_address, record.session_token)
        return LogoutResult(success=success, message=message)

    async def has_role(self, *required_roles: str) -> bool:
        """Whether the saved role is one of ``required_roles``."""
        role = await self.vault.load_role()
        if role is None:
            return False
        return role in required_roles
