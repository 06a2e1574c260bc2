"""Auto-login on application start.

Runs once per launch: reads the saved credentials, replays them against the
server without user interaction and reconciles the vault with the outcome.
A refused or failed auto-login purges the saved credentials silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from ..auth import LoginOutcome, LoginRejected, LoginStatus, LoginSuccess, SessionAuthenticator
from ..credential import CredentialRecord, CredentialVault
from ..errors import ValidationError


class AutoLoginState(str, Enum):
    """Auto-login progress."""

    IDLE = "idle"
    CHECKING_STORE = "checking_store"
    AUTHENTICATING = "authenticating"
    RESOLVED = "resolved"
    TERMINAL = "terminal"


class Destination(str, Enum):
    """Surface the presentation layer should show next."""

    LOGIN = "login"
    HOME = "home"
    SETUP = "setup"


@dataclass(frozen=True)
class AutoLoginResult:
    """What happened during auto-login and where to go next.

    Only the outcome status is kept; auto-login never has a message to show.
    """

    attempted: bool
    destination: Destination
    status: Optional[LoginStatus] = None

    @property
    def authenticated(self) -> bool:
        return self.status == LoginStatus.SUCCESS


def destination_for(outcome: LoginOutcome) -> Destination:
    if isinstance(outcome, LoginSuccess):
        return Destination.SETUP if outcome.redirect_to_setup else Destination.HOME
    return Destination.LOGIN


def record_from_success(record: CredentialRecord, outcome: LoginSuccess) -> CredentialRecord:
    """Saved record refreshed with the role and token of a new session."""
    return record.model_copy(update={"role": outcome.role, "session_token": outcome.session_token})


class AutoLoginOrchestrator:
    """Drives the non-interactive login at startup."""

    def __init__(self, vault: CredentialVault, authenticator: SessionAuthenticator):
        self.vault = vault
        self.authenticator = authenticator
        self._state = AutoLoginState.IDLE
        self._in_flight = False
        self._result: Optional[AutoLoginResult] = None

    @property
    def state(self) -> AutoLoginState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def result(self) -> Optional[AutoLoginResult]:
        return self._result

    async def run(self) -> Optional[AutoLoginResult]:
        """Attempt auto-login.

        Returns:
            The result, or None when another attempt is already in flight.
            Once finished, later calls return the first result without
            contacting the server again.
        """
        if self._in_flight:
            logger.debug("Auto-login already in progress, ignoring")
            return None

        if self._result is not None:
            return self._result

        self._in_flight = True
        try:
            self._state = AutoLoginState.CHECKING_STORE
            record = await self.vault.load()

            if record is None:
                logger.info("No saved credentials, auto-login not attempted")
                self._result = AutoLoginResult(attempted=False, destination=Destination.LOGIN)
                return self._result

            self._state = AutoLoginState.AUTHENTICATING
            try:
                outcome = await self.authenticator.authenticate(record.server_address, record.username, record.password)
            except ValidationError as e:
                outcome = LoginRejected(message=e.message)

            self._state = AutoLoginState.RESOLVED
            await self._reconcile(record, outcome)

            self._result = AutoLoginResult(attempted=True, destination=destination_for(outcome), status=outcome.status)
            return self._result

        finally:
            self._state = AutoLoginState.TERMINAL
            self._in_flight = False

    async def _reconcile(self, record: CredentialRecord, outcome: LoginOutcome) -> None:
        if isinstance(outcome, LoginSuccess):
            await self.vault.save(record_from_success(record, outcome))
            logger.info(f"Auto-login succeeded for {record.username}")
            return

        # Not shown to the user; the login surface simply stays visible
        logger.info(f"Auto-login failed ({outcome.status.value}): {outcome.message}")
        await self.vault.clear()
