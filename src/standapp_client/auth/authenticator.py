"""Session authenticator for the Stand App server.

Performs the form-encoded login exchange, pulls the session cookie out of
the response and classifies the result as a ``LoginOutcome``. No retries
happen here; retry policy belongs to the caller.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from loguru import logger

from ..errors import ValidationError
from .outcome import LoginOutcome, LoginRejected, LoginSuccess, LoginTransportError
from .transport import HttpTransport, TransportFailure, TransportResponse

LOGIN_PATH = "/login"
LOGOUT_PATH = "/api/logout"

DEFAULT_ROLE = "Betrachter"

LOGIN_OK_MESSAGE = "Login successful."
LOGIN_FAILED_MESSAGE = "Login failed."
UNEXPECTED_STATUS_MESSAGE = "An unexpected error occurred. Status: {status}"


def extract_session_token(set_cookie: Optional[str]) -> Optional[str]:
    """Return the ``name=value`` pair of a Set-Cookie header value.

    Attributes such as ``Path`` or ``HttpOnly`` are dropped.
    """
    if not set_cookie:
        return None
    pair = set_cookie.split(";", 1)[0].strip()
    return pair or None


def session_headers(session_token: Optional[str]) -> dict[str, str]:
    """Headers replaying the session cookie on authenticated requests."""
    if not session_token:
        return {}
    return {"Cookie": session_token}


def join_url(server_address: str, path: str) -> str:
    return f"{server_address.rstrip('/')}{path}"


def _decode_body(body: str) -> Optional[dict[str, Any]]:
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _message_from(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not data:
        return None
    message = data.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return None


class SessionAuthenticator:
    """Logs a user in against ``{server}/login`` and classifies the answer."""

    def __init__(self, transport: HttpTransport, default_role: str = DEFAULT_ROLE):
        """Initialize the authenticator.

        Args:
            transport: HTTP collaborator used for the exchange
            default_role: Role assumed when the server does not send one
        """
        self.transport = transport
        self.default_role = default_role

    @staticmethod
    def validate_inputs(server_address: str, username: str, password: str) -> tuple[str, str, str]:
        """Trim the three inputs and reject any that are empty.

        Raises:
            ValidationError: If a field is missing after trimming
        """
        fields = {
            "server_address": (server_address or "").strip(),
            "username": (username or "").strip(),
            "password": (password or "").strip(),
        }
        missing = tuple(name for name, value in fields.items() if not value)
        if missing:
            raise ValidationError(missing=missing)
        return fields["server_address"].rstrip("/"), fields["username"], fields["password"]

    async def authenticate(self, server_address: str, username: str, password: str) -> LoginOutcome:
        """Run one login exchange.

        Raises:
            ValidationError: Before any network call, when an input is empty

        Returns:
            ``LoginSuccess``, ``LoginRejected`` or ``LoginTransportError``
        """
        server_address, username, password = self.validate_inputs(server_address, username, password)
        url = join_url(server_address, LOGIN_PATH)

        logger.info(f"Logging in as {username} at {server_address}")

        try:
            response = await self.transport.post_form(url, {"username": username, "password": password})
        except TransportFailure as e:
            logger.warning(f"Login transport failure: {e.detail}")
            return LoginTransportError(detail=e.detail)
        except Exception as e:
            logger.error(f"Unexpected error during login: {e}")
            return LoginTransportError(detail=str(e) or type(e).__name__)

        return self.classify(response)

    def classify(self, response: TransportResponse) -> LoginOutcome:
        """Turn a raw login response into an outcome."""
        data = _decode_body(response.body)

        if response.ok:
            if data is not None and data.get("success") is True:
                return self._success(response, data)

            message = _message_from(data) or LOGIN_FAILED_MESSAGE
            logger.warning(f"Server rejected login: {message}")
            return LoginRejected(message=message, http_status=response.status)

        message = _message_from(data) or UNEXPECTED_STATUS_MESSAGE.format(status=response.status)
        logger.warning(f"Login failed with HTTP {response.status}: {message}")
        return LoginRejected(message=message, http_status=response.status)

    def _success(self, response: TransportResponse, data: Mapping[str, Any]) -> LoginSuccess:
        role = data.get("user_role")
        if not isinstance(role, str) or not role.strip():
            role = self.default_role

        token = extract_session_token(response.header("Set-Cookie"))
        if token is None:
            logger.debug("Login response carried no session cookie")

        outcome = LoginSuccess(
            role=role,
            session_token=token,
            redirect_to_setup=data.get("redirect_to_setup") is True,
            message=_message_from(data) or LOGIN_OK_MESSAGE,
        )
        logger.info(f"Login successful, role: {outcome.role}, setup required: {outcome.redirect_to_setup}")
        return outcome

    async def logout(self, server_address: str, session_token: Optional[str] = None) -> tuple[bool, str]:
        """Tell the server the session is over.

        Returns:
            Tuple of (success, message)
        """
        url = join_url(server_address, LOGOUT_PATH)
        try:
            response = await self.transport.get(url, headers=session_headers(session_token))
        except TransportFailure as e:
            logger.warning(f"Logout transport failure: {e.detail}")
            return False, f"Connection error while logging out: {e.detail}"
        except Exception as e:
            logger.error(f"Unexpected error during logout: {e}")
            return False, f"Connection error while logging out: {e}"

        if response.status == 200:
            logger.info("Logged out from server")
            return True, "Logged out successfully."

        logger.warning(f"Logout failed with HTTP {response.status}")
        return False, f"Logout failed. Status: {response.status}"
