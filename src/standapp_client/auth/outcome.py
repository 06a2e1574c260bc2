"""Login outcome models.

Every authentication attempt resolves to exactly one of these, so callers
branch on the outcome instead of catching exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class LoginStatus(str, Enum):
    """Enumeration of login attempt outcomes."""

    SUCCESS = "success"
    REJECTED = "rejected"  # Server understood the request and declined it
    TRANSPORT_ERROR = "transport_error"  # No meaningful server response


class LoginSuccess(BaseModel):
    """The server accepted the credentials."""

    model_config = ConfigDict(frozen=True)

    status: Literal[LoginStatus.SUCCESS] = LoginStatus.SUCCESS
    role: str
    session_token: Optional[str] = None
    redirect_to_setup: bool = False
    message: str = ""


class LoginRejected(BaseModel):
    """The server declined the login, or answered with an unusable body."""

    model_config = ConfigDict(frozen=True)

    status: Literal[LoginStatus.REJECTED] = LoginStatus.REJECTED
    message: str
    http_status: Optional[int] = None


class LoginTransportError(BaseModel):
    """The exchange failed before the server gave a meaningful answer."""

    model_config = ConfigDict(frozen=True)

    status: Literal[LoginStatus.TRANSPORT_ERROR] = LoginStatus.TRANSPORT_ERROR
    detail: str

    @property
    def message(self) -> str:
        return f"Connection error: please check the server address and your internet connection. ({self.detail})"


LoginOutcome = Union[LoginSuccess, LoginRejected, LoginTransportError]
