"""Login exchange with the Stand App server."""

from .authenticator import SessionAuthenticator, extract_session_token, session_headers
from .outcome import LoginOutcome, LoginRejected, LoginStatus, LoginSuccess, LoginTransportError
from .transport import AiohttpTransport, HttpTransport, TransportFailure, TransportResponse

__all__ = [
    "AiohttpTransport",
    "HttpTransport",
    "LoginOutcome",
    "LoginRejected",
    "LoginStatus",
    "LoginSuccess",
    "LoginTransportError",
    "SessionAuthenticator",
    "TransportFailure",
    "TransportResponse",
    "extract_session_token",
    "session_headers",
]
