"""Session lifecycle: auto-login at startup, interactive login and logout."""

from .auto_login import AutoLoginOrchestrator, AutoLoginResult, AutoLoginState, Destination
from .login_controller import LoginController, LoginForm, LoginResult, LogoutResult

__all__ = [
    "AutoLoginOrchestrator",
    "AutoLoginResult",
    "AutoLoginState",
    "Destination",
    "LoginController",
    "LoginForm",
    "LoginResult",
    "LogoutResult",
]
