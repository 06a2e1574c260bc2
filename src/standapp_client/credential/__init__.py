"""Stand App credential management module.

This module owns the persisted identity bundle: server address, username,
password, role and session token.
"""

from .models import CredentialRecord
from .vault import IDENTITY_KEYS, CredentialVault

__all__ = [
    "CredentialRecord",
    "CredentialVault",
    "IDENTITY_KEYS",
]
