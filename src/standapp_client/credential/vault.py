"""Credential vault for the Stand App client.

This module handles:
- Reading the saved identity bundle and rejecting partial data
- Writing the full bundle after a successful login
- Removing every identity key on logout or failed auto-login

The vault is the only writer of the identity keys in the store.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..storage import KeyValueStore
from .models import CredentialRecord

SERVER_ADDRESS_KEY = "serverAddress"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"
ROLE_KEY = "userRole"
SESSION_COOKIE_KEY = "sessionCookie"

REQUIRED_KEYS = (SERVER_ADDRESS_KEY, USERNAME_KEY, PASSWORD_KEY, ROLE_KEY)
IDENTITY_KEYS = REQUIRED_KEYS + (SESSION_COOKIE_KEY,)


class CredentialVault:
    """Owns the schema and lifecycle of the stored identity bundle."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def load(self) -> Optional[CredentialRecord]:
        """Load the saved record.

        Returns:
            The record when all four required fields are present, None otherwise
        """
        values = {key: await self.store.get_string(key) for key in IDENTITY_KEYS}

        missing = [key for key in REQUIRED_KEYS if not (values[key] or "").strip()]
        if missing:
            if len(missing) < len(REQUIRED_KEYS):
                logger.debug(f"Ignoring partial credentials, missing: {', '.join(missing)}")
            else:
                logger.debug("No saved credentials found")
            return None

        try:
            return CredentialRecord(
                server_address=values[SERVER_ADDRESS_KEY],
                username=values[USERNAME_KEY],
                password=values[PASSWORD_KEY],
                role=values[ROLE_KEY],
                session_token=values[SESSION_COOKIE_KEY],
            )
        except PydanticValidationError as e:
            logger.warning(f"Saved credentials failed validation: {e.error_count()} error(s)")
            return None

    async def save(self, record: CredentialRecord) -> None:
        """Persist all fields of a complete record as one unit.

        An absent session token removes the stored token key instead of
        writing an empty value. Stores offering ``set_many`` commit the record
        in one write; with any other store a failure partway through removes
        every identity key, so old and new fields are never mixed.
        """
        if not isinstance(record, CredentialRecord):
            raise ValueError("save() requires a CredentialRecord")

        values = {
            SERVER_ADDRESS_KEY: record.server_address,
            USERNAME_KEY: record.username,
            PASSWORD_KEY: record.password,
            ROLE_KEY: record.role,
        }
        removed = []
        if record.session_token is None:
            removed.append(SESSION_COOKIE_KEY)
        else:
            values[SESSION_COOKIE_KEY] = record.session_token

        set_many = getattr(self.store, "set_many", None)
        if set_many is not None:
            await set_many(values, remove=removed)
        else:
            try:
                for key, value in values.items():
                    await self.store.set_string(key, value)
                for key in removed:
                    await self.store.remove(key)
            except Exception:
                logger.error("Failed to store credentials, removing the partial record")
                try:
                    await self._remove_identity_keys()
                except Exception as e:
                    logger.error(f"Failed to remove partial credentials: {e}")
                raise

        logger.info(f"Stored credentials for {record.username} at {record.server_address}")

    async def clear(self) -> None:
        """Remove every identity key. Safe to call when nothing is stored."""
        await self._remove_identity_keys()
        logger.info("Removed stored credentials")

    async def _remove_identity_keys(self) -> None:
        remove_many = getattr(self.store, "remove_many", None)
        if remove_many is not None:
            await remove_many(IDENTITY_KEYS)
        else:
            for key in IDENTITY_KEYS:
                await self.store.remove(key)

    async def load_session_token(self) -> Optional[str]:
        """Session token of a complete saved record, if any."""
        record = await self.load()
        return record.session_token if record else None

    async def load_role(self) -> Optional[str]:
        record = await self.load()
        return record.role if record else None
