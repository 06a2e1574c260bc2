"""Shared fixtures for the Stand App client tests."""

import asyncio
import json
from typing import Optional

import pytest

from standapp_client.auth import SessionAuthenticator, TransportResponse
from standapp_client.credential import CredentialRecord, CredentialVault
from standapp_client.storage import MemoryStore


class FakeTransport:
    """Replays queued responses and records every request."""

    def __init__(self):
        self.responses = []
        self.requests = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    def queue(self, item) -> None:
        self.responses.append(item)

    def queue_json(self, status: int, body: dict, headers=()) -> None:
        self.responses.append(TransportResponse(status=status, body=json.dumps(body), headers=tuple(headers)))

    async def post_form(self, url, fields):
        self.requests.append(("POST", url, dict(fields), None))
        return await self._next()

    async def get(self, url, headers=None):
        self.requests.append(("GET", url, None, dict(headers or {})))
        return await self._next()

    async def close(self):
        self.closed = True

    async def _next(self):
        if self.gate is not None:
            await self.gate.wait()
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class CountingVault(CredentialVault):
    """Vault that counts save and clear calls."""

    def __init__(self, store):
        super().__init__(store)
        self.saves = 0
        self.clears = 0

    async def save(self, record):
        self.saves += 1
        await super().save(record)

    async def clear(self):
        self.clears += 1
        await super().clear()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def vault(store):
    return CountingVault(store)


@pytest.fixture
def authenticator(transport):
    return SessionAuthenticator(transport, default_role="Betrachter")


@pytest.fixture
def record():
    return CredentialRecord(
        server_address="http://10.0.2.2:5000",
        username="alice",
        password="s3cret",
        role="Bewerter",
        session_token="session=OLD",
    )
