"""Tests for the credential vault and the stores behind it."""

import json
import os
import stat
import tempfile
from pathlib import Path

import pytest

from standapp_client.credential import CredentialRecord, CredentialVault
from standapp_client.errors import StoreError
from standapp_client.storage import JsonFileStore, MemoryStore

COMPLETE = {
    "serverAddress": "http://10.0.2.2:5000",
    "username": "alice",
    "password": "s3cret",
    "userRole": "Administrator",
}


@pytest.mark.parametrize("missing_key", sorted(COMPLETE))
async def test_partial_record_is_treated_as_absent(missing_key):
    data = {k: v for k, v in COMPLETE.items() if k != missing_key}
    data["sessionCookie"] = "session=XYZ"
    vault = CredentialVault(MemoryStore(data))

    assert await vault.load() is None, f"Record without {missing_key} should be rejected"


async def test_blank_required_field_is_treated_as_absent():
    vault = CredentialVault(MemoryStore({**COMPLETE, "password": "   "}))

    assert await vault.load() is None


async def test_complete_record_without_token_loads():
    vault = CredentialVault(MemoryStore(COMPLETE))

    record = await vault.load()

    assert record is not None
    assert record.role == "Administrator"
    assert record.session_token is None


async def test_round_trip_with_token(vault, record):
    await vault.save(record)

    assert await vault.load() == record


async def test_round_trip_without_token(vault, store, record):
    await vault.save(record)
    tokenless = record.model_copy(update={"session_token": None})

    await vault.save(tokenless)

    assert await vault.load() == tokenless
    assert "sessionCookie" not in store.snapshot(), "Absent token must remove the key, not store an empty value"


async def test_clear_removes_everything(vault, store, record):
    await vault.save(record)

    await vault.clear()

    assert await vault.load() is None
    assert store.snapshot() == {}


async def test_clear_is_idempotent(vault):
    await vault.clear()
    await vault.clear()

    assert await vault.load() is None


async def test_clear_leaves_unrelated_keys(store, record):
    await store.set_string("isDarkMode", "true")
    vault = CredentialVault(store)
    await vault.save(record)

    await vault.clear()

    assert store.snapshot() == {"isDarkMode": "true"}


async def test_session_token_requires_complete_record():
    vault = CredentialVault(MemoryStore({"sessionCookie": "session=XYZ", "username": "alice"}))

    assert await vault.load_session_token() is None


def test_record_rejects_missing_fields():
    with pytest.raises(ValueError):
        CredentialRecord(server_address="http://host", username="", password="pw", role="Admin")


def test_record_normalizes_server_address_and_empty_token():
    record = CredentialRecord(server_address=" http://host:5000/ ", username="bob", password="pw", role="Admin", session_token="")

    assert record.server_address == "http://host:5000"
    assert record.session_token is None


def test_record_repr_hides_secrets(record):
    text = repr(record)

    assert "s3cret" not in text
    assert "OLD" not in text


async def test_json_store_persists_across_instances(record):
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "prefs" / "preferences.json"

        await CredentialVault(JsonFileStore(path)).save(record)
        loaded = await CredentialVault(JsonFileStore(path)).load()

        assert loaded == record
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


async def test_json_store_clear_writes_once_and_persists(record):
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "preferences.json"
        vault = CredentialVault(JsonFileStore(path))
        await vault.save(record)

        await vault.clear()

        with open(path) as f:
            assert json.load(f) == {}
        assert await CredentialVault(JsonFileStore(path)).load() is None


async def test_json_store_ignores_corrupt_file():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "preferences.json"
        path.write_text("{not json")

        store = JsonFileStore(path)

        assert await store.get_string("username") is None
        await store.set_string("username", "alice")
        assert await JsonFileStore(path).get_string("username") == "alice"


async def test_json_store_failed_write_keeps_saved_value():
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "preferences.json"
        store = JsonFileStore(path)
        await store.set_string("username", "alice")
        path.with_suffix(".tmp").mkdir()

        with pytest.raises(StoreError):
            await store.set_string("username", "mallory")
        with pytest.raises(StoreError):
            await store.remove_many(["username"])

        assert await store.get_string("username") == "alice"
        assert await JsonFileStore(path).get_string("username") == "alice"


async def test_json_store_temp_file_is_created_owner_only(monkeypatch):
    monkeypatch.setattr(os, "chmod", lambda *args, **kwargs: None)
    old_umask = os.umask(0o022)
    try:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "preferences.json"

            await JsonFileStore(path).set_string("password", "s3cret")

            assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    finally:
        os.umask(old_umask)


async def test_json_store_failed_save_keeps_previous_record(record):
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "preferences.json"
        vault = CredentialVault(JsonFileStore(path))
        await vault.save(record)
        path.with_suffix(".tmp").mkdir()
        replacement = record.model_copy(update={"server_address": "http://new", "username": "bob"})

        with pytest.raises(StoreError):
            await vault.save(replacement)

        assert await vault.load() == record
        assert await CredentialVault(JsonFileStore(path)).load() == record


class SingleKeyStore:
    """Store without batch operations that fails writing one key."""

    def __init__(self, initial, failing_key):
        self.data = dict(initial)
        self.failing_key = failing_key

    async def get_string(self, key):
        return self.data.get(key)

    async def set_string(self, key, value):
        if key == self.failing_key:
            raise StoreError(f"cannot write {key}")
        self.data[key] = value

    async def remove(self, key):
        self.data.pop(key, None)


async def test_failed_save_never_leaves_mixed_record():
    store = SingleKeyStore({**COMPLETE, "serverAddress": "http://old"}, failing_key="username")
    vault = CredentialVault(store)
    replacement = CredentialRecord(server_address="http://new", username="bob", password="pw", role="Admin")

    with pytest.raises(StoreError):
        await vault.save(replacement)

    assert await vault.load() is None, "A partially written record must not load"
    assert store.data == {}
