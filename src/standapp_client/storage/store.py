"""Durable key/value storage of strings.

This module handles:
- The async key/value protocol the credential vault is written against
- A JSON file backed implementation that survives process restarts
- An in-memory implementation for tests and ephemeral sessions
"""

from __future__ import annotations

import asyncio
import json
import os
import stat
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable

from loguru import logger

from ..errors import StoreError


@runtime_checkable
class KeyValueStore(Protocol):
    """String key/value persistence used by the credential vault."""

    async def get_string(self, key: str) -> Optional[str]: ...

    async def set_string(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get_string(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_string(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def set_many(self, values: Mapping[str, str], remove: Iterable[str] = ()) -> None:
        self._data.update(values)
        for key in remove:
            self._data.pop(key, None)

    async def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)


class JsonFileStore:
    """Store backed by a single JSON object on disk, readable by the owner only.

    File reads and writes run in a worker thread so the event loop is never
    blocked. Every change writes a new copy of the data; the in-memory view is
    only updated once that copy is on disk.
    """

    def __init__(self, path: Path):
        """Initialize the file store.

        Args:
            path: Location of the JSON file; its directory is created if missing
        """
        self.path = Path(path)
        self._data: Optional[dict[str, str]] = None
        self._lock = asyncio.Lock()

        self._ensure_parent_dir()

    async def get_string(self, key: str) -> Optional[str]:
        data = await self._load()
        return data.get(key)

    async def set_string(self, key: str, value: str) -> None:
        await self.set_many({key: value})

    async def remove(self, key: str) -> None:
        await self.remove_many([key])

    async def set_many(self, values: Mapping[str, str], remove: Iterable[str] = ()) -> None:
        """Set and remove several keys with a single write."""
        async with self._lock:
            data = dict(await self._load())
            data.update(values)
            for key in remove:
                data.pop(key, None)
            await self._commit(data)

    async def remove_many(self, keys: Iterable[str]) -> None:
        """Remove several keys with a single write. Missing keys are ignored."""
        async with self._lock:
            data = dict(await self._load())
            removed = [key for key in keys if data.pop(key, None) is not None]
            if removed:
                await self._commit(data)

    async def _load(self) -> dict[str, str]:
        if self._data is None:
            self._data = await asyncio.to_thread(self._read)
        return self._data

    async def _commit(self, data: dict[str, str]) -> None:
        await asyncio.to_thread(self._write, data)
        self._data = data

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            logger.debug(f"No store file found at {self.path}")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read store file {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.error(f"Store file {self.path} does not hold a JSON object, ignoring it")
            return {}

        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        temp_file = self.path.with_suffix(".tmp")
        try:
            # Owner read/write only, from creation on
            fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, stat.S_IRUSR | stat.S_IWUSR)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)

            # A leftover temp file keeps its old mode
            os.chmod(temp_file, stat.S_IRUSR | stat.S_IWUSR)

            temp_file.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write store file {self.path}: {e}")
            raise StoreError(f"Failed to write store file {self.path}: {e}") from e

    def _ensure_parent_dir(self) -> None:
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create store directory: {e}")
            raise StoreError(f"Failed to create store directory {self.path.parent}: {e}") from e
