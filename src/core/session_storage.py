"""Key/value persistence for the session entries that survive restarts."""

import asyncio
import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

from src.core.errors import StorageError


logger = logging.getLogger(__name__)


class SessionStorage(Protocol):
    """String key/value store used by the session gate."""

    async def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value."""
        ...

    async def delete(self, *keys: str) -> None:
        """Remove one or more keys; missing keys are ignored."""
        ...


class InMemorySessionStorage:
    """Thread-safe in-memory storage; lost on restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    async def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            logger.debug("Stored session key: %s", key)

    async def delete(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)
            logger.debug("Deleted %d session key(s)", len(keys))

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every stored entry."""
        with self._lock:
            return dict(self._data)


class FileSessionStorage:
    """Storage backed by a single JSON object on disk.

    Each write replaces the file atomically (write to a sibling temp file, then rename),
    so a crash never leaves a half-written session behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read session file {self._path}: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Session file is not valid JSON, ignoring it", extra={"path": str(self._path)})
            return {}

        if not isinstance(data, dict):
            logger.warning("Session file does not hold an object, ignoring it", extra={"path": str(self._path)})
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write session file {self._path}: {e}") from e

    def _get(self, key: str) -> str | None:
        with self._lock:
            return self._read_all().get(key)

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)
            logger.debug("Stored session key: %s", key)

    def _delete(self, keys: tuple[str, ...]) -> None:
        with self._lock:
            data = self._read_all()
            for key in keys:
                data.pop(key, None)
            self._write_all(data)
            logger.debug("Deleted %d session key(s)", len(keys))

    # Blocking file access runs in the default executor.
    async def get(self, key: str) -> str | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get, key)

    async def set(self, key: str, value: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._set, key, value)

    async def delete(self, *keys: str) -> None:
        if not keys:
            return

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._delete, keys)
