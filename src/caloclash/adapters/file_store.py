"""Key-value store persisted as a single JSON file on local disk."""

import asyncio
import json
import os
from dataclasses import dataclass
from pathlib import Path

from caloclash.domain.errors import StoreIOError
from caloclash.services.profiles import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Stores all keys in one JSON object file.

    Each write rewrites the file through a temporary file and an atomic
    rename, so a crash leaves either the old or the new contents.
    """

    path: Path

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``."""
        values = await asyncio.to_thread(self._read)
        return values.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        await asyncio.to_thread(self._update, {key: value}, [])

    async def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        await asyncio.to_thread(self._update, {}, [key])

    async def remove_many(self, keys: list[str]) -> None:
        """Remove every key in ``keys``."""
        await asyncio.to_thread(self._update, {}, keys)

    def _read(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreIOError(f"Failed to read {self.path}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise StoreIOError(f"Store file {self.path} is corrupt") from exc
        if not isinstance(data, dict):
            raise StoreIOError(f"Store file {self.path} is corrupt")
        return {str(key): str(value) for key, value in data.items()}

    def _update(self, updates: dict[str, str], removals: list[str]) -> None:
        values = self._read()
        values.update(updates)
        for key in removals:
            values.pop(key, None)
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(values), encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise StoreIOError(f"Failed to write {self.path}") from exc
