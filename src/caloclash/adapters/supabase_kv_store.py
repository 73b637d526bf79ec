"""Supabase-backed key-value store."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from supabase import Client

from caloclash.domain.errors import StoreIOError
from caloclash.services.profiles import KeyValueStore

T = TypeVar("T")


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Supabase implementation over a ``(key, value)`` table.

    The client is synchronous, so calls run in a worker thread.
    """

    client: Client
    table: str = "kv_store"

    async def get(self, key: str) -> str | None:
        """Return the value for a key, if present."""
        return await self._run(self._get, key)

    async def set(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        await self._run(self._set, key, value)

    async def remove(self, key: str) -> None:
        """Delete the row for a key."""
        await self._run(self._remove_many, [key])

    async def remove_many(self, keys: list[str]) -> None:
        """Delete the rows for several keys."""
        if keys:
            await self._run(self._remove_many, keys)

    def _get(self, key: str) -> str | None:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    def _set(self, key: str, value: str) -> None:
        self.client.table(self.table).upsert(
            {"key": key, "value": value}, on_conflict="key"
        ).execute()

    def _remove_many(self, keys: list[str]) -> None:
        self.client.table(self.table).delete().in_("key", keys).execute()

    async def _run(self, func: Callable[..., T], *args: object) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except StoreIOError:
            raise
        except Exception as exc:
            raise StoreIOError(f"Supabase {self.table} request failed") from exc
