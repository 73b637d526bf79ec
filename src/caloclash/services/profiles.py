"""Profile collection and active-profile pointer over a key-value store."""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import uuid4

from caloclash.domain.errors import StoreIOError
from caloclash.domain.profiles import Plan, Profile
from caloclash.services.codec import (
    decode_json,
    encode_json,
    profile_from_document,
    profile_to_document,
)

DEFAULT_KEY_PREFIX = "caloclash"
DEFAULT_PROFILE_NAME = "New Profile"

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Asynchronous string key-value storage."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    async def remove(self, key: str) -> None:
        """Remove a key if present."""

    async def remove_many(self, keys: list[str]) -> None:
        """Remove several keys."""


@dataclass(frozen=True)
class StorageKeys:
    """Names of the keys the engine owns."""

    profiles: str
    active_profile_id: str
    storage_version: str

    @classmethod
    def with_prefix(cls, prefix: str = DEFAULT_KEY_PREFIX) -> "StorageKeys":
        return cls(
            profiles=f"{prefix}_profiles",
            active_profile_id=f"{prefix}_activeProfileId",
            storage_version=f"{prefix}_storageVersion",
        )


def new_profile_id() -> str:
    """Return a fresh, never reused profile id."""
    return f"profile_{uuid4().hex}"


@dataclass
class ProfileRepository:
    """Full-document CRUD over the profile collection.

    Every write replaces the whole collection, so callers read, modify and
    save; overlapping saves of the same profile are last-write-wins.
    """

    store: KeyValueStore
    keys: StorageKeys

    async def list_profiles(self, today: int) -> list[Profile]:
        """Return all profiles, or an empty list when storage is unreadable."""
        profiles: list[Profile] = []
        for doc in await self._read_documents():
            profile = profile_from_document(doc, today)
            if profile is not None:
                profiles.append(profile)
        return profiles

    async def get(self, profile_id: str, today: int) -> Profile | None:
        for profile in await self.list_profiles(today):
            if profile.id == profile_id:
                return profile
        return None

    async def create(
        self, user_data: dict[str, object], plan: Plan, today: int
    ) -> Profile:
        """Create a profile, append it and make it active."""
        profile = Profile(
            id=new_profile_id(),
            name=str(user_data.get("name") or DEFAULT_PROFILE_NAME),
            user_data=user_data,
            plan=plan,
            last_save_date=today,
            water_intake_date=today,
        )
        documents = await self._read_documents()
        documents.append(profile_to_document(profile))
        await self._write_documents(documents)
        await self.set_active_id(profile.id)
        _logger.info("Created profile %s", profile.id)
        return profile

    async def save(self, profile: Profile) -> Profile:
        """Upsert a profile by id, syncing its name from the user data."""
        stored = with_synced_name(profile)
        documents = await self._read_documents()
        document = profile_to_document(stored)
        for index, existing in enumerate(documents):
            if isinstance(existing, dict) and existing.get("id") == stored.id:
                documents[index] = document
                break
        else:
            documents.append(document)
        await self._write_documents(documents)
        return stored

    async def delete(self, profile_id: str) -> None:
        """Remove a profile and repoint or clear the active pointer."""
        documents = await self._read_documents()
        remaining = [
            doc
            for doc in documents
            if not (isinstance(doc, dict) and doc.get("id") == profile_id)
        ]
        await self._write_documents(remaining)
        active_id = await self.get_active_id()
        remaining_ids = [
            doc["id"]
            for doc in remaining
            if isinstance(doc, dict) and isinstance(doc.get("id"), str)
        ]
        if not remaining_ids:
            await self._call(self.store.remove(self.keys.active_profile_id))
        elif active_id == profile_id:
            await self.set_active_id(remaining_ids[0])
        _logger.info("Deleted profile %s", profile_id)

    async def get_active_id(self) -> str | None:
        """Return the active id; an unreadable pointer raises StoreIOError."""
        try:
            return await self.store.get(self.keys.active_profile_id)
        except StoreIOError:
            _logger.exception("Could not read active profile id")
            raise

    async def set_active_id(self, profile_id: str) -> None:
        await self._call(self.store.set(self.keys.active_profile_id, profile_id))

    async def get_active(self, today: int) -> Profile | None:
        """Return the active profile, if it still exists."""
        active_id = await self.get_active_id()
        if active_id is None:
            return None
        return await self.get(active_id, today)

    async def _read_documents(self) -> list[object]:
        try:
            raw = await self.store.get(self.keys.profiles)
        except StoreIOError:
            _logger.warning("Could not read profiles, using none", exc_info=True)
            return []
        return decode_json(raw, [])

    async def _write_documents(self, documents: list[object]) -> None:
        await self._call(self.store.set(self.keys.profiles, encode_json(documents)))

    async def _call(self, operation: Awaitable[None]) -> None:
        try:
            await operation
        except StoreIOError:
            _logger.exception("Profile storage write failed")
            raise
        except Exception as exc:
            _logger.exception("Profile storage write failed")
            raise StoreIOError(str(exc)) from exc


def with_synced_name(profile: Profile) -> Profile:
    """Copy the display name from the user data when it has one."""
    name = profile.user_data.get("name")
    if isinstance(name, str) and name and name != profile.name:
        return replace(profile, name=name)
    return profile
