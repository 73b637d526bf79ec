"""One-shot migration of single-profile data into the profile collection."""

import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass

from caloclash.domain.calendar import parse_day
from caloclash.domain.errors import StoreIOError
from caloclash.domain.profiles import Profile
from caloclash.services.codec import (
    decode_json,
    encode_json,
    favorites_from_documents,
    gamification_from_document,
    meals_from_documents,
    plan_from_document,
    profile_to_document,
)
from caloclash.services.profiles import KeyValueStore, StorageKeys, new_profile_id

CURRENT_STORAGE_VERSION = "2"
LEGACY_PROFILE_NAME = "My Profile"

LEGACY_USER_DATA = "userData"
LEGACY_PLAN = "userPlan"
LEGACY_MEALS = "todayMeals"
LEGACY_LAST_SAVE_DATE = "lastSaveDate"
LEGACY_GAMIFICATION = "gamification"
LEGACY_WATER_INTAKE = "waterIntake"
LEGACY_WATER_DATE = "waterIntakeDate"
LEGACY_FAVORITES = "favoriteMeals"

LEGACY_KEYS = [
    LEGACY_USER_DATA,
    LEGACY_PLAN,
    LEGACY_MEALS,
    LEGACY_LAST_SAVE_DATE,
    LEGACY_GAMIFICATION,
    LEGACY_FAVORITES,
    LEGACY_WATER_INTAKE,
    LEGACY_WATER_DATE,
]

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

_logger = logging.getLogger(__name__)


@dataclass
class LegacyMigrator:
    """Moves pre-multi-profile data into a single profile, exactly once.

    The version marker is written after the profile and active pointer and
    before the legacy keys are removed. A crash before the marker reruns the
    whole migration; a crash after it leaves stale legacy keys that are
    never read again.
    """

    store: KeyValueStore
    keys: StorageKeys

    async def run(self, today: int) -> Profile | None:
        """Migrate legacy data if needed; return the migrated profile."""
        version = await self._get(self.keys.storage_version)
        if version == CURRENT_STORAGE_VERSION:
            return None

        raw_user_data = await self._get(LEGACY_USER_DATA)
        raw_plan = await self._get(LEGACY_PLAN)
        if not raw_user_data or not raw_plan:
            await self._stamp()
            return None

        user_data = decode_json(raw_user_data, None)
        plan_doc = decode_json(raw_plan, None)
        if not isinstance(user_data, dict) or not isinstance(plan_doc, dict):
            _logger.error("Legacy user data or plan is unreadable, skipping")
            await self._stamp()
            return None

        profile = Profile(
            id=new_profile_id(),
            name=str(user_data.get("name") or LEGACY_PROFILE_NAME),
            user_data=user_data,
            plan=plan_from_document(plan_doc),
            today_meals=meals_from_documents(
                decode_json(await self._get(LEGACY_MEALS), [])
            ),
            last_save_date=_day_or_today(
                await self._get(LEGACY_LAST_SAVE_DATE), today
            ),
            gamification=gamification_from_document(
                decode_json(await self._get(LEGACY_GAMIFICATION), {})
            ),
            water_intake=_glasses(await self._get(LEGACY_WATER_INTAKE)),
            water_intake_date=_day_or_today(
                await self._get(LEGACY_WATER_DATE), today
            ),
            favorite_meals=favorites_from_documents(
                decode_json(await self._get(LEGACY_FAVORITES), [])
            ),
        )

        await self._set(
            self.keys.profiles, encode_json([profile_to_document(profile)])
        )
        await self._set(self.keys.active_profile_id, profile.id)
        await self._stamp()
        await self._write(self.store.remove_many(LEGACY_KEYS))
        _logger.info("Migrated legacy data into profile %s", profile.id)
        return profile

    async def _stamp(self) -> None:
        await self._set(self.keys.storage_version, CURRENT_STORAGE_VERSION)

    async def _get(self, key: str) -> str | None:
        try:
            return await self.store.get(key)
        except StoreIOError:
            _logger.exception("Migration read failed for %s", key)
            raise

    async def _set(self, key: str, value: str) -> None:
        await self._write(self.store.set(key, value))

    async def _write(self, operation: Awaitable[None]) -> None:
        try:
            await operation
        except StoreIOError:
            _logger.exception("Migration write failed")
            raise


def _day_or_today(raw: str | None, today: int) -> int:
    day = parse_day(raw)
    return today if day is None else day


def _glasses(raw: str | None) -> int:
    # Leading integer only, so "3.0" and "3 glasses" both read as 3.
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return 0
    return max(int(match.group(0)), 0)
