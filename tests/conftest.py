"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date

import pytest

from caloclash.adapters.memory_store import InMemoryKeyValueStore
from caloclash.config import Settings
from caloclash.domain.calendar import day_from_date
from caloclash.domain.errors import StoreIOError
from caloclash.services.migration import LegacyMigrator
from caloclash.services.profiles import KeyValueStore, ProfileRepository, StorageKeys
from caloclash.services.tracker import TrackerService

TODAY = day_from_date(date(2026, 10, 19))

ANA_ANSWERS: dict[str, object] = {
    "name": "Ana",
    "gender": "female",
    "age": "30",
    "weight": "65",
    "height": "165",
    "measurementSystem": "metric",
    "activityLevel": "moderate",
    "occupation": "sedentary",
    "sleepHours": "7",
    "goal": "lose",
    "pace": "moderate",
    "targetWeight": "60",
    "timeframe": "12",
    "dietaryRestrictions": ["vegetarian"],
    "exercisePreference": "both",
    "motivation": "health",
    "previousExperience": "no",
}


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Store whose reads and/or writes fail like unavailable storage."""

    values: dict[str, str] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = True

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StoreIOError("storage unavailable")
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StoreIOError("storage full")
        self.values[key] = value

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StoreIOError("storage full")
        self.values.pop(key, None)

    async def remove_many(self, keys: list[str]) -> None:
        for key in keys:
            await self.remove(key)


@dataclass
class FakeClock:
    """Settable day clock."""

    today: int = TODAY

    def __call__(self) -> int:
        return self.today

    def advance(self, days: int = 1) -> None:
        self.today += days


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", timezone=None)


@pytest.fixture
def keys() -> StorageKeys:
    return StorageKeys.with_prefix("caloclash")


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store: InMemoryKeyValueStore, keys: StorageKeys) -> ProfileRepository:
    return ProfileRepository(store=store, keys=keys)


@pytest.fixture
def migrator(store: InMemoryKeyValueStore, keys: StorageKeys) -> LegacyMigrator:
    return LegacyMigrator(store=store, keys=keys)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(
    repository: ProfileRepository, migrator: LegacyMigrator, clock: FakeClock
) -> TrackerService:
    return TrackerService(repository=repository, migrator=migrator, clock=clock)
