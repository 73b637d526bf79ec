"""Dependency container wiring for the engine."""

from dataclasses import dataclass
from functools import partial

from supabase import create_client

from caloclash.adapters.file_store import JsonFileKeyValueStore
from caloclash.adapters.memory_store import InMemoryKeyValueStore
from caloclash.adapters.supabase_kv_store import SupabaseKeyValueStore
from caloclash.config import Settings, parse_timezone
from caloclash.domain.calendar import local_today
from caloclash.services.migration import LegacyMigrator
from caloclash.services.profiles import KeyValueStore, ProfileRepository, StorageKeys
from caloclash.services.tracker import TrackerService


@dataclass
class AppContainer:
    """Holds engine-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    profile_repository: ProfileRepository
    migrator: LegacyMigrator
    tracker_service: TrackerService


def build_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by the settings."""
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.storage_path)
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs SUPABASE_URL and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    return InMemoryKeyValueStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    keys = StorageKeys.with_prefix(resolved_settings.key_prefix)
    profile_repository = ProfileRepository(store=store, keys=keys)
    migrator = LegacyMigrator(store=store, keys=keys)
    tracker_service = TrackerService(
        repository=profile_repository,
        migrator=migrator,
        clock=partial(local_today, parse_timezone(resolved_settings.timezone)),
    )

    return AppContainer(
        settings=resolved_settings,
        store=store,
        profile_repository=profile_repository,
        migrator=migrator,
        tracker_service=tracker_service,
    )
