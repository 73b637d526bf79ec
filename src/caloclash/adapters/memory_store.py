"""In-memory key-value store."""

from dataclasses import dataclass, field

from caloclash.services.profiles import KeyValueStore


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; contents are lost with the process."""

    values: dict[str, str] = field(default_factory=dict)

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value

    async def remove(self, key: str) -> None:
        self.values.pop(key, None)

    async def remove_many(self, keys: list[str]) -> None:
        for key in keys:
            self.values.pop(key, None)
