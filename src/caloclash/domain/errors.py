"""Error types raised by the profile engine."""


class CaloClashError(Exception):
    """Base class for engine errors."""


class StoreIOError(CaloClashError):
    """The key-value store failed to read or write."""


class ValidationError(CaloClashError, ValueError):
    """Input failed validation before any state was touched."""


class ProfileNotFoundError(CaloClashError, LookupError):
    """No profile exists for the requested id, or none is active."""

    def __init__(self, profile_id: str | None) -> None:
        if profile_id is None:
            super().__init__("No active profile")
        else:
            super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id
