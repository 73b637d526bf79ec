"""Day-boundary reset of day-scoped profile fields."""

from dataclasses import dataclass, replace

from caloclash.domain.profiles import Profile


@dataclass(frozen=True)
class RolloverResult:
    """Profile after rollover and which fields were reset."""

    profile: Profile
    meals_reset: bool
    water_reset: bool

    @property
    def changed(self) -> bool:
        return self.meals_reset or self.water_reset


def apply_day_rollover(profile: Profile, today: int) -> RolloverResult:
    """Empty meals and water that belong to a day other than ``today``.

    Meals and water carry their own dates and are checked independently.
    """
    meals_reset = profile.last_save_date != today
    water_reset = profile.water_intake_date != today
    updated = profile
    if meals_reset:
        updated = replace(updated, today_meals=(), last_save_date=today)
    if water_reset:
        updated = replace(updated, water_intake=0, water_intake_date=today)
    return RolloverResult(
        profile=updated, meals_reset=meals_reset, water_reset=water_reset
    )
