"""Application service behind the tracker screens.

Every mutating call reads the profile, applies a pure transition and saves
the whole profile back. A failed save is reported through
``TrackerOutcome.persisted`` instead of raising, and the returned profile
still carries the new state.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TypeVar
from uuid import uuid4

from caloclash.domain.calendar import local_today
from caloclash.domain.errors import ProfileNotFoundError, StoreIOError, ValidationError
from caloclash.domain.inputs import MealDraft, parse_meal_draft, parse_survey
from caloclash.domain.profiles import DailyTotals, FavoriteMeal, Meal, Profile
from caloclash.services.migration import LegacyMigrator
from caloclash.services.plans import calculate_plan
from caloclash.services.profiles import ProfileRepository
from caloclash.services.progression import (
    ProgressUpdate,
    check_streak,
    on_meal_logged,
    on_water_added,
)
from caloclash.services.rollover import apply_day_rollover

T = TypeVar("T", Meal, FavoriteMeal)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackerOutcome:
    """Profile after an operation, with any progression events."""

    profile: Profile
    progress: ProgressUpdate | None = None
    persisted: bool = True


@dataclass
class TrackerService:
    """Orchestrates migration, loading, logging and persistence."""

    repository: ProfileRepository
    migrator: LegacyMigrator
    clock: Callable[[], int] = local_today

    async def start(self) -> list[Profile]:
        """Run the legacy migration and return all profiles."""
        today = self.clock()
        await self.migrator.run(today)
        return await self.repository.list_profiles(today)

    async def create_profile(self, answers: dict[str, object]) -> Profile:
        """Validate survey answers, compute the plan and create a profile."""
        survey = parse_survey(answers)
        user_data = survey.to_user_data()
        plan = calculate_plan(user_data)
        return await self.repository.create(user_data, plan, self.clock())

    async def load_profile(self, profile_id: str | None = None) -> TrackerOutcome:
        """Load a profile (the active one by default) for display.

        Stale meals and water are reset and a broken streak is zeroed; the
        profile is saved only when one of those changed something.
        """
        today = self.clock()
        if profile_id is None:
            profile_id = await self.repository.get_active_id()
            if profile_id is None:
                raise ProfileNotFoundError(None)
        profile = await self.repository.get(profile_id, today)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        rolled = apply_day_rollover(profile, today)
        gamification = check_streak(rolled.profile.gamification, today)
        updated = replace(rolled.profile, gamification=gamification)
        if not rolled.changed and gamification == profile.gamification:
            return TrackerOutcome(profile=updated)
        if gamification.streak != profile.gamification.streak:
            _logger.info("Streak broken for profile %s", profile_id)
        return await self._persist(updated)

    async def switch_profile(self, profile_id: str) -> TrackerOutcome:
        """Make another profile active and load it."""
        if await self.repository.get(profile_id, self.clock()) is None:
            raise ProfileNotFoundError(profile_id)
        await self.repository.set_active_id(profile_id)
        return await self.load_profile(profile_id)

    async def delete_profile(self, profile_id: str) -> str | None:
        """Delete a profile and return the id that is active afterwards."""
        await self.repository.delete(profile_id)
        return await self.repository.get_active_id()

    async def add_meal(
        self, profile_id: str, draft: dict[str, object]
    ) -> TrackerOutcome:
        """Log a meal for today and apply points, streak and badges."""
        meal_draft = parse_meal_draft(draft)
        today = self.clock()
        profile = await self._current(profile_id, today)
        return await self._log_meal(profile, _meal_from_draft(meal_draft), today)

    async def log_favorite(self, profile_id: str, favorite_id: str) -> TrackerOutcome:
        """Log a saved favorite as today's meal."""
        today = self.clock()
        profile = await self._current(profile_id, today)
        favorite = _find(profile.favorite_meals, favorite_id)
        if favorite is None:
            raise ValidationError(f"Unknown favorite meal: {favorite_id}")
        meal = Meal(
            id=new_meal_id(),
            name=favorite.name,
            calories=favorite.calories,
            protein=favorite.protein,
            carbs=favorite.carbs,
            fats=favorite.fats,
            type=favorite.type,
            timestamp=_now_iso(),
        )
        return await self._log_meal(profile, meal, today)

    async def delete_meal(self, profile_id: str, meal_id: str) -> TrackerOutcome:
        """Remove one of today's meals; points already earned are kept."""
        profile = await self._current(profile_id, self.clock())
        meals = tuple(meal for meal in profile.today_meals if meal.id != meal_id)
        return await self._persist(replace(profile, today_meals=meals))

    async def save_favorite(self, profile_id: str, meal_id: str) -> TrackerOutcome:
        """Save one of today's meals as a reusable favorite."""
        profile = await self._current(profile_id, self.clock())
        meal = _find(profile.today_meals, meal_id)
        if meal is None:
            raise ValidationError(f"Unknown meal: {meal_id}")
        favorite = FavoriteMeal(
            id=new_meal_id(),
            name=meal.name,
            calories=meal.calories,
            protein=meal.protein,
            carbs=meal.carbs,
            fats=meal.fats,
            type=meal.type,
        )
        return await self._persist(
            replace(profile, favorite_meals=(*profile.favorite_meals, favorite))
        )

    async def remove_favorite(
        self, profile_id: str, favorite_id: str
    ) -> TrackerOutcome:
        profile = await self._current(profile_id, self.clock())
        favorites = tuple(
            favorite
            for favorite in profile.favorite_meals
            if favorite.id != favorite_id
        )
        return await self._persist(replace(profile, favorite_meals=favorites))

    async def add_water(self, profile_id: str) -> TrackerOutcome:
        """Add a 250 ml glass; every fourth glass of the day earns points."""
        today = self.clock()
        profile = await self._current(profile_id, today)
        glasses = profile.water_intake + 1
        progress = on_water_added(profile.gamification, glasses)
        updated = replace(
            profile,
            water_intake=glasses,
            water_intake_date=today,
            gamification=progress.gamification,
        )
        if progress.points_awarded:
            _logger.info("Hydration reward for profile %s", profile_id)
        return await self._persist(updated, progress)

    async def remove_water(self, profile_id: str) -> TrackerOutcome:
        """Remove a glass; the count never drops below zero."""
        profile = await self._current(profile_id, self.clock())
        if profile.water_intake == 0:
            return TrackerOutcome(profile=profile)
        return await self._persist(
            replace(profile, water_intake=profile.water_intake - 1)
        )

    async def _current(self, profile_id: str, today: int) -> Profile:
        profile = await self.repository.get(profile_id, today)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return apply_day_rollover(profile, today).profile

    async def _log_meal(
        self, profile: Profile, meal: Meal, today: int
    ) -> TrackerOutcome:
        progress = on_meal_logged(profile.gamification, today)
        updated = replace(
            profile,
            today_meals=(*profile.today_meals, meal),
            last_save_date=today,
            gamification=progress.gamification,
        )
        if progress.leveled_up:
            _logger.info(
                "Profile %s reached level %s",
                profile.id,
                progress.gamification.level,
            )
        for badge_id in progress.new_badges:
            _logger.info("Profile %s earned badge %s", profile.id, badge_id)
        return await self._persist(updated, progress)

    async def _persist(
        self, profile: Profile, progress: ProgressUpdate | None = None
    ) -> TrackerOutcome:
        try:
            saved = await self.repository.save(profile)
        except StoreIOError:
            return TrackerOutcome(profile=profile, progress=progress, persisted=False)
        return TrackerOutcome(profile=saved, progress=progress)


def daily_totals(meals: Iterable[Meal]) -> DailyTotals:
    """Sum the macros of the given meals."""
    totals = DailyTotals(calories=0.0, protein=0.0, carbs=0.0, fats=0.0)
    for meal in meals:
        totals = DailyTotals(
            calories=totals.calories + meal.calories,
            protein=totals.protein + meal.protein,
            carbs=totals.carbs + meal.carbs,
            fats=totals.fats + meal.fats,
        )
    return totals


def new_meal_id() -> str:
    """Return a unique id that sorts by creation time."""
    return f"{time.time_ns():020d}-{uuid4().hex[:8]}"


def _meal_from_draft(draft: MealDraft) -> Meal:
    return Meal(
        id=new_meal_id(),
        name=draft.name,
        calories=draft.calories,
        protein=draft.protein,
        carbs=draft.carbs,
        fats=draft.fats,
        type=draft.type,
        timestamp=_now_iso(),
    )


def _find(items: Iterable[T], item_id: str) -> T | None:
    for item in items:
        if item.id == item_id:
            return item
    return None


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()
