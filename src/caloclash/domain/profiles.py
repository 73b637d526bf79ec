"""Domain models for profiles and their day-scoped logs."""

from dataclasses import dataclass, field

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
POINTS_PER_LEVEL = 100


@dataclass(frozen=True)
class Plan:
    """Daily calorie and macro targets produced at onboarding."""

    calories: int
    protein: int
    carbs: int
    fats: int
    bmr: int
    tdee: int


@dataclass(frozen=True)
class Meal:
    """A meal logged for the current day."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    type: str
    timestamp: str


@dataclass(frozen=True)
class FavoriteMeal:
    """Reusable meal template."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    type: str


@dataclass(frozen=True)
class Gamification:
    """Progression state: points, streak, badges and counters."""

    points: int = 0
    streak: int = 0
    last_log_date: int | None = None
    badges: tuple[str, ...] = ()
    total_meals_logged: int = 0

    @property
    def level(self) -> int:
        return level_for_points(self.points)


@dataclass(frozen=True)
class Profile:
    """One user's complete persisted state."""

    id: str
    name: str
    user_data: dict[str, object]
    plan: Plan
    last_save_date: int
    water_intake_date: int
    today_meals: tuple[Meal, ...] = ()
    gamification: Gamification = field(default_factory=Gamification)
    water_intake: int = 0
    favorite_meals: tuple[FavoriteMeal, ...] = ()


@dataclass(frozen=True)
class DailyTotals:
    """Summed macros for the meals of one day."""

    calories: float
    protein: float
    carbs: float
    fats: float


def level_for_points(points: int) -> int:
    """Return the level reached with the given points."""
    return points // POINTS_PER_LEVEL + 1
