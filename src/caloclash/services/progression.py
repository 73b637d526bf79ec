"""Points, levels, streaks and badges.

Pure transitions over ``Gamification``; callers persist the result.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace

from caloclash.domain.profiles import POINTS_PER_LEVEL, Gamification

MEAL_POINTS = 10
HYDRATION_POINTS = 5
GLASSES_PER_HYDRATION_REWARD = 4


@dataclass(frozen=True)
class BadgeInfo:
    """Display details for a badge."""

    name: str
    emoji: str
    description: str


@dataclass(frozen=True)
class BadgeRule:
    """Threshold that awards a badge once."""

    badge_id: str
    condition: Callable[[Gamification], bool]


@dataclass(frozen=True)
class ProgressUpdate:
    """Result of a progression transition."""

    gamification: Gamification
    points_awarded: int = 0
    leveled_up: bool = False
    new_badges: tuple[str, ...] = ()


BADGES = {
    "week_warrior": BadgeInfo("Week Warrior", "\U0001f525", "7-day streak"),
    "month_master": BadgeInfo("Month Master", "\U0001f451", "30-day streak"),
    "novice_logger": BadgeInfo("Novice Logger", "\U0001f4dd", "10 meals logged"),
    "dedicated_tracker": BadgeInfo(
        "Dedicated Tracker", "\U0001f4aa", "50 meals logged"
    ),
    "logging_legend": BadgeInfo("Logging Legend", "\U0001f3c6", "100 meals logged"),
    "point_collector": BadgeInfo(
        "Point Collector", "\U0001f48e", "500 points earned"
    ),
}

UNKNOWN_BADGE = BadgeInfo("Unknown", "\u2753", "")

BADGE_RULES = (
    BadgeRule("week_warrior", lambda state: state.streak >= 7),
    BadgeRule("month_master", lambda state: state.streak >= 30),
    BadgeRule("novice_logger", lambda state: state.total_meals_logged >= 10),
    BadgeRule("dedicated_tracker", lambda state: state.total_meals_logged >= 50),
    BadgeRule("logging_legend", lambda state: state.total_meals_logged >= 100),
    BadgeRule("point_collector", lambda state: state.points >= 500),
)


def on_meal_logged(state: Gamification, today: int) -> ProgressUpdate:
    """Apply a logged meal: streak, points, counters, then badges."""
    streak = _next_streak(state, today)
    awarded = award_points(state, MEAL_POINTS)
    logged = replace(
        awarded.gamification,
        streak=streak,
        last_log_date=today,
        total_meals_logged=state.total_meals_logged + 1,
    )
    final, new_badges = evaluate_badges(logged)
    return ProgressUpdate(
        gamification=final,
        points_awarded=MEAL_POINTS,
        leveled_up=awarded.leveled_up,
        new_badges=new_badges,
    )


def award_points(state: Gamification, amount: int) -> ProgressUpdate:
    """Add points; the level follows from the new total."""
    if amount < 0:
        raise ValueError("points are never taken away")
    updated = replace(state, points=state.points + amount)
    return ProgressUpdate(
        gamification=updated,
        points_awarded=amount,
        leveled_up=updated.level > state.level,
    )


def on_water_added(state: Gamification, glass_count: int) -> ProgressUpdate:
    """Reward every fourth glass of the day."""
    if glass_count > 0 and glass_count % GLASSES_PER_HYDRATION_REWARD == 0:
        return award_points(state, HYDRATION_POINTS)
    return ProgressUpdate(gamification=state)


def check_streak(state: Gamification, today: int) -> Gamification:
    """Zero the streak when the last log is more than a day old."""
    if state.last_log_date is None or state.last_log_date == today:
        return state
    if today - state.last_log_date > 1 and state.streak != 0:
        return replace(state, streak=0)
    return state


def evaluate_badges(state: Gamification) -> tuple[Gamification, tuple[str, ...]]:
    """Award every badge whose threshold is met and not yet held."""
    new_badges = tuple(
        rule.badge_id
        for rule in BADGE_RULES
        if rule.badge_id not in state.badges and rule.condition(state)
    )
    if not new_badges:
        return state, ()
    return replace(state, badges=state.badges + new_badges), new_badges


def badge_info(badge_id: str) -> BadgeInfo:
    return BADGES.get(badge_id, UNKNOWN_BADGE)


def level_progress(state: Gamification) -> int:
    """Points earned toward the next level."""
    return state.points % POINTS_PER_LEVEL


def _next_streak(state: Gamification, today: int) -> int:
    if state.last_log_date is None:
        return 1
    days_since = today - state.last_log_date
    # A clock set backwards counts as the same day.
    if days_since <= 0:
        return state.streak
    if days_since == 1:
        return state.streak + 1
    return 1
