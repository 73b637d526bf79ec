"""Tests for the progression engine."""

import pytest

from caloclash.domain.profiles import Gamification
from caloclash.services.progression import (
    award_points,
    badge_info,
    check_streak,
    evaluate_badges,
    level_progress,
    on_meal_logged,
    on_water_added,
)
from tests.conftest import TODAY


def test_first_meal_starts_streak() -> None:
    update = on_meal_logged(Gamification(), TODAY)

    state = update.gamification
    assert state.streak == 1
    assert state.points == 10
    assert state.level == 1
    assert state.total_meals_logged == 1
    assert state.last_log_date == TODAY
    assert update.points_awarded == 10
    assert not update.leveled_up


def test_meal_after_yesterday_levels_up_and_awards_novice_badge() -> None:
    state = Gamification(
        points=95,
        streak=3,
        last_log_date=TODAY - 1,
        total_meals_logged=9,
    )

    update = on_meal_logged(state, TODAY)

    assert update.gamification.points == 105
    assert update.gamification.level == 2
    assert update.leveled_up
    assert update.gamification.streak == 4
    assert update.gamification.total_meals_logged == 10
    assert update.new_badges == ("novice_logger",)
    assert update.gamification.badges == ("novice_logger",)


def test_gap_of_two_days_restarts_streak_at_one() -> None:
    state = Gamification(points=200, streak=12, last_log_date=TODAY - 2)

    update = on_meal_logged(state, TODAY)

    assert update.gamification.streak == 1


def test_same_day_logging_stacks_points_but_not_streak() -> None:
    state = Gamification(streak=2, last_log_date=TODAY - 1)

    first = on_meal_logged(state, TODAY).gamification
    second = on_meal_logged(first, TODAY).gamification

    assert first.streak == 3
    assert second.streak == 3
    assert second.points == first.points + 10
    assert second.total_meals_logged == first.total_meals_logged + 1


def test_level_always_follows_points() -> None:
    state = Gamification()
    for glass in range(1, 41):
        state = on_meal_logged(state, TODAY + glass // 3).gamification
        state = on_water_added(state, glass).gamification
        assert state.level == state.points // 100 + 1


def test_badges_never_shrink_or_repeat() -> None:
    state = Gamification(
        points=490, streak=29, last_log_date=TODAY - 1, total_meals_logged=99
    )
    previous: tuple[str, ...] = ()
    for offset in range(5):
        update = on_meal_logged(state, TODAY + offset)
        state = update.gamification
        assert set(previous) <= set(state.badges)
        assert len(state.badges) == len(set(state.badges))
        previous = state.badges

    assert set(state.badges) == {
        "week_warrior",
        "month_master",
        "novice_logger",
        "dedicated_tracker",
        "logging_legend",
        "point_collector",
    }


def test_evaluate_badges_is_idempotent() -> None:
    state = Gamification(points=600, streak=8, total_meals_logged=12)

    awarded, new_badges = evaluate_badges(state)
    again, none_new = evaluate_badges(awarded)

    assert new_badges == ("week_warrior", "novice_logger", "point_collector")
    assert none_new == ()
    assert again == awarded


def test_every_fourth_glass_awards_five_points() -> None:
    state = Gamification()
    rewarded = []
    for glass in range(1, 9):
        update = on_water_added(state, glass)
        if update.points_awarded:
            rewarded.append(glass)
        state = update.gamification

    assert rewarded == [4, 8]
    assert state.points == 10
    assert state.streak == 0
    assert state.badges == ()


def test_hydration_reward_can_level_up() -> None:
    update = on_water_added(Gamification(points=98), 4)

    assert update.leveled_up
    assert update.gamification.level == 2


def test_check_streak_zeroes_broken_streak() -> None:
    state = Gamification(streak=5, last_log_date=TODAY - 3)

    assert check_streak(state, TODAY).streak == 0


def test_check_streak_keeps_recent_streaks() -> None:
    yesterday = Gamification(streak=5, last_log_date=TODAY - 1)
    today = Gamification(streak=5, last_log_date=TODAY)
    never = Gamification()

    assert check_streak(yesterday, TODAY) == yesterday
    assert check_streak(today, TODAY) == today
    assert check_streak(never, TODAY) == never


def test_decay_then_log_restarts_at_one() -> None:
    state = check_streak(Gamification(streak=5, last_log_date=TODAY - 4), TODAY)

    assert on_meal_logged(state, TODAY).gamification.streak == 1


def test_award_points_rejects_negative_amounts() -> None:
    with pytest.raises(ValueError):
        award_points(Gamification(points=10), -5)


def test_badge_info_and_level_progress() -> None:
    assert badge_info("week_warrior").name == "Week Warrior"
    assert badge_info("nope").name == "Unknown"
    assert level_progress(Gamification(points=235)) == 35
