"""Daily calorie and macro targets from onboarding answers."""

import math
import re
from collections.abc import Mapping

from caloclash.domain.profiles import Plan

LB_TO_KG = 0.453592
IN_TO_CM = 2.54

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "veryActive": 1.9,
}

# Non-exercise activity thermogenesis, kcal/day.
OCCUPATION_BONUS = {
    "sedentary": 0,
    "standing": 50,
    "physical": 150,
}

GOAL_ADJUSTMENTS = {
    "lose": {"slow": -250, "moderate": -500, "fast": -750},
    "gain": {"slow": 250, "moderate": 500, "fast": 750},
    "maintain": {"slow": 0, "moderate": 0, "fast": 0},
}

SHORT_SLEEP_HOURS = 6
LONG_SLEEP_HOURS = 8
SHORT_SLEEP_FACTOR = 0.95
LONG_SLEEP_FACTOR = 1.02

PROTEIN_SHARE = 0.30
CARBS_SHARE = 0.40
FATS_SHARE = 0.30
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")


def calculate_plan(answers: Mapping[str, object]) -> Plan:
    """Compute BMR, TDEE and daily targets from survey answers.

    Malformed numbers propagate as NaN instead of raising; callers validate
    input before relying on the result.
    """
    bmr = calculate_bmr(answers)
    tdee = calculate_tdee(bmr, answers)
    goal = str(answers.get("goal") or "")
    pace = str(answers.get("pace") or "")
    adjustment = GOAL_ADJUSTMENTS.get(goal, {}).get(pace, 0)
    calories = _round(tdee + adjustment)
    return Plan(
        calories=calories,
        protein=_round(calories * PROTEIN_SHARE / KCAL_PER_G_PROTEIN),
        carbs=_round(calories * CARBS_SHARE / KCAL_PER_G_CARBS),
        fats=_round(calories * FATS_SHARE / KCAL_PER_G_FAT),
        bmr=_round(bmr),
        tdee=_round(tdee),
    )


def calculate_bmr(answers: Mapping[str, object]) -> float:
    """Mifflin-St Jeor basal metabolic rate in kcal/day."""
    weight_kg, height_cm = to_metric(
        answers.get("weight"),
        answers.get("height"),
        str(answers.get("measurementSystem") or "metric"),
    )
    age = _parse_int(answers.get("age"))
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if answers.get("gender") == "male":
        return base + 5
    return base - 161


def calculate_tdee(bmr: float, answers: Mapping[str, object]) -> float:
    """Total daily energy expenditure including occupation and sleep."""
    multiplier = ACTIVITY_MULTIPLIERS.get(
        str(answers.get("activityLevel") or ""), math.nan
    )
    tdee = bmr * multiplier
    tdee += OCCUPATION_BONUS.get(str(answers.get("occupation") or ""), 0)
    sleep_hours = _parse_int(answers.get("sleepHours"))
    if sleep_hours < SHORT_SLEEP_HOURS:
        tdee *= SHORT_SLEEP_FACTOR
    elif sleep_hours >= LONG_SLEEP_HOURS:
        tdee *= LONG_SLEEP_FACTOR
    return tdee


def to_metric(weight: object, height: object, system: str) -> tuple[float, float]:
    """Return weight in kg and height in cm."""
    weight_value = _parse_float(weight)
    height_value = _parse_float(height)
    if system == "imperial":
        return weight_value * LB_TO_KG, height_value * IN_TO_CM
    return weight_value, height_value


def _round(value: float) -> int:
    # Half-up; NaN passes through unrounded.
    if not math.isfinite(value):
        return value  # type: ignore[return-value]
    return math.floor(value + 0.5)


def _parse_float(value: object) -> float:
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match:
            return float(match.group(0))
    return math.nan


def _parse_int(value: object) -> float:
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return float(math.trunc(value)) if math.isfinite(value) else math.nan
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match:
            return int(match.group(0))
    return math.nan
