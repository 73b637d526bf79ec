"""JSON document encoding for profiles, with defensive decoding.

Every decoder takes whatever was stored and falls back to a typed default
field by field, so a single corrupt value never discards the rest.
"""

import json
import logging
import math
from typing import TypeVar

from caloclash.domain.calendar import format_day, parse_day
from caloclash.domain.profiles import (
    MEAL_TYPES,
    FavoriteMeal,
    Gamification,
    Meal,
    Plan,
    Profile,
)

T = TypeVar("T")

_logger = logging.getLogger(__name__)


def decode_json(raw: str | None, default: T) -> T:
    """Decode a stored JSON string, returning ``default`` when unusable.

    The decoded value must have the same container type as the default
    (a list default only accepts lists, a dict default only dicts).
    """
    if raw is None or raw == "":
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        _logger.warning("Discarding malformed stored JSON: %.60r", raw)
        return default
    if default is not None and not isinstance(value, type(default)):
        _logger.warning(
            "Discarding stored JSON of type %s, expected %s",
            type(value).__name__,
            type(default).__name__,
        )
        return default
    return value


def encode_json(value: object) -> str:
    """Encode a document for storage."""
    return json.dumps(value, separators=(",", ":"))


def plan_from_document(doc: object) -> Plan:
    data = doc if isinstance(doc, dict) else {}
    return Plan(
        calories=_to_int(data.get("calories")),
        protein=_to_int(data.get("protein")),
        carbs=_to_int(data.get("carbs")),
        fats=_to_int(data.get("fats")),
        bmr=_to_int(data.get("bmr")),
        tdee=_to_int(data.get("tdee")),
    )


def plan_to_document(plan: Plan) -> dict[str, object]:
    return {
        "calories": plan.calories,
        "protein": plan.protein,
        "carbs": plan.carbs,
        "fats": plan.fats,
        "bmr": plan.bmr,
        "tdee": plan.tdee,
    }


def meal_from_document(doc: object) -> Meal | None:
    """Decode a meal, or None when it is not an object."""
    if not isinstance(doc, dict):
        return None
    return Meal(
        id=str(doc.get("id") or ""),
        name=str(doc.get("name") or ""),
        calories=_to_float(doc.get("calories")),
        protein=_to_float(doc.get("protein")),
        carbs=_to_float(doc.get("carbs")),
        fats=_to_float(doc.get("fats")),
        type=_meal_type(doc.get("type")),
        timestamp=str(doc.get("timestamp") or ""),
    )


def meal_to_document(meal: Meal) -> dict[str, object]:
    return {
        "id": meal.id,
        "name": meal.name,
        "calories": meal.calories,
        "protein": meal.protein,
        "carbs": meal.carbs,
        "fats": meal.fats,
        "type": meal.type,
        "timestamp": meal.timestamp,
    }


def favorite_from_document(doc: object) -> FavoriteMeal | None:
    if not isinstance(doc, dict):
        return None
    return FavoriteMeal(
        id=str(doc.get("id") or ""),
        name=str(doc.get("name") or ""),
        calories=_to_float(doc.get("calories")),
        protein=_to_float(doc.get("protein")),
        carbs=_to_float(doc.get("carbs")),
        fats=_to_float(doc.get("fats")),
        type=_meal_type(doc.get("type")),
    )


def favorite_to_document(favorite: FavoriteMeal) -> dict[str, object]:
    return {
        "id": favorite.id,
        "name": favorite.name,
        "calories": favorite.calories,
        "protein": favorite.protein,
        "carbs": favorite.carbs,
        "fats": favorite.fats,
        "type": favorite.type,
    }


def gamification_from_document(doc: object) -> Gamification:
    """Decode progression state; the stored level is ignored and re-derived."""
    data = doc if isinstance(doc, dict) else {}
    badges_raw = data.get("badges")
    badges: list[str] = []
    if isinstance(badges_raw, list):
        for badge in badges_raw:
            if isinstance(badge, str) and badge not in badges:
                badges.append(badge)
    return Gamification(
        points=max(_to_int(data.get("points")), 0),
        streak=max(_to_int(data.get("streak")), 0),
        last_log_date=parse_day(data.get("lastLogDate")),
        badges=tuple(badges),
        total_meals_logged=max(_to_int(data.get("totalMealsLogged")), 0),
    )


def gamification_to_document(state: Gamification) -> dict[str, object]:
    return {
        "points": state.points,
        "level": state.level,
        "streak": state.streak,
        "lastLogDate": (
            format_day(state.last_log_date)
            if state.last_log_date is not None
            else None
        ),
        "badges": list(state.badges),
        "totalMealsLogged": state.total_meals_logged,
    }


def profile_from_document(doc: object, today: int) -> Profile | None:
    """Decode a stored profile; documents without an id are dropped."""
    if not isinstance(doc, dict):
        return None
    profile_id = doc.get("id")
    if not isinstance(profile_id, str) or not profile_id:
        return None
    user_data = doc.get("userData")
    if not isinstance(user_data, dict):
        user_data = {}
    # An unreadable day never matches today, so rollover clears its data.
    stale = today - 1
    return Profile(
        id=profile_id,
        name=str(doc.get("name") or user_data.get("name") or "My Profile"),
        user_data=user_data,
        plan=plan_from_document(doc.get("plan")),
        today_meals=meals_from_documents(doc.get("todayMeals")),
        last_save_date=_day_or(doc.get("lastSaveDate"), stale),
        gamification=gamification_from_document(doc.get("gamification")),
        water_intake=max(_to_int(doc.get("waterIntake")), 0),
        water_intake_date=_day_or(doc.get("waterIntakeDate"), stale),
        favorite_meals=favorites_from_documents(doc.get("favoriteMeals")),
    )


def profile_to_document(profile: Profile) -> dict[str, object]:
    return {
        "id": profile.id,
        "name": profile.name,
        "userData": profile.user_data,
        "plan": plan_to_document(profile.plan),
        "todayMeals": [meal_to_document(meal) for meal in profile.today_meals],
        "lastSaveDate": format_day(profile.last_save_date),
        "gamification": gamification_to_document(profile.gamification),
        "waterIntake": profile.water_intake,
        "waterIntakeDate": format_day(profile.water_intake_date),
        "favoriteMeals": [
            favorite_to_document(favorite) for favorite in profile.favorite_meals
        ],
    }


def meals_from_documents(docs: object) -> tuple[Meal, ...]:
    if not isinstance(docs, list):
        return ()
    meals = (meal_from_document(doc) for doc in docs)
    return tuple(meal for meal in meals if meal is not None)


def favorites_from_documents(docs: object) -> tuple[FavoriteMeal, ...]:
    if not isinstance(docs, list):
        return ()
    favorites = (favorite_from_document(doc) for doc in docs)
    return tuple(favorite for favorite in favorites if favorite is not None)


def _day_or(raw: object, fallback: int) -> int:
    day = parse_day(raw)
    return fallback if day is None else day


def _meal_type(value: object) -> str:
    if isinstance(value, str) and value in MEAL_TYPES:
        return value
    return MEAL_TYPES[0]


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _to_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0
