"""Validated user input: onboarding survey answers and meal drafts."""

from typing import Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from caloclash.domain.errors import ValidationError

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class SurveyAnswers(BaseModel):
    """Onboarding survey answers, stored as a profile's user data."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="allow",
    )

    name: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    age: str = Field(min_length=1)
    weight: str = Field(min_length=1)
    height: str = Field(min_length=1)
    measurement_system: Literal["metric", "imperial"] = "metric"
    activity_level: str = Field(min_length=1)
    occupation: str = Field(min_length=1)
    sleep_hours: str = Field(min_length=1)
    goal: str = Field(min_length=1)
    pace: str = Field(min_length=1)
    target_weight: str = ""
    timeframe: str = ""
    dietary_restrictions: list[str] = Field(default_factory=list)
    health_conditions: list[str] = Field(default_factory=list)
    exercise_preference: str = Field(min_length=1)
    meals_per_day: str = "3"
    motivation: str = Field(min_length=1)
    previous_experience: str = ""

    @field_validator(
        "age",
        "weight",
        "height",
        "sleep_hours",
        "target_weight",
        "timeframe",
        "meals_per_day",
        mode="before",
    )
    @classmethod
    def _numbers_as_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("previous_experience", mode="before")
    @classmethod
    def _flag_as_text(cls, value: object) -> object:
        if isinstance(value, bool):
            return "yes" if value else "no"
        return value

    @model_validator(mode="after")
    def _target_weight_unless_maintaining(self) -> "SurveyAnswers":
        if self.goal != "maintain" and not self.target_weight:
            raise ValueError("targetWeight is required unless goal is maintain")
        return self

    def to_user_data(self) -> dict[str, object]:
        """Return the answers keyed the way they are stored."""
        return self.model_dump(by_alias=True)


class MealDraft(BaseModel):
    """A meal as entered by the user, before it gets an id and timestamp."""

    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fats: float = Field(default=0.0, ge=0)
    type: MealType = "breakfast"

    @field_validator("protein", "carbs", "fats", mode="before")
    @classmethod
    def _blank_macro_is_zero(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0.0
        return value


def parse_survey(payload: dict[str, object]) -> SurveyAnswers:
    """Validate survey answers, raising ValidationError on missing fields."""
    try:
        return SurveyAnswers.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def parse_meal_draft(payload: dict[str, object]) -> MealDraft:
    """Validate a meal draft; name and calories are required."""
    try:
        return MealDraft.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def _describe(exc: pydantic.ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "input"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)
