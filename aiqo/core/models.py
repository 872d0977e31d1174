"""Core Data Models - Pydantic models for type safety.

All models are immutable value objects with no behavior beyond validation.
Attributes are snake_case in Python and camelCase in stored JSON, so records
written by earlier app versions load unchanged.
"""

import re
import uuid
from datetime import date as DateType
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

MEALS_PER_DAY = 3
SNACKS_PER_DAY = 2


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class Goal(str, Enum):
    CUT = "cut"
    BULK = "bulk"
    MAINTAIN = "maintain"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    ATHLETE = "athlete"


class _Record(BaseModel):
    """Base for persisted records: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _validate_clock(value: str) -> str:
    if not _CLOCK_RE.match(value):
        raise ValueError(f"expected HH:MM, got {value!r}")
    return value


ClockTime = Annotated[str, AfterValidator(_validate_clock)]


class MealTimes(_Record):
    """Preferred local times for the three main meals."""

    breakfast: ClockTime = "08:30"
    lunch: ClockTime = "14:00"
    dinner: ClockTime = "20:00"


class SleepWindow(_Record):
    """Preferred local sleep window."""

    start: ClockTime = "00:00"
    end: ClockTime = "07:00"


class DietaryPreferences(_Record):
    """Dietary flags collected at onboarding.

    These are display filters only; meal generation does not read them.
    """

    halal: bool = False
    vegan: bool = False
    vegetarian: bool = False
    gluten_free: bool = False
    lactose_free: bool = False


class Profile(_Record):
    """Onboarding record describing the user."""

    gender: Gender = Gender.MALE
    age: int = Field(default=24, gt=0, description="Age in years")
    height: float = Field(default=175, gt=0, description="Height in cm")
    weight: float = Field(default=90, gt=0, description="Weight in kg")
    goal: Goal = Goal.CUT
    activity: ActivityLevel = ActivityLevel.LIGHT
    meal_times: MealTimes = Field(default_factory=MealTimes)
    sleep_time: SleepWindow = Field(default_factory=SleepWindow)
    diet: DietaryPreferences = Field(default_factory=lambda: DietaryPreferences(halal=True))


class Meal(_Record):
    """A generated meal or snack with its recipe."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = Field(min_length=1)
    kcal: int = Field(ge=0, description="Energy content")
    protein: float = Field(ge=0, description="Protein in grams")
    carbs: float = Field(ge=0, description="Carbohydrates in grams")
    fat: float = Field(ge=0, description="Fat in grams")
    time_mins: int = Field(gt=0, description="Preparation time in minutes")
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    tags: Optional[list[str]] = None


MealList = Annotated[list[Meal], Field(min_length=MEALS_PER_DAY, max_length=MEALS_PER_DAY)]
SnackList = Annotated[list[Meal], Field(min_length=SNACKS_PER_DAY, max_length=SNACKS_PER_DAY)]


class Day(_Record):
    """A single calendar day's tracked metrics."""

    day_date: DateType = Field(alias="date", description="Calendar date (YYYY-MM-DD)")
    sleep_pct: int = Field(ge=0, le=100)
    sitting_hrs: float = Field(ge=0)
    steps: int = Field(ge=0)
    steps_goal: int = Field(ge=0)
    water_ml: int = Field(ge=0)
    water_target: int = Field(ge=0)
    kcal_consumed: int = Field(ge=0)
    kcal_target: int = Field(ge=0)
    meals: MealList
    snacks: SnackList
    prayer_done: bool = False
    workout_done: bool = False


class DayPatch(_Record):
    """Partial update to a Day.

    Only the fields set on the patch are merged. Targets and the date are not
    patchable; unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    sleep_pct: Optional[int] = Field(default=None, ge=0, le=100)
    sitting_hrs: Optional[float] = Field(default=None, ge=0)
    steps: Optional[int] = Field(default=None, ge=0)
    water_ml: Optional[int] = Field(default=None, ge=0)
    kcal_consumed: Optional[int] = Field(default=None, ge=0)
    meals: Optional[MealList] = None
    snacks: Optional[SnackList] = None
    prayer_done: Optional[bool] = None
    workout_done: Optional[bool] = None


class JournalEntry(_Record):
    """A day's mood check-in."""

    mood: int = Field(ge=1, le=5)
    note: str = ""


class DaySummary(BaseModel):
    """UI-facing figures derived from a Day."""

    day_date: DateType
    wellness_score: int = Field(ge=0, le=100)
    water_percent: int = Field(ge=0, le=100)
    calories_remaining: int = Field(ge=0)
    steps: int
    steps_goal: int
    streak: int = Field(ge=0)
    nudge: str
    nudge_message: str
    complete: bool
