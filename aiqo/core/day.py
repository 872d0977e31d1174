"""Day Lifecycle - Pure functions for creating and updating a Day.

Every change to a Day goes through apply_patch, which returns a new Day and
leaves the original untouched. Persisting the result is the caller's job.
"""

import random
from datetime import date
from typing import Optional

from .calculators import daily_energy_target, hydration_target
from .meal_plan import generate_meal_plan
from .models import ActivityLevel, Day, DayPatch, Meal, Profile


BASELINE_SLEEP_PCT = 70
BASELINE_SITTING_HRS = 7
BASELINE_STEPS = 2500

SEDENTARY_STEPS_GOAL = 6000
DEFAULT_STEPS_GOAL = 9000

# Share of the water and step targets needed to close a day
COMPLETION_THRESHOLD = 0.9


class MealNotFoundError(LookupError):
    """Raised when a meal id is not part of the day's plan."""


def steps_goal_for(activity: ActivityLevel) -> int:
    if ActivityLevel(activity) is ActivityLevel.SEDENTARY:
        return SEDENTARY_STEPS_GOAL
    return DEFAULT_STEPS_GOAL


def create_day(profile: Profile, day_date: date, rng: Optional[random.Random] = None) -> Day:
    """Create a fresh Day for a profile.

    Targets are derived once here and only change when the plan is rebuilt.

    Args:
        profile: The user's onboarding profile
        day_date: Calendar date of the new day
        rng: Random source for the meal plan

    Returns:
        A new Day with baseline metrics and empty counters
    """
    kcal_target = daily_energy_target(profile)
    meals, snacks = generate_meal_plan(kcal_target, profile.goal, rng)

    return Day(
        day_date=day_date,
        sleep_pct=BASELINE_SLEEP_PCT,
        sitting_hrs=BASELINE_SITTING_HRS,
        steps=BASELINE_STEPS,
        steps_goal=steps_goal_for(profile.activity),
        water_ml=0,
        water_target=hydration_target(profile),
        kcal_consumed=0,
        kcal_target=kcal_target,
        meals=meals,
        snacks=snacks,
        prayer_done=False,
        workout_done=False,
    )


def apply_patch(day: Day, patch: DayPatch) -> Day:
    """Merge the fields set on a patch into a Day.

    Args:
        day: The current day
        patch: Partial update; unset fields are left alone

    Returns:
        A new Day with the patch applied
    """
    updates = {name: getattr(patch, name) for name in patch.model_fields_set}
    return day.model_copy(update=updates)


def add_water(day: Day, ml: int) -> Day:
    """Log water intake in millilitres."""
    if ml < 0:
        raise ValueError(f"Water amount must be non-negative, got {ml}")
    return apply_patch(day, DayPatch(water_ml=day.water_ml + ml))


def reset_water(day: Day) -> Day:
    return apply_patch(day, DayPatch(water_ml=0))


def add_steps(day: Day, steps: int) -> Day:
    """Log walked steps."""
    if steps < 0:
        raise ValueError(f"Step count must be non-negative, got {steps}")
    return apply_patch(day, DayPatch(steps=day.steps + steps))


def find_meal(day: Day, meal_id: str) -> Meal:
    """Look up a meal or snack by id.

    Raises:
        MealNotFoundError: If no meal in the plan has this id
    """
    for meal in [*day.meals, *day.snacks]:
        if meal.id == meal_id:
            return meal
    raise MealNotFoundError(meal_id)


def eat_meal(day: Day, meal_id: str) -> Day:
    """Add a planned meal's energy to the calories consumed.

    Eating the same meal twice counts it twice.
    """
    meal = find_meal(day, meal_id)
    return apply_patch(day, DayPatch(kcal_consumed=day.kcal_consumed + meal.kcal))


def toggle_prayer(day: Day) -> Day:
    return apply_patch(day, DayPatch(prayer_done=not day.prayer_done))


def mark_workout_done(day: Day) -> Day:
    return apply_patch(day, DayPatch(workout_done=True))


def regenerate_meals(day: Day, profile: Profile, rng: Optional[random.Random] = None) -> Day:
    """Replace the day's meals and snacks with a freshly generated plan.

    Counters, flags and targets are kept as they are.
    """
    meals, snacks = generate_meal_plan(daily_energy_target(profile), profile.goal, rng)
    return apply_patch(day, DayPatch(meals=meals, snacks=snacks))


def evaluate_completion(day: Day) -> bool:
    """Check whether a day meets the water and step thresholds.

    Calories are not part of the test.
    """
    return (
        day.water_ml >= COMPLETION_THRESHOLD * day.water_target
        and day.steps >= COMPLETION_THRESHOLD * day.steps_goal
    )


def update_streak(current_streak: int, day_complete: bool, had_prior_day_record: bool) -> int:
    """Compute the streak after closing a day.

    Args:
        current_streak: Streak before this day was closed
        day_complete: Result of evaluate_completion for the day
        had_prior_day_record: Whether the previous calendar day was stored

    Returns:
        The new streak: unchanged for an incomplete day, otherwise one more
        than before if yesterday exists, else 1
    """
    if not day_complete:
        return current_streak
    if had_prior_day_record:
        return current_streak + 1
    return 1
