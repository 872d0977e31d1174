"""Meal Plan Generator - Builds a day's meals and snacks from a fixed pantry.

Generation is random, so callers that need reproducible plans (tests, replays)
pass their own ``random.Random``. Nothing here touches storage.
"""

import random
import uuid
from dataclasses import dataclass
from typing import Optional

from .calculators import round_half_up
from .models import Goal, Meal


MAIN_MEAL_SHARE = 0.75
MAIN_MEAL_COUNT = 3
SNACK_COUNT = 2

# Preparation time is drawn from [MIN, MAX) minutes
PREP_TIME_MIN = 15
PREP_TIME_MAX = 30

PANTRY: dict[str, tuple[str, ...]] = {
    "proteins": ("chicken breast", "eggs", "tuna", "chickpeas", "lentils", "greek yogurt"),
    "carbs": ("basmati rice", "oats", "whole-wheat pita", "potato", "quinoa", "dates"),
    "fats": ("avocado", "olive oil", "mixed nuts", "tahini"),
    "veggies": ("lettuce", "spinach", "tomato", "cucumber", "bell pepper", "broccoli", "carrot"),
}

# Every pantry item is halal, so every generated meal carries the tag.
PANTRY_TAGS = ("halal",)


@dataclass(frozen=True)
class MealSlot:
    """A position in the day's plan with its fixed macro split (grams)."""

    title: str
    protein: float
    carbs: float
    fat: float


MEAL_SLOTS = (
    MealSlot("Balanced breakfast", 30, 50, 15),
    MealSlot("Satisfying lunch", 35, 55, 18),
    MealSlot("Light dinner", 28, 45, 12),
)

SNACK_SLOTS = (
    MealSlot("Snack 1", 12, 15, 8),
    MealSlot("Snack 2", 10, 18, 6),
)


def pick(options: tuple[str, ...], count: int, rng: random.Random) -> list[str]:
    """Draw up to ``count`` distinct items, in draw order."""
    return rng.sample(list(options), min(count, len(options)))


def build_meal(slot: MealSlot, kcal: int, rng: random.Random) -> Meal:
    """Build one meal for a slot with freshly drawn ingredients.

    Args:
        slot: Title and macro split for the meal
        kcal: Energy content assigned to the meal
        rng: Random source for ingredient and prep-time picks

    Returns:
        A new Meal with a fresh id
    """
    protein = pick(PANTRY["proteins"], 1, rng)[0]
    carb = pick(PANTRY["carbs"], 1, rng)[0]
    fat = pick(PANTRY["fats"], 1, rng)[0]
    veggies = pick(PANTRY["veggies"], 2, rng)

    return Meal(
        id=uuid.UUID(int=rng.getrandbits(128), version=4).hex,
        title=slot.title,
        kcal=kcal,
        protein=slot.protein,
        carbs=slot.carbs,
        fat=slot.fat,
        time_mins=rng.randrange(PREP_TIME_MIN, PREP_TIME_MAX),
        ingredients=[protein, carb, fat, *veggies],
        steps=[
            f"Prep the ingredients: {protein} + {carb} + {fat} + {', '.join(veggies)}",
            "Cook the protein over medium heat for 8-10 min",
            "Boil or warm the carbs as the package directs",
            "Plate up and add the vegetables and sauce",
        ],
        tags=list(PANTRY_TAGS),
    )


def split_energy(day_kcal: int) -> tuple[int, int]:
    """Split a day's energy into per-meal and per-snack kcal.

    Each share is rounded on its own, so the five values need not add up to
    ``day_kcal`` exactly.

    Returns:
        Tuple of (kcal per main meal, kcal per snack)
    """
    main_pool = round_half_up(day_kcal * MAIN_MEAL_SHARE)
    snack_pool = day_kcal - main_pool
    return (
        round_half_up(main_pool / MAIN_MEAL_COUNT),
        round_half_up(snack_pool / SNACK_COUNT),
    )


def generate_meal_plan(
    day_kcal: int,
    goal: Goal,
    rng: Optional[random.Random] = None,
) -> tuple[list[Meal], list[Meal]]:
    """Generate three main meals and two snacks for a calorie target.

    The goal is accepted for future macro policies; the current split is the
    same for every goal.

    Args:
        day_kcal: Daily energy target in kcal
        goal: The user's dietary goal
        rng: Random source (defaults to a fresh system-seeded one)

    Returns:
        Tuple of (meals, snacks)
    """
    if day_kcal <= 0:
        raise ValueError(f"day_kcal must be positive, got {day_kcal}")

    rng = rng or random.Random()
    meal_kcal, snack_kcal = split_energy(day_kcal)

    meals = [build_meal(slot, meal_kcal, rng) for slot in MEAL_SLOTS]
    snacks = [build_meal(slot, snack_kcal, rng) for slot in SNACK_SLOTS]
    return meals, snacks
