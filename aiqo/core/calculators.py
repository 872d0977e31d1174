"""Unit Calculators - Pure functions for energy and hydration targets.

All functions are pure: same input always produces same output, no side effects.
"""

import math

from .models import ActivityLevel, Gender, Goal, Profile


ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

# Extra millilitres of water per day on top of the 35 ml/kg base
HYDRATION_BUMPS: dict[ActivityLevel, int] = {
    ActivityLevel.SEDENTARY: 0,
    ActivityLevel.LIGHT: 200,
    ActivityLevel.MODERATE: 400,
    ActivityLevel.ACTIVE: 600,
    ActivityLevel.ATHLETE: 800,
}

GOAL_ADJUSTMENTS: dict[Goal, int] = {
    Goal.CUT: -400,
    Goal.BULK: 300,
    Goal.MAINTAIN: 0,
}

WATER_ML_PER_KG = 35


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up.

    Python's round() rounds halves to even; stored targets were produced
    with half-up rounding, so every target calculation uses this instead.
    """
    return math.floor(value + 0.5)


def basal_metabolic_rate(gender: Gender, weight_kg: float, height_cm: float, age_years: int) -> float:
    """Calculate basal metabolic rate with the Mifflin-St Jeor equation.

    Args:
        gender: Biological sex used by the equation
        weight_kg: Body weight in kilograms
        height_cm: Height in centimetres
        age_years: Age in years

    Returns:
        Resting energy expenditure in kcal/day (unrounded)
    """
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    if Gender(gender) is Gender.MALE:
        return base + 5
    return base - 161


def activity_multiplier(level: ActivityLevel) -> float:
    """Return the TDEE multiplier for an activity level."""
    return ACTIVITY_MULTIPLIERS[ActivityLevel(level)]


def daily_energy_target(profile: Profile) -> int:
    """Calculate the daily calorie target for a profile.

    BMR is scaled by the activity multiplier and rounded once; the goal
    offset (cut -400, bulk +300, maintain 0) is then added.

    Args:
        profile: The user's onboarding profile

    Returns:
        Daily energy target in kcal
    """
    bmr = basal_metabolic_rate(profile.gender, profile.weight, profile.height, profile.age)
    tdee = round_half_up(bmr * activity_multiplier(profile.activity))
    return tdee + GOAL_ADJUSTMENTS[profile.goal]


def hydration_target(profile: Profile) -> int:
    """Calculate the daily water target in millilitres."""
    bump = HYDRATION_BUMPS[profile.activity]
    return round_half_up(profile.weight * WATER_ML_PER_KG + bump)
