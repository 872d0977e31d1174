"""Shared test fixtures."""

import random
from datetime import date

import pytest

from aiqo.core.meal_plan import generate_meal_plan
from aiqo.core.models import Day, Goal


TEST_DATE = date(2026, 10, 18)


@pytest.fixture
def make_day():
    """Factory for days with middling metrics and a seeded meal plan."""
    meals, snacks = generate_meal_plan(2000, Goal.CUT, random.Random(0))

    def factory(**overrides) -> Day:
        fields = dict(
            day_date=TEST_DATE,
            sleep_pct=50,
            sitting_hrs=10,
            steps=1000,
            steps_goal=8000,
            water_ml=0,
            water_target=2000,
            kcal_consumed=0,
            kcal_target=2000,
            meals=meals,
            snacks=snacks,
            prayer_done=False,
            workout_done=False,
        )
        fields.update(overrides)
        return Day(**fields)

    return factory
