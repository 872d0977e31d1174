"""Unit tests for meal plan generation - seeded randomness, no mocks needed."""

import random

import pytest

from aiqo.core.models import Goal
from aiqo.core.meal_plan import (
    MEAL_SLOTS,
    PANTRY,
    SNACK_SLOTS,
    generate_meal_plan,
    split_energy,
)


class TestSplitEnergy:
    """Tests for split_energy."""

    def test_even_split(self):
        """2400 kcal splits into 600 per meal and 300 per snack."""
        assert split_energy(2400) == (600, 300)

    def test_each_share_rounded(self):
        """Shares are rounded individually."""
        # main pool round(1637.25) = 1637 -> 545.67 -> 546; snack pool 546 -> 273
        assert split_energy(2183) == (546, 273)


class TestGenerateMealPlan:
    """Tests for generate_meal_plan."""

    def test_three_meals_two_snacks(self):
        """Plan always has 3 meals and 2 snacks."""
        meals, snacks = generate_meal_plan(2400, Goal.MAINTAIN, random.Random(1))
        assert len(meals) == 3
        assert len(snacks) == 2

    def test_total_close_to_target(self):
        """Sum of all five is within rounding slack of the target."""
        for target in (1500, 1999, 2183, 2400, 3117):
            meals, snacks = generate_meal_plan(target, Goal.MAINTAIN, random.Random(target))
            total = sum(m.kcal for m in meals + snacks)
            assert abs(total - target) <= 60

    def test_slot_titles_and_macros(self):
        """Each slot keeps its fixed title and macro split."""
        meals, snacks = generate_meal_plan(2400, Goal.CUT, random.Random(2))
        for meal, slot in zip(meals + snacks, MEAL_SLOTS + SNACK_SLOTS):
            assert meal.title == slot.title
            assert (meal.protein, meal.carbs, meal.fat) == (slot.protein, slot.carbs, slot.fat)

    def test_goal_does_not_change_split(self):
        """Same seed gives same kcal and macros for every goal."""
        plans = [generate_meal_plan(2000, goal, random.Random(5)) for goal in Goal]
        kcal = [[m.kcal for m in meals + snacks] for meals, snacks in plans]
        assert kcal[0] == kcal[1] == kcal[2]

    def test_ingredients_from_pantry(self):
        """One protein, carb and fat plus two distinct vegetables."""
        meals, snacks = generate_meal_plan(2400, Goal.MAINTAIN, random.Random(3))
        for meal in meals + snacks:
            protein, carb, fat, veg1, veg2 = meal.ingredients
            assert protein in PANTRY["proteins"]
            assert carb in PANTRY["carbs"]
            assert fat in PANTRY["fats"]
            assert veg1 in PANTRY["veggies"] and veg2 in PANTRY["veggies"]
            assert veg1 != veg2

    def test_first_step_lists_ingredients(self):
        """The prep step names every picked ingredient."""
        meals, _ = generate_meal_plan(2400, Goal.MAINTAIN, random.Random(4))
        first_step = meals[0].steps[0]
        assert len(meals[0].steps) == 4
        for ingredient in meals[0].ingredients:
            assert ingredient in first_step

    def test_prep_time_range(self):
        """Prep time is in [15, 30)."""
        rng = random.Random(9)
        for _ in range(20):
            meals, snacks = generate_meal_plan(2400, Goal.MAINTAIN, rng)
            for meal in meals + snacks:
                assert 15 <= meal.time_mins < 30

    def test_tagged_halal(self):
        """Every meal carries the halal tag."""
        meals, snacks = generate_meal_plan(2400, Goal.MAINTAIN)
        assert all(m.tags == ["halal"] for m in meals + snacks)

    def test_unique_ids(self):
        """Every meal gets its own id, and a new plan gets new ids."""
        rng = random.Random(11)
        first = generate_meal_plan(2400, Goal.MAINTAIN, rng)
        second = generate_meal_plan(2400, Goal.MAINTAIN, rng)
        ids = [m.id for meals, snacks in (first, second) for m in meals + snacks]
        assert len(set(ids)) == 10

    def test_seed_reproducible(self):
        """Same seed gives the same plan."""
        assert generate_meal_plan(2400, Goal.MAINTAIN, random.Random(42)) == generate_meal_plan(
            2400, Goal.MAINTAIN, random.Random(42)
        )

    def test_rejects_non_positive_target(self):
        """A zero target is an error."""
        with pytest.raises(ValueError):
            generate_meal_plan(0, Goal.MAINTAIN)
