"""Recommendation Engine - Wellness score and nudge selection.

The nudge is a fixed decision table; the same Day always yields the same nudge.
"""

from enum import Enum

from .calculators import round_half_up
from .models import Day


FAITH_DONE_SCORE = 100
FAITH_PENDING_SCORE = 30
SPORT_DONE_SCORE = 100
SPORT_PENDING_SCORE = 40

LOW_WATER_RATIO = 0.5
CALORIE_GAP_FOR_SNACK = 300
MAX_SITTING_HRS = 8


class Nudge(str, Enum):
    """Nudge tokens, listed in priority order."""

    HYDRATION = "hydration"
    MOVEMENT = "movement"
    PROTEIN_SNACK = "protein_snack"
    PRAYER = "prayer"
    POSTURE = "posture"
    ENCOURAGEMENT = "encouragement"


NUDGE_MESSAGES: dict[Nudge, str] = {
    Nudge.HYDRATION: "A glass of water right now will refresh you 💧",
    Nudge.MOVEMENT: "Walk for 10 minutes, your mood will thank you 🚶",
    Nudge.PROTEIN_SNACK: "Have a light protein snack before your workout 💪",
    Nudge.PRAYER: "Two short rak'ahs will brighten your day 🕊️",
    Nudge.POSTURE: "Stand up and stretch for a minute, your back matters 🙆",
    Nudge.ENCOURAGEMENT: "Keep going, your progress shows today ✨",
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def ratio(amount: float, target: float) -> float:
    """Return amount/target, treating a zero target as 1."""
    return amount / max(1, target)


def wellness_score(day: Day) -> int:
    """Score a day from 0 to 100.

    The score is the mean of five sub-scores, each clamped to [0, 100]:
    water and steps as percent of target, sleep percent, prayer (100 or 30)
    and workout (100 or 40).

    Args:
        day: The day to score

    Returns:
        Rounded wellness score
    """
    water = clamp(ratio(day.water_ml, day.water_target) * 100, 0, 100)
    sleep = clamp(day.sleep_pct, 0, 100)
    steps = clamp(ratio(day.steps, day.steps_goal) * 100, 0, 100)
    faith = FAITH_DONE_SCORE if day.prayer_done else FAITH_PENDING_SCORE
    sport = SPORT_DONE_SCORE if day.workout_done else SPORT_PENDING_SCORE
    return round_half_up((water + sleep + steps + faith + sport) / 5)


def select_nudge(day: Day) -> Nudge:
    """Pick the single most pressing nudge for a day.

    Rules are checked in order and the first match wins: low water, low
    steps, large calorie gap, prayer pending, long sitting, otherwise
    encouragement.
    """
    if ratio(day.water_ml, day.water_target) < LOW_WATER_RATIO:
        return Nudge.HYDRATION
    if day.steps < day.steps_goal / 2:
        return Nudge.MOVEMENT
    if day.kcal_target - day.kcal_consumed > CALORIE_GAP_FOR_SNACK:
        return Nudge.PROTEIN_SNACK
    if not day.prayer_done:
        return Nudge.PRAYER
    if day.sitting_hrs > MAX_SITTING_HRS:
        return Nudge.POSTURE
    return Nudge.ENCOURAGEMENT


def nudge_message(nudge: Nudge) -> str:
    return NUDGE_MESSAGES[nudge]
