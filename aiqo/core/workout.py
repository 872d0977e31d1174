"""Workout Plan - Today's exercise list with set, rep and rest counters."""

from pydantic import BaseModel, ConfigDict, Field


REST_STEP_SECONDS = 15

DEFAULT_EXERCISES = (
    "Bodyweight squat",
    "Dumbbell chest press",
    "Back row",
    "Plank 45 seconds",
)

BREATHING_EXERCISE = (
    "Box breathing 4-4-4-4: inhale for 4 seconds, hold 4, exhale 4, hold 4. "
    "Repeat 5 times ✨"
)


class WorkoutPlan(BaseModel):
    """Adaptive plan shown on the gym screen."""

    model_config = ConfigDict(frozen=True)

    sets: int = Field(default=3, ge=0)
    reps: int = Field(default=10, ge=0)
    rest_seconds: int = Field(default=60, ge=0)
    exercises: tuple[str, ...] = DEFAULT_EXERCISES


def adjust_counter(value: int, delta: int) -> int:
    """Add delta to a counter without going below zero."""
    return max(0, value + delta)


def adjust_plan(plan: WorkoutPlan, sets: int = 0, reps: int = 0, rest_steps: int = 0) -> WorkoutPlan:
    """Return a plan with its counters nudged up or down.

    Args:
        plan: Current plan
        sets: Change in number of sets
        reps: Change in reps per set
        rest_steps: Change in rest, in 15-second steps

    Returns:
        A new WorkoutPlan
    """
    return plan.model_copy(update={
        "sets": adjust_counter(plan.sets, sets),
        "reps": adjust_counter(plan.reps, reps),
        "rest_seconds": adjust_counter(plan.rest_seconds, rest_steps * REST_STEP_SECONDS),
    })
