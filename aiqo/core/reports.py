"""Report Generation - Pure functions for the figures shown to the user."""

from .calculators import round_half_up
from .day import evaluate_completion
from .models import Day, DaySummary
from .recommendations import nudge_message, ratio, select_nudge, wellness_score


def format_duration(mins: int) -> str:
    """Format a duration in minutes for display.

    Args:
        mins: Duration in whole minutes

    Returns:
        "<m> min" below an hour, "<h> hr <m> min" otherwise
    """
    if mins < 60:
        return f"{mins} min"
    hours, minutes = divmod(mins, 60)
    return f"{hours} hr {minutes} min"


def water_percent(day: Day) -> int:
    """Water intake as a percent of target, capped at 100."""
    return min(100, round_half_up(ratio(day.water_ml, day.water_target) * 100))


def calories_remaining(day: Day) -> int:
    """Calories left before the target is reached (never negative)."""
    return max(0, day.kcal_target - day.kcal_consumed)


def summarize_day(day: Day, streak: int) -> DaySummary:
    """Generate the summary card for a day.

    Args:
        day: The day to summarize
        streak: Current streak, shown alongside the day

    Returns:
        DaySummary with score, progress figures and the current nudge
    """
    nudge = select_nudge(day)

    return DaySummary(
        day_date=day.day_date,
        wellness_score=wellness_score(day),
        water_percent=water_percent(day),
        calories_remaining=calories_remaining(day),
        steps=day.steps,
        steps_goal=day.steps_goal,
        streak=streak,
        nudge=nudge.value,
        nudge_message=nudge_message(nudge),
        complete=evaluate_completion(day),
    )
