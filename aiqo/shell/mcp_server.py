"""MCP Server - Tool definitions for the AiQo companion.

Each tool maps to one user interaction: logging water or steps, eating a
planned meal, closing the day, journaling, and running rest/cook timers.
The server runs over stdio; there is no network listener.
"""

import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..core.day import MealNotFoundError, find_meal
from ..core.models import (
    ActivityLevel,
    DietaryPreferences,
    Day,
    Gender,
    Goal,
    MealTimes,
    Profile,
    SleepWindow,
)
from ..core.reports import calories_remaining, format_duration, water_percent
from ..core.recommendations import nudge_message, select_nudge, wellness_score
from ..core.timers import TimerKind
from ..core.workout import BREATHING_EXERCISE, WorkoutPlan, adjust_plan
from .countdown import CountdownRunner
from .session import AiqoSession, DayUpdate
from .storage import StorageConfig, StorageError, create_store


logger = logging.getLogger(__name__)

mcp = FastMCP(
    "aiqo",
    instructions="""AiQo - Personal health and fitness companion.

Use these tools to track the user's water, steps, meals, prayer and workout
for today, and to suggest the next small step.

If get_today reports onboarding_required, ask for the user's details and call
setup_profile. After each logged action, show the updated wellness score and
nudge.""",
)

SAVE_FAILED_WARNING = "Saved in memory only; storage is unavailable."

# Lazy-initialized state
_session: AiqoSession | None = None
_runner: CountdownRunner | None = None
_workout = WorkoutPlan()


async def get_session() -> AiqoSession:
    """Get or create the started session."""
    global _session
    if _session is None:
        session = AiqoSession(create_store(StorageConfig.from_env()))
        await session.start()
        _session = session
    return _session


def _announce_expiry(kind: TimerKind) -> None:
    if kind is TimerKind.COOK:
        logger.info("Enjoy your meal! Cooking is done.")
    else:
        logger.info("Rest is over, start your next set.")


def get_runner() -> CountdownRunner:
    """Get or create the countdown runner."""
    global _runner
    if _runner is None:
        _runner = CountdownRunner(on_expire=_announce_expiry)
    return _runner


def _parse_date(date_str: str) -> date | None:
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        return None


def serialize_day(day: Day, streak: int | None = None) -> dict[str, Any]:
    """Render a day with the figures shown on the home screen."""
    nudge = select_nudge(day)
    data: dict[str, Any] = {
        "date": day.day_date.isoformat(),
        "wellness_score": wellness_score(day),
        "water": {"ml": day.water_ml, "target": day.water_target, "percent": water_percent(day)},
        "steps": {"count": day.steps, "goal": day.steps_goal},
        "calories": {
            "consumed": day.kcal_consumed,
            "target": day.kcal_target,
            "remaining": calories_remaining(day),
        },
        "sleep_pct": day.sleep_pct,
        "sitting_hrs": day.sitting_hrs,
        "prayer_done": day.prayer_done,
        "workout_done": day.workout_done,
        "meals": [
            {
                "id": m.id,
                "title": m.title,
                "kcal": m.kcal,
                "protein": m.protein,
                "carbs": m.carbs,
                "fat": m.fat,
                "time": format_duration(m.time_mins),
                "ingredients": m.ingredients,
                "steps": m.steps,
                "tags": m.tags or [],
            }
            for m in [*day.meals, *day.snacks]
        ],
        "nudge": {"token": nudge.value, "message": nudge_message(nudge)},
    }
    if streak is not None:
        data["streak"] = streak
    return data


def _update_response(update: DayUpdate, session: AiqoSession) -> dict[str, Any]:
    response = serialize_day(update.day, session.streak)
    if not update.saved:
        response["warning"] = SAVE_FAILED_WARNING
    return response


# ==================== Profile Tools ====================


@mcp.tool()
async def setup_profile(
    gender: str,
    age: int,
    height_cm: float,
    weight_kg: float,
    goal: str,
    activity: str,
    breakfast_time: str = "08:30",
    lunch_time: str = "14:00",
    dinner_time: str = "20:00",
    sleep_start: str = "00:00",
    sleep_end: str = "07:00",
    halal: bool = True,
    vegan: bool = False,
    vegetarian: bool = False,
    gluten_free: bool = False,
    lactose_free: bool = False,
) -> dict:
    """Save the user's onboarding profile and rebuild today's plan.

    Args:
        gender: "male" or "female"
        age: Age in years
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms
        goal: "cut", "bulk" or "maintain"
        activity: "sedentary", "light", "moderate", "active" or "athlete"
        breakfast_time: Preferred breakfast time (HH:MM)
        lunch_time: Preferred lunch time (HH:MM)
        dinner_time: Preferred dinner time (HH:MM)
        sleep_start: Bedtime (HH:MM)
        sleep_end: Wake-up time (HH:MM)
        halal: Halal preference
        vegan: Vegan preference
        vegetarian: Vegetarian preference
        gluten_free: Gluten-free preference
        lactose_free: Lactose-free preference

    Returns:
        Today's new day with targets derived from the profile
    """
    try:
        profile = Profile(
            gender=Gender(gender),
            age=age,
            height=height_cm,
            weight=weight_kg,
            goal=Goal(goal),
            activity=ActivityLevel(activity),
            meal_times=MealTimes(breakfast=breakfast_time, lunch=lunch_time, dinner=dinner_time),
            sleep_time=SleepWindow(start=sleep_start, end=sleep_end),
            diet=DietaryPreferences(
                halal=halal,
                vegan=vegan,
                vegetarian=vegetarian,
                gluten_free=gluten_free,
                lactose_free=lactose_free,
            ),
        )
    except ValueError as e:
        return {"error": f"Invalid profile: {e}"}

    try:
        session = await get_session()
        update = await session.save_profile(profile)
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    except ValueError as e:
        return {"error": f"Cannot build a plan for this profile: {e}"}
    return _update_response(update, session)


@mcp.tool()
async def get_profile() -> dict:
    """Retrieve the stored onboarding profile.

    Returns:
        Profile fields, plus onboarding_required if defaults are in use
    """
    try:
        session = await get_session()
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    profile = session.profile or Profile()
    return {
        **profile.model_dump(mode="json"),
        "onboarding_required": session.onboarding_required,
    }


# ==================== Day Tools ====================


@mcp.tool()
async def get_today() -> dict:
    """Get today's metrics, meal plan, wellness score and nudge."""
    try:
        session = await get_session()
        day = await session.today()
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    response = serialize_day(day, session.streak)
    response["onboarding_required"] = session.onboarding_required
    return response


@mcp.tool()
async def get_day(date_str: str) -> dict:
    """Get a past day's record.

    Args:
        date_str: Date in YYYY-MM-DD format
    """
    day_date = _parse_date(date_str)
    if day_date is None:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    try:
        session = await get_session()
        day = await session.get_day(day_date)
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    if day is None:
        return {"error": f"No record for {date_str}."}
    return serialize_day(day)


async def _mutate(action) -> dict:
    try:
        session = await get_session()
        update = await action(session)
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    return _update_response(update, session)


@mcp.tool()
async def add_water(ml: int = 250) -> dict:
    """Log water intake.

    Args:
        ml: Millilitres drunk (250 for a glass, 500 for a bottle)
    """
    if ml < 0:
        return {"error": "Water amount must be non-negative."}
    return await _mutate(lambda s: s.add_water(ml))


@mcp.tool()
async def reset_water() -> dict:
    """Reset today's water intake to zero."""
    return await _mutate(lambda s: s.reset_water())


@mcp.tool()
async def add_steps(steps: int = 500) -> dict:
    """Log walked steps.

    Args:
        steps: Number of steps (1000 is roughly a 10 minute walk)
    """
    if steps < 0:
        return {"error": "Step count must be non-negative."}
    return await _mutate(lambda s: s.add_steps(steps))


@mcp.tool()
async def eat_meal(meal_id: str) -> dict:
    """Mark a planned meal or snack as eaten, adding its calories.

    Args:
        meal_id: ID of the meal from get_today
    """
    try:
        return await _mutate(lambda s: s.eat_meal(meal_id))
    except MealNotFoundError:
        return {"error": f"Meal not found: {meal_id}"}


@mcp.tool()
async def toggle_prayer() -> dict:
    """Flip today's prayer-done flag."""
    return await _mutate(lambda s: s.toggle_prayer())


@mcp.tool()
async def complete_workout() -> dict:
    """Record today's workout as done."""
    return await _mutate(lambda s: s.complete_workout())


@mcp.tool()
async def regenerate_meals() -> dict:
    """Replace today's meals and snacks with a new random plan."""
    return await _mutate(lambda s: s.regenerate_meals())


@mcp.tool()
async def complete_day() -> dict:
    """Close today and update the streak.

    A day is complete when at least 90% of both the water and step targets
    are reached.
    """
    try:
        session = await get_session()
        closure = await session.complete_day()
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}

    response: dict[str, Any] = {"complete": closure.complete, "streak": closure.streak}
    if closure.complete:
        response["message"] = "Day complete, well done! 🔥"
    else:
        response["message"] = "Not there yet: drink some water, take a short walk and try again ✨"
    if not closure.saved:
        response["warning"] = SAVE_FAILED_WARNING
    return response


@mcp.tool()
async def get_nudge() -> dict:
    """Get the most relevant suggestion for right now."""
    try:
        session = await get_session()
        summary = await session.summary()
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    return {"token": summary.nudge, "message": summary.nudge_message, "wellness_score": summary.wellness_score}


# ==================== Journal Tools ====================


@mcp.tool()
async def save_journal(mood: int, note: str = "") -> str:
    """Save today's mood check-in.

    Args:
        mood: Mood from 1 (low) to 5 (great)
        note: A short note about how the user feels
    """
    try:
        session = await get_session()
        saved = await session.save_journal(mood, note)
    except ValidationError:
        return "Mood must be between 1 and 5."
    except StorageError as e:
        return f"Storage unavailable: {e}"

    if saved:
        return "Journal saved."
    return "Failed to save journal. Please try again."


@mcp.tool()
async def get_journal(date_str: str | None = None) -> dict:
    """Get the mood check-in for a date.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    day_date = None
    if date_str is not None:
        day_date = _parse_date(date_str)
        if day_date is None:
            return {"error": "Invalid date format. Use YYYY-MM-DD."}

    try:
        session = await get_session()
        entry = await session.load_journal(day_date)
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}
    if entry is None:
        return {"error": "No journal entry for that date."}
    return entry.model_dump()


# ==================== Workout Tools ====================


@mcp.tool()
def get_workout_plan() -> dict:
    """Get today's exercises with sets, reps and rest time."""
    return _workout.model_dump()


@mcp.tool()
def adjust_workout(sets: int = 0, reps: int = 0, rest_steps: int = 0) -> dict:
    """Increase or decrease the workout counters.

    Args:
        sets: Change in number of sets (e.g. 1 or -1)
        reps: Change in reps per set
        rest_steps: Change in rest time, in 15-second steps
    """
    global _workout
    _workout = adjust_plan(_workout, sets=sets, reps=reps, rest_steps=rest_steps)
    return _workout.model_dump()


@mcp.tool()
def breathing_exercise() -> str:
    """Get a quick breathing exercise."""
    return BREATHING_EXERCISE


@mcp.tool()
def sync_health() -> str:
    """Sync activity from the phone's health store."""
    return "Health sync needs HealthKit or Health Connect and is not available in this offline build."


# ==================== Timer Tools ====================


@mcp.tool()
async def start_rest_timer() -> dict:
    """Start the rest countdown using the workout plan's rest time."""
    countdown = get_runner().start(TimerKind.REST, _workout.rest_seconds)
    return countdown.model_dump(mode="json")


@mcp.tool()
async def start_cook_timer(meal_id: str) -> dict:
    """Start the cooking countdown for a planned meal.

    Args:
        meal_id: ID of the meal from get_today
    """
    try:
        session = await get_session()
        meal = find_meal(await session.today(), meal_id)
    except MealNotFoundError:
        return {"error": f"Meal not found: {meal_id}"}
    except StorageError as e:
        return {"error": f"Storage unavailable: {e}"}

    countdown = get_runner().start(TimerKind.COOK, meal.time_mins * 60)
    return {"meal": meal.title, **countdown.model_dump(mode="json")}


@mcp.tool()
def get_timers() -> dict:
    """Get the state of the rest and cook countdowns."""
    runner = get_runner()
    return {kind.value: runner.state(kind).model_dump(mode="json") for kind in TimerKind}
