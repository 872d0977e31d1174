"""Session - The running app's profile, current day and streak.

All state lives on an AiqoSession instance. Each mutation computes the new Day
with the pure functions in core.day, keeps it in memory, then writes it to the
store. A failed write is logged and reported, never raised, so in-memory state
stays usable when storage is down. Failed reads are raised as StorageError
because guessing "absent" could overwrite a stored record.
"""

import logging
import random
from datetime import date, timedelta
from typing import Callable, NamedTuple, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.calculators import daily_energy_target
from ..core.day import (
    add_steps,
    add_water,
    create_day,
    eat_meal,
    evaluate_completion,
    mark_workout_done,
    regenerate_meals,
    reset_water,
    toggle_prayer,
    update_streak,
)
from ..core.models import Day, DaySummary, JournalEntry, Profile
from ..core.reports import summarize_day
from .storage import (
    ONBOARDING_KEY,
    STREAK_KEY,
    KVStore,
    StorageError,
    day_key,
    journal_key,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DayUpdate(NamedTuple):
    """Result of a day mutation."""

    day: Day
    saved: bool


class DayClosure(NamedTuple):
    """Result of closing the day."""

    complete: bool
    streak: int
    saved: bool


class AiqoSession:
    """State for one user session.

    Document layout in the store:
        aiqo_onboarding_v2: Profile JSON
        aiqo_day_{YYYY-MM-DD}: Day JSON, one per visited date
        aiqo_streak_v2: streak as a decimal string
        aiqo_journal_{YYYY-MM-DD}: JournalEntry JSON
    """

    def __init__(
        self,
        store: KVStore,
        clock: Callable[[], date] = date.today,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize session.

        Args:
            store: Persistence backend
            clock: Returns today's date
            rng: Random source for meal plans
        """
        self.store = store
        self.clock = clock
        self.rng = rng
        self.profile: Profile | None = None
        self.day: Day | None = None
        self.streak = 0
        self.onboarding_required = False

    # ==================== Reading ====================

    async def _read_model(self, key: str, model: type[ModelT]) -> ModelT | None:
        """Fetch and parse a stored record; malformed records count as absent."""
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed record %s: %s", key, e.errors()[0]["msg"])
            return None

    async def _read_streak(self) -> int:
        raw = await self.store.get(STREAK_KEY)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            logger.warning("Ignoring malformed streak value: %r", raw)
            return 0

    async def start(self) -> None:
        """Load the profile, today's day and the streak.

        Without a usable stored profile the defaults are used and
        onboarding_required is set.
        """
        profile = await self._read_model(ONBOARDING_KEY, Profile)
        if profile is not None and daily_energy_target(profile) <= 0:
            logger.warning("Ignoring stored profile with no usable energy target")
            profile = None
        self.onboarding_required = profile is None
        self.profile = profile or Profile()
        if self.onboarding_required:
            logger.info("No stored profile, starting with defaults")

        self.day = await self.load_or_create_day(self.clock())
        self.streak = await self._read_streak()

    async def load_or_create_day(self, day_date: date) -> Day:
        """Fetch a stored day, or build and store a fresh one from the profile.

        Stored and fresh data are never merged.
        """
        stored = await self._read_model(day_key(day_date), Day)
        if stored is not None:
            return stored
        logger.info("Creating new day for %s", day_date)
        day = create_day(self._profile(), day_date, self.rng)
        await self._persist_day(day)
        return day

    async def get_day(self, day_date: date) -> Day | None:
        """Fetch a stored day without creating one."""
        return await self._read_model(day_key(day_date), Day)

    async def today(self) -> Day:
        """Return the current day, switching over when the date changes."""
        today = self.clock()
        if self.day is None or self.day.day_date != today:
            self.day = await self.load_or_create_day(today)
        return self.day

    def _profile(self) -> Profile:
        if self.profile is None:
            self.profile = Profile()
        return self.profile

    # ==================== Writing ====================

    async def _write(self, key: str, value: str) -> bool:
        try:
            await self.store.set(key, value)
            return True
        except StorageError as e:
            logger.error("Failed to save %s: %s", key, str(e))
            return False

    async def _persist_day(self, day: Day) -> bool:
        return await self._write(day_key(day.day_date), day.model_dump_json(by_alias=True))

    async def save_profile(self, profile: Profile) -> DayUpdate:
        """Store a new profile and rebuild today's day from it.

        Today's counters restart, since the targets they measure against
        have changed. The new day is built first, so a profile that cannot
        produce a plan leaves the session and the store untouched.

        Raises:
            ValueError: If the profile's daily energy target is not positive
        """
        day = create_day(profile, self.clock(), self.rng)

        logger.info("Saving profile (goal=%s, activity=%s)", profile.goal.value, profile.activity.value)
        self.profile = profile
        self.onboarding_required = False
        saved = await self._write(ONBOARDING_KEY, profile.model_dump_json(by_alias=True))

        self.day = day
        saved = await self._persist_day(day) and saved
        return DayUpdate(day, saved)

    async def mutate(self, change: Callable[[Day], Day]) -> DayUpdate:
        """Apply a change to today's day and persist the result.

        Args:
            change: Pure function from the current Day to the new Day

        Returns:
            The new day and whether it was written to storage
        """
        day = change(await self.today())
        self.day = day
        return DayUpdate(day, await self._persist_day(day))

    async def add_water(self, ml: int) -> DayUpdate:
        return await self.mutate(lambda d: add_water(d, ml))

    async def reset_water(self) -> DayUpdate:
        return await self.mutate(reset_water)

    async def add_steps(self, steps: int) -> DayUpdate:
        return await self.mutate(lambda d: add_steps(d, steps))

    async def eat_meal(self, meal_id: str) -> DayUpdate:
        return await self.mutate(lambda d: eat_meal(d, meal_id))

    async def toggle_prayer(self) -> DayUpdate:
        return await self.mutate(toggle_prayer)

    async def complete_workout(self) -> DayUpdate:
        return await self.mutate(mark_workout_done)

    async def regenerate_meals(self) -> DayUpdate:
        profile = self._profile()
        return await self.mutate(lambda d: regenerate_meals(d, profile, self.rng))

    async def complete_day(self) -> DayClosure:
        """Close today and update the streak.

        The streak grows only if yesterday has a stored record; otherwise a
        complete day restarts it at 1. An incomplete day leaves it alone.
        """
        day = await self.today()
        complete = evaluate_completion(day)
        if not complete:
            logger.info("Day %s not complete, streak stays at %d", day.day_date, self.streak)
            return DayClosure(False, self.streak, True)

        previous = await self.store.get(day_key(day.day_date - timedelta(days=1)))
        self.streak = update_streak(self.streak, complete, previous is not None)
        logger.info("Day %s complete, streak now %d", day.day_date, self.streak)
        saved = await self._write(STREAK_KEY, str(self.streak))
        return DayClosure(True, self.streak, saved)

    async def summary(self) -> DaySummary:
        return summarize_day(await self.today(), self.streak)

    # ==================== Journal ====================

    async def save_journal(self, mood: int, note: str, day_date: date | None = None) -> bool:
        """Save a mood check-in for a date (defaults to today).

        Raises:
            ValidationError: If mood is outside 1..5
        """
        entry = JournalEntry(mood=mood, note=note)
        return await self._write(journal_key(day_date or self.clock()), entry.model_dump_json())

    async def load_journal(self, day_date: date | None = None) -> JournalEntry | None:
        return await self._read_model(journal_key(day_date or self.clock()), JournalEntry)
