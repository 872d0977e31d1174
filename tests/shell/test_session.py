"""Tests for AiqoSession against in-memory stores."""

import json
import random
from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from aiqo.core.day import MealNotFoundError
from aiqo.core.models import Day, Goal, Profile
from aiqo.shell.session import AiqoSession
from aiqo.shell.storage import (
    ONBOARDING_KEY,
    STREAK_KEY,
    InMemoryKVStore,
    StorageError,
    day_key,
    journal_key,
)


TODAY = date(2026, 10, 18)


class FailingWriteStore(InMemoryKVStore):
    """Reads work, every write fails."""

    async def set(self, key, value):
        raise StorageError("disk full")


class FailingReadStore(InMemoryKVStore):
    """Every read fails."""

    async def get(self, key):
        raise StorageError("unreachable")


class Clock:
    """Settable clock for date rollover tests."""

    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


@pytest.fixture
def store():
    return InMemoryKVStore()


@pytest.fixture
def make_session(store):
    """Factory for started sessions with a fixed date and seed."""

    async def factory(backend=None, clock=None):
        session = AiqoSession(backend or store, clock=clock or (lambda: TODAY), rng=random.Random(7))
        await session.start()
        return session

    return factory


class TestStart:
    """Tests for loading a session."""

    async def test_without_profile(self, make_session, store):
        """No profile means defaults and onboarding."""
        session = await make_session()
        assert session.onboarding_required is True
        assert session.profile == Profile()
        assert session.day.day_date == TODAY
        assert session.day.kcal_target == 2183
        assert session.day.water_target == 3350
        assert session.day.steps_goal == 9000
        assert session.day.steps == 2500
        assert session.streak == 0

    async def test_new_day_is_stored(self, make_session, store):
        """A created day is written right away."""
        session = await make_session()
        stored = Day.model_validate_json(await store.get(day_key(TODAY)))
        assert stored == session.day

    async def test_with_stored_profile(self, make_session, store):
        """A stored profile skips onboarding."""
        await store.set(ONBOARDING_KEY, Profile(goal=Goal.MAINTAIN).model_dump_json(by_alias=True))
        session = await make_session()
        assert session.onboarding_required is False
        assert session.day.kcal_target == 2583

    async def test_stored_day_loaded_as_is(self, make_session, store, make_day):
        """A stored day is used without merging fresh values."""
        stored = make_day(water_ml=750)
        await store.set(day_key(TODAY), stored.model_dump_json(by_alias=True))
        session = await make_session()
        assert session.day == stored

    async def test_streak_loaded(self, make_session, store):
        """The stored streak is read."""
        await store.set(STREAK_KEY, "4")
        assert (await make_session()).streak == 4

    async def test_malformed_records_ignored(self, make_session, store):
        """Broken records are treated as absent."""
        await store.set(ONBOARDING_KEY, json.dumps({"goal": "shred"}))
        await store.set(day_key(TODAY), "{not json")
        await store.set(STREAK_KEY, "many")
        session = await make_session()
        assert session.onboarding_required is True
        assert session.day.water_ml == 0
        assert session.streak == 0

    async def test_read_failure_raises(self, make_session):
        """Read failures are not mistaken for missing data."""
        with pytest.raises(StorageError):
            await make_session(FailingReadStore())


class TestMutations:
    """Tests for day mutations."""

    async def test_add_water_persists(self, make_session, store):
        """Logged water is stored."""
        session = await make_session()
        update = await session.add_water(250)
        assert update.saved is True
        assert update.day.water_ml == 250
        stored = Day.model_validate_json(await store.get(day_key(TODAY)))
        assert stored.water_ml == 250

    async def test_water_and_steps(self, make_session):
        """Counters accumulate and water resets."""
        session = await make_session()
        await session.add_water(500)
        await session.add_water(250)
        await session.add_steps(1000)
        assert session.day.water_ml == 750
        assert session.day.steps == 3500
        assert (await session.reset_water()).day.water_ml == 0

    async def test_negative_amount_rejected(self, make_session):
        """Negative amounts raise and change nothing."""
        session = await make_session()
        with pytest.raises(ValueError):
            await session.add_water(-1)
        assert session.day.water_ml == 0

    async def test_eat_meal(self, make_session):
        """Eating a meal adds its energy."""
        session = await make_session()
        meal = session.day.meals[0]
        update = await session.eat_meal(meal.id)
        assert update.day.kcal_consumed == meal.kcal

    async def test_eat_unknown_meal(self, make_session):
        """Unknown ids raise MealNotFoundError."""
        session = await make_session()
        with pytest.raises(MealNotFoundError):
            await session.eat_meal("missing")

    async def test_flags(self, make_session):
        """Prayer toggles and workout sticks."""
        session = await make_session()
        assert (await session.toggle_prayer()).day.prayer_done is True
        assert (await session.toggle_prayer()).day.prayer_done is False
        assert (await session.complete_workout()).day.workout_done is True

    async def test_regenerate_keeps_counters(self, make_session):
        """A new plan leaves counters alone."""
        session = await make_session()
        await session.add_water(500)
        old_ids = {m.id for m in session.day.meals}
        update = await session.regenerate_meals()
        assert update.day.water_ml == 500
        assert len(update.day.meals) == 3
        assert {m.id for m in update.day.meals}.isdisjoint(old_ids)

    async def test_write_failure_keeps_memory(self, make_session):
        """A failed write is reported and in-memory state still moves."""
        session = await make_session(FailingWriteStore())
        update = await session.add_water(250)
        assert update.saved is False
        assert session.day.water_ml == 250

    async def test_date_rollover(self, make_session, store):
        """A new date starts a new day."""
        clock = Clock(TODAY)
        session = await make_session(clock=clock)
        await session.add_water(1000)

        clock.today = TODAY + timedelta(days=1)
        update = await session.add_water(250)
        assert update.day.day_date == TODAY + timedelta(days=1)
        assert update.day.water_ml == 250
        assert Day.model_validate_json(await store.get(day_key(TODAY))).water_ml == 1000


class TestSaveProfile:
    """Tests for save_profile."""

    async def test_rebuilds_today(self, make_session, store):
        """A new profile resets today's targets and counters."""
        session = await make_session()
        await session.add_water(1000)

        update = await session.save_profile(Profile(goal=Goal.MAINTAIN))
        assert update.saved is True
        assert update.day.kcal_target == 2583
        assert update.day.water_ml == 0
        assert session.onboarding_required is False
        assert Profile.model_validate_json(await store.get(ONBOARDING_KEY)).goal is Goal.MAINTAIN

    async def test_unplannable_profile_changes_nothing(self, make_session, store):
        """A profile with no positive energy target is refused before any write."""
        session = await make_session()
        await session.save_profile(Profile(goal=Goal.MAINTAIN))
        await session.add_water(500)
        stored_profile = await store.get(ONBOARDING_KEY)
        stored_day = await store.get(day_key(TODAY))
        day_before = session.day

        frail = Profile(gender="female", age=120, height=100, weight=20, goal="cut", activity="sedentary")
        with pytest.raises(ValueError):
            await session.save_profile(frail)

        assert session.profile.goal is Goal.MAINTAIN
        assert session.day == day_before
        assert await store.get(ONBOARDING_KEY) == stored_profile
        assert await store.get(day_key(TODAY)) == stored_day

    async def test_start_over_unplannable_profile(self, make_session, store):
        """A stored profile that cannot produce a plan falls back to defaults."""
        frail = Profile(gender="female", age=120, height=100, weight=20, goal="cut", activity="sedentary")
        await store.set(ONBOARDING_KEY, frail.model_dump_json(by_alias=True))

        session = await make_session()
        assert session.onboarding_required is True
        assert session.profile == Profile()
        assert session.day.kcal_target == 2183
        assert len((await session.regenerate_meals()).day.meals) == 3


class TestCompleteDay:
    """Tests for closing the day."""

    async def _fill(self, session):
        await session.add_water(3100)
        await session.add_steps(6000)

    async def test_incomplete_leaves_streak(self, make_session, store):
        """An incomplete day changes nothing."""
        await store.set(STREAK_KEY, "2")
        session = await make_session()
        closure = await session.complete_day()
        assert closure.complete is False
        assert closure.streak == 2
        assert await store.get(STREAK_KEY) == "2"

    async def test_first_complete_day(self, make_session, store):
        """Without yesterday the streak starts at 1."""
        await store.set(STREAK_KEY, "5")
        session = await make_session()
        await self._fill(session)
        closure = await session.complete_day()
        assert closure == (True, 1, True)
        assert await store.get(STREAK_KEY) == "1"

    async def test_continues_after_yesterday(self, make_session, store, make_day):
        """A stored yesterday extends the streak."""
        yesterday = make_day(day_date=TODAY - timedelta(days=1))
        await store.set(day_key(yesterday.day_date), yesterday.model_dump_json(by_alias=True))
        await store.set(STREAK_KEY, "3")
        session = await make_session()
        await self._fill(session)
        assert (await session.complete_day()).streak == 4

    async def test_streak_write_failure(self, make_session, store):
        """A failed streak write is reported."""
        session = await make_session()
        await self._fill(session)
        session.store = FailingWriteStore()
        closure = await session.complete_day()
        assert closure.streak == 1
        assert closure.saved is False


class TestJournal:
    """Tests for the mood journal."""

    async def test_round_trip(self, make_session, store):
        """Saved entries load back."""
        session = await make_session()
        assert await session.save_journal(4, "Slept well") is True
        entry = await session.load_journal()
        assert (entry.mood, entry.note) == (4, "Slept well")
        assert await store.get(journal_key(TODAY)) is not None

    async def test_missing_entry(self, make_session):
        """No entry gives None."""
        session = await make_session()
        assert await session.load_journal(date(2026, 1, 1)) is None

    async def test_bad_mood(self, make_session):
        """Mood outside 1..5 raises ValidationError."""
        session = await make_session()
        with pytest.raises(ValidationError):
            await session.save_journal(9, "")


class TestSummary:
    """Tests for the home screen summary."""

    async def test_summary(self, make_session):
        """Summary reflects today and the streak."""
        session = await make_session()
        summary = await session.summary()
        assert summary.day_date == TODAY
        assert summary.streak == 0
        assert summary.nudge == "hydration"
