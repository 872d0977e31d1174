"""Countdown State Machine - Rest and cooking timers.

A countdown is Idle, Running with some seconds left, or Expired. It only moves
when ticked; scheduling the ticks is left to the shell.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TimerKind(str, Enum):
    REST = "rest"
    COOK = "cook"


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"


class Countdown(BaseModel):
    """Immutable snapshot of a countdown."""

    model_config = ConfigDict(frozen=True)

    status: TimerStatus = TimerStatus.IDLE
    remaining: int = Field(default=0, ge=0, description="Seconds left")


IDLE = Countdown()


def start_countdown(seconds: int) -> Countdown:
    """Start a countdown; a non-positive duration expires immediately."""
    if seconds <= 0:
        return Countdown(status=TimerStatus.EXPIRED, remaining=0)
    return Countdown(status=TimerStatus.RUNNING, remaining=seconds)


def tick(countdown: Countdown) -> Countdown:
    """Advance a running countdown by one second.

    Idle and expired countdowns are returned unchanged.
    """
    if countdown.status is not TimerStatus.RUNNING:
        return countdown
    if countdown.remaining <= 1:
        return Countdown(status=TimerStatus.EXPIRED, remaining=0)
    return Countdown(status=TimerStatus.RUNNING, remaining=countdown.remaining - 1)


def cancel(countdown: Countdown) -> Countdown:
    return IDLE
