"""Game clock, tick conversion and key state tracking."""

from __future__ import annotations

import enum
import logging
import time as _time
from dataclasses import dataclass, field
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

# Ticks per second of the update loop; one tick per millisecond.
TPS = 1000

# Milliseconds of silence before the chart starts and after it ends.
WAIT = 1800


def time_to_tick(time: int) -> int:
    """Convert a time in milliseconds to a tick count."""
    return int(time / 1000 * TPS)


def tick_to_time(tick: int) -> int:
    """Convert a tick count to a time in milliseconds."""
    return int(tick / TPS * 1000)


class KeyAction(enum.Enum):
    """State change of a key between two consecutive updates."""

    IDLE = "idle"
    HIT = "hit"
    RELEASE = "release"
    HOLD = "hold"


def current_key_action(last: bool, now: bool) -> KeyAction:
    """Classify a key from its previous and current pressed state."""
    if now:
        return KeyAction.HOLD if last else KeyAction.HIT
    return KeyAction.RELEASE if last else KeyAction.IDLE


@dataclass
class Timer:
    """Tick-driven game clock that starts WAIT milliseconds before time zero."""

    start_time: float
    offset: int = 0
    ticks: int = 0
    max_tick: int = 0
    now: int = 0
    paused: bool = False
    clock: Callable[[], float] = field(default=_time.monotonic, repr=False)

    @classmethod
    def create(cls, duration: int, offset: int = 0) -> "Timer":
        """Make a timer for a chart lasting ``duration`` milliseconds."""
        return cls(
            start_time=_time.monotonic() + WAIT / 1000,
            offset=offset,
            ticks=time_to_tick(-WAIT),
            max_tick=time_to_tick(duration + WAIT),
            now=-WAIT,
        )

    def toggle_pause(self) -> None:
        self.paused = not self.paused

    def tick(self, offset: int) -> None:
        """Advance one tick, applying any change of the audio offset."""
        if self.paused:
            return
        self.ticks += 1
        delta = offset - self.offset
        if delta:
            self.offset += delta
            self.ticks += time_to_tick(delta)
        self.now = tick_to_time(self.ticks)

    def sync(self) -> None:
        """Catch up with the wall clock when the tick count lags behind it."""
        elapsed_us = round((self.clock() - self.start_time) * 1_000_000)
        since = int(elapsed_us / 1000) + WAIT
        error = since - self.now
        if error >= 1:
            logger.debug("adjusting time error at %dms: %d", self.now, error)
            self.ticks += time_to_tick(error)
        self.now = tick_to_time(self.ticks)


@dataclass
class KeyLogger:
    """Remembers the pressed state of each key over the last two updates."""

    key_count: int
    last_pressed: list[bool] = field(default_factory=list)
    pressed: list[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.last_pressed:
            self.last_pressed = [False] * self.key_count
        if not self.pressed:
            self.pressed = [False] * self.key_count

    def update(self, pressed: Sequence[bool]) -> None:
        """Record a new snapshot of the pressed keys."""
        if len(pressed) != self.key_count:
            raise ValueError(
                f"expected {self.key_count} key states, got {len(pressed)}"
            )
        self.last_pressed = self.pressed
        self.pressed = list(pressed)

    def key_action(self, key: int) -> KeyAction:
        return current_key_action(self.last_pressed[key], self.pressed[key])