"""Notes, roll dots and chart preparation for the drum mode."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from gosukit.bars import Bar, new_bars
from gosukit.transpoint import Sample, TransPoint, bpms

SCREEN_SIZE_X = 1600
SCREEN_SIZE_Y = 900

POSITION_MARGIN = 100
HIT_POSITION = SCREEN_SIZE_X * 0.1875
MIN_POSITION = -HIT_POSITION - POSITION_MARGIN
MAX_POSITION = -HIT_POSITION + SCREEN_SIZE_X + POSITION_MARGIN

DOT_DENSITY = 4.0  # Dots per beat in a roll.
SHAKE_DENSITY = 3.0  # Shakes per beat in a shake note.

MAX_SCALED_BPM = 280
MIN_SCALED_BPM = 60

SECTION_DURATION = 800


class NoteType(enum.IntEnum):
    NORMAL = 0
    ROLL = 1
    SHAKE = 2


class NoteColor(enum.IntEnum):
    NONE = -1
    RED = 0
    BLUE = 1
    YELLOW = 2
    PURPLE = 3


class NoteSize(enum.IntEnum):
    NONE = -1
    REGULAR = 0
    BIG = 1


class DotMark(enum.IntEnum):
    READY = 0
    HIT = 1
    MISS = 2


@dataclass(eq=False)
class Note:
    """A drum note: a plain hit, a roll or a shake."""

    time: int
    type: NoteType = NoteType.NORMAL
    color: NoteColor = NoteColor.RED
    size: NoteSize = NoteSize.REGULAR
    duration: int = 0
    length: float = 0.0  # Slider length, used to derive a roll's duration.
    tick: int = 0  # Number of ticks in a roll or shake.
    sample: Sample = field(default_factory=Sample)
    speed: float = 0.0
    marked: bool = False
    hit_tick: int = 0
    next: Optional["Note"] = field(default=None, repr=False)
    prev: Optional["Note"] = field(default=None, repr=False)

    def position(self, time: int) -> float:
        """Distance from the hit position at ``time``."""
        return (self.time - time) * self.speed

    def weight(self) -> float:
        if self.type == NoteType.NORMAL:
            if self.size in (NoteSize.REGULAR, NoteSize.BIG):
                return 1.0
            return 0.0
        if self.type == NoteType.SHAKE:
            return math.pow(32 * self.tick, 0.75) / 32
        return 0.0


@dataclass(eq=False)
class Dot:
    """A tick inside a roll."""

    time: int
    speed: float = 0.0
    marked: DotMark = DotMark.READY
    next: Optional["Dot"] = field(default=None, repr=False)
    prev: Optional["Dot"] = field(default=None, repr=False)

    def position(self, time: int) -> float:
        return (self.time - time) * self.speed

    def weight(self) -> float:
        """Eight dots are worth one normal note."""
        return 0.125


def _link(items: Sequence) -> None:
    for prev, item in zip([None, *items], items):
        item.prev = prev
        if prev is not None:
            prev.next = item


def link_notes(notes: Iterable[Note]) -> list[Note]:
    """Sort notes by time only, keeping the given order of simultaneous ones, and link them."""
    ordered = sorted(notes, key=lambda n: n.time)
    _link(ordered)
    return ordered


def new_dots(rolls: Iterable[Note]) -> list[Dot]:
    """Spread each roll's ticks evenly from its start to its end."""
    dots: list[Dot] = []
    for roll in rolls:
        step = roll.duration / (roll.tick - 1) if roll.tick >= 2 else 0.0
        dots.extend(
            Dot(time=roll.time + int(step * tick), speed=roll.speed)
            for tick in range(roll.tick)
        )
    _link(dots)
    return dots


def scaled_bpm(bpm: float) -> float:
    """Fold a BPM into [MIN_SCALED_BPM, MAX_SCALED_BPM] by halving or doubling."""
    bpm = abs(bpm)
    if bpm == 0 or math.isnan(bpm) or math.isinf(bpm):
        raise ValueError(f"cannot scale BPM {bpm}")
    while bpm > MAX_SCALED_BPM:
        bpm /= 2
    while bpm < MIN_SCALED_BPM:
        bpm *= 2
    return bpm


def exposure_time(speed_scale: float) -> float:
    """Milliseconds a note stays on screen; one pixel is one millisecond."""
    return (SCREEN_SIZE_X - HIT_POSITION) / speed_scale


@dataclass(eq=False)
class Chart:
    """A drum chart with timing, notes, dots and bars prepared for play."""

    trans_points: list[TransPoint]
    notes: list[Note] = field(default_factory=list)
    rolls: list[Note] = field(default_factory=list)
    shakes: list[Note] = field(default_factory=list)
    dots: list[Dot] = field(default_factory=list)
    bars: list[Bar] = field(default_factory=list)
    level: float = 0.0
    score_factors: tuple[float, float, float] = (1.0, 1.0, 1.0)
    md5: bytes = b""

    def duration(self) -> int:
        """End time of the latest-ending last note among the three lists."""
        last = 0
        for notes in (self.notes, self.rolls, self.shakes):
            if notes:
                n = notes[-1]
                last = max(last, n.time + n.duration)
        return last

    def note_counts(self) -> list[int]:
        counts = [0, 0, 0]
        for n in self.notes:
            counts[n.type] += 1
        return counts

    def bpms(self) -> tuple[float, float, float]:
        return bpms(self.trans_points, self.duration())

    def difficulties(self) -> list[float]:
        """Rough strain per 800ms section."""
        if not self.notes:
            return []
        ds = [0.0] * (self.duration() // SECTION_DURATION + 1)

        def advance(time: int, i: int, d: float) -> tuple[int, float]:
            while time >= (i + 1) * SECTION_DURATION:
                ds[i] += d
                d = 0.0
                i += 1
            return i, d

        i, d = 0, 0.0
        for n in self.notes:
            i, d = advance(n.time, i, d)
            d += n.weight()
            if n.size == NoteSize.BIG:
                d += 0.1

        i, d = 0, 0.0
        for dot in self.dots:
            i, d = advance(dot.time, i, d)
            d += dot.weight()

        i, d = 0, 0.0
        for n in self.shakes:
            i, d = advance(n.time, i, d)
            # A shake contributes in proportion to its overlap with the section.
            t = i * SECTION_DURATION
            start = max(n.time, t)
            end = min(n.time + n.duration, t + SECTION_DURATION)
            rate = (end - start) / n.duration if n.duration > 0 else 0.0
            d += n.weight() * rate
        return ds


def prepare_chart(
    trans_points: list[TransPoint],
    notes: Iterable[Note],
    rolls: Iterable[Note],
    shakes: Iterable[Note],
    slider_multiplier: float,
) -> Chart:
    """Link notes, normalise speeds, derive roll durations and ticks, dots and bars."""
    if not trans_points:
        raise ValueError("no TransPoints in the chart")
    if not slider_multiplier > 0:
        raise ValueError("slider multiplier must be positive")

    # Main BPM is taken before any note is known, so the chart counts as empty.
    main_bpm, _, _ = bpms(trans_points, 0)
    bpm_scale = trans_points[0].bpm / main_bpm
    for tp in trans_points:
        tp.speed *= bpm_scale

    chart = Chart(
        trans_points=trans_points,
        notes=link_notes(notes),
        rolls=link_notes(rolls),
        shakes=link_notes(shakes),
    )
    for group in (chart.notes, chart.rolls, chart.shakes):
        tp = trans_points[0]
        for n in group:
            tp = tp.fetch_by_time(n.time)
            n.speed = tp.speed
            bpm = scaled_bpm(tp.bpm)
            if n.type == NoteType.ROLL:
                # Slider velocity in chart pixels per millisecond.
                speed = tp.bpm * (tp.speed / bpm_scale) / 60000 * slider_multiplier * 100
                n.duration = int(n.length / speed)
                n.tick = int(n.duration * bpm / 60000 * DOT_DENSITY + 0.1) + 1
            elif n.type == NoteType.SHAKE:
                n.tick = int(n.duration * bpm / 60000 * SHAKE_DENSITY + 0.1) + 1

    chart.dots = new_dots(chart.rolls)
    chart.bars = new_bars(trans_points, chart.duration())
    tp = trans_points[0]
    for bar in chart.bars:
        tp = tp.fetch_by_time(bar.time)
        bar.speed = tp.speed
    return chart