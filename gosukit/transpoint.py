"""Tempo and speed change points of a chart, and note samples."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass(frozen=True)
class TimingPoint:
    """A timing point as stored in a chart file.

    For an uninherited point ``beat_length`` is milliseconds per beat; for an
    inherited one it is a negative percentage of the current beat length.
    """

    time: float
    beat_length: float
    meter: int = 4
    volume: int = 100
    uninherited: bool = True
    effects: int = 0

    def bpm(self) -> float:
        return 60000 / self.beat_length

    def beat_length_scale(self) -> float:
        """Speed multiplier carried by an inherited point."""
        return -100 / self.beat_length

    def is_kiai(self) -> bool:
        return bool(self.effects & 1)


@dataclass(eq=False)
class TransPoint:
    """A point where BPM, speed, volume or highlight may change."""

    time: int
    bpm: float
    speed: float
    meter: int
    new_beat: bool
    volume: float
    highlight: bool
    position: float = 0.0
    next: Optional["TransPoint"] = field(default=None, repr=False)
    prev: Optional["TransPoint"] = field(default=None, repr=False)

    def beat_duration(self) -> float:
        """Length of one bar in milliseconds."""
        return self.meter * (60000 / self.bpm)

    def fetch_by_time(self, time: int) -> "TransPoint":
        """Return the last point at or before ``time``, walking forward from here."""
        tp = self
        while tp.next is not None and time >= tp.next.time:
            tp = tp.next
        return tp


def new_trans_points(timing_points: Iterable[TimingPoint]) -> list[TransPoint]:
    """Build linked trans points; the first BPM serves as the reference speed."""
    ordered = sorted(timing_points, key=lambda p: (p.time, not p.uninherited))
    while ordered and not ordered[0].uninherited:
        ordered.pop(0)
    if not ordered:
        return []

    main_bpm = ordered[0].bpm()
    points: list[TransPoint] = []
    prev_bpm = main_bpm
    for point in ordered:
        tp = TransPoint(
            time=int(point.time),
            bpm=prev_bpm,
            speed=prev_bpm / main_bpm,
            meter=point.meter,
            new_beat=point.uninherited,
            volume=point.volume / 100,
            highlight=point.is_kiai(),
        )
        if point.uninherited:
            tp.bpm = point.bpm()
            tp.speed = tp.bpm / main_bpm
        else:
            tp.speed *= point.beat_length_scale()
        if points and points[-1].time == tp.time:
            tp.new_beat = points.pop().new_beat or tp.new_beat
        points.append(tp)
        prev_bpm = tp.bpm

    for prev, tp in zip([None, *points], points):
        tp.prev = prev
        if prev is not None:
            prev.next = tp
    return points


def bpms(trans_points: list[TransPoint], duration: int) -> tuple[float, float, float]:
    """Return (main, min, max) BPM.

    The main BPM lasts longest; ties go to the larger BPM.
    """
    durations: dict[float, int] = {}
    for i, tp in enumerate(trans_points):
        if i == 0:
            durations[tp.bpm] = durations.get(tp.bpm, 0) + tp.time
        end = trans_points[i + 1].time if i < len(trans_points) - 1 else duration
        durations[tp.bpm] = durations.get(tp.bpm, 0) + end - tp.time

    main = 0.0
    lowest = sys.float_info.max
    highest = 0.0
    longest = 0
    for bpm, length in durations.items():
        if longest < length:
            longest = length
            main = bpm
        elif longest == length and main < bpm:
            main = bpm
        lowest = min(lowest, bpm)
        highest = max(highest, bpm)
    return main, lowest, highest


@dataclass(frozen=True)
class Sample:
    """A hit sound file attached to a note, with volume in [0, 1]."""

    name: str = ""
    volume: float = 0.0

    def path(self, chart_path: str) -> Optional[str]:
        """Path of the sample next to the chart, or None without a sample."""
        if not self.name:
            return None
        return os.path.join(os.path.dirname(chart_path), self.name)