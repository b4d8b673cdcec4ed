"""Bar lines (measure separators) laid out from a chart's trans points."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from gosukit.transpoint import TransPoint

# Bars are generated this many milliseconds before time zero and after the end.
BAR_MARGIN = 5000


@dataclass(eq=False)
class Bar:
    """A bar line; position is used by scrolling lanes, speed by floating ones."""

    time: int
    position: float = 0.0
    speed: float = 0.0
    next: Optional["Bar"] = field(default=None, repr=False)
    prev: Optional["Bar"] = field(default=None, repr=False)


def _step_of(tp: TransPoint) -> float:
    step = tp.beat_duration()
    if not step > 0:
        raise ValueError(f"beat duration at {tp.time}ms must be positive, got {step}")
    return step


def new_bars(trans_points: Sequence[TransPoint], duration: int) -> list[Bar]:
    """Lay out linked bars from before the first point up to after the chart ends."""
    if not trans_points:
        raise ValueError("no trans points to lay bars out from")

    first = trans_points[0]
    step = _step_of(first)
    start = float(first.time)
    end = min(start, -float(BAR_MARGIN))
    leading: list[Bar] = []
    t = start
    while t >= end:
        leading.append(Bar(time=int(t)))
        t -= step
    leading.reverse()
    # The bar at the first point itself comes again from the loop below.
    bars = leading[:-1]

    new_beats = [tp for tp in trans_points if tp.new_beat]
    for tp, following in zip(new_beats, [*new_beats[1:], None]):
        if following is None:
            end = float(duration + BAR_MARGIN)
        else:
            end = float(following.time)
        step = _step_of(tp)
        t = float(tp.time)
        while t < end:
            bars.append(Bar(time=int(t)))
            t += step

    for prev, bar in zip([None, *bars], bars):
        bar.prev = prev
        if prev is not None:
            prev.next = bar
    return bars