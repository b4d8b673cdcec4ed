"""Judging and scoring of drum notes, roll dots and shakes, plus replay input."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from gosukit.drum.notes import Chart, Dot, DotMark, Note, NoteColor, NoteSize
from gosukit.scoring import BLANK, DEFAULT_MAX_SCORES, Judgment, Scorer, ScoreKind, verdict
from gosukit.timing import KeyAction, Timer

COOL = Judgment(flow=0.01, acc=1, window=25)
GOOD = Judgment(flow=0.01, acc=0.25, window=60)
MISS = Judgment(flow=-1, acc=0, window=100)
JUDGMENTS = (COOL, GOOD, MISS)
DOT_HIT_WINDOW = 25

# Two presses of one color within this many milliseconds make a big hit.
MAX_BIG_HIT_DURATION = 25

# Indices into the judgment counts.
COOLS = 0
GOODS = 1
MISSES = 2
COOL_PARTIALS = 3
GOOD_PARTIALS = 4
TICK_HITS = 5
TICK_DROPS = 6
JUDGMENT_COUNT_KINDS = (
    "Cools", "Goods", "Misses",
    "CoolPartials", "GoodPartials",
    "TickHits", "TickDrops",
)

# Keys are ordered left blue, left red, right red, right blue.
KEYS_BY_COLOR = {NoteColor.RED: (1, 2), NoteColor.BLUE: (0, 3)}

# Replay key bits for each of the four keys.
_REPLAY_KEY_BITS = (2, 1, 4, 8)
_REPLAY_SENTINEL_WAIT = 2_000_000_000


def is_color_hit(actions: Sequence[NoteSize], color: int) -> bool:
    """Whether the given color was hit in this update."""
    return actions[color] != NoteSize.NONE


def is_other_color_hit(actions: Sequence[NoteSize], color: int) -> bool:
    """Whether the opposite of a red or blue color was hit."""
    if color == NoteColor.RED:
        return is_color_hit(actions, NoteColor.BLUE)
    if color == NoteColor.BLUE:
        return is_color_hit(actions, NoteColor.RED)
    return False


def verdict_note(note: Note, actions: Sequence[NoteSize], td: int) -> tuple[Judgment, bool]:
    """Judge a normal note; returns the judgment and whether it was hit big."""
    if td > MISS.window:
        return BLANK, False
    if td < -MISS.window:
        return MISS, False
    if is_other_color_hit(actions, note.color):
        return MISS, False
    if not is_color_hit(actions, note.color):
        return BLANK, False
    j = verdict(JUDGMENTS, KeyAction.HIT, td)
    big = note.size == NoteSize.BIG and actions[note.color] == NoteSize.BIG
    return j, big


def verdict_dot(dot: Dot, actions: Sequence[NoteSize], td: int) -> DotMark:
    """Judge a roll dot: any hit inside the window counts."""
    if td < -DOT_HIT_WINDOW:
        return DotMark.MISS
    if td < DOT_HIT_WINDOW:
        if actions[NoteColor.RED] != NoteSize.NONE or actions[NoteColor.BLUE] != NoteSize.NONE:
            return DotMark.HIT
    return DotMark.READY


def verdict_shake(shake: Note, actions: Sequence[NoteSize], waiting_color: int) -> int:
    """Return the color awaited next; it changes when the awaited color is hit."""
    if waiting_color in (NoteColor.RED, NoteColor.NONE):
        if actions[NoteColor.RED] != NoteSize.NONE:
            return NoteColor.BLUE
    if waiting_color in (NoteColor.BLUE, NoteColor.NONE):
        if actions[NoteColor.BLUE] != NoteSize.NONE:
            return NoteColor.RED
    return waiting_color


def extra_score_rate(nws: float, ews: float) -> float:
    """Share of the extra score a chart can award, given note and extra weights."""
    factor = 10 * 1.5
    if nws == 0:
        return 0.0 if ews == 0 else 1.0
    return min(1.0, factor * ews / nws)


@dataclass(frozen=True)
class ReplayAction:
    """One replay frame: ``w`` is the time since the previous frame."""

    w: int
    x: float = 0.0
    y: float = 0.0
    z: int = 0


def replay_listener(actions: Sequence[ReplayAction], timer: Timer) -> Callable[[], list[bool]]:
    """Make a function returning the four keys' pressed state at the timer's time."""
    frames = [*actions, ReplayAction(w=_REPLAY_SENTINEL_WAIT)]
    if len(frames) < 2:
        raise ValueError("replay has no actions")
    index = 0
    next_time = frames[0].w + frames[1].w

    def fetch() -> list[bool]:
        nonlocal index, next_time
        while timer.now >= next_time:
            index += 1
            next_time += frames[index + 1].w
        z = int(frames[index].z)
        return [bool(z & bit) for bit in _REPLAY_KEY_BITS]

    return fetch


@dataclass(eq=False)
class DrumJudge:
    """Scoring state of one drum play over a prepared chart."""

    chart: Chart
    scorer: Scorer = field(init=False)
    staged_note: Optional[Note] = field(init=False, default=None)
    staged_dot: Optional[Dot] = field(init=False, default=None)
    staged_shake: Optional[Note] = field(init=False, default=None)
    last_hit_times: list[int] = field(default_factory=lambda: [0] * 4)
    key_actions: list[NoteSize] = field(
        default_factory=lambda: [NoteSize.NONE, NoteSize.NONE]
    )

    def __post_init__(self) -> None:
        c = self.chart
        self.scorer = Scorer(score_factors=list(c.score_factors))
        self.scorer.judgment_counts = [0] * len(JUDGMENT_COUNT_KINDS)
        note_weight = sum(n.weight() for n in c.notes)
        self.scorer.max_weights[ScoreKind.FLOW] = note_weight
        self.scorer.max_weights[ScoreKind.ACC] = note_weight
        self.scorer.max_weights[ScoreKind.EXTRA] = sum(d.weight() for d in c.dots) + sum(
            n.weight() for n in c.shakes
        )
        self.set_max_scores()
        self.staged_note = c.notes[0] if c.notes else None
        self.staged_dot = c.dots[0] if c.dots else None
        self.staged_shake = c.shakes[0] if c.shakes else None

    def update_key_actions(self, now: int, hits: Sequence[bool]) -> tuple[NoteSize, NoteSize]:
        """Turn the four keys' fresh hits into a regular or big action per color."""
        if len(hits) != 4:
            raise ValueError(f"expected 4 key hits, got {len(hits)}")
        for key, hit in enumerate(hits):
            if hit:
                self.last_hit_times[key] = now
        for color, (a, b) in KEYS_BY_COLOR.items():
            if hits[a] or hits[b]:
                big = (hits[a] and now - self.last_hit_times[b] < MAX_BIG_HIT_DURATION) or (
                    hits[b] and now - self.last_hit_times[a] < MAX_BIG_HIT_DURATION
                )
                self.key_actions[color] = NoteSize.BIG if big else NoteSize.REGULAR
            else:
                self.key_actions[color] = NoteSize.NONE
        return self.key_actions[0], self.key_actions[1]

    def mark_note(self, note: Note, judgment: Judgment, big: bool) -> None:
        """Score a judged note; a big note hit by one press earns half accuracy."""
        s = self.scorer
        if judgment == MISS:
            s.break_combo()
        else:
            s.add_combo()
        s.calc_score(ScoreKind.FLOW, judgment.flow, note.weight())
        partial = note.size == NoteSize.BIG and not big
        acc = judgment.acc / 2 if partial else judgment.acc
        s.calc_score(ScoreKind.ACC, acc, note.weight())
        if judgment.window == COOL.window:
            s.judgment_counts[COOLS] += 1
            if partial:
                s.judgment_counts[COOL_PARTIALS] += 1
        elif judgment.window == GOOD.window:
            s.judgment_counts[GOODS] += 1
            if partial:
                s.judgment_counts[GOOD_PARTIALS] += 1
        elif judgment.window == MISS.window:
            s.judgment_counts[MISSES] += 1
        note.marked = True
        if self.staged_note is not None:
            self.staged_note = self.staged_note.next

    def mark_dot(self, dot: Dot, marked: DotMark) -> None:
        """Score a roll dot; rolls only affect the extra score."""
        s = self.scorer
        if marked == DotMark.HIT:
            s.judgment_counts[TICK_HITS] += 1
            s.calc_score(ScoreKind.EXTRA, 1, dot.weight())
            dot.marked = DotMark.HIT
        elif marked == DotMark.MISS:
            s.judgment_counts[TICK_DROPS] += 1
            s.calc_score(ScoreKind.EXTRA, 0, dot.weight())
            dot.marked = DotMark.MISS
        if marked != DotMark.READY and self.staged_dot is not None:
            self.staged_dot = self.staged_dot.next

    def mark_shake(self, shake: Note, flush: bool) -> None:
        """Count one shake tick, or drop all remaining ticks when flushed."""
        s = self.scorer
        if flush:
            remained = shake.tick - shake.hit_tick
            s.judgment_counts[TICK_DROPS] += remained
            s.calc_score(ScoreKind.EXTRA, 0, shake.weight() * remained / shake.tick)
        else:
            shake.hit_tick += 1
            s.judgment_counts[TICK_HITS] += 1
            s.calc_score(ScoreKind.EXTRA, 1, shake.weight() / shake.tick)
        if flush or shake.hit_tick == shake.tick:
            shake.marked = True
            if self.staged_shake is not None:
                self.staged_shake = self.staged_shake.next

    def set_max_scores(self) -> None:
        """Shrink the extra score for charts short of rolls and shakes.

        The margin goes to flow and accuracy at 7:3.
        """
        s = self.scorer
        nws = s.max_weights[ScoreKind.FLOW]
        ews = s.max_weights[ScoreKind.EXTRA]
        extra_max = DEFAULT_MAX_SCORES[ScoreKind.EXTRA]
        rate = extra_score_rate(nws, ews)
        remained = extra_max * (1 - rate)

        max_scores = list(s.max_scores)
        max_scores[ScoreKind.FLOW] += remained * 0.7
        max_scores[ScoreKind.ACC] += remained * 0.3
        max_scores[ScoreKind.EXTRA] = extra_max * rate
        if nws == 0:
            max_scores[ScoreKind.EXTRA] += max_scores[ScoreKind.FLOW] + max_scores[ScoreKind.ACC]
            max_scores[ScoreKind.FLOW] = 0
            max_scores[ScoreKind.ACC] = 0
        s.set_max_scores(max_scores)