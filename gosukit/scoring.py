"""Judgments, score calculation and play results."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from gosukit.timing import KeyAction


@dataclass(frozen=True)
class Judgment:
    """A timing grade; a zero window marks the blank judgment."""

    flow: float = 0.0
    acc: float = 0.0
    window: int = 0

    def is_(self, other: "Judgment") -> bool:
        """Whether both judgments have the same window."""
        return self.window == other.window

    def valid(self) -> bool:
        """Whether this is not the blank judgment."""
        return self.window != 0


BLANK = Judgment()


def judge(judgments: Sequence[Judgment], td: int) -> Judgment:
    """Pick the narrowest judgment whose window contains ``td``."""
    td = abs(td)
    for j in judgments:
        if td <= j.window:
            return j
    return BLANK


def verdict(judgments: Sequence[Judgment], action: KeyAction, td: int) -> Judgment:
    """Judge a normal note; the last judgment is the miss."""
    miss = judgments[-1]
    if td > miss.window:
        return BLANK
    if td < -miss.window:
        return miss
    if action is KeyAction.HIT:
        return judge(judgments, td)
    return BLANK


class ScoreKind(enum.IntEnum):
    FLOW = 0
    ACC = 1
    EXTRA = 2
    TOTAL = 3


DEFAULT_MAX_SCORES = (7e5, 3e5, 1e5, 11e5)


def _div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a)
    return a / b


def _pow(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def _floor(x: float) -> float:
    if math.isnan(x) or math.isinf(x):
        return x
    return float(math.floor(x))


@dataclass
class Result:
    """Outcome of one finished play."""

    md5: bytes
    played_time: datetime
    score_factors: tuple[float, ...]
    scores: tuple[float, ...]
    judgment_counts: list[int]
    max_combo: int


@dataclass
class Scorer:
    """Accumulates flow, accuracy and extra scores during play."""

    score_factors: list[float]
    flow: float = 1.0
    combo: int = 0
    max_combo: int = 0
    primitives: list[float] = field(default_factory=lambda: [0.0] * 3)
    ratios: list[float] = field(default_factory=lambda: [1.0] * 3)
    weights: list[float] = field(default_factory=lambda: [0.0] * 3)
    max_weights: list[float] = field(default_factory=lambda: [0.0] * 3)
    scores: list[float] = field(default_factory=lambda: [0.0] * 4)
    score_bounds: list[float] = field(default_factory=lambda: list(DEFAULT_MAX_SCORES))
    max_scores: list[float] = field(default_factory=lambda: list(DEFAULT_MAX_SCORES))
    judgment_counts: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.score_factors = list(self.score_factors)
        if len(self.score_factors) != 3:
            raise ValueError("score_factors needs exactly 3 values")

    def set_max_scores(self, max_scores: Sequence[float]) -> None:
        if len(max_scores) != 4:
            raise ValueError("max_scores needs exactly 4 values")
        self.score_bounds = list(max_scores)
        self.max_scores = list(max_scores)

    def add_combo(self) -> None:
        self.combo += 1
        self.max_combo = max(self.max_combo, self.combo)

    def break_combo(self) -> None:
        self.combo = 0

    def calc_score(self, kind: int, value: float, weight: float) -> None:
        """Add one judged note's contribution to the score of ``kind``."""
        kind = ScoreKind(kind)
        if kind is ScoreKind.TOTAL:
            raise ValueError("total score is derived, not calculated directly")
        factor = self.score_factors[kind]
        if kind is ScoreKind.FLOW:
            self.flow = min(1.0, max(0.0, self.flow + value * weight))
            self.primitives[kind] += _pow(self.flow, factor)
        else:
            self.primitives[kind] += value * weight
        self.weights[kind] += weight
        self.ratios[kind] = _div(self.primitives[kind], self.weights[kind])

        max_weight = self.max_weights[kind]
        score_rate = _div(self.primitives[kind], max_weight)
        bound_rate = 1 - _div(self.weights[kind] - self.primitives[kind], max_weight)
        if kind is not ScoreKind.FLOW:
            score_rate = _pow(score_rate, factor)
            bound_rate = _pow(bound_rate, factor)
        self.scores[kind] = self.max_scores[kind] * score_rate
        self.score_bounds[kind] = self.max_scores[kind] * bound_rate
        total = ScoreKind.TOTAL
        self.scores[total] = _floor(sum(self.scores[:total]) + 0.1)
        self.score_bounds[total] = _floor(sum(self.score_bounds[:total]) + 0.1)

    def new_result(self, md5: bytes) -> Result:
        return Result(
            md5=bytes(md5),
            played_time=datetime.now(),
            score_factors=tuple(self.score_factors),
            scores=tuple(self.scores),
            judgment_counts=list(self.judgment_counts),
            max_combo=self.max_combo,
        )