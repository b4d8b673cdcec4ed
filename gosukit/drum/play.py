"""Per-update play logic of the drum mode, without drawing or audio."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from gosukit.drum.notes import Chart, DotMark, NoteColor, NoteSize
from gosukit.drum.scoring import (
    KEYS_BY_COLOR,
    MAX_BIG_HIT_DURATION,
    MISS,
    DrumJudge,
    is_other_color_hit,
    verdict_dot,
    verdict_note,
    verdict_shake,
)
from gosukit.scoring import BLANK, Judgment, Scorer
from gosukit.timing import WAIT
from gosukit.transpoint import TransPoint


@dataclass(eq=False)
class DrumPlay:
    """Advances one drum play through time from the keys hit at each update."""

    chart: Chart
    judge: DrumJudge = field(init=False)
    trans_point: TransPoint = field(init=False)
    speed_scale: float = field(init=False, default=1.0)
    staged_judgment: Judgment = field(init=False, default=BLANK)
    staged_judgment_time: int = field(init=False, default=0)
    shake_waiting_color: NoteColor = field(init=False, default=NoteColor.RED)

    def __post_init__(self) -> None:
        if not self.chart.trans_points:
            raise ValueError("no TransPoints in the chart")
        self.judge = DrumJudge(self.chart)
        self.trans_point = self.chart.trans_points[0]

    @property
    def scorer(self) -> Scorer:
        return self.judge.scorer

    def update(self, now: int, hits: Sequence[bool]) -> tuple[Judgment, bool]:
        """Judge the staged objects at ``now``; returns the note judgment and bigness."""
        judge = self.judge
        actions = judge.update_key_actions(now, hits)
        judgment, big = BLANK, False

        if self.staged_judgment.valid() and judge.staged_note is not None:
            n = judge.staged_note
            flush = (
                is_other_color_hit(actions, n.color)
                or self.staged_judgment_time - now < -MAX_BIG_HIT_DURATION
                or n.time - now < -MISS.window
            )
            if flush:
                for key in KEYS_BY_COLOR[NoteColor(n.color)]:
                    judge.last_hit_times[key] = -WAIT
                judgment = self.staged_judgment
                judge.mark_note(n, judgment, False)
                self.staged_judgment = BLANK

        n = judge.staged_note
        if n is not None:
            td = n.time - now
            j, b = verdict_note(n, actions, td)
            if j.window != 0:
                if n.size == NoteSize.BIG and not b:
                    self.staged_judgment = j
                    self.staged_judgment_time = now
                else:
                    judge.mark_note(n, j, b)
                    judgment, big = j, b
                    self.staged_judgment = BLANK

        dot = judge.staged_dot
        if dot is not None:
            marked = verdict_dot(dot, actions, dot.time - now)
            if marked != DotMark.READY:
                judge.mark_dot(dot, marked)

        shake = judge.staged_shake
        if shake is not None and shake.time - now <= 0:
            if shake.time + shake.duration - now < 0:
                judge.mark_shake(shake, True)
            else:
                waiting = self.shake_waiting_color
                following = verdict_shake(shake, actions, waiting)
                if following != waiting:
                    judge.mark_shake(shake, False)
                    self.shake_waiting_color = NoteColor(following)

        self.trans_point = self.trans_point.fetch_by_time(now)
        return judgment, big

    def set_speed(self, speed_scale: float) -> None:
        """Rescale every floating object's speed to a new speed scale."""
        if not speed_scale > 0:
            raise ValueError(f"speed scale must be positive, got {speed_scale}")
        ratio = speed_scale / self.speed_scale
        c = self.chart
        for tp in c.trans_points:
            tp.speed *= ratio
        for bar in c.bars:
            bar.speed *= ratio
        for group in (c.notes, c.rolls, c.shakes):
            for n in group:
                n.speed *= ratio
        for dot in c.dots:
            dot.speed *= ratio
        self.speed_scale = speed_scale

    def current_speed(self) -> float:
        return self.trans_point.speed * self.speed_scale