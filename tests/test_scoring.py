import hashlib
import random

import pytest

from gosukit.scoring import (
    DEFAULT_MAX_SCORES,
    Judgment,
    Result,
    Scorer,
    ScoreKind,
    judge,
    verdict,
)
from gosukit.timing import KeyAction

KOOL = Judgment(0.01, 1, 20)
COOL = Judgment(0.01, 1, 45)
GOOD = Judgment(0.01, 0.25, 75)
BAD = Judgment(0.01, 0, 110)
MISS = Judgment(-1, 0, 150)
JUDGMENTS = [KOOL, COOL, GOOD, BAD, MISS]


def test_judgment_equality_by_window():
    assert KOOL.is_(Judgment(5, 5, 20))
    assert not KOOL.is_(COOL)


def test_blank_judgment_invalid():
    assert not Judgment().valid()
    assert MISS.valid()


@pytest.mark.parametrize(
    "td, expected",
    [(0, KOOL), (-20, KOOL), (21, COOL), (-75, GOOD), (110, BAD), (-150, MISS)],
)
def test_judge_picks_narrowest(td, expected):
    assert judge(JUDGMENTS, td) == expected


def test_judge_out_of_range_is_blank():
    assert not judge(JUDGMENTS, 151).valid()


def test_verdict_too_early_is_blank():
    assert verdict(JUDGMENTS, KeyAction.HIT, 151) == Judgment()


def test_verdict_too_late_is_miss():
    assert verdict(JUDGMENTS, KeyAction.IDLE, -151) == MISS


def test_verdict_in_range_needs_hit():
    assert verdict(JUDGMENTS, KeyAction.HIT, 30) == COOL
    assert verdict(JUDGMENTS, KeyAction.HOLD, 30) == Judgment()


def test_new_scorer_defaults():
    scorer = Scorer([0.5, 2, 2])
    assert scorer.flow == 1
    assert scorer.score_bounds == list(DEFAULT_MAX_SCORES)
    assert scorer.max_scores == list(DEFAULT_MAX_SCORES)


def test_scorer_rejects_bad_factors():
    with pytest.raises(ValueError):
        Scorer([1, 1])


def test_combo_tracking():
    scorer = Scorer([1, 1, 1])
    for _ in range(3):
        scorer.add_combo()
    scorer.break_combo()
    scorer.add_combo()
    assert scorer.combo == 1
    assert scorer.max_combo == 3


def test_set_max_scores():
    scorer = Scorer([1, 1, 1])
    scorer.set_max_scores([1, 2, 3, 6])
    assert scorer.max_scores == [1, 2, 3, 6]
    assert scorer.score_bounds == [1, 2, 3, 6]
    with pytest.raises(ValueError):
        scorer.set_max_scores([1, 2])


def _play(scorer, judgments):
    for j in judgments:
        scorer.calc_score(ScoreKind.FLOW, j.flow, 1)
        scorer.calc_score(ScoreKind.ACC, j.acc, 1)
        scorer.calc_score(ScoreKind.EXTRA, 1 if j.is_(KOOL) else 0, 1)


def test_perfect_play_reaches_max():
    scorer = Scorer([0.5, 2, 2])
    scorer.max_weights = [10.0] * 3
    _play(scorer, [KOOL] * 10)
    assert scorer.scores[ScoreKind.TOTAL] == DEFAULT_MAX_SCORES[ScoreKind.TOTAL]
    assert scorer.score_bounds[ScoreKind.TOTAL] == DEFAULT_MAX_SCORES[ScoreKind.TOTAL]
    assert scorer.ratios == [1.0, 1.0, 1.0]


def test_all_miss_gives_zero():
    scorer = Scorer([0.5, 2, 2])
    scorer.max_weights = [10.0] * 3
    _play(scorer, [MISS] * 10)
    assert scorer.flow == 0
    assert scorer.scores[ScoreKind.TOTAL] == 0
    assert scorer.score_bounds[ScoreKind.TOTAL] == 0


def test_score_stays_under_bound():
    rng = random.Random(7)
    scorer = Scorer([0.5, 2, 2])
    scorer.max_weights = [50.0] * 3
    for _ in range(50):
        _play(scorer, [rng.choice(JUDGMENTS)])
        assert 0 <= scorer.flow <= 1
        assert scorer.scores[ScoreKind.TOTAL] <= scorer.score_bounds[ScoreKind.TOTAL]
        assert scorer.score_bounds[ScoreKind.TOTAL] <= DEFAULT_MAX_SCORES[ScoreKind.TOTAL]


def test_total_kind_rejected():
    scorer = Scorer([1, 1, 1])
    with pytest.raises(ValueError):
        scorer.calc_score(ScoreKind.TOTAL, 1, 1)


def test_new_result_snapshot():
    scorer = Scorer([0.5, 2, 2])
    scorer.max_weights = [2.0] * 3
    scorer.judgment_counts = [0, 0]
    _play(scorer, [KOOL])
    scorer.add_combo()
    digest = hashlib.md5(b"chart").digest()
    result = scorer.new_result(digest)
    assert isinstance(result, Result)
    assert result.md5 == digest
    assert result.scores == tuple(scorer.scores)
    assert result.max_combo == scorer.max_combo
    scorer.judgment_counts[0] += 1
    scorer.scores[0] = -1
    assert result.judgment_counts == [0, 0]
    assert result.scores[0] != -1