import pytest

from gosukit.bars import Bar, new_bars
from gosukit.transpoint import TransPoint


def make_point(time, bpm=120.0, meter=4, new_beat=True):
    return TransPoint(
        time=time,
        bpm=bpm,
        speed=1.0,
        meter=meter,
        new_beat=new_beat,
        volume=1.0,
        highlight=False,
    )


def test_single_point_layout():
    bars = new_bars([make_point(0)], 1000)
    assert [b.time for b in bars] == [-4000, -2000, 0, 2000, 4000]


def test_bars_are_sorted_and_linked():
    bars = new_bars([make_point(0), make_point(3000, bpm=240.0)], 10000)
    times = [b.time for b in bars]
    assert times == sorted(times)
    assert bars[0].prev is None
    assert bars[-1].next is None
    for prev, nxt in zip(bars, bars[1:]):
        assert prev.next is nxt
        assert nxt.prev is prev


def test_first_point_appears_once():
    tp = make_point(700)
    bars = new_bars([tp], 2000)
    assert [b.time for b in bars].count(700) == 1


def test_spacing_matches_beat_duration():
    tp = make_point(0, bpm=150.0, meter=3)
    bars = new_bars([tp], 4000)
    step = tp.beat_duration()
    times = [b.time for b in bars]
    for a, b in zip(times, times[1:]):
        assert b - a == pytest.approx(step, abs=1)


def test_leading_bars_reach_margin():
    tp = make_point(0)
    bars = new_bars([tp], 0)
    assert bars[0].time >= -5000
    assert bars[0].time - tp.beat_duration() < -5000


def test_trailing_bars_end_before_margin():
    duration = 3000
    bars = new_bars([make_point(0)], duration)
    assert bars[-1].time < duration + 5000
    assert bars[-1].time + make_point(0).beat_duration() >= duration + 5000


def test_point_after_minus_margin_still_generates_leading_bars():
    tp = make_point(1500)
    bars = new_bars([tp], 1500)
    assert min(b.time for b in bars) < 0
    assert any(b.time == 1500 for b in bars)


def test_new_beat_point_restarts_grid():
    second = make_point(3000, bpm=240.0)
    bars = new_bars([make_point(0), second], 6000)
    times = [b.time for b in bars]
    assert 3000 in times
    before = [t for t in times if 0 <= t < 3000]
    assert all(t % 2000 == 0 for t in before)
    after = [t for t in times if t >= 3000]
    for a, b in zip(after, after[1:]):
        assert b - a == second.beat_duration()


def test_inherited_point_does_not_restart_grid():
    plain = new_bars([make_point(0)], 6000)
    with_inherited = new_bars(
        [make_point(0), make_point(3000, bpm=120.0, new_beat=False)], 6000
    )
    assert [b.time for b in plain] == [b.time for b in with_inherited]


def test_bar_defaults():
    bar = Bar(time=10)
    assert (bar.position, bar.speed, bar.next, bar.prev) == (0.0, 0.0, None, None)


def test_empty_trans_points_raise():
    with pytest.raises(ValueError):
        new_bars([], 1000)


def test_zero_meter_raises():
    with pytest.raises(ValueError):
        new_bars([make_point(0, meter=0)], 1000)