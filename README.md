# gosukit

Game logic for a drum-style rhythm game mode. The mode has two colours of notes, plus rolls and shakes. The package holds only the parts that do not depend on drawing or audio. These are the clock, judgments, scoring, tempo changes, bar lines, and per-update play logic.

## Modules

- `gosukit.timing` provides:
  - `time_to_tick` and `tick_to_time` for tick/millisecond conversion.
  - A `Timer` that starts `WAIT` milliseconds before time zero and follows audio offset changes.
  - A `KeyLogger` that turns pressed-key snapshots into `KeyAction`s (`IDLE`, `HIT`, `RELEASE`, `HOLD`).
- `gosukit.scoring` provides:
  - `Judgment` windows.
  - `judge`, which returns the narrowest window containing a time difference.
  - `verdict`, which judges a normal note.
  - The `Scorer`, which accumulates flow, accuracy and extra scores. Its `new_result` produces a `Result`.
- `gosukit.transpoint` provides:
  - `TimingPoint`, the timing point as stored in a chart.
  - `new_trans_points`, which builds linked `TransPoint`s (BPM, speed, volume and highlight changes).
  - `bpms`, which returns the main, minimum and maximum BPM.
  - `Sample`, which resolves a hit sound's path next to its chart.
- `gosukit.bars` lays out linked `Bar` lines from the trans points, from before time zero to after the chart ends.
- `gosukit.drum.notes` provides:
  - The drum `Note` and roll `Dot`.
  - `scaled_bpm` and `exposure_time`.
  - `prepare_chart`, which links notes, normalises speeds, derives roll durations and ticks, and builds dots and bars into a `Chart`. A `Chart` has `duration`, `note_counts`, `bpms` and `difficulties`.
- `gosukit.drum.scoring` provides:
  - The drum judgment windows and `verdict_note`, `verdict_dot` and `verdict_shake`.
  - `extra_score_rate`.
  - `replay_listener`, which turns `ReplayAction` frames into key states.
  - `DrumJudge`, which marks notes, dots and shakes and keeps a `Scorer`.
- `gosukit.drum.play.DrumPlay` runs one play. `update(now, hits)` takes the time and the four keys' fresh hits. `set_speed` rescales every floating object. `current_speed` reports the speed in effect.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from gosukit.drum.notes import Note, NoteColor, prepare_chart
from gosukit.drum.play import DrumPlay
from gosukit.transpoint import TimingPoint, new_trans_points

trans_points = new_trans_points([TimingPoint(time=0, beat_length=500)])  # 120 BPM
chart = prepare_chart(
    trans_points,
    notes=[Note(time=1000), Note(time=1500, color=NoteColor.BLUE)],
    rolls=[],
    shakes=[],
    slider_multiplier=1.4,
)
play = DrumPlay(chart)

# Keys are ordered left blue, left red, right red, right blue.
judgment, big = play.update(1000, [False, True, False, False])
print(judgment.window, play.scorer.combo)  # 25 1
```

All times are in milliseconds. A positive time difference means the note is still ahead. A negative one means the hit is late.

## What the package does not do

- It does not read chart or replay files. Timing points, notes and replay frames are passed in as Python objects.
- It draws nothing and plays no sound.
- It has no command to run.
- The `gosukit.piano` sub-package is empty. There is no lane layout, note handling or judging for the piano mode.