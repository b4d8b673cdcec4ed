"""Drum mode: two-colour notes, rolls and shakes, their judging and play."""