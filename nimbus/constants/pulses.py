"""Pulse-based timing constants.

The clocks use **24 pulses per quarter note** (PPQN = 24) as their internal time
base, the same resolution as MIDI clock. Harmonic rhythm is expressed in bars and
converted to pulses at the clock boundary. 4/4 time is assumed throughout.
"""

PULSES_PER_QUARTER_NOTE = 24

BEATS_PER_BAR = 4
PULSES_PER_BAR = PULSES_PER_QUARTER_NOTE * BEATS_PER_BAR
