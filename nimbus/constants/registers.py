"""Octave placements and register bounds.

Octave numbers follow the C4 = 60 convention (Middle C), so octave ``n`` starts
at MIDI note ``(n + 1) * 12``.
"""

# Root-position chord voicings are built around this octave.
CHORD_OCTAVE = 4

# Bass notes (including inversions) live in this octave.
BASS_OCTAVE = 2

# Chord-tone and scale-tone pools span these octaves (inclusive).
TONE_LOW_OCTAVE = 3
TONE_HIGH_OCTAVE = 5

# Voice-led pitches are clamped into [C3, C6].
VOICE_LEADING_LOW = 48
VOICE_LEADING_HIGH = 84
