import logging
import typing

import nimbus.constants.registers
import nimbus.notes


logger = logging.getLogger(__name__)


DEFAULT_MODE = "ionian"


MODE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"aeolian": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"ionian": [0, 2, 4, 5, 7, 9, 11],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
}

MODE_ALIASES: typing.Dict[str, str] = {
	"major": "ionian",
	"minor": "aeolian",
	"harmonicMinor": "harmonic_minor",
	"melodicMinor": "melodic_minor",
}


def resolve_mode (mode: str) -> str:

	"""Return a canonical mode name, falling back to ``ionian`` for unknown modes.

	Aliases such as ``"major"`` and ``"harmonicMinor"`` are accepted. Unknown
	names are logged and replaced so generation always succeeds.
	"""

	mode = MODE_ALIASES.get(mode, mode)

	if mode not in MODE_INTERVALS:
		logger.warning(f"Unknown mode {mode!r} - using {DEFAULT_MODE}")
		return DEFAULT_MODE

	return mode


def get_mode_intervals (mode: str) -> typing.List[int]:

	"""
	Return the seven semitone offsets of a mode (unknown modes resolve to ionian).
	"""

	return list(MODE_INTERVALS[resolve_mode(mode)])


def scale_pitch_classes (key_pc: int, mode: str = DEFAULT_MODE) -> typing.List[int]:

	"""
	Return the pitch classes (0–11) that belong to a key and mode.

	Example:
		```python
		scale_pitch_classes(9, "aeolian")  # → [9, 11, 0, 2, 4, 5, 7]
		```
	"""

	return [(key_pc + i) % 12 for i in get_mode_intervals(mode)]


def scale_midi (
	key_pc: int,
	mode: str = DEFAULT_MODE,
	low_octave: int = nimbus.constants.registers.TONE_LOW_OCTAVE,
	high_octave: int = nimbus.constants.registers.TONE_HIGH_OCTAVE
) -> typing.List[int]:

	"""Return scale notes as MIDI numbers across an inclusive octave range.

	Each octave contributes seven notes starting at the key root in that octave,
	so the list always has ``7 * (high_octave - low_octave + 1)`` entries in
	ascending order.

	Example:
		```python
		scale_midi(0, "ionian", 4, 4)  # → [60, 62, 64, 65, 67, 69, 71]
		```
	"""

	intervals = get_mode_intervals(mode)
	result: typing.List[int] = []

	for octave in range(low_octave, high_octave + 1):
		base = nimbus.notes.octave_base(octave) + key_pc
		result.extend(base + interval for interval in intervals)

	return result
