"""Pitch class tables and note-name conversion.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to sharp-spelled note names

Module-level helpers:
- `key_name_to_pc(key_name)`: Validate a key name and return its pitch class.
- `midi_to_note_name(midi)`: Convert a MIDI number to a name such as ``"C4"``
  (C4 = 60).
"""

import typing


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]


def key_name_to_pc (key_name: str) -> int:

	"""Validate a key name and return its pitch class (0–11).

	Parameters:
		key_name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Returns:
		Pitch class integer (0–11).

	Raises:
		ValueError: If the key name is not recognised.

	Example:
		```python
		key_name_to_pc("C")   # → 0
		key_name_to_pc("Bb")  # → 10
		```
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


def octave_base (octave: int) -> int:

	"""
	Return the MIDI number of C in the given octave (C4 = 60).
	"""

	return (octave + 1) * 12


def midi_to_note_name (midi: int) -> str:

	"""Return a sharp-spelled note name with octave.

	Example:
		```python
		midi_to_note_name(60)  # → "C4"
		midi_to_note_name(57)  # → "A3"
		```
	"""

	octave = midi // 12 - 1

	return f"{PC_TO_NOTE_NAME[midi % 12]}{octave}"
