"""Chord definitions.

This module provides the seventh-chord quality tables and the immutable `Chord`
value object shared between the generator, the player and downstream consumers.

Module-level constants:
- `CHORD_INTERVALS`: Maps chord quality names to interval lists (semitones from root)
- `CHORD_SUFFIX`: Maps chord quality names to human-readable suffixes (e.g. `"m7"`)
- `RESOLVABLE_DEGREES`: Scale degrees that may be preceded by a secondary dominant

Chord qualities: `"maj7"`, `"min7"`, `"dom7"`, `"min7b5"`, named from the
pitches by `quality_for_notes()`.
"""

import dataclasses
import typing

import nimbus.notes


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"maj7": [0, 4, 7, 11],
	"min7": [0, 3, 7, 10],
	"dom7": [0, 4, 7, 10],
	"min7b5": [0, 3, 6, 10],
}

CHORD_SUFFIX: typing.Dict[str, str] = {
	"maj7": "maj7",
	"min7": "m7",
	"dom7": "7",
	"min7b5": "m7b5",
}

# ii, IV, V and vi. The tonic and the unstable iii/vii are never tonicised.
RESOLVABLE_DEGREES: typing.FrozenSet[int] = frozenset({2, 4, 5, 6})


def quality_for_notes (notes: typing.Sequence[int]) -> str:

	"""Name the quality of a root-position seventh chord from its pitches.

	Stacks that match an entry of ``CHORD_INTERVALS`` take its name. The
	harmonic and melodic minor scales also produce minor-major, augmented-major
	and diminished sevenths, which have no entry; those are labelled by their
	triad instead: a minor third over a diminished fifth reads as ``min7b5``,
	over any other fifth as ``min7``, and a major third as ``maj7`` or ``dom7``
	depending on the seventh.

	Example:
		```python
		quality_for_notes([67, 71, 74, 77])  # → "dom7"
		quality_for_notes([68, 71, 74, 77])  # → "min7b5" (G#dim7 in A harmonic minor)
		```
	"""

	stack = [note - notes[0] for note in notes[:4]]

	for quality, intervals in CHORD_INTERVALS.items():
		if stack == intervals:
			return quality

	third, fifth, seventh = stack[1], stack[2], stack[3]

	if third == 3:
		return "min7b5" if fifth == 6 else "min7"

	return "maj7" if seventh == 11 else "dom7"


@dataclasses.dataclass(frozen=True)
class Chord:

	"""A fully voiced chord, ready for playback.

	All pitches are MIDI note numbers. Chords are immutable and are handed to
	listeners by reference, so every pitch collection is a tuple.

	Attributes:
		degree: Scale degree (1–7), or ``None`` for a chromatic chord.
		quality: One of the keys of ``CHORD_INTERVALS``.
		notes: Root-position voicing (root, 3rd, 5th, 7th).
		bass_note: Bass pitch in the bass register, possibly an inversion.
		chord_tones: Every chord tone across the tone-pool octaves, ascending.
		scale_tones: The prevailing diatonic scale across the tone-pool octaves.
			For secondary dominants this is the surrounding key, not the
			chord's own scale, so melodic voices stay in key.
		root_name: Pitch name of the chord root without octave (e.g. ``"F#"``).
		is_secondary_dominant: True for an injected V7/x chord.
		resolves_degree: The degree a secondary dominant resolves into.
	"""

	degree: typing.Optional[int]
	quality: str
	notes: typing.Tuple[int, ...]
	bass_note: int
	chord_tones: typing.Tuple[int, ...]
	scale_tones: typing.Tuple[int, ...]
	root_name: str
	is_secondary_dominant: bool = False
	resolves_degree: typing.Optional[int] = None


	def intervals (self) -> typing.List[int]:

		"""Return the semitone offsets of the voicing above its root.

		These come from the pitches themselves, so they stay exact when the
		quality label is only an approximation (see ``quality_for_notes``).
		"""

		return [note - self.notes[0] for note in self.notes]


	def name (self) -> str:

		"""Return a human-friendly chord name such as ``"Dm7"`` or ``"G7"``."""

		return f"{self.root_name}{CHORD_SUFFIX.get(self.quality, '')}"


	def note_names (self) -> typing.List[str]:

		"""Return the root-position voicing as note names (e.g. ``["D4", "F4", ...]``)."""

		return [nimbus.notes.midi_to_note_name(note) for note in self.notes]


	def with_bass_note (self, bass_note: int) -> "Chord":

		"""
		Return a copy of this chord with a different bass pitch.
		"""

		if bass_note == self.bass_note:
			return self

		return dataclasses.replace(self, bass_note=bass_note)
