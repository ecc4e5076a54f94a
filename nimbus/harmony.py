"""Scale/harmony model.

Builds the diatonic seventh chords of any mode, the chord-tone and scale-tone
pools used for arpeggiation and melody, and the chromatic secondary dominants
that the generator injects before selected degrees.

Keys may be given as note names (``"D"``, ``"Bb"``) or pitch classes (0–11).

Example:
	```python
	import nimbus.harmony

	# ii7 in D dorian, root position around octave 4
	chord = nimbus.harmony.build_chord("D", "dorian", degree=2)
	chord.name()        # → "Em7"
	chord.note_names()  # → ["E4", "G4", "B4", "D5"]

	# V7/ii - a chromatic A7 leading into Em7, still carrying D dorian scale tones
	v_of_ii = nimbus.harmony.build_secondary_dominant(chord)
	```
"""

import logging
import typing

import nimbus.chords
import nimbus.constants.registers
import nimbus.intervals
import nimbus.notes


logger = logging.getLogger(__name__)


DEFAULT_ROOT = "C"

KeyType = typing.Union[str, int]

# Scale steps stacked to form a seventh chord: 1, 3, 5, 7.
SEVENTH_STACK: typing.Tuple[int, ...] = (0, 2, 4, 6)

DOMINANT_SEVENTH_INTERVALS: typing.List[int] = nimbus.chords.CHORD_INTERVALS["dom7"]


def resolve_key_pc (root: KeyType) -> int:

	"""Return the pitch class of a key, falling back to C for unknown names.

	Integers are taken as pitch classes and wrapped into 0–11.
	"""

	if isinstance(root, int):
		return root % 12

	try:
		return nimbus.notes.key_name_to_pc(root)

	except ValueError:
		logger.warning(f"Unknown root {root!r} - using {DEFAULT_ROOT}")
		return nimbus.notes.key_name_to_pc(DEFAULT_ROOT)


def scale_degree_name (root: KeyType, mode: str, degree_index: int) -> str:

	"""Return the pitch name (no octave) of a 0-indexed scale degree.

	Example:
		```python
		scale_degree_name("D", "dorian", 2)  # → "F"
		```
	"""

	pitch_classes = nimbus.intervals.scale_pitch_classes(resolve_key_pc(root), mode)

	return nimbus.notes.PC_TO_NOTE_NAME[pitch_classes[degree_index % 7]]


def diatonic_chord (
	root: KeyType,
	mode: str,
	degree_index: int,
	octave: int = nimbus.constants.registers.CHORD_OCTAVE
) -> typing.List[int]:

	"""Build a four-note seventh chord on a scale degree by stacking thirds.

	Pitches are drawn from a three-octave scale window (``octave - 1`` to
	``octave + 1``), starting from the degree's instance in the middle octave,
	so the 7th of the highest degree still lands inside the window.

	Parameters:
		root: Key root name or pitch class.
		mode: Mode name (unknown modes resolve to ionian).
		degree_index: 0-indexed scale degree (0 = I, 1 = ii, ...).
		octave: Octave of the key root the chord is built around.

	Returns:
		MIDI note numbers ``[root, 3rd, 5th, 7th]`` in ascending order.

	Example:
		```python
		diatonic_chord("C", "ionian", 4)  # → [67, 71, 74, 77]  (G7)
		diatonic_chord("C", "ionian", 6)  # → [71, 74, 77, 81]  (Bm7b5)
		```
	"""

	key_pc = resolve_key_pc(root)
	window = nimbus.intervals.scale_midi(key_pc, mode, octave - 1, octave + 1)
	start = 7 + (degree_index % 7)

	return [window[start + offset] for offset in SEVENTH_STACK]


def chord_tones_from_semitones (
	root_pc: int,
	semitone_offsets: typing.Sequence[int],
	low_octave: int = nimbus.constants.registers.TONE_LOW_OCTAVE,
	high_octave: int = nimbus.constants.registers.TONE_HIGH_OCTAVE
) -> typing.List[int]:

	"""Spread semitone offsets from a root across an octave range, ascending.

	Used for chords that are not diatonic to the key, such as secondary
	dominants.
	"""

	tones: typing.Set[int] = set()

	for octave in range(low_octave, high_octave + 1):
		base = nimbus.notes.octave_base(octave) + root_pc
		tones.update(base + offset for offset in semitone_offsets)

	return sorted(tones)


def chord_tones_for_degree (
	root: KeyType,
	mode: str,
	degree_index: int,
	low_octave: int = nimbus.constants.registers.TONE_LOW_OCTAVE,
	high_octave: int = nimbus.constants.registers.TONE_HIGH_OCTAVE
) -> typing.List[int]:

	"""Return every tone of a degree's seventh chord across an octave range.

	The arpeggio and melody voices use this pool to tell chord tones from
	passing tones.
	"""

	key_pc = resolve_key_pc(root)
	intervals = nimbus.intervals.get_mode_intervals(mode)
	semitones = {intervals[(degree_index + offset) % 7] for offset in SEVENTH_STACK}

	return chord_tones_from_semitones(key_pc, sorted(semitones), low_octave, high_octave)


def dominant_seventh (root_pc: int, octave: int = nimbus.constants.registers.CHORD_OCTAVE) -> typing.List[int]:

	"""Return a root-position dominant seventh (root, M3, P5, m7) in an octave."""

	base = nimbus.notes.octave_base(octave) + root_pc

	return [base + interval for interval in DOMINANT_SEVENTH_INTERVALS]


def bass_pitch (root_pc: int) -> int:

	"""
	Return a chord root placed in the bass register.
	"""

	return nimbus.notes.octave_base(nimbus.constants.registers.BASS_OCTAVE) + root_pc


def build_chord (root: KeyType, mode: str, degree: int) -> nimbus.chords.Chord:

	"""Build the diatonic ``Chord`` for a 1-indexed scale degree.

	The bass is the chord root in the bass register; the generator may later
	replace it with an inversion.
	"""

	key_pc = resolve_key_pc(root)
	mode = nimbus.intervals.resolve_mode(mode)
	degree_index = (degree - 1) % 7

	notes = diatonic_chord(key_pc, mode, degree_index)
	root_pc = notes[0] % 12

	return nimbus.chords.Chord(
		degree = degree_index + 1,
		quality = nimbus.chords.quality_for_notes(notes),
		notes = tuple(notes),
		bass_note = bass_pitch(root_pc),
		chord_tones = tuple(chord_tones_for_degree(key_pc, mode, degree_index)),
		scale_tones = tuple(nimbus.intervals.scale_midi(key_pc, mode)),
		root_name = nimbus.notes.PC_TO_NOTE_NAME[root_pc]
	)


def build_secondary_dominant (
	target: nimbus.chords.Chord,
	scale_tones: typing.Optional[typing.Sequence[int]] = None
) -> nimbus.chords.Chord:

	"""Build the dominant seventh that resolves into ``target`` (V7 of the target).

	The root sits a perfect fifth above the target root. The chord is
	chromatic, so ``degree`` is ``None``, but ``scale_tones`` carries the
	surrounding key so melodic material stays diatonic through the insertion.

	Parameters:
		target: The diatonic chord being tonicised.
		scale_tones: Scale pool of the prevailing key. Defaults to the
			target's own ``scale_tones``.
	"""

	target_root_pc = target.notes[0] % 12
	root_pc = (target_root_pc + 7) % 12

	if scale_tones is None:
		scale_tones = target.scale_tones

	return nimbus.chords.Chord(
		degree = None,
		quality = "dom7",
		notes = tuple(dominant_seventh(root_pc)),
		bass_note = bass_pitch(root_pc),
		chord_tones = tuple(chord_tones_from_semitones(root_pc, DOMINANT_SEVENTH_INTERVALS)),
		scale_tones = tuple(scale_tones),
		root_name = nimbus.notes.PC_TO_NOTE_NAME[root_pc],
		is_secondary_dominant = True,
		resolves_degree = target.degree
	)
