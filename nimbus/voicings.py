"""Voice leading and bass inversions.

Voice leading keeps each voice of a pad close to where it was: every note of
the new chord is moved to the octave nearest the pitch the same voice is
currently sounding, then folded back into a fixed register so that long runs
of chord changes cannot drift up or down the keyboard.

Inversion selection does the same for the bass line alone, choosing between
the root, 3rd and 5th to minimise the leap from the previous bass note.

Example:
	```python
	from nimbus.voicings import VoiceLeadingState

	state = VoiceLeadingState()
	pad = state.next(chord.notes)        # root position (no previous voicing)
	pad = state.next(next_chord.notes)   # each voice moves to its nearest octave
	```
"""

import typing

import nimbus.chords
import nimbus.constants.registers
import nimbus.harmony


def clamp_to_register (
	pitch: int,
	low: int = nimbus.constants.registers.VOICE_LEADING_LOW,
	high: int = nimbus.constants.registers.VOICE_LEADING_HIGH
) -> int:

	"""Shift a pitch by whole octaves until it lies within ``[low, high]``.

	The range must span at least an octave for every pitch class to fit.
	"""

	while pitch < low:
		pitch += 12

	while pitch > high:
		pitch -= 12

	return pitch


def nearest_octave (target: int, reference: int) -> int:

	"""Return whichever of ``target - 12``, ``target``, ``target + 12`` is closest to ``reference``.

	Ties go to the lower candidate, so the result is reproducible.
	"""

	best = target - 12
	best_distance = abs(best - reference)

	for candidate in (target, target + 12):
		distance = abs(candidate - reference)

		if distance < best_distance:
			best = candidate
			best_distance = distance

	return best


def voice_lead (
	current_voicing: typing.Optional[typing.Sequence[int]],
	target_root_position: typing.Sequence[int]
) -> typing.List[int]:

	"""Place each note of a chord in the octave nearest the currently sounding voice.

	Voice ``i`` of the target follows voice ``i`` of the current voicing; extra
	target voices follow the first current voice. Results are clamped into the
	voice-leading register (C3–C6).

	Parameters:
		current_voicing: MIDI notes currently sounding, or ``None``/empty for
			the first chord.
		target_root_position: The next chord in root position.

	Returns:
		MIDI note numbers for the voice-led target.

	Example:
		```python
		# Cmaj7 → G7: every voice drops below; the F is a tie (65 vs 77) and goes low
		voice_lead([60, 64, 67, 71], [67, 71, 74, 77])  # → [55, 59, 62, 65]
		```
	"""

	if not target_root_position:
		return []

	if not current_voicing:
		return [clamp_to_register(pitch) for pitch in target_root_position]

	voiced: typing.List[int] = []

	for i, target in enumerate(target_root_position):
		reference = current_voicing[i] if i < len(current_voicing) else current_voicing[0]
		voiced.append(clamp_to_register(nearest_octave(target, reference)))

	return voiced


def inversion_candidates (chord: nimbus.chords.Chord) -> typing.List[int]:

	"""Return the root, 3rd and 5th of the chord's own voicing placed in the bass register."""

	root_bass = nimbus.harmony.bass_pitch(chord.notes[0] % 12)

	return [root_bass + interval for interval in chord.intervals()[:3]]


def select_inversion (chord: nimbus.chords.Chord, previous_bass_note: typing.Optional[int]) -> nimbus.chords.Chord:

	"""Choose the bass inversion closest to the previous bass note.

	Only ``bass_note`` changes; the voicing and tone pools are untouched. With
	no previous bass note the chord is returned unchanged. Equal distances
	prefer root position, then first inversion.
	"""

	if previous_bass_note is None:
		return chord

	best = min(
		inversion_candidates(chord),
		key = lambda candidate: abs(candidate - previous_bass_note)
	)

	return chord.with_bass_note(best)


class VoiceLeadingState:

	"""Track the previous voicing across chord changes.

	Each voice that uses voice leading gets its own instance so that, for
	example, a pad and a string layer can move independently.
	"""

	def __init__ (self) -> None:

		"""Start with no previous voicing."""

		self.previous_voicing: typing.Optional[typing.List[int]] = None

	def next (self, target_root_position: typing.Sequence[int]) -> typing.List[int]:

		"""Voice-lead the next chord from the previous voicing and remember the result."""

		result = voice_lead(self.previous_voicing, target_root_position)
		self.previous_voicing = result

		return result

	def reset (self) -> None:

		"""Forget the previous voicing so the next chord sounds in root position."""

		self.previous_voicing = None
