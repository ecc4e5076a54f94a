"""Chord progression generation.

``generate_progression()`` turns the slowly-changing musical context (key root,
mode, environmental category and normalised air pressure) into a fully
materialised, immutable ``Progression``:

1. The category selects a mood, and with it a set of weight tables.
2. Pressure sets the harmonic rhythm: low pressure changes chords quickly,
   high pressure slowly. Storms are always fast and fog always slow.
3. A Markov walk over scale degrees, with no immediate repeats, produces a
   degree sequence whose length is drawn from the mood's range.
4. Each degree becomes a diatonic seventh chord.
5. Secondary dominants are injected before some ii, IV, V and vi chords.
6. Bass inversions are chosen left to right to minimise bass leaps.

All randomness happens here. The player only ever reads the result.

Example:
	```python
	import random
	import nimbus.progression

	progression = nimbus.progression.generate_progression(
		"D", "dorian", "rain", pressure_norm=0.4, rng=random.Random(7)
	)

	[chord.name() for chord in progression.chords]
	progression.harmonic_rhythm  # → 4 (bars per chord)
	```
"""

import dataclasses
import logging
import math
import random
import typing

import nimbus.chords
import nimbus.harmony
import nimbus.intervals
import nimbus.markov_chain
import nimbus.moods
import nimbus.voicings


logger = logging.getLogger(__name__)


FAST_HARMONIC_RHYTHM = 2
SLOW_HARMONIC_RHYTHM = 8

# Categories whose harmonic rhythm ignores pressure.
FIXED_HARMONIC_RHYTHM: typing.Dict[str, int] = {
	"storm": FAST_HARMONIC_RHYTHM,
	"fog": SLOW_HARMONIC_RHYTHM,
}

# Onset or clearance of these categories swaps the progression immediately.
DRAMATIC_CATEGORIES: typing.FrozenSet[str] = frozenset({"storm", "fog", "snow"})


@dataclasses.dataclass(frozen=True)
class Progression:

	"""An immutable chord sequence and the number of bars each chord lasts.

	Attributes:
		chords: Chords in playback order, secondary dominants included.
		harmonic_rhythm: Bars per chord.
		mood: Mood whose tables generated the progression.
		root: Key root the progression was generated in.
		mode: Mode the progression was generated in.
		base_length: Number of diatonic chords from the Markov walk, before
			secondary dominants were injected.
	"""

	chords: typing.Tuple[nimbus.chords.Chord, ...]
	harmonic_rhythm: int
	mood: nimbus.moods.Mood = nimbus.moods.DEFAULT_MOOD
	root: str = nimbus.harmony.DEFAULT_ROOT
	mode: str = nimbus.intervals.DEFAULT_MODE
	base_length: int = 0


	@property
	def length (self) -> int:

		"""Number of chords, secondary dominants included."""

		return len(self.chords)


	def degrees (self) -> typing.List[typing.Optional[int]]:

		"""Return the degree of every chord (``None`` for secondary dominants)."""

		return [chord.degree for chord in self.chords]


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, with halves going up (2.5 → 3)."""

	return int(math.floor(value + 0.5))


def harmonic_rhythm_bars (pressure_norm: float, category: typing.Optional[str]) -> int:

	"""Return bars per chord for a pressure reading and category.

	Outside the fixed categories the rhythm interpolates linearly from 2 bars
	at the lowest pressure to 8 bars at the highest. ``pressure_norm`` is
	clamped to [0, 1].
	"""

	if category in FIXED_HARMONIC_RHYTHM:
		return FIXED_HARMONIC_RHYTHM[category]

	pressure_norm = min(1.0, max(0.0, pressure_norm))

	return round_half_up(FAST_HARMONIC_RHYTHM + pressure_norm * (SLOW_HARMONIC_RHYTHM - FAST_HARMONIC_RHYTHM))


def sample_length (profile: nimbus.moods.MoodProfile, rng: random.Random) -> int:

	"""Draw a progression length uniformly from the mood's inclusive range."""

	low, high = profile.length_range

	return rng.randint(low, high)


def walk_degrees (profile: nimbus.moods.MoodProfile, length: int, rng: random.Random) -> typing.List[int]:

	"""Return a degree sequence from the mood's Markov tables with no immediate repeats."""

	chain: nimbus.markov_chain.MarkovChain[int] = nimbus.markov_chain.MarkovChain(
		transitions = profile.transitions,
		initial_weights = profile.starting_weights,
		rng = rng
	)

	return chain.walk(length)


def inject_secondary_dominants (
	chords: typing.Sequence[nimbus.chords.Chord],
	probability: float,
	rng: random.Random
) -> typing.List[nimbus.chords.Chord]:

	"""Insert a V7 of the next chord before some ii, IV, V and vi chords.

	Each eligible diatonic chord is tonicised independently with the given
	probability. Secondary dominants are only ever placed before diatonic
	chords, never before one another, and they carry the target's scale tones.
	"""

	result: typing.List[nimbus.chords.Chord] = []

	for chord in chords:

		eligible = (
			not chord.is_secondary_dominant
			and chord.degree in nimbus.chords.RESOLVABLE_DEGREES
			and (not result or not result[-1].is_secondary_dominant)
		)

		# Ineligible chords never consume a roll.
		if eligible and probability > 0 and rng.random() < probability:
			result.append(nimbus.harmony.build_secondary_dominant(chord, chord.scale_tones))

		result.append(chord)

	return result


def apply_inversions (chords: typing.Sequence[nimbus.chords.Chord]) -> typing.List[nimbus.chords.Chord]:

	"""Choose each chord's bass inversion to minimise the leap from the previous bass note."""

	result: typing.List[nimbus.chords.Chord] = []
	previous_bass: typing.Optional[int] = None

	for chord in chords:
		chord = nimbus.voicings.select_inversion(chord, previous_bass)
		previous_bass = chord.bass_note
		result.append(chord)

	return result


def generate_progression (
	root: nimbus.harmony.KeyType,
	mode: str,
	category: typing.Optional[str],
	pressure_norm: float,
	rng: typing.Optional[random.Random] = None,
	profiles: typing.Optional[typing.Mapping[nimbus.moods.Mood, nimbus.moods.MoodProfile]] = None
) -> Progression:

	"""Generate a fresh progression for the current musical context.

	Never raises for unusual input: unknown categories use the calm mood,
	unknown modes use ionian and unknown roots use C.

	Parameters:
		root: Key root name (``"D"``) or pitch class.
		mode: Mode name (e.g. ``"dorian"``).
		category: Environmental category (e.g. ``"rain"``).
		pressure_norm: Air pressure normalised to [0, 1].
		rng: Optional seeded random source for reproducible output.
		profiles: Optional alternative mood tables (see ``nimbus.moods``).
	"""

	rng = rng or random.Random()

	mood = nimbus.moods.mood_for_category(category)
	profile = nimbus.moods.get_profile(mood, profiles)
	mode = nimbus.intervals.resolve_mode(mode)
	key_pc = nimbus.harmony.resolve_key_pc(root)
	root_name = nimbus.harmony.scale_degree_name(key_pc, mode, 0)

	harmonic_rhythm = harmonic_rhythm_bars(pressure_norm, category)
	length = sample_length(profile, rng)
	degrees = walk_degrees(profile, length, rng)

	chords = [nimbus.harmony.build_chord(key_pc, mode, degree) for degree in degrees]
	chords = inject_secondary_dominants(chords, profile.secondary_dominant_probability, rng)
	chords = apply_inversions(chords)

	progression = Progression(
		chords = tuple(chords),
		harmonic_rhythm = harmonic_rhythm,
		mood = mood,
		root = root_name,
		mode = mode,
		base_length = len(degrees)
	)

	logger.debug(
		f"Generated {mood.value} progression in {root_name} {mode}: "
		f"{' '.join(chord.name() for chord in progression.chords)} "
		f"({harmonic_rhythm} bars per chord)"
	)

	return progression


def should_change_immediately (old_category: typing.Optional[str], new_category: typing.Optional[str]) -> bool:

	"""Return True when a category change should interrupt the current progression.

	Storm, fog and snow each have a distinct harmonic world, so their onset or
	clearance swaps progressions straight away. Other changes wait for the
	current cycle to finish.
	"""

	if old_category == new_category:
		return False

	return old_category in DRAMATIC_CATEGORIES or new_category in DRAMATIC_CATEGORIES
