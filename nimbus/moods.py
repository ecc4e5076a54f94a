"""Moods and their harmonic profile tables.

A mood is the internal harmonic character selected by an environmental
category (``"clear"`` → calm, ``"storm"`` → tense, ...). Each mood owns a
``MoodProfile``: starting-degree weights, a 7×7 transition table, a
progression length range and a secondary-dominant probability.

The built-in tables ship as ``nimbus/data/moods.yaml`` and are loaded once,
at import, into read-only ``MOOD_PROFILES``. Alternative tables in the same
format can be loaded with ``load_mood_profiles()`` and passed to the
generator.
"""

import dataclasses
import enum
import logging
import os
import types
import typing

import yaml

import nimbus.markov_chain


logger = logging.getLogger(__name__)


DEFAULT_MOODS_PATH = os.path.join(os.path.dirname(__file__), "data", "moods.yaml")


class Mood (str, enum.Enum):

	"""Harmonic character of a progression."""

	CALM = "calm"
	GENTLE = "gentle"
	MELANCHOLY = "melancholy"
	TENSE = "tense"
	SUSPENDED = "suspended"
	SPARSE = "sparse"


DEFAULT_MOOD = Mood.CALM

CATEGORY_TO_MOOD: typing.Mapping[str, Mood] = types.MappingProxyType({
	"clear": Mood.CALM,
	"cloudy": Mood.GENTLE,
	"fog": Mood.SUSPENDED,
	"drizzle": Mood.MELANCHOLY,
	"rain": Mood.GENTLE,
	"snow": Mood.SPARSE,
	"storm": Mood.TENSE,
})


def mood_for_category (category: typing.Optional[str]) -> Mood:

	"""Return the mood for an environmental category; unknown categories are calm."""

	if category not in CATEGORY_TO_MOOD:
		logger.debug(f"No mood for category {category!r} - using {DEFAULT_MOOD.value}")
		return DEFAULT_MOOD

	return CATEGORY_TO_MOOD[category]


@dataclasses.dataclass(frozen=True)
class MoodProfile:

	"""
	Static generation parameters for one mood.
	"""

	mood: Mood
	starting_weights: typing.Mapping[int, float]
	transitions: typing.Mapping[int, typing.Mapping[int, float]]
	length_range: typing.Tuple[int, int]
	secondary_dominant_probability: float


def _parse_weights (raw: typing.Any, context: str) -> typing.Mapping[int, float]:

	"""Validate a degree → weight row and freeze it."""

	if not isinstance(raw, dict):
		raise ValueError(f"{context}: expected a mapping of degree to weight")

	row: typing.Dict[int, float] = {}

	for degree, weight in raw.items():

		if degree not in nimbus.markov_chain.DEGREES:
			raise ValueError(f"{context}: degree must be 1-7, got {degree!r}")

		if not isinstance(weight, (int, float)) or weight < 0:
			raise ValueError(f"{context}: weight for degree {degree} must be a non-negative number")

		row[degree] = float(weight)

	return types.MappingProxyType(row)


def _parse_profile (mood: Mood, raw: typing.Any) -> MoodProfile:

	"""Build a ``MoodProfile`` from one mood's YAML section."""

	if not isinstance(raw, dict):
		raise ValueError(f"{mood.value}: expected a mapping")

	starting_weights = _parse_weights(raw.get("starting_weights"), f"{mood.value}.starting_weights")

	raw_transitions = raw.get("transitions")

	if not isinstance(raw_transitions, dict) or not raw_transitions:
		raise ValueError(f"{mood.value}.transitions: expected a mapping of degree to row")

	transitions: typing.Dict[int, typing.Mapping[int, float]] = {}

	for degree, row in raw_transitions.items():

		if degree not in nimbus.markov_chain.DEGREES:
			raise ValueError(f"{mood.value}.transitions: degree must be 1-7, got {degree!r}")

		transitions[degree] = _parse_weights(row, f"{mood.value}.transitions.{degree}")

	length_range = raw.get("length_range")

	if (
		not isinstance(length_range, (list, tuple))
		or len(length_range) != 2
		or not all(isinstance(value, int) for value in length_range)
		or length_range[0] < 1
		or length_range[0] > length_range[1]
	):
		raise ValueError(f"{mood.value}.length_range: expected [min, max] with 1 <= min <= max")

	probability = raw.get("secondary_dominant_probability", 0.0)

	if not isinstance(probability, (int, float)) or probability < 0 or probability > 1:
		raise ValueError(f"{mood.value}.secondary_dominant_probability must be between 0 and 1")

	return MoodProfile(
		mood = mood,
		starting_weights = starting_weights,
		transitions = types.MappingProxyType(transitions),
		length_range = (length_range[0], length_range[1]),
		secondary_dominant_probability = float(probability)
	)


def parse_mood_profiles (data: typing.Any) -> typing.Mapping[Mood, MoodProfile]:

	"""Validate a mood-table mapping (as loaded from YAML) and freeze it.

	Raises:
		ValueError: If a mood name is unknown, the default mood is missing, or
			any table is malformed.
	"""

	if not isinstance(data, dict):
		raise ValueError("Mood table must be a mapping of mood name to profile")

	profiles: typing.Dict[Mood, MoodProfile] = {}

	for name, raw in data.items():

		try:
			mood = Mood(name)
		except ValueError:
			raise ValueError(f"Unknown mood in table: {name!r}") from None

		profiles[mood] = _parse_profile(mood, raw)

	if DEFAULT_MOOD not in profiles:
		raise ValueError(f"Mood table must define the default mood {DEFAULT_MOOD.value!r}")

	return types.MappingProxyType(profiles)


def load_mood_profiles (path: str) -> typing.Mapping[Mood, MoodProfile]:

	"""Load and validate mood tables from a YAML file."""

	with open(path, "r") as f:
		data = yaml.safe_load(f)

	profiles = parse_mood_profiles(data)

	logger.debug(f"Loaded {len(profiles)} mood profiles from {path}")

	return profiles


MOOD_PROFILES: typing.Mapping[Mood, MoodProfile] = load_mood_profiles(DEFAULT_MOODS_PATH)


def get_profile (
	mood: Mood,
	profiles: typing.Optional[typing.Mapping[Mood, MoodProfile]] = None
) -> MoodProfile:

	"""Return the profile for a mood, falling back to the default mood's profile."""

	if profiles is None:
		profiles = MOOD_PROFILES

	if mood not in profiles:
		logger.debug(f"No profile for mood {mood.value!r} - using {DEFAULT_MOOD.value}")
		return profiles[DEFAULT_MOOD]

	return profiles[mood]
