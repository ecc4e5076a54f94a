import typing

import pytest

import nimbus.chords
import nimbus.clock
import nimbus.harmony
import nimbus.player
import nimbus.progression


class ChordLog:

	"""Collects chord_change events for assertions."""

	def __init__ (self) -> None:

		"""Start with no recorded changes."""

		self.changes: typing.List[nimbus.player.ChordChange] = []

	def __call__ (self, change: nimbus.player.ChordChange) -> None:

		"""Record one chord change."""

		self.changes.append(change)

	@property
	def chords (self) -> typing.List[nimbus.chords.Chord]:

		"""The announced chords, in order."""

		return [change.chord for change in self.changes]

	@property
	def indices (self) -> typing.List[int]:

		"""The announced cursor positions, in order."""

		return [change.index for change in self.changes]


def make_progression (
	degrees: typing.Sequence[int],
	harmonic_rhythm: int = 4,
	root: str = "C",
	mode: str = "ionian"
) -> nimbus.progression.Progression:

	"""Build a deterministic progression from explicit degrees."""

	chords = tuple(nimbus.harmony.build_chord(root, mode, degree) for degree in degrees)

	return nimbus.progression.Progression(chords=chords, harmonic_rhythm=harmonic_rhythm, base_length=len(chords))


@pytest.fixture
def clock () -> nimbus.clock.ManualClock:

	"""A fresh deterministic clock at pulse 0."""

	return nimbus.clock.ManualClock()


@pytest.fixture
def chord_log () -> ChordLog:

	"""A fresh chord_change recorder."""

	return ChordLog()


@pytest.fixture
def player (clock: nimbus.clock.ManualClock, chord_log: ChordLog) -> nimbus.player.ProgressionPlayer:

	"""A player on the manual clock, wired to the chord log."""

	progression_player = nimbus.player.ProgressionPlayer(clock)
	progression_player.on(nimbus.player.CHORD_CHANGE_EVENT, chord_log)

	return progression_player
