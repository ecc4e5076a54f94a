import dataclasses
import logging
import random
import typing

import nimbus.clock
import nimbus.config
import nimbus.event_emitter
import nimbus.harmony
import nimbus.intervals
import nimbus.moods
import nimbus.player
import nimbus.progression
import nimbus.voicings


logger = logging.getLogger(__name__)


HARMONY_EVENT = "harmony"


@dataclasses.dataclass(frozen=True)
class HarmonyUpdate:

	"""
	A chord change together with the voice-led pad voicing for it.
	"""

	change: nimbus.player.ChordChange
	voicing: typing.Tuple[int, ...]


class HarmonicState:

	"""Holds the live musical context and keeps the player supplied with progressions.

	The external mapper reports context changes through the ``set_*`` methods.
	Key and mode changes are musically significant and swap progressions at
	once. Category changes swap at once only for dramatic weather (see
	``nimbus.progression.should_change_immediately``), and pressure changes
	always wait for the current cycle to end. Whenever a cycle ends with
	nothing queued, a fresh progression is generated from the current context.
	Changes made while paused never restart playback: the new progression is
	loaded silently and its first chord is heard on ``resume()``.

	Listeners registered with ``on("harmony", callback)`` receive a
	``HarmonyUpdate`` for every chord change.
	"""

	def __init__ (
		self,
		root: nimbus.harmony.KeyType = nimbus.harmony.DEFAULT_ROOT,
		mode: str = nimbus.intervals.DEFAULT_MODE,
		category: typing.Optional[str] = "clear",
		pressure_norm: float = 0.5,
		clock: typing.Optional[nimbus.clock.MusicalClock] = None,
		rng: typing.Optional[random.Random] = None,
		profiles: typing.Optional[typing.Mapping[nimbus.moods.Mood, nimbus.moods.MoodProfile]] = None
	) -> None:

		"""Initialize the context. Nothing plays until ``start()``.

		Parameters:
			root: Key root name or pitch class.
			mode: Mode name.
			category: Environmental category (e.g. ``"rain"``).
			pressure_norm: Air pressure normalised to [0, 1].
			clock: Clock to play against. Defaults to a ``ManualClock``.
			rng: Optional seeded random source for reproducible output.
			profiles: Optional alternative mood tables.
		"""

		self.root = root
		self.mode = mode
		self.category = category
		self.pressure_norm = pressure_norm
		self.profiles = profiles

		self.rng = rng or random.Random()
		self.clock = clock or nimbus.clock.ManualClock()
		self.events = nimbus.event_emitter.EventEmitter()
		self.voice_leading = nimbus.voicings.VoiceLeadingState()
		self.current_voicing: typing.Optional[typing.Tuple[int, ...]] = None

		self.player = nimbus.player.ProgressionPlayer(self.clock, on_cycle_end=self.generate)
		self.player.on(nimbus.player.CHORD_CHANGE_EVENT, self._on_chord_change)


	@classmethod
	def from_config (
		cls,
		config: typing.Optional[typing.Mapping[str, typing.Any]] = None,
		clock: typing.Optional[nimbus.clock.MusicalClock] = None
	) -> "HarmonicState":

		"""Build a session from a configuration mapping (see ``nimbus.config``).

		Without an explicit clock, an ``AsyncioClock`` at the configured tempo
		is created.
		"""

		settings = nimbus.config.merge_config(config)
		harmony = settings["harmony"]

		profiles = None

		if settings["moods"].get("path"):
			profiles = nimbus.moods.load_mood_profiles(settings["moods"]["path"])

		if clock is None:
			clock = nimbus.clock.AsyncioClock(bpm=settings["clock"]["bpm"])

		seed = harmony.get("seed")

		return cls(
			root = harmony["root"],
			mode = harmony["mode"],
			category = harmony["category"],
			pressure_norm = harmony["pressure_norm"],
			clock = clock,
			rng = random.Random(seed) if seed is not None else None,
			profiles = profiles
		)


	def on (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a listener (e.g. for ``"harmony"``).
		"""

		self.events.on(event_name, callback)


	def generate (self) -> nimbus.progression.Progression:

		"""Generate a progression from the current context."""

		return nimbus.progression.generate_progression(
			self.root,
			self.mode,
			self.category,
			self.pressure_norm,
			rng = self.rng,
			profiles = self.profiles
		)


	def start (self) -> None:

		"""Generate the first progression and start playing it."""

		logger.info(f"Harmony starting in {self.root} {self.mode} ({self.category})")

		self.player.set_progression(self.generate(), immediate=True)


	def set_root (self, root: nimbus.harmony.KeyType) -> None:

		"""Change key root; the new progression starts now."""

		if root == self.root:
			return

		self.root = root
		self._replace_progression(immediate=True)


	def set_mode (self, mode: str) -> None:

		"""Change mode; the new progression starts now."""

		if mode == self.mode:
			return

		self.mode = mode
		self._replace_progression(immediate=True)


	def set_category (self, category: typing.Optional[str]) -> None:

		"""Change environmental category; dramatic changes swap at once, others at cycle end."""

		if category == self.category:
			return

		immediate = nimbus.progression.should_change_immediately(self.category, category)
		self.category = category
		self._replace_progression(immediate=immediate)


	def set_pressure (self, pressure_norm: float) -> None:

		"""Change air pressure; the new harmonic rhythm arrives at the next cycle end."""

		if pressure_norm == self.pressure_norm:
			return

		self.pressure_norm = pressure_norm
		self._replace_progression(immediate=False)


	def pause (self) -> None:

		self.player.pause()


	def resume (self) -> None:

		self.player.resume()


	def stop (self) -> None:

		"""Stop playback and forget the pad voicing."""

		self.player.stop()
		self.voice_leading.reset()
		self.current_voicing = None


	def dispose (self) -> None:

		self.stop()
		self.player.dispose()


	def _replace_progression (self, immediate: bool) -> None:

		"""Hand a freshly generated progression to the player, if it is playing."""

		# Before start() the context is only recorded; start() picks it up.
		if self.player.current_progression is None:
			return

		self.player.set_progression(self.generate(), immediate=immediate)


	def _on_chord_change (self, change: nimbus.player.ChordChange) -> None:

		"""Voice-lead the pad to the new chord, log it and notify listeners."""

		voicing = tuple(self.voice_leading.next(change.chord.notes))
		self.current_voicing = voicing

		degree = change.degree if change.degree is not None else f"V7/{change.chord.resolves_degree}"

		logger.info(
			f"Chord {change.index + 1}/{change.total}: degree {degree} "
			f"({change.quality}) - {', '.join(change.chord.note_names())}"
		)

		self.events.emit(HARMONY_EVENT, HarmonyUpdate(change=change, voicing=voicing))
