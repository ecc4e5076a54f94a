"""Real-time progression playback.

``ProgressionPlayer`` steps through a ``Progression`` in musical time, one chord
per harmonic-rhythm interval, and announces each chord to listeners:

```python
clock = nimbus.clock.ManualClock()
player = nimbus.player.ProgressionPlayer(clock, on_cycle_end=make_next_progression)
player.on("chord_change", lambda change: print(change.index, change.chord.name()))

player.set_progression(progression, immediate=True)   # prints chord 0 now
clock.advance_bars(progression.harmonic_rhythm)        # prints chord 1
```

Transitions between progressions are either immediate (the new progression
starts now) or deferred (it is queued and takes over when the current
progression finishes its cycle). When a cycle ends with nothing queued, the
``on_cycle_end`` supplier is asked for a fresh progression so the music never
repeats verbatim; if there is no supplier, or it has nothing, the current
progression loops.

Secondary dominants are passing chords: while one sounds, the interval to the
next chord is half the harmonic rhythm (rounded half up, at least one bar).

Pausing discards the time already spent on the current chord: after
``resume()`` the next chord arrives one full interval later, not after the
remainder of the interrupted one. Only ``resume()`` leaves PAUSED. An
immediate ``set_progression()`` while paused swaps the progression and resets
the cursor but stays paused; its first chord is announced on ``resume()``.

State machine::

	IDLE --set_progression--> RUNNING --pause--> PAUSED --resume--> RUNNING
	PAUSED --set_progression--> PAUSED
	any --stop--> IDLE
	any --dispose--> DISPOSED (terminal)
"""

import dataclasses
import enum
import logging
import typing

import nimbus.chords
import nimbus.clock
import nimbus.event_emitter
import nimbus.progression


logger = logging.getLogger(__name__)


CHORD_CHANGE_EVENT = "chord_change"

CycleEndSupplier = typing.Callable[[], typing.Optional[nimbus.progression.Progression]]


class PlayerState (enum.Enum):

	"""Lifecycle state of a ``ProgressionPlayer``."""

	IDLE = "idle"
	RUNNING = "running"
	PAUSED = "paused"
	DISPOSED = "disposed"


@dataclasses.dataclass(frozen=True)
class ChordChange:

	"""
	Payload of a ``chord_change`` event.
	"""

	chord: nimbus.chords.Chord
	index: int
	total: int


	@property
	def root_name (self) -> str:

		return self.chord.root_name


	@property
	def quality (self) -> str:

		return self.chord.quality


	@property
	def degree (self) -> typing.Optional[int]:

		return self.chord.degree


def _is_playable (progression: typing.Optional[nimbus.progression.Progression]) -> bool:

	"""An empty progression counts as no progression."""

	return progression is not None and progression.length > 0


class ProgressionPlayer:

	"""Plays progressions against a musical clock, one chord per interval.

	The player owns at most one clock trigger at a time. Every rebuild cancels
	the previous trigger before registering the next, and ``pause()``,
	``stop()`` and ``dispose()`` cancel it outright, after which no advance can
	fire.

	All methods must be called from the clock's thread (for ``AsyncioClock``,
	the event loop). Listener exceptions propagate.
	"""

	def __init__ (
		self,
		clock: nimbus.clock.MusicalClock,
		on_cycle_end: typing.Optional[CycleEndSupplier] = None
	) -> None:

		"""Initialize an idle player.

		Parameters:
			clock: Clock that drives chord advances.
			on_cycle_end: Optional supplier called when a progression finishes
				with nothing queued. Returning ``None`` loops the current
				progression.
		"""

		self.clock = clock
		self.on_cycle_end = on_cycle_end
		self.events = nimbus.event_emitter.EventEmitter()

		self.current_progression: typing.Optional[nimbus.progression.Progression] = None
		self.next_progression: typing.Optional[nimbus.progression.Progression] = None
		self.chord_index = 0
		self.state = PlayerState.IDLE

		self._trigger: typing.Optional[nimbus.clock.Trigger] = None
		self._trigger_bars = 0
		self._announce_on_resume = False


	def on (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a listener (e.g. for ``"chord_change"``).
		"""

		self.events.on(event_name, callback)


	@property
	def current_chord (self) -> typing.Optional[nimbus.chords.Chord]:

		"""The chord at the cursor, or ``None`` when nothing is loaded."""

		if self.current_progression is None:
			return None

		return self.current_progression.chords[self.chord_index]


	@property
	def position (self) -> typing.Tuple[int, int]:

		"""``(index, total)`` of the cursor; ``(0, 0)`` when nothing is loaded."""

		if self.current_progression is None:
			return (0, 0)

		return (self.chord_index, self.current_progression.length)


	def set_progression (self, progression: nimbus.progression.Progression, immediate: bool = False) -> None:

		"""Load a progression now or queue it for the end of the current cycle.

		If ``immediate`` is True, or nothing is loaded, the progression replaces
		the current one straight away and its first chord is announced before
		this call returns. A paused player takes the progression and rewinds
		to its first chord but stays paused and silent until ``resume()``.
		Otherwise the progression waits until the current one completes its
		cycle; a later queued progression replaces an earlier one.
		"""

		if self.state == PlayerState.DISPOSED:
			logger.debug("set_progression() ignored - player is disposed")
			return

		if not _is_playable(progression):
			logger.warning("Ignoring empty progression")
			return

		if immediate or self.current_progression is None:
			self.current_progression = progression
			self.chord_index = 0

			if self.state == PlayerState.PAUSED:
				self._announce_on_resume = True
				logger.debug("Loaded progression while paused - first chord follows resume()")
				return

			self.state = PlayerState.RUNNING

			self._rebuild_trigger()
			self._emit_current()

		else:
			self.next_progression = progression
			logger.debug(f"Queued {progression.length}-chord progression for the end of the cycle")


	def pause (self) -> None:

		"""Suspend chord advances, keeping the progression and cursor."""

		if self.state != PlayerState.RUNNING:
			logger.debug(f"pause() ignored - player is {self.state.value}")
			return

		self._cancel_trigger()
		self.state = PlayerState.PAUSED


	def resume (self) -> None:

		"""Restart chord advances from the cursor without announcing the current chord again.

		The next chord follows one full interval after resuming. A progression
		loaded immediately while paused has not been heard yet, so its first
		chord is announced here.
		"""

		if self.state != PlayerState.PAUSED or self.current_progression is None:
			logger.debug(f"resume() ignored - player is {self.state.value}")
			return

		self.state = PlayerState.RUNNING
		self._rebuild_trigger()

		if self._announce_on_resume:
			self._announce_on_resume = False
			self._emit_current()


	def stop (self) -> None:

		"""Cancel playback and forget all progressions. ``set_progression()`` starts again."""

		if self.state == PlayerState.DISPOSED:
			return

		self._cancel_trigger()
		self.current_progression = None
		self.next_progression = None
		self.chord_index = 0
		self.state = PlayerState.IDLE
		self._announce_on_resume = False


	def dispose (self) -> None:

		"""Stop for good. Every later call is a no-op."""

		self.stop()
		self.state = PlayerState.DISPOSED


	def _interval_bars (self) -> int:

		"""Bars until the next advance, given the chord at the cursor."""

		assert self.current_progression is not None

		harmonic_rhythm = max(1, self.current_progression.harmonic_rhythm)
		chord = self.current_progression.chords[self.chord_index]

		if chord.is_secondary_dominant:
			return max(1, nimbus.progression.round_half_up(harmonic_rhythm / 2))

		return harmonic_rhythm


	def _cancel_trigger (self) -> None:

		if self._trigger is not None:
			self._trigger.cancel()
			self._trigger = None


	def _rebuild_trigger (self) -> None:

		"""Replace the clock trigger with one firing every interval from now."""

		self._cancel_trigger()

		bars = self._interval_bars()
		self._trigger = self.clock.schedule_repeating(self._advance, self.clock.bars_to_pulses(bars))
		self._trigger_bars = bars


	def _advance (self, pulse: int) -> None:

		"""Clock callback: move to the next chord and announce it."""

		if self.state != PlayerState.RUNNING or self.current_progression is None:
			return

		self.chord_index += 1

		if self.chord_index >= self.current_progression.length:
			self._end_cycle()

		# Steady playback keeps one unbroken trigger.
		if self._interval_bars() != self._trigger_bars:
			self._rebuild_trigger()

		self._emit_current()


	def _end_cycle (self) -> None:

		"""Choose what plays after the last chord: queued, freshly supplied, or the same again."""

		if self.next_progression is not None:
			self.current_progression = self.next_progression
			self.next_progression = None
			logger.debug("Cycle end - switching to queued progression")

		elif self.on_cycle_end is not None:
			fresh = self._request_fresh_progression()

			if _is_playable(fresh):
				self.current_progression = fresh
				logger.debug("Cycle end - switching to fresh progression")

			else:
				logger.debug("Cycle end - no fresh progression, looping")

		self.chord_index = 0


	def _request_fresh_progression (self) -> typing.Optional[nimbus.progression.Progression]:

		"""Call the cycle-end supplier, treating a failure as "nothing new"."""

		assert self.on_cycle_end is not None

		try:
			return self.on_cycle_end()

		except Exception as exc:
			logger.warning(f"Cycle-end supplier failed: {exc}")
			return None


	def _emit_current (self) -> None:

		assert self.current_progression is not None

		change = ChordChange(
			chord = self.current_progression.chords[self.chord_index],
			index = self.chord_index,
			total = self.current_progression.length
		)

		logger.debug(f"Chord {change.index + 1}/{change.total}: {change.chord.name()}")

		self.events.emit(CHORD_CHANGE_EVENT, change)
