"""Musical-time clocks.

A clock counts integer pulses (24 per quarter note, 96 per 4/4 bar) and fires
repeating triggers at exact pulse positions. The progression player registers
exactly one trigger at a time and talks to the clock only through
``schedule_repeating()`` and ``Trigger.cancel()``, so it runs unchanged on:

- ``ManualClock`` - advanced explicitly by the caller. Deterministic; used in
  tests and for offline rendering.
- ``AsyncioClock`` - advanced by an asyncio task in real time at a tempo.

Triggers due at the same pulse fire in registration order. A trigger
cancelled during dispatch, even by an earlier trigger at the same pulse,
never fires again.

Example:
	```python
	clock = nimbus.clock.ManualClock()
	trigger = clock.schedule_repeating(lambda pulse: print(pulse), clock.bars_to_pulses(2))

	clock.advance_bars(4)  # prints 192, then 384
	trigger.cancel()
	```
"""

import abc
import asyncio
import heapq
import itertools
import logging
import time
import typing

import nimbus.constants.pulses


logger = logging.getLogger(__name__)


TriggerCallback = typing.Callable[[int], typing.Any]


class Trigger:

	"""
	A repeating action registered on a clock.
	"""

	def __init__ (self, callback: TriggerCallback, interval_pulses: int, next_pulse: int) -> None:

		"""
		Store the callback and its schedule.
		"""

		self.callback = callback
		self.interval_pulses = interval_pulses
		self.next_pulse = next_pulse
		self.cancelled = False


	def cancel (self) -> None:

		"""Stop this trigger. Safe to call more than once."""

		self.cancelled = True


class MusicalClock (abc.ABC):

	"""Shared trigger scheduling for all clock implementations.

	Subclasses decide how time moves forward and call ``_dispatch()`` with the
	new pulse position.
	"""

	def __init__ (self, pulses_per_bar: int = nimbus.constants.pulses.PULSES_PER_BAR) -> None:

		"""
		Initialize the clock at pulse 0 with no triggers.
		"""

		if pulses_per_bar <= 0:
			raise ValueError("Pulses per bar must be positive")

		self.pulses_per_bar = pulses_per_bar
		self.pulse = 0

		self._queue: typing.List[typing.Tuple[int, int, Trigger]] = []
		self._counter = itertools.count()


	def bars_to_pulses (self, bars: int) -> int:

		"""
		Convert a whole number of bars to pulses.
		"""

		return bars * self.pulses_per_bar


	def schedule_repeating (
		self,
		callback: TriggerCallback,
		interval_pulses: int,
		first_pulse: typing.Optional[int] = None
	) -> Trigger:

		"""Register a callback to fire every ``interval_pulses``.

		Parameters:
			callback: Called with the pulse it was scheduled for.
			interval_pulses: Pulses between firings (must be positive).
			first_pulse: Pulse of the first firing. Defaults to one interval
				from now and must lie in the future.

		Returns:
			The ``Trigger``, whose ``cancel()`` stops it.
		"""

		if interval_pulses <= 0:
			raise ValueError("Trigger interval must be positive")

		if first_pulse is None:
			first_pulse = self.pulse + interval_pulses

		if first_pulse <= self.pulse:
			raise ValueError("First trigger pulse must be in the future")

		trigger = Trigger(callback, interval_pulses, first_pulse)
		heapq.heappush(self._queue, (trigger.next_pulse, next(self._counter), trigger))

		return trigger


	def active_triggers (self) -> typing.List[Trigger]:

		"""Return the triggers that have not been cancelled, in firing order."""

		return [trigger for _, _, trigger in sorted(self._queue) if not trigger.cancelled]


	def _dispatch (self, pulse: int) -> None:

		"""Fire every trigger due at or before ``pulse``, then move the clock to ``pulse``.

		While a trigger runs, ``self.pulse`` equals its scheduled pulse, so any
		trigger it registers is timed from that exact position.
		"""

		while self._queue and self._queue[0][0] <= pulse:

			due_pulse, _, trigger = heapq.heappop(self._queue)

			if trigger.cancelled:
				continue

			self.pulse = due_pulse

			# Re-queue before firing so the callback can cancel its own trigger.
			trigger.next_pulse = due_pulse + trigger.interval_pulses
			heapq.heappush(self._queue, (trigger.next_pulse, next(self._counter), trigger))

			trigger.callback(due_pulse)

		self.pulse = pulse


class ManualClock (MusicalClock):

	"""A clock that only moves when told to.

	Example:
		```python
		clock = ManualClock()
		player = nimbus.player.ProgressionPlayer(clock)
		player.set_progression(progression, immediate=True)

		clock.advance_bars(progression.harmonic_rhythm)  # next chord
		```
	"""

	def advance (self, pulses: int) -> None:

		"""Move time forward, firing every trigger that falls due on the way."""

		if pulses < 0:
			raise ValueError("Cannot move a clock backwards")

		self._dispatch(self.pulse + pulses)


	def advance_bars (self, bars: int) -> None:

		"""Move time forward by whole bars."""

		self.advance(self.bars_to_pulses(bars))


class AsyncioClock (MusicalClock):

	"""A real-time clock driven by an asyncio task.

	The loop targets absolute pulse times and sleeps between them, so timing
	errors do not accumulate. Triggers run on the event loop thread.
	"""

	def __init__ (
		self,
		bpm: float = 72,
		pulses_per_bar: int = nimbus.constants.pulses.PULSES_PER_BAR,
		beats_per_bar: int = nimbus.constants.pulses.BEATS_PER_BAR
	) -> None:

		"""Initialize the clock at a tempo.

		Parameters:
			bpm: Tempo in quarter-note beats per minute.
			pulses_per_bar: Pulse resolution of one bar.
			beats_per_bar: Beats in one bar (4 for 4/4).
		"""

		super().__init__(pulses_per_bar=pulses_per_bar)

		if beats_per_bar <= 0:
			raise ValueError("Beats per bar must be positive")

		self.pulses_per_beat = pulses_per_bar / beats_per_bar
		self.current_bpm: float = 0
		self.seconds_per_pulse = 0.0
		self.running = False
		self.task: typing.Optional[asyncio.Task] = None

		self.set_bpm(bpm)


	def set_bpm (self, bpm: float) -> None:

		"""
		Instantly change the tempo. Takes effect from the next pulse.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.current_bpm = bpm
		self.seconds_per_pulse = 60.0 / bpm / self.pulses_per_beat

		logger.info(f"BPM set to {self.current_bpm:.2f}")


	async def start (self) -> None:

		"""Start advancing time in a background asyncio task."""

		if self.running:
			return

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info("Clock started")


	async def stop (self) -> None:

		"""Stop advancing time. Registered triggers are kept and resume with ``start()``."""

		if not self.running:
			return

		self.running = False

		if self.task:
			self.task.cancel()

			try:
				await self.task
			except asyncio.CancelledError:
				pass

			self.task = None

		logger.info("Clock stopped")


	async def _run_loop (self) -> None:

		"""Advance one pulse at a time, sleeping until each pulse is due."""

		next_pulse_time = time.perf_counter() + self.seconds_per_pulse

		while self.running:

			sleep_time = next_pulse_time - time.perf_counter()

			if sleep_time > 0:
				await asyncio.sleep(sleep_time)

			# Catch up pulse by pulse if the loop fell behind.
			while self.running and time.perf_counter() >= next_pulse_time:
				self._dispatch(self.pulse + 1)
				next_pulse_time += self.seconds_per_pulse
