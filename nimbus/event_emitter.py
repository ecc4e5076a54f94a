import inspect
import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A synchronous event emitter.

	Listeners run in registration order, inside the call to ``emit()``. The
	harmony engine is single-threaded, so coroutine functions are rejected
	when they are registered rather than silently never awaited.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		if inspect.iscoroutinefunction(callback):
			raise ValueError(f"Async callbacks are not supported for event {event_name!r}")

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def listener_count (self, event_name: str) -> int:

		"""
		Return how many callbacks are registered for an event name.
		"""

		return len(self._listeners.get(event_name, []))


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for an event. Listener exceptions propagate to the caller.
		"""

		# Copy so a listener may unregister itself while the event is being delivered.
		for callback in list(self._listeners.get(event_name, [])):
			callback(*args, **kwargs)
