import asyncio
import inspect
import logging
import typing


logger = logging.getLogger(__name__)


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Listener registry for named playback events.

	Listeners run synchronously, in registration order, at the point the
	event is emitted.  Coroutine functions are accepted too; they are
	scheduled as tasks on the running event loop rather than awaited, since
	the sequencer never suspends mid-dispatch.  The emitter holds on to those
	tasks until they finish and logs any exception they raise.
	"""

	def __init__ (self, event_names: typing.Optional[typing.Iterable[str]] = None) -> None:

		"""
		Parameters:
			event_names: When given, only these names may be registered or
				emitted; anything else raises ``ValueError`` so typos surface
				immediately.
		"""

		self._event_names: typing.Optional[typing.FrozenSet[str]] = frozenset(event_names) if event_names is not None else None
		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}
		self._tasks: typing.Set[asyncio.Task] = set()


	def _check_name (self, event_name: str) -> None:

		if self._event_names is not None and event_name not in self._event_names:
			raise ValueError(f"Unknown event {event_name!r} (expected one of {sorted(self._event_names)})")


	def on (self, event_name: str, callback: CallbackType) -> CallbackType:

		"""
		Register a callback for an event name.

		Returns the callback so it can be kept for a later ``off()``.
		"""

		self._check_name(event_name)
		self._listeners.setdefault(event_name, []).append(callback)

		return callback


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if event_name not in self._listeners or callback not in self._listeners[event_name]:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def listener_count (self, event_name: str) -> int:

		return len(self._listeners.get(event_name, []))


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener registered for ``event_name``.
		"""

		self._check_name(event_name)

		# Copy so a listener may unregister itself while being called.
		for callback in list(self._listeners.get(event_name, [])):

			if inspect.iscoroutinefunction(callback):
				task = asyncio.get_running_loop().create_task(callback(*args, **kwargs))
				self._tasks.add(task)
				task.add_done_callback(self._task_done)

			else:
				callback(*args, **kwargs)


	def _task_done (self, task: asyncio.Task) -> None:

		self._tasks.discard(task)

		if task.cancelled():
			return

		exception = task.exception()

		if exception is not None:
			logger.error("Async event listener failed", exc_info=exception)
