import asyncio
import logging
import typing


logger = logging.getLogger(__name__)


TickCallback = typing.Callable[[], None]


@typing.runtime_checkable
class PeriodicTimer (typing.Protocol):

	"""
	Host timer that calls a callback on a fixed cadence until cancelled.

	Once ``cancel()`` returns the callback must never be invoked again by
	this timer, even if an invocation was already queued.
	"""

	def start (self) -> None:
		...

	def cancel (self) -> None:
		...


TimerFactory = typing.Callable[[TickCallback], PeriodicTimer]


class AsyncioIntervalTimer:

	"""
	Periodic timer running on an asyncio event loop.

	Each firing schedules the next one with ``loop.call_later`` after the
	callback returns, so invocations never overlap.  The callback is free to
	cancel this timer (and start a new one) from inside itself.
	"""

	def __init__ (self, callback: TickCallback, interval: float = 0.005, loop: typing.Optional[asyncio.AbstractEventLoop] = None) -> None:

		"""
		Parameters:
			callback: Invoked once per interval.
			interval: Seconds between invocations.
			loop: Event loop to run on (the running loop when omitted).
		"""

		if interval <= 0:
			raise ValueError("Timer interval must be positive")

		self._callback = callback
		self._interval = interval
		self._loop = loop
		self._handle: typing.Optional[asyncio.TimerHandle] = None
		self._cancelled = False


	def start (self) -> None:

		if self._handle is not None:
			return

		if self._loop is None:
			self._loop = asyncio.get_running_loop()

		self._cancelled = False
		self._handle = self._loop.call_later(self._interval, self._fire)


	def cancel (self) -> None:

		self._cancelled = True

		if self._handle is not None:
			self._handle.cancel()
			self._handle = None


	@property
	def active (self) -> bool:
		return self._handle is not None and not self._cancelled


	def _fire (self) -> None:

		if self._cancelled:
			return

		try:
			self._callback()
		except Exception:
			logger.exception("Timer callback failed - stopping timer")
			self.cancel()

		if self._cancelled or self._loop is None:
			return

		self._handle = self._loop.call_later(self._interval, self._fire)


def asyncio_timer_factory (interval: float = 0.005) -> TimerFactory:

	"""Return a factory creating :class:`AsyncioIntervalTimer` instances with ``interval``."""

	def factory (callback: TickCallback) -> PeriodicTimer:
		return AsyncioIntervalTimer(callback, interval=interval)

	return factory
