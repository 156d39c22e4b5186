import time
import typing


WallClock = typing.Callable[[], float]


class PlaybackClock:

	"""
	Virtual playback time anchored to the wall clock.

	The current time is never stored while running; it is derived on every
	read from the anchor and the playback rate::

		current_time = (now - absolute_start_time) * playback_rate

	A rate change therefore applies immediately to the next read.  While
	paused the clock reports the captured ``paused_at`` value instead.
	"""

	def __init__ (self, playback_rate: float = 1.0, clock: WallClock = time.perf_counter) -> None:

		"""
		Parameters:
			playback_rate: Speed multiplier, must be greater than zero.
			clock: Monotonic wall clock in seconds (``time.perf_counter`` by default).
		"""

		self._clock = clock
		self.playback_rate = playback_rate
		self.absolute_start_time = clock()
		self.paused_at: typing.Optional[float] = None


	@property
	def paused (self) -> bool:
		return self.paused_at is not None


	@property
	def current_time (self) -> float:

		if self.paused_at is not None:
			return self.paused_at

		return (self._clock() - self.absolute_start_time) * self.playback_rate


	def seek (self, seconds: float) -> None:

		"""Re-anchor so that ``current_time`` reads ``seconds`` now, and leave the paused state."""

		self.paused_at = None
		self.absolute_start_time = self._clock() - seconds / self.playback_rate


	def pause (self, at: typing.Optional[float] = None) -> None:

		"""Freeze the clock at its current time, or at ``at`` when given."""

		self.paused_at = self.current_time if at is None else at


	def resume (self) -> None:

		"""Continue from the paused position."""

		if self.paused_at is None:
			return

		self.seek(self.paused_at)
