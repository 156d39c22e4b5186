"""Tick to seconds conversion over a tempo map.

A MIDI file measures time in ticks; ``time_division`` ticks make a quarter
note and each tempo change sets how many microseconds a quarter note lasts
from its tick onwards.  The mapping from ticks to seconds is therefore
piecewise linear, with one segment per tempo point.

The cumulative start time of every segment is computed once, by a forward
scan, when the map is built.  Conversions then only need a binary search and
one multiplication, however long the recording is.
"""

import bisect
import dataclasses
import logging
import typing

import midiplayer.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass (frozen=True)
class TempoPoint:

	"""A tempo change: from ``tick`` onwards a quarter note lasts this many microseconds."""

	tick: int
	microseconds_per_quarter: int


def seconds_per_tick (microseconds_per_quarter: float, time_division: int) -> float:

	"""
	Length of one tick at the given tempo.

	A non-positive tempo (a corrupt file) cannot be played at, so the default
	120 BPM is used for it instead and a warning is logged.
	"""

	if microseconds_per_quarter <= 0:
		logger.warning(f"Invalid tempo ({microseconds_per_quarter} us per quarter) - falling back to {midiplayer.constants.DEFAULT_BPM} BPM")
		microseconds_per_quarter = midiplayer.constants.DEFAULT_MICROSECONDS_PER_QUARTER

	return microseconds_per_quarter / (1000000.0 * time_division)


class TempoMap:

	"""
	Static tick to time reference built from a recording's tempo changes.
	"""

	def __init__ (self, points: typing.Sequence[TempoPoint], time_division: int) -> None:

		"""
		Build the segment table.

		Parameters:
			points: Tempo changes sorted ascending by tick.  When the list is
				empty or does not start at tick 0, 120 BPM covers the gap.
			time_division: Ticks per quarter note.
		"""

		if time_division <= 0:
			raise ValueError("time_division must be positive")

		self.time_division = time_division
		self.points: typing.List[TempoPoint] = list(points)

		if not self.points or self.points[0].tick > 0:
			self.points.insert(0, TempoPoint(0, midiplayer.constants.DEFAULT_MICROSECONDS_PER_QUARTER))

		self._ticks: typing.List[int] = []
		self._start_seconds: typing.List[float] = []
		self._seconds_per_tick: typing.List[float] = []

		elapsed = 0.0
		previous_tick = 0
		previous_rate = 0.0

		for point in self.points:
			elapsed += (point.tick - previous_tick) * previous_rate
			rate = seconds_per_tick(point.microseconds_per_quarter, time_division)

			self._ticks.append(point.tick)
			self._start_seconds.append(elapsed)
			self._seconds_per_tick.append(rate)

			previous_tick = point.tick
			previous_rate = rate


	def ticks_to_seconds (self, tick: float) -> float:

		"""
		Convert an absolute tick position to elapsed seconds from tick 0.

		Uses the last tempo point strictly before ``tick``; a tempo change
		sitting exactly on ``tick`` only affects what comes after it.
		"""

		if tick <= 0:
			return 0.0

		index = bisect.bisect_left(self._ticks, tick) - 1

		return self._start_seconds[index] + (tick - self._ticks[index]) * self._seconds_per_tick[index]


	def initial_seconds_per_tick (self) -> float:

		"""Tick length at the very start of the recording."""

		return self._seconds_per_tick[0]
