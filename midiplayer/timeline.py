import dataclasses
import enum
import typing

import midiplayer.constants


class EventKind (enum.Enum):

	"""
	Whether an event goes to the renderer or is interpreted by the sequencer.
	"""

	CHANNEL = "channel"
	META = "meta"


@dataclasses.dataclass (frozen=True)
class TimedEvent:

	"""
	A single MIDI message placed at an absolute tick.

	For channel events ``status`` is the raw status byte (type and channel).
	For meta events it is the meta type byte, e.g. ``META_SET_TEMPO``.
	"""

	tick: int
	kind: EventKind
	status: int
	data: bytes = b""


	@classmethod
	def channel_event (cls, tick: int, status: int, *data: int) -> "TimedEvent":

		"""Build a channel event from a status byte and its data bytes."""

		return cls(tick=tick, kind=EventKind.CHANNEL, status=status, data=bytes(data))


	@classmethod
	def meta_event (cls, tick: int, meta_type: int, data: bytes = b"") -> "TimedEvent":

		"""Build a meta event carrying a raw payload."""

		return cls(tick=tick, kind=EventKind.META, status=meta_type, data=bytes(data))


	@property
	def is_channel_event (self) -> bool:
		return self.kind is EventKind.CHANNEL


	@property
	def message_type (self) -> int:

		"""High nibble of the status byte (``NOTE_ON``, ``PITCH_BEND``...)."""

		return self.status & 0xF0


	@property
	def channel (self) -> typing.Optional[int]:

		"""Channel 0-15 for channel voice messages, ``None`` otherwise."""

		if not self.is_channel_event or self.status >= midiplayer.constants.SYSTEM_EXCLUSIVE:
			return None

		return self.status & 0x0F


	@property
	def is_note_event (self) -> bool:

		return self.channel is not None and self.message_type in (midiplayer.constants.NOTE_ON, midiplayer.constants.NOTE_OFF)


	@property
	def message_bytes (self) -> typing.List[int]:

		"""Status byte followed by data bytes, as sent to the renderer."""

		return [self.status, *self.data]


Timeline = typing.Tuple[TimedEvent, ...]


def build_timeline (tracks: typing.Sequence[typing.Sequence[TimedEvent]]) -> Timeline:

	"""
	Merge per-track event lists into one tick-ordered timeline.

	Events on the same tick keep their merge order: earlier tracks first, and
	within a track the original order.  ``sorted`` is stable, so flattening in
	track order and sorting by tick alone gives exactly that.
	"""

	merged = [event for track in tracks for event in track]

	return tuple(sorted(merged, key=lambda event: event.tick))
