import dataclasses
import typing


@dataclasses.dataclass (frozen=True)
class SoundingNote:

	"""A note that is currently audible on the renderer."""

	channel: int
	key: int
	velocity: int


class SoundingNotes:

	"""
	The set of notes currently sounding, used to restore them after a pause.

	One entry per ``(channel, key)``: a repeated note-on replaces the stored
	velocity rather than adding a second entry, and a note-off (or a note-on
	with velocity 0) removes it.
	"""

	def __init__ (self) -> None:

		self._notes: typing.Dict[typing.Tuple[int, int], SoundingNote] = {}


	def note_on (self, channel: int, key: int, velocity: int) -> None:

		if velocity == 0:
			self.note_off(channel, key)
			return

		self._notes[(channel, key)] = SoundingNote(channel, key, velocity)


	def note_off (self, channel: int, key: int) -> None:

		self._notes.pop((channel, key), None)


	def clear (self) -> None:

		self._notes.clear()


	def snapshot (self) -> typing.FrozenSet[SoundingNote]:

		return frozenset(self._notes.values())


	def __iter__ (self) -> typing.Iterator[SoundingNote]:

		return iter(list(self._notes.values()))


	def __len__ (self) -> int:

		return len(self._notes)
