import dataclasses
import typing

import midiplayer.constants


@dataclasses.dataclass
class ChannelLatch:

	"""Last pitch bend and program seen on one channel while fast-forwarding."""

	pitch_bend: int = midiplayer.constants.PITCH_BEND_CENTER
	program: int = 0


class ChannelLatches:

	"""
	Coalesced per-channel state collected during a fast-forward.

	Only the latest pitch bend and program change before the seek target are
	kept, so restoring them costs one command of each per channel no matter
	how many changes were skipped.
	"""

	def __init__ (self) -> None:

		self.channels: typing.List[ChannelLatch] = [ChannelLatch() for _ in range(midiplayer.constants.MIDI_CHANNELS)]


	def set_pitch_bend (self, channel: int, lsb: int, msb: int) -> None:

		self.channels[channel].pitch_bend = (msb << 7) | lsb


	def set_program (self, channel: int, program: int) -> None:

		self.channels[channel].program = program


	def restore_messages (self) -> typing.List[typing.List[int]]:

		"""
		One pitch bend and one program change per channel, as raw MIDI bytes.
		"""

		messages: typing.List[typing.List[int]] = []

		for channel, latch in enumerate(self.channels):
			messages.append([midiplayer.constants.PITCH_BEND | channel, latch.pitch_bend & 0x7F, latch.pitch_bend >> 7])
			messages.append([midiplayer.constants.PROGRAM_CHANGE | channel, latch.program])

		return messages
