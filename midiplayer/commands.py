"""Outbound command protocol.

Every MIDI message sent to the renderer is a single text command: the tag
``midi`` followed by each byte in lowercase, unpadded hexadecimal, all
comma separated.  A note-on for middle C on channel 1 at velocity 100 is::

	midi,90,3c,64

The channel is fire-and-forget: commands are posted and never acknowledged.
"""

import logging
import typing

import midiplayer.constants


logger = logging.getLogger(__name__)


COMMAND_TAG = "midi"

PostFunction = typing.Callable[[str], typing.Any]


def encode_command (message: typing.Iterable[int]) -> str:

	"""Encode raw MIDI bytes as a ``midi,...`` command string."""

	return ",".join([COMMAND_TAG, *(format(byte, "x") for byte in message)])


def decode_command (command: str) -> typing.List[int]:

	"""
	Parse a command string back into raw MIDI bytes.

	Raises ``ValueError`` for anything that is not a ``midi`` command.
	"""

	tag, _, body = command.partition(",")

	if tag != COMMAND_TAG:
		raise ValueError(f"Not a {COMMAND_TAG} command: {command!r}")

	if not body:
		raise ValueError(f"Command has no status byte: {command!r}")

	return [int(token, 16) for token in body.split(",")]


class CommandEmitter:

	"""
	Serializes MIDI messages and posts them across the renderer boundary.
	"""

	def __init__ (self, post: PostFunction) -> None:

		"""
		Parameters:
			post: Called with each encoded command, e.g. a websocket broadcast
				or :class:`midiplayer.midi_utils.MidoPortSink`.
		"""

		self._post = post


	def send (self, message: typing.Sequence[int]) -> None:

		"""Post one MIDI message given as status byte plus data bytes."""

		self._post(encode_command(message))


	def silence_all (self) -> None:

		"""Send all sound off and all notes off on every channel."""

		for channel in range(midiplayer.constants.MIDI_CHANNELS):
			self.send([midiplayer.constants.CONTROLLER_CHANGE | channel, midiplayer.constants.ALL_SOUND_OFF, 0])
			self.send([midiplayer.constants.CONTROLLER_CHANGE | channel, midiplayer.constants.ALL_NOTES_OFF, 0])
