import typing

import mido
import pytest

import midiplayer.commands
import midiplayer.constants
import midiplayer.recording
import midiplayer.sequencer

from midiplayer.tempo_map import TempoPoint
from midiplayer.timeline import TimedEvent


class FakeMidiOut:

	"""MIDI output stub that remembers what was sent."""

	def __init__ (self) -> None:

		self.sent: list[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


class FakeClock:

	"""Wall clock that only moves when told to."""

	def __init__ (self, start: float = 1000.0) -> None:

		self.now = start


	def __call__ (self) -> float:

		return self.now


	def advance (self, seconds: float) -> None:

		self.now += seconds


class ManualTimer:

	"""Periodic timer fired by hand from the test."""

	def __init__ (self, callback: typing.Callable[[], None]) -> None:

		self.callback = callback
		self.started = False
		self.cancelled = False


	def start (self) -> None:

		self.started = True


	def cancel (self) -> None:

		self.cancelled = True


	def fire (self) -> None:

		"""Invoke the callback unless the timer was cancelled."""

		if self.started and not self.cancelled:
			self.callback()


class ManualTimerFactory:

	"""Keeps every timer the sequencer creates so tests can fire the live one."""

	def __init__ (self) -> None:

		self.timers: list[ManualTimer] = []


	def __call__ (self, callback: typing.Callable[[], None]) -> ManualTimer:

		timer = ManualTimer(callback)
		self.timers.append(timer)
		return timer


	@property
	def current (self) -> ManualTimer:

		return self.timers[-1]


	def fire (self) -> None:

		"""Fire the most recently created timer."""

		self.current.fire()


class CommandLog:

	"""Collects posted commands and decodes them for assertions."""

	def __init__ (self) -> None:

		self.commands: list[str] = []


	def __call__ (self, command: str) -> None:

		self.commands.append(command)


	def clear (self) -> None:

		self.commands.clear()


	@property
	def messages (self) -> list[list[int]]:

		return [midiplayer.commands.decode_command(command) for command in self.commands]


	def of_type (self, message_type: int) -> list[list[int]]:

		"""Decoded messages whose status high nibble matches ``message_type``."""

		return [message for message in self.messages if message[0] & 0xF0 == message_type]


	@property
	def note_ons (self) -> list[list[int]]:

		return self.of_type(midiplayer.constants.NOTE_ON)


def tempo_event (tick: int, microseconds: int) -> TimedEvent:

	"""Set-tempo meta event."""

	return TimedEvent.meta_event(tick, midiplayer.constants.META_SET_TEMPO, microseconds.to_bytes(3, "big"))


def note_on (tick: int, channel: int, key: int, velocity: int = 100) -> TimedEvent:

	return TimedEvent.channel_event(tick, midiplayer.constants.NOTE_ON | channel, key, velocity)


def note_off (tick: int, channel: int, key: int) -> TimedEvent:

	return TimedEvent.channel_event(tick, midiplayer.constants.NOTE_OFF | channel, key, 0)


def make_recording (
	tracks: list[list[TimedEvent]],
	tempo_changes: typing.Optional[list[TempoPoint]] = None,
	time_division: int = 480,
	loop: typing.Optional[midiplayer.recording.LoopWindow] = None
) -> midiplayer.recording.Recording:

	"""
	Build a recording whose tempo map matches the tempo events in its tracks.

	Without explicit tempo changes a 120 BPM tempo event is put at tick 0 of
	the first track.
	"""

	if tempo_changes is None:
		tempo_changes = [TempoPoint(0, 500000)]
		tracks = [[tempo_event(0, 500000), *tracks[0]], *tracks[1:]]

	last_tick = max(event.tick for track in tracks for event in track)

	return midiplayer.recording.Recording(
		tracks = tracks,
		tempo_changes = tempo_changes,
		time_division = time_division,
		loop = loop or midiplayer.recording.LoopWindow(0, last_tick),
		name = "test"
	)


@pytest.fixture
def clock () -> FakeClock:

	return FakeClock()


@pytest.fixture
def timers () -> ManualTimerFactory:

	return ManualTimerFactory()


@pytest.fixture
def commands () -> CommandLog:

	return CommandLog()


@pytest.fixture
def make_sequencer (clock: FakeClock, timers: ManualTimerFactory, commands: CommandLog) -> typing.Callable[..., midiplayer.sequencer.Sequencer]:

	"""Factory building a sequencer wired to the fake clock, timers and command log."""

	def factory (recording: midiplayer.recording.Recording, **kwargs: typing.Any) -> midiplayer.sequencer.Sequencer:
		kwargs.setdefault("loop", False)
		return midiplayer.sequencer.Sequencer(recording, commands, timer_factory=timers, clock=clock, **kwargs)

	return factory
