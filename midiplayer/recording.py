"""Parsed recordings: the input the sequencer plays.

A :class:`Recording` is what a MIDI parser hands over: per-track event lists
with absolute ticks, the tempo changes, the time division and a default loop
window.  :func:`load_midi_file` builds one from a standard MIDI file using
mido; any other parser only has to produce the same structure.
"""

import dataclasses
import logging
import os
import typing

import mido

import midiplayer.constants

from midiplayer.tempo_map import TempoPoint
from midiplayer.timeline import TimedEvent


logger = logging.getLogger(__name__)


@dataclasses.dataclass (frozen=True)
class LoopWindow:

	"""Tick range playback wraps within when looping is enabled."""

	start: int
	end: int


@dataclasses.dataclass
class Recording:

	"""
	A parsed multi-track MIDI performance.

	Attributes:
		tracks: One list of events per track, ticks absolute from the start.
		tempo_changes: Tempo points sorted ascending by tick.
		time_division: Ticks per quarter note.
		loop: Default loop window in ticks.
		name: Display name.
	"""

	tracks: typing.List[typing.List[TimedEvent]]
	tempo_changes: typing.List[TempoPoint]
	time_division: int
	loop: LoopWindow
	name: str = ""


def _split_meta_bytes (raw: typing.Sequence[int]) -> typing.Tuple[int, bytes]:

	"""Split ``FF <type> <varlen length> <data>`` into meta type and payload."""

	meta_type = raw[1]
	index = 2

	# Skip the variable-length size; the payload is whatever follows it.
	while raw[index] & 0x80:
		index += 1

	return meta_type, bytes(raw[index + 1:])


def _convert_message (message: typing.Union[mido.Message, mido.MetaMessage], tick: int) -> TimedEvent:

	"""Turn one mido message into a timeline event at ``tick``."""

	if isinstance(message, mido.UnknownMetaMessage):
		return TimedEvent.meta_event(tick, message.type_byte, bytes(message.data))

	if message.is_meta:
		meta_type, payload = _split_meta_bytes(message.bytes())
		return TimedEvent.meta_event(tick, meta_type, payload)

	raw = message.bytes()
	status = raw[0]

	if status <= midiplayer.constants.SYSTEM_EXCLUSIVE:
		return TimedEvent.channel_event(tick, status, *raw[1:])

	# Other system messages are interpreted, not forwarded.
	return TimedEvent.meta_event(tick, status, bytes(raw[1:]))


def from_midi_file (midi_file: mido.MidiFile, name: typing.Optional[str] = None) -> Recording:

	"""
	Build a :class:`Recording` from a mido ``MidiFile``.

	Tempo changes from every track are collected into the tempo map (mido
	stores the tempo as microseconds per quarter note already).  The default
	loop window spans the whole recording.
	"""

	if midi_file.type == 2:
		raise ValueError("Asynchronous (type 2) MIDI files are not supported")

	tracks: typing.List[typing.List[TimedEvent]] = []
	tempo_changes: typing.List[TempoPoint] = []
	track_name: typing.Optional[str] = None
	last_tick = 0

	for track in midi_file.tracks:

		tick = 0
		events: typing.List[TimedEvent] = []

		for message in track:

			tick += message.time
			events.append(_convert_message(message, tick))

			if message.type == "set_tempo":
				tempo_changes.append(TempoPoint(tick, message.tempo))

			elif message.type == "track_name" and track_name is None and message.name:
				track_name = message.name

		if events:
			last_tick = max(last_tick, events[-1].tick)

		tracks.append(events)

	tempo_changes.sort(key=lambda point: point.tick)

	if name is None:
		if track_name:
			name = track_name
		elif midi_file.filename:
			name = os.path.splitext(os.path.basename(midi_file.filename))[0]
		else:
			name = ""

	logger.info(f"Loaded '{name}': {len(tracks)} tracks, {len(tempo_changes)} tempo changes, {midi_file.ticks_per_beat} ticks per beat")

	return Recording(
		tracks = tracks,
		tempo_changes = tempo_changes,
		time_division = midi_file.ticks_per_beat,
		loop = LoopWindow(start=0, end=last_tick),
		name = name
	)


def load_midi_file (path: str) -> Recording:

	"""Read and convert a standard MIDI file from disk."""

	return from_midi_file(mido.MidiFile(path))
