"""MIDI protocol constants.

Status bytes carry the message type in the high nibble and the channel in the
low nibble.  Meta events (which only exist inside MIDI files) are identified
by their meta type byte, stored in place of a status byte on the timeline.
"""

MIDI_CHANNELS = 16

# Channel message types (high nibble of the status byte)

NOTE_OFF = 0x80
NOTE_ON = 0x90
CONTROLLER_CHANGE = 0xB0
PROGRAM_CHANGE = 0xC0
PITCH_BEND = 0xE0

# System messages

SYSTEM_EXCLUSIVE = 0xF0
SONG_POSITION = 0xF2
ACTIVE_SENSING = 0xFE

# Controllers used for silencing

ALL_SOUND_OFF = 0x78
ALL_NOTES_OFF = 0x7B

PITCH_BEND_CENTER = 8192

# Meta event types

META_TEXT = 0x01
META_COPYRIGHT = 0x02
META_TRACK_NAME = 0x03
META_INSTRUMENT_NAME = 0x04
META_LYRIC = 0x05
META_MARKER = 0x06
META_CUE_POINT = 0x07
META_CHANNEL_PREFIX = 0x20
META_MIDI_PORT = 0x21
META_END_OF_TRACK = 0x2F
META_SET_TEMPO = 0x51
META_TIME_SIGNATURE = 0x58
META_KEY_SIGNATURE = 0x59
META_SEQUENCER_SPECIFIC = 0x7F

TEXT_META_TYPES = frozenset({
	META_TEXT,
	META_COPYRIGHT,
	META_TRACK_NAME,
	META_INSTRUMENT_NAME,
	META_LYRIC,
	META_MARKER,
	META_CUE_POINT,
})

IGNORED_META_TYPES = frozenset({
	META_END_OF_TRACK,
	META_CHANNEL_PREFIX,
	META_TIME_SIGNATURE,
	SONG_POSITION,
	ACTIVE_SENSING,
	META_KEY_SIGNATURE,
	META_MIDI_PORT,
})

# Tempo

DEFAULT_BPM = 120
DEFAULT_MICROSECONDS_PER_QUARTER = 500000
