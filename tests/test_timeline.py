import midiplayer.constants
import midiplayer.timeline

from midiplayer.timeline import EventKind, TimedEvent


def test_merge_orders_by_tick () -> None:

	track_a = [TimedEvent.channel_event(0, 0x90, 60, 100), TimedEvent.channel_event(200, 0x80, 60, 0)]
	track_b = [TimedEvent.channel_event(100, 0x91, 64, 90)]

	timeline = midiplayer.timeline.build_timeline([track_a, track_b])

	assert [event.tick for event in timeline] == [0, 100, 200]


def test_equal_ticks_keep_merge_order () -> None:

	"""Ties are broken by track order, then by order within the track."""

	first = TimedEvent.channel_event(10, 0xC0, 5)
	second = TimedEvent.channel_event(10, 0x90, 60, 100)
	third = TimedEvent.channel_event(10, 0xB1, 7, 100)

	timeline = midiplayer.timeline.build_timeline([[first, second], [third]])

	assert list(timeline) == [first, second, third]


def test_timeline_is_immutable_tuple () -> None:

	timeline = midiplayer.timeline.build_timeline([[TimedEvent.channel_event(0, 0x90, 60, 1)]])

	assert isinstance(timeline, tuple)


def test_channel_event_properties () -> None:

	event = TimedEvent.channel_event(5, 0xE3, 0x00, 0x40)

	assert event.kind is EventKind.CHANNEL
	assert event.channel == 3
	assert event.message_type == midiplayer.constants.PITCH_BEND
	assert event.message_bytes == [0xE3, 0x00, 0x40]
	assert not event.is_note_event


def test_meta_event_has_no_channel () -> None:

	event = TimedEvent.meta_event(0, midiplayer.constants.META_LYRIC, b"la")

	assert event.kind is EventKind.META
	assert event.channel is None
	assert not event.is_note_event


def test_sysex_is_forwarded_but_has_no_channel () -> None:

	event = TimedEvent.channel_event(0, midiplayer.constants.SYSTEM_EXCLUSIVE, 0x7E, 0x7F, 0xF7)

	assert event.is_channel_event
	assert event.channel is None


def test_note_event_detection () -> None:

	assert TimedEvent.channel_event(0, 0x95, 60, 100).is_note_event
	assert TimedEvent.channel_event(0, 0x85, 60, 0).is_note_event
	assert not TimedEvent.channel_event(0, 0xB5, 7, 100).is_note_event
