import logging
import time
import typing

import midiplayer.channel_state
import midiplayer.clock
import midiplayer.commands
import midiplayer.constants
import midiplayer.event_emitter
import midiplayer.recording
import midiplayer.sounding_notes
import midiplayer.tempo_map
import midiplayer.timeline
import midiplayer.timers


logger = logging.getLogger(__name__)


EVENT_NAMES = ("text_event", "time_change", "loop", "end")


def format_time (seconds: float) -> str:

	"""Format seconds as ``m:ss`` for log messages."""

	total = int(round(seconds))

	return f"{total // 60}:{total % 60:02d}"


class Sequencer:

	"""
	Plays a parsed recording by posting its MIDI messages to a renderer.

	Virtual time comes from a :class:`~midiplayer.clock.PlaybackClock`.  A
	host timer calls :meth:`_process_tick` on a fixed cadence; each call
	releases every event whose time has been reached, in timeline order.
	Seeking replays the timeline silently from the start (fast-forward) so
	the renderer ends up in the same controller, pitch bend and program
	state a listener at that position would hear.

	Events emitted on ``sequencer.events`` (see :meth:`on_event`):

	- ``text_event(payload: bytes, meta_type: int)`` for text-class meta events.
	- ``time_change(seconds: float)`` whenever the position is set.
	- ``loop(start_tick: int)`` when playback wraps to the loop start.
	- ``end(seconds: float)`` when playback pauses at the end of the recording.
	"""

	def __init__ (
		self,
		recording: midiplayer.recording.Recording,
		post: midiplayer.commands.PostFunction,
		loop: bool = True,
		playback_rate: float = 1.0,
		tick_interval: float = 0.005,
		timer_factory: typing.Optional[midiplayer.timers.TimerFactory] = None,
		clock: midiplayer.clock.WallClock = time.perf_counter
	) -> None:

		"""Create a sequencer for ``recording``, initially paused at 0.

		Parameters:
			recording: The parsed recording to play.
			post: Receives every outbound command string.
			loop: Wrap to the loop start instead of pausing at the end.
			playback_rate: Speed multiplier (must be greater than zero).
			tick_interval: Seconds between dispatch cycles for the default
				asyncio timer.  Ignored when ``timer_factory`` is given.
			timer_factory: Builds the periodic timer driving dispatch.  A fresh
				timer is created every time playback starts.
			clock: Monotonic wall clock in seconds.
		"""

		self.emitter = midiplayer.commands.CommandEmitter(post)
		self.events = midiplayer.event_emitter.EventEmitter(EVENT_NAMES)
		self.loop = loop

		self._clock = midiplayer.clock.PlaybackClock(playback_rate=playback_rate, clock=clock)
		self._timer_factory = timer_factory or midiplayer.timers.asyncio_timer_factory(tick_interval)
		self._timer: typing.Optional[midiplayer.timers.PeriodicTimer] = None
		self._sounding_notes = midiplayer.sounding_notes.SoundingNotes()

		self._load(recording)


	def _load (self, recording: midiplayer.recording.Recording) -> None:

		"""Build the timeline and tempo map and rewind to the start."""

		if not recording.tracks:
			raise ValueError("No tracks supplied")

		events = midiplayer.timeline.build_timeline(recording.tracks)

		if not events:
			raise ValueError("Recording contains no events")

		self.recording = recording
		self._events = events
		self._tempo_map = midiplayer.tempo_map.TempoMap(recording.tempo_changes, recording.time_division)
		self._duration = self._tempo_map.ticks_to_seconds(events[-1].tick)

		self.loop_start_tick = recording.loop.start
		self.loop_end_tick = recording.loop.end

		self._rewind()
		self._clock.pause(at=0.0)

		logger.info(f"Loaded '{recording.name}': {len(events)} events, total time {format_time(self._duration)}")


	def start_new_sequence (self, recording: midiplayer.recording.Recording) -> None:

		"""
		Replace the current recording, silencing whatever was playing.

		The sequencer is left paused at 0; call :meth:`play` to start.
		"""

		self._stop_dispatch()
		self._sounding_notes.clear()
		self._load(recording)


	# Properties

	@property
	def duration (self) -> float:

		"""Time of the last event, in seconds."""

		return self._duration


	@property
	def playback_rate (self) -> float:
		return self._clock.playback_rate


	@playback_rate.setter
	def playback_rate (self, rate: float) -> None:
		self._clock.playback_rate = rate


	@property
	def paused (self) -> bool:
		return self._clock.paused


	@property
	def running (self) -> bool:
		return self._timer is not None


	@property
	def sounding_notes (self) -> typing.FrozenSet[midiplayer.sounding_notes.SoundingNote]:
		return self._sounding_notes.snapshot()


	@property
	def current_time (self) -> float:

		"""Playback position in seconds."""

		return self._clock.current_time


	@current_time.setter
	def current_time (self, seconds: float) -> None:

		"""
		Seek to ``seconds`` and keep playing from there.

		Values outside ``[0, duration]`` (and NaN) snap to 0.
		"""

		if not 0 <= seconds <= self._duration:
			seconds = 0.0

		self._stop_dispatch()
		self._sounding_notes.clear()
		self._play_to(seconds=seconds)
		self._clock.seek(seconds)
		self._start_dispatch()

		self.events.emit("time_change", seconds)


	def set_time_ticks (self, tick: int) -> None:

		"""
		Seek to an exact tick and keep playing from there.

		The timeline is fast-forwarded up to (not including) the first event
		at or after ``tick``.
		"""

		tick = max(0, tick)

		self._stop_dispatch()
		self._sounding_notes.clear()
		self._play_to(tick=tick)
		self._clock.seek(min(self._tempo_map.ticks_to_seconds(tick), self._duration))
		self._start_dispatch()

		self.events.emit("time_change", self.current_time)


	def ticks_to_seconds (self, tick: int) -> float:
		return self._tempo_map.ticks_to_seconds(tick)


	def on_event (self, event_name: str, callback: midiplayer.event_emitter.CallbackType) -> midiplayer.event_emitter.CallbackType:

		"""
		Register a listener for one of the sequencer's events.
		"""

		return self.events.on(event_name, callback)


	def off_event (self, event_name: str, callback: midiplayer.event_emitter.CallbackType) -> None:

		"""
		Remove a listener added with :meth:`on_event`.
		"""

		self.events.off(event_name, callback)


	# Transport

	def play (self, reset_time: bool = False) -> None:

		"""
		Start or resume playback.

		Parameters:
			reset_time: Restart from 0 instead of resuming.

		A finished recording (position at or past the end) restarts from 0.
		Notes that were sounding when playback paused are struck again.
		"""

		if reset_time or self.current_time >= self._duration:
			self.current_time = 0
			return

		if self.running:
			logger.debug("Already playing")
			return

		self._clock.resume()
		self._start_dispatch()

		logger.info(f"Playing from {format_time(self.current_time)}")


	def pause (self) -> None:

		"""
		Pause playback, keeping track of the notes that were sounding.
		"""

		if self.paused:
			logger.warning("Already paused")
			return

		self._pause()

		logger.info(f"Paused at {format_time(self.current_time)}")


	def stop (self) -> None:

		"""
		Stop playback, silence the renderer and rewind to the start.

		There is no separate stopped state: afterwards the sequencer is paused
		at 0, so ``paused`` reads True and :meth:`play` starts from the top.
		"""

		self._stop_dispatch()
		self._sounding_notes.clear()
		self._rewind()
		self._clock.pause(at=0.0)

		logger.info("Stopped")


	def _pause (self, at: typing.Optional[float] = None) -> None:

		self._clock.pause(at)
		self._stop_dispatch()


	def _stop_dispatch (self) -> None:

		"""Cancel the dispatch timer and silence every channel."""

		if self._timer is not None:
			self._timer.cancel()
			self._timer = None

		self.emitter.silence_all()


	def _start_dispatch (self) -> None:

		"""Restore sounding notes and start a fresh dispatch timer."""

		for note in self._sounding_notes:
			self.emitter.send([midiplayer.constants.NOTE_ON | note.channel, note.key, note.velocity])

		self._timer = self._timer_factory(self._process_tick)
		self._timer.start()


	# Position bookkeeping

	def _rewind (self) -> None:

		self._event_index = 0
		self._played_time = 0.0
		self._seconds_per_tick = self._tempo_map.initial_seconds_per_tick()


	def _advance (self) -> None:

		"""Move past the current event, adding the time up to the next one."""

		event = self._events[self._event_index]
		self._event_index += 1

		if self._event_index < len(self._events):
			self._played_time += self._seconds_per_tick * (self._events[self._event_index].tick - event.tick)


	# Dispatch

	def _process_tick (self) -> None:

		"""
		Release every event that is due, then return.

		Called by the host timer.  No due event is ever skipped, however
		coarse the timer is: the loop runs until the next event lies in the
		future.

		If a cycle raises, playback is paused before the exception reaches
		the timer, so a later :meth:`play` resumes from the same position.
		"""

		try:
			self._dispatch_due_events()
		except Exception:
			# Never report running once the timer has given up.
			logger.warning(f"Dispatch failed at {format_time(self.current_time)} - pausing")
			self._pause()
			raise


	def _dispatch_due_events (self) -> None:

		if self._event_index >= len(self._events):
			self._end_of_sequence()
			return

		while self._played_time <= self.current_time:

			event = self._events[self._event_index]
			self._process_event(event)
			self._advance()

			reached_end = self._event_index >= len(self._events)

			if self.loop and (reached_end or event.tick >= self.loop_end_tick):
				self._wrap_loop()
				return

			if reached_end:
				self._finish()
				return


	def _end_of_sequence (self) -> None:

		if self.loop:
			self._wrap_loop()
		else:
			self._finish()


	def _wrap_loop (self) -> None:

		logger.debug(f"Looping to tick {self.loop_start_tick}")

		self.set_time_ticks(self.loop_start_tick)
		self.events.emit("loop", self.loop_start_tick)


	def _finish (self) -> None:

		self._pause(at=self._duration)

		logger.info("Sequence complete")

		self.events.emit("end", self._duration)


	def _process_event (self, event: midiplayer.timeline.TimedEvent) -> None:

		"""
		Forward a channel event to the renderer or interpret a meta event.
		"""

		if event.is_channel_event:

			self.emitter.send(event.message_bytes)

			if event.is_note_event:
				self._track_note(event)

			return

		meta_type = event.status

		if meta_type == midiplayer.constants.META_SET_TEMPO:
			microseconds = int.from_bytes(event.data[:3], "big")
			self._seconds_per_tick = midiplayer.tempo_map.seconds_per_tick(microseconds, self._tempo_map.time_division)

		elif meta_type in midiplayer.constants.IGNORED_META_TYPES:
			pass

		elif meta_type in midiplayer.constants.TEXT_META_TYPES:
			self.events.emit("text_event", event.data, meta_type)

		else:
			logger.info(f"Unrecognized event: meta type 0x{meta_type:02x} at tick {event.tick}")


	def _track_note (self, event: midiplayer.timeline.TimedEvent) -> None:

		channel = typing.cast(int, event.channel)
		key = event.data[0]

		if event.message_type == midiplayer.constants.NOTE_ON:
			self._sounding_notes.note_on(channel, key, event.data[1])
		else:
			self._sounding_notes.note_off(channel, key)


	# Fast-forward

	def _play_to (self, seconds: typing.Optional[float] = None, tick: typing.Optional[int] = None) -> None:

		"""
		Silently replay the timeline from the start up to a target position.

		Exactly one of ``seconds`` or ``tick`` is the target.  Notes are
		skipped, pitch bends and program changes are collapsed to their last
		value per channel, and every other event is processed as in normal
		playback so tempo changes, controllers and text events still apply.
		The collapsed values are sent at the end: one pitch bend and one
		program change for each of the 16 channels.
		"""

		if (seconds is None) == (tick is None):
			raise ValueError("Fast-forward needs exactly one of seconds or tick")

		self._rewind()
		self.emitter.silence_all()

		latches = midiplayer.channel_state.ChannelLatches()

		while self._event_index < len(self._events):

			event = self._events[self._event_index]

			if tick is not None:
				if event.tick >= tick:
					break
			elif self._played_time >= typing.cast(float, seconds):
				break

			channel = event.channel

			if event.is_note_event:
				pass

			elif channel is not None and event.message_type == midiplayer.constants.PITCH_BEND:
				latches.set_pitch_bend(channel, event.data[0], event.data[1])

			elif channel is not None and event.message_type == midiplayer.constants.PROGRAM_CHANGE:
				latches.set_program(channel, event.data[0])

			else:
				self._process_event(event)

			self._advance()

		for message in latches.restore_messages():
			self.emitter.send(message)
