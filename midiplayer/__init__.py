"""
midiplayer - tempo-aware MIDI file playback for external renderers.

A :class:`Sequencer` takes a parsed recording (tracks of tick-stamped MIDI
events plus a tempo map) and plays it in real time, posting each message as
a text command to a renderer: a hardware synth behind a MIDI port, or any
process listening on a WebSocket.  It generates no audio itself.

What it does:

- **Tempo-aware timing.** Ticks become seconds through the recording's tempo
  map; tempo changes mid-song are followed exactly.
- **Seeking without glitches.** Jumping to any time or tick silently replays
  controllers, pitch bends and program changes up to that point, so the
  renderer sounds right at the new position without re-striking old notes.
- **Pause and resume.** Notes held at the moment of pausing are struck again
  on resume.
- **Rate and looping.** Variable playback rate, and an optional loop window
  in ticks.
- **Listeners.** Text, lyric and marker events, position changes, loop wraps
  and the end of playback are all observable with ``on_event()``.

Minimal example:

    ```python
    import asyncio
    import midiplayer

    async def main ():
        recording = midiplayer.load_midi_file("song.mid")
        bridge = midiplayer.RendererBridge(port=8765)
        await bridge.start()

        sequencer = midiplayer.Sequencer(recording, bridge.post, loop=False)
        done = asyncio.Event()
        sequencer.on_event("end", lambda seconds: done.set())
        sequencer.play()
        await done.wait()

    asyncio.run(main())
    ```

Package-level exports: ``Sequencer``, ``Recording``, ``LoopWindow``,
``TimedEvent``, ``TempoPoint``, ``load_midi_file``, ``RendererBridge``.
"""

import midiplayer.recording
import midiplayer.renderer_bridge
import midiplayer.sequencer
import midiplayer.tempo_map
import midiplayer.timeline


Sequencer = midiplayer.sequencer.Sequencer
Recording = midiplayer.recording.Recording
LoopWindow = midiplayer.recording.LoopWindow
TimedEvent = midiplayer.timeline.TimedEvent
TempoPoint = midiplayer.tempo_map.TempoPoint
load_midi_file = midiplayer.recording.load_midi_file
RendererBridge = midiplayer.renderer_bridge.RendererBridge
