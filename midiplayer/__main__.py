import argparse
import asyncio
import logging
import os
import sys
import typing

import yaml

import midiplayer.midi_utils
import midiplayer.recording
import midiplayer.renderer_bridge
import midiplayer.sequencer


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	parser = argparse.ArgumentParser(prog="midiplayer", description="Play a MIDI file to a renderer")
	parser.add_argument("file", help="Standard MIDI file to play")
	parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
	parser.add_argument("--device", default=None, help="MIDI output device name")
	parser.add_argument("--websocket", type=int, default=None, metavar="PORT", help="Serve renderers over WebSocket on PORT instead of a MIDI port")
	parser.add_argument("--start", type=float, default=0.0, metavar="SECONDS", help="Start position")
	parser.add_argument("--rate", type=float, default=None, help="Playback rate multiplier")
	parser.add_argument("--loop", action=argparse.BooleanOptionalAction, default=None, help="Loop over the recording's loop window")

	return parser.parse_args(argv)


async def run (args: argparse.Namespace, config: dict) -> int:

	"""
	Play the file until it ends (or forever when looping).
	"""

	player_config = config.get('player', {})
	loop = args.loop if args.loop is not None else player_config.get('loop', False)
	rate = args.rate if args.rate is not None else player_config.get('playback_rate', 1.0)
	tick_interval = player_config.get('tick_interval', 0.005)

	if rate <= 0:
		logger.error("Playback rate must be positive")
		return 2

	recording = midiplayer.recording.load_midi_file(args.file)

	bridge: typing.Optional[midiplayer.renderer_bridge.RendererBridge] = None
	sink: typing.Optional[midiplayer.midi_utils.MidoPortSink] = None
	post: typing.Callable[[str], typing.Any]

	ws_port = args.websocket if args.websocket is not None else config.get('bridge', {}).get('port')

	if ws_port is not None:
		bridge = midiplayer.renderer_bridge.RendererBridge(port=ws_port)
		await bridge.start()
		post = bridge.post

	else:
		device = args.device or config.get('midi', {}).get('device_name')
		device_name, midi_out = midiplayer.midi_utils.select_output_device(device)

		if midi_out is None:
			return 1

		sink = midiplayer.midi_utils.MidoPortSink(midi_out)
		post = sink

	finished = asyncio.Event()

	sequencer = midiplayer.sequencer.Sequencer(
		recording,
		post,
		loop = loop,
		playback_rate = rate,
		tick_interval = tick_interval
	)

	sequencer.on_event("end", lambda seconds: finished.set())
	sequencer.on_event("text_event", lambda payload, meta_type: logger.info(payload.decode("latin-1")))

	if args.start > 0:
		sequencer.current_time = args.start
	else:
		sequencer.play()

	try:
		await finished.wait()
	finally:
		sequencer.stop()

		if sink is not None:
			sink.close()

		if bridge is not None:
			await bridge.stop()

	return 0


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point for the midiplayer command line.
	"""

	args = parse_args(argv)
	config = load_config(args.config)

	if not os.path.exists(args.file):
		logger.error(f"MIDI file {args.file} not found.")
		sys.exit(1)

	try:
		status = asyncio.run(run(args, config))
	except KeyboardInterrupt:
		logger.info("Stopping...")
		status = 0

	sys.exit(status)


if __name__ == "__main__":
	main()
