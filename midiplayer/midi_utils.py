import logging
import typing

import mido

import midiplayer.commands

logger = logging.getLogger(__name__)


def _prompt_for_device(outputs: typing.List[str]) -> str:
    """Ask on the console which of several output ports should render playback."""
    print("\nAvailable MIDI output devices:\n")
    for i, name in enumerate(outputs, 1):
        print(f"  {i}. {name}")
    print()

    while True:
        try:
            choice = int(input(f"Render on which device (1-{len(outputs)}): "))
            if 1 <= choice <= len(outputs):
                return outputs[choice - 1]
        except (ValueError, EOFError):
            pass
        print(f"Enter a number between 1 and {len(outputs)}.")


def select_output_device(device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Open the MIDI output port that will render playback.

    An explicit `device_name` must match an available port exactly.  Without
    one, a single available port is used as-is and several ports prompt the
    user to pick (the choice is echoed as a `--device` hint for next time).

    Returns:
        A tuple of (device_name, midi_out_object) or (None, None) on failure.
    """
    try:
        outputs = mido.get_output_names()
        logger.debug(f"Renderer ports on this system: {outputs}")

        if not outputs:
            logger.error("No MIDI output port available to render on")
            return None, None

        if device_name is not None and device_name not in outputs:
            logger.error(f"Renderer port '{device_name}' is not connected (choose from {outputs})")
            return None, None

        if device_name is None and len(outputs) == 1:
            device_name = outputs[0]
            logger.info(f"Rendering on '{device_name}', the only output port")

        elif device_name is None:
            device_name = _prompt_for_device(outputs)
            print(f"\nTip: skip this prompt with --device \"{device_name}\"\n")

        midi_out = mido.open_output(device_name)
        logger.info(f"Renderer port '{device_name}' open")
        return device_name, midi_out

    except Exception as e:
        logger.error(f"Could not open renderer port '{device_name}': {e}")
        return None, None


class MidoPortSink:
    """
    Renderer channel that turns command strings back into MIDI on a mido port.

    Pass an instance as the sequencer's ``post`` function to drive a hardware
    synth or a software instrument directly.
    """

    def __init__(self, port: typing.Any) -> None:
        self.port = port

    def __call__(self, command: str) -> None:
        try:
            message = mido.Message.from_bytes(midiplayer.commands.decode_command(command))
        except ValueError:
            logger.warning(f"Dropping malformed command {command!r}")
            return

        try:
            self.port.send(message)
        except Exception:
            logger.exception(f"Renderer port rejected {message}")

    def close(self) -> None:
        self.port.close()
