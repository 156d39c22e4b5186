import pytest

import midiplayer.commands


def test_encode_uses_unpadded_lowercase_hex () -> None:

	assert midiplayer.commands.encode_command([0x90, 0x3C, 0x64]) == "midi,90,3c,64"
	assert midiplayer.commands.encode_command([0xC1, 0x05]) == "midi,c1,5"


def test_decode_reverses_encode () -> None:

	assert midiplayer.commands.decode_command("midi,e0,0,40") == [0xE0, 0x00, 0x40]


def test_decode_rejects_other_tags () -> None:

	with pytest.raises(ValueError, match="midi"):
		midiplayer.commands.decode_command("osc,90,3c")


def test_decode_rejects_empty_command () -> None:

	with pytest.raises(ValueError):
		midiplayer.commands.decode_command("midi")


def test_emitter_posts_encoded_messages () -> None:

	posted: list[str] = []
	emitter = midiplayer.commands.CommandEmitter(posted.append)

	emitter.send([0x80, 60, 0])

	assert posted == ["midi,80,3c,0"]


def test_silence_all_covers_every_channel () -> None:

	"""All sound off (0x78) and all notes off (0x7B) go to each of the 16 channels."""

	posted: list[str] = []
	emitter = midiplayer.commands.CommandEmitter(posted.append)

	emitter.silence_all()

	messages = [midiplayer.commands.decode_command(command) for command in posted]

	assert len(messages) == 32
	assert {message[0] for message in messages} == {0xB0 | channel for channel in range(16)}
	assert sorted({message[1] for message in messages}) == [0x78, 0x7B]
	assert all(message[2] == 0 for message in messages)
