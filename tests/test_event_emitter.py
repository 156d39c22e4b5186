import asyncio
import logging

import pytest

import midiplayer.event_emitter


def test_on_and_emit () -> None:

	"""Registered callbacks are called on emit."""

	emitter = midiplayer.event_emitter.EventEmitter()
	received: list[int] = []

	emitter.on("tick", lambda v: received.append(v))
	emitter.emit("tick", 42)

	assert received == [42]


def test_off_only_removes_target_callback () -> None:

	"""off() leaves other callbacks for the same event intact."""

	emitter = midiplayer.event_emitter.EventEmitter()
	a: list[int] = []
	b: list[int] = []

	def cb_a (v: int) -> None:
		a.append(v)

	def cb_b (v: int) -> None:
		b.append(v)

	emitter.on("tick", cb_a)
	emitter.on("tick", cb_b)
	emitter.off("tick", cb_a)
	emitter.emit("tick", 7)

	assert a == []
	assert b == [7]


def test_off_raises_for_unregistered_callback () -> None:

	"""off() raises ValueError when the callback was never registered."""

	emitter = midiplayer.event_emitter.EventEmitter()

	with pytest.raises(ValueError, match="tick"):
		emitter.off("tick", lambda: None)


def test_known_event_names_are_enforced () -> None:

	"""A restricted emitter rejects unknown names on both on() and emit()."""

	emitter = midiplayer.event_emitter.EventEmitter(["time_change"])

	with pytest.raises(ValueError, match="text_evnt"):
		emitter.on("text_evnt", lambda: None)

	with pytest.raises(ValueError):
		emitter.emit("loop")


def test_listener_may_remove_itself_during_emit () -> None:

	emitter = midiplayer.event_emitter.EventEmitter()
	calls: list[str] = []

	def once () -> None:
		calls.append("once")
		emitter.off("tick", once)

	emitter.on("tick", once)
	emitter.emit("tick")
	emitter.emit("tick")

	assert calls == ["once"]
	assert emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_async_listener_is_scheduled (caplog: pytest.LogCaptureFixture) -> None:

	"""Coroutine listeners run as tasks on the running loop; failures are logged."""

	emitter = midiplayer.event_emitter.EventEmitter()
	received: list[float] = []

	async def on_time (seconds: float) -> None:
		received.append(seconds)

	async def broken (seconds: float) -> None:
		raise RuntimeError("listener failed")

	emitter.on("time_change", on_time)
	emitter.on("time_change", broken)

	with caplog.at_level(logging.ERROR, logger="midiplayer.event_emitter"):
		emitter.emit("time_change", 1.5)

		assert received == []

		for _ in range(3):
			await asyncio.sleep(0)

	assert received == [1.5]
	assert emitter._tasks == set()
	assert any(record.getMessage() == "Async event listener failed" and record.exc_info is not None for record in caplog.records)
