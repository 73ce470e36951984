import asyncio
import threading

import numpy as np
import pytest

from audio.decoder import AudioDecoder
from audio.engine import EngineConfig
from audio.errors import DecodeError, OutputUnavailable, SelectionIncomplete
from audio.renderer import OfflineRenderer
from playback.controller import PlaybackController, PlaybackState
from playback.output import ManualOutput

from conftest import encode_float_wav


class GatedDecoder(AudioDecoder):
    """Decoder that blocks until the test releases it."""

    def __init__(self) -> None:
        self.gate = threading.Event()

    def decode(self, data: bytes):
        assert self.gate.wait(timeout=5.0)
        return super().decode(data)


def _controller(**kwargs) -> tuple[PlaybackController, ManualOutput]:
    output = ManualOutput()
    config = EngineConfig(block_size=64, start_lead_seconds=0.1)
    controller = PlaybackController(output, config=config, **kwargs)
    return controller, output


async def _wait_for(predicate) -> None:
    for _ in range(200):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.mark.asyncio
async def test_play_walks_through_loading_into_playing(wav_bytes):
    controller, output = _controller()
    seen: list[PlaybackState] = []
    controller.add_state_listener(seen.append)

    session = await controller.play(wav_bytes(0.5, 300), wav_bytes(0.25, 200))

    assert session is not None
    assert controller.state == PlaybackState.PLAYING
    assert seen == [PlaybackState.LOADING, PlaybackState.PLAYING]
    assert session.start_deadline == pytest.approx(0.1)
    assert len(output.active_streams()) == 1
    assert output.streams[0].sample_rate == 1_000


@pytest.mark.asyncio
async def test_both_sources_begin_at_the_shared_deadline(wav_bytes):
    controller, output = _controller(gain_right=2.0)
    await controller.play(wav_bytes(0.5, 300), wav_bytes(0.25, 200))
    stream = output.streams[0]
    for _ in range(8):
        stream.advance()

    rendered = stream.rendered()
    left_start = int(np.flatnonzero(rendered[:, 0])[0])
    right_start = int(np.flatnonzero(rendered[:, 1])[0])
    assert left_start == right_start
    assert abs(left_start - 100) <= 1
    np.testing.assert_array_equal(rendered[left_start : left_start + 200, 0], np.full(200, 0.5, dtype=np.float32))
    np.testing.assert_array_equal(rendered[left_start : left_start + 200, 1], np.full(200, 0.5, dtype=np.float32))


@pytest.mark.asyncio
async def test_play_without_both_selections_is_rejected(wav_bytes):
    controller, output = _controller()
    with pytest.raises(SelectionIncomplete):
        await controller.play(wav_bytes(0.5, 10), None)
    with pytest.raises(SelectionIncomplete):
        await controller.play(b"", wav_bytes(0.5, 10))
    assert controller.state == PlaybackState.IDLE
    assert output.streams == []


@pytest.mark.asyncio
async def test_decode_failure_returns_to_idle(wav_bytes):
    controller, output = _controller()
    seen: list[PlaybackState] = []
    controller.add_state_listener(seen.append)

    with pytest.raises(DecodeError):
        await controller.play(wav_bytes(0.5, 10), b"not audio")

    assert controller.state == PlaybackState.IDLE
    assert controller.session is None
    assert seen == [PlaybackState.LOADING, PlaybackState.IDLE]
    assert output.streams == []


@pytest.mark.asyncio
async def test_second_play_tears_down_the_first_session(wav_bytes):
    controller, output = _controller()
    first = await controller.play(wav_bytes(0.5, 300), wav_bytes(0.25, 300))
    second = await controller.play(wav_bytes(0.1, 300), wav_bytes(0.2, 300))

    assert first is not None and second is not None
    assert first.state == PlaybackState.STOPPED
    assert first.scheduled.cancelled
    assert controller.session is second
    assert len(output.streams) == 2
    assert output.active_streams() == [output.streams[1]]


@pytest.mark.asyncio
async def test_concurrent_play_calls_leave_one_session(wav_bytes):
    controller, output = _controller()
    left, right = wav_bytes(0.5, 100), wav_bytes(0.25, 100)

    first, second = await asyncio.gather(controller.play(left, right), controller.play(left, right))

    assert first is None
    assert second is not None
    assert len(output.streams) == 1
    assert controller.state == PlaybackState.PLAYING


@pytest.mark.asyncio
async def test_stop_mid_load_discards_decode_results(wav_bytes):
    decoder = GatedDecoder()
    controller, output = _controller(decoder=decoder)

    task = asyncio.create_task(controller.play(wav_bytes(0.5, 10), wav_bytes(0.5, 10)))
    await _wait_for(lambda: controller.state == PlaybackState.LOADING)
    controller.stop()
    decoder.gate.set()

    assert await task is None
    assert controller.state == PlaybackState.IDLE
    assert output.streams == []


@pytest.mark.asyncio
async def test_stop_halts_playback_and_returns_to_idle(wav_bytes):
    controller, output = _controller()
    seen: list[PlaybackState] = []
    session = await controller.play(wav_bytes(0.5, 300), wav_bytes(0.25, 300))
    controller.add_state_listener(seen.append)

    controller.stop()

    assert seen == [PlaybackState.STOPPED, PlaybackState.IDLE]
    assert controller.session is None
    assert session.stream is None
    assert output.active_streams() == []


def test_stop_while_idle_is_a_no_op():
    controller, _ = _controller()
    seen: list[PlaybackState] = []
    controller.add_state_listener(seen.append)

    controller.stop()

    assert controller.state == PlaybackState.IDLE
    assert seen == []


@pytest.mark.asyncio
async def test_live_gain_changes_apply_without_restart(wav_bytes):
    controller, output = _controller()
    session = await controller.play(wav_bytes(0.5, 1_000), wav_bytes(0.25, 1_000))
    stream = output.streams[0]
    for _ in range(3):
        stream.advance()

    controller.set_gain_right(0.0)
    block = stream.advance()

    assert controller.session is session
    assert len(output.streams) == 1
    np.testing.assert_array_equal(block[:, 0], np.full(64, 0.5, dtype=np.float32))
    assert not np.any(block[:, 1])


def test_negative_gain_is_rejected():
    controller, _ = _controller()
    with pytest.raises(ValueError):
        controller.set_gain_left(-0.5)
    assert controller.gain_left.value == 1.0


@pytest.mark.asyncio
async def test_stop_mid_load_discards_decode_failures(wav_bytes):
    decoder = GatedDecoder()
    controller, output = _controller(decoder=decoder)
    seen: list[PlaybackState] = []
    controller.add_state_listener(seen.append)

    task = asyncio.create_task(controller.play(wav_bytes(0.5, 10), b"not audio"))
    await _wait_for(lambda: controller.state == PlaybackState.LOADING)
    controller.stop()
    decoder.gate.set()

    assert await task is None
    assert controller.state == PlaybackState.IDLE
    assert controller.session is None
    assert seen == [PlaybackState.LOADING, PlaybackState.STOPPED, PlaybackState.IDLE]
    assert output.streams == []


class BrokenOutput(ManualOutput):
    def open(self, **kwargs):
        raise RuntimeError("Error opening OutputStream: Device unavailable")


@pytest.mark.asyncio
async def test_output_open_failure_returns_to_idle(wav_bytes):
    controller = PlaybackController(BrokenOutput(), config=EngineConfig(block_size=64))
    seen: list[PlaybackState] = []
    controller.add_state_listener(seen.append)

    with pytest.raises(OutputUnavailable) as excinfo:
        await controller.play(wav_bytes(0.5, 10), wav_bytes(0.5, 10))

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert controller.state == PlaybackState.IDLE
    assert controller.session is None
    assert seen == [PlaybackState.LOADING, PlaybackState.IDLE]


@pytest.mark.asyncio
async def test_live_output_matches_offline_render():
    frames = np.arange(300, dtype=np.float32)
    left = np.stack([np.linspace(-0.9, 0.7, 300), np.sin(frames * 0.05) * 0.4], axis=1)
    right = np.cos(np.arange(220, dtype=np.float32) * 0.13)[:, None] * 0.6
    left_bytes = encode_float_wav(left, 1_000)
    right_bytes = encode_float_wav(right, 1_000)

    controller, output = _controller(gain_left=0.8, gain_right=1.5)
    await controller.play(left_bytes, right_bytes)
    stream = output.streams[0]
    while controller.session.scheduled.position < 300:
        stream.advance()
    live = stream.rendered()
    start = int(np.flatnonzero(live[:, 0])[0])

    decoder = AudioDecoder()
    offline = OfflineRenderer(EngineConfig(block_size=128)).render(
        decoder.decode(left_bytes), 0.8, decoder.decode(right_bytes), 1.5
    )

    assert offline.frame_count == 300
    assert not np.any(live[:start])
    np.testing.assert_array_equal(live[start : start + 300], offline.samples)
