import numpy as np
import pytest

from playback.output import ManualOutput


def test_manual_stream_advances_clock_and_records_blocks():
    calls = []

    def callback(frames, block_time):
        calls.append((frames, block_time))
        return np.full((frames, 2), 0.1, dtype=np.float32)

    output = ManualOutput()
    stream = output.open(sample_rate=1_000, channels=2, block_size=10, callback=callback)
    stream.advance()
    stream.advance(5)

    assert calls == [(10, 0.0), (5, pytest.approx(0.01))]
    assert stream.time == pytest.approx(0.015)
    assert stream.rendered().shape == (15, 2)
    assert output.active_streams() == [stream]


def test_closed_manual_stream_refuses_to_advance():
    output = ManualOutput()
    stream = output.open(
        sample_rate=1_000,
        channels=2,
        block_size=4,
        callback=lambda frames, _time: np.zeros((frames, 2), dtype=np.float32),
    )
    stream.close()
    assert not stream.active
    assert output.active_streams() == []
    with pytest.raises(RuntimeError):
        stream.advance()
