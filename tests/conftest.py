import io
import sys
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
import soundfile as sf

from audio.buffers import SampleBuffer

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def encode_float_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Write ``(frames, channels)`` float samples to an in-memory 32-bit float WAV."""

    handle = io.BytesIO()
    sf.write(handle, np.asarray(samples, dtype=np.float32), sample_rate, format="WAV", subtype="FLOAT")
    return handle.getvalue()


@pytest.fixture()
def ramp_buffer() -> Callable[..., SampleBuffer]:
    def build(frames: int, *, sample_rate: int = 44_100, channels: int = 1, scale: float = 0.5) -> SampleBuffer:
        ramp = np.linspace(-scale, scale, frames, dtype=np.float32)
        data = np.stack([ramp * (index + 1) / channels for index in range(channels)], axis=1)
        return SampleBuffer.from_interleaved(data, sample_rate)

    return build


@pytest.fixture()
def wav_bytes() -> Callable[..., bytes]:
    def build(value: float, frames: int, *, sample_rate: int = 1_000, channels: int = 1) -> bytes:
        data = np.full((frames, channels), value, dtype=np.float32)
        return encode_float_wav(data, sample_rate)

    return build
