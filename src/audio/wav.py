"""Canonical 16-bit PCM WAV serialization for rendered mixes.

The encoder always emits the 44-byte RIFF/WAVE header followed by a single
``data`` chunk of interleaved little-endian ``int16`` frames (left, right).
No ``LIST`` or other metadata chunks are written, so identical mixes always
produce identical bytes.
"""
from __future__ import annotations

from dataclasses import dataclass
import struct

import numpy as np

from .buffers import RenderedMix

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
PCM_FORMAT = 1

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True)
class WavHeader:
    """Decoded view of the canonical header fields."""

    chunk_size: int
    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def frame_count(self) -> int:
        return self.data_size // self.block_align


def quantize(samples: np.ndarray) -> np.ndarray:
    """Map float samples to ``int16`` with asymmetric full-range scaling.

    Samples are clamped to ``[-1, 1]``; negatives scale by ``32768`` and the
    rest by ``32767``, rounding half up. NaN maps to ``0``.
    """

    values = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    clamped = np.clip(values, -1.0, 1.0)
    scaled = np.where(clamped < 0.0, clamped * 32768.0, clamped * 32767.0)
    return np.floor(scaled + 0.5).astype("<i2")


class WavEncoder:
    """Serialize a :class:`RenderedMix` into a self-contained WAV file."""

    def encode(self, mix: RenderedMix) -> bytes:
        num_channels = mix.channel_count
        block_align = num_channels * (BITS_PER_SAMPLE // 8)
        data_size = mix.frame_count * block_align
        header = _HEADER.pack(
            b"RIFF",
            HEADER_SIZE - 8 + data_size,
            b"WAVE",
            b"fmt ",
            16,
            PCM_FORMAT,
            num_channels,
            mix.sample_rate,
            mix.sample_rate * block_align,
            block_align,
            BITS_PER_SAMPLE,
            b"data",
            data_size,
        )
        # Row-major (frames, 2) order is already left/right interleaved.
        payload = quantize(mix.samples).tobytes(order="C")
        return header + payload


def parse_header(data: bytes) -> WavHeader:
    """Read back the canonical header written by :class:`WavEncoder`."""

    if len(data) < HEADER_SIZE:
        raise ValueError("WAV data is shorter than the canonical 44-byte header")
    (
        riff,
        chunk_size,
        wave,
        fmt,
        fmt_size,
        audio_format,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data)
    if (riff, wave, fmt, data_id) != (b"RIFF", b"WAVE", b"fmt ", b"data") or fmt_size != 16:
        raise ValueError("Not a canonical PCM WAV header")
    return WavHeader(
        chunk_size=chunk_size,
        audio_format=audio_format,
        num_channels=num_channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
    )


__all__ = ["HEADER_SIZE", "WavEncoder", "WavHeader", "parse_header", "quantize"]
