"""Immutable sample containers passed between decode, mix, and encode stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np


def _frozen(array: np.ndarray) -> np.ndarray:
    frozen = np.array(array, dtype=np.float32, copy=True)
    frozen.setflags(write=False)
    return frozen


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Decoded PCM audio stored channel-first as float32 arrays.

    Every channel shares the same frame count. The arrays are copied on
    construction and marked read-only so downstream stages can only read them.
    """

    sample_rate: int
    channels: Tuple[np.ndarray, ...]

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise ValueError("sample_rate must be a positive integer")
        if not self.channels:
            raise ValueError("SampleBuffer requires at least one channel")
        frozen = tuple(_frozen(np.ravel(channel)) for channel in self.channels)
        lengths = {channel.shape[0] for channel in frozen}
        if len(lengths) != 1:
            raise ValueError(f"All channels must share one frame count; got {sorted(lengths)}")
        object.__setattr__(self, "sample_rate", int(self.sample_rate))
        object.__setattr__(self, "channels", frozen)

    @classmethod
    def from_interleaved(cls, frames: np.ndarray, sample_rate: int) -> "SampleBuffer":
        """Build a buffer from a ``(frames, channels)`` array such as soundfile returns."""

        data = np.asarray(frames, dtype=np.float32)
        if data.ndim == 1:
            data = data[:, None]
        if data.ndim != 2:
            raise ValueError("Interleaved audio must be a 1-D or 2-D array")
        return cls(sample_rate=sample_rate, channels=tuple(data.T))

    @classmethod
    def from_channels(cls, channels: Sequence[Sequence[float]], sample_rate: int) -> "SampleBuffer":
        return cls(
            sample_rate=sample_rate,
            channels=tuple(np.asarray(channel, dtype=np.float32) for channel in channels),
        )

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return int(self.channels[0].shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)


@dataclass(frozen=True, eq=False)
class RenderedMix:
    """Finite stereo render covering the union duration of both sources."""

    sample_rate: int
    samples: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise ValueError("sample_rate must be a positive integer")
        samples = _frozen(self.samples)
        if samples.ndim != 2 or samples.shape[1] != 2:
            raise ValueError(f"RenderedMix expects (frames, 2) samples; got {samples.shape}")
        object.__setattr__(self, "sample_rate", int(self.sample_rate))
        object.__setattr__(self, "samples", samples)

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def channel_count(self) -> int:
        return 2

    @property
    def left(self) -> np.ndarray:
        return self.samples[:, 0]

    @property
    def right(self) -> np.ndarray:
        return self.samples[:, 1]

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)


__all__ = ["RenderedMix", "SampleBuffer"]
