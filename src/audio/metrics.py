"""Level readings reported alongside renders and live playback."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict

import numpy as np


@dataclass
class MeterReading:
    """Represents a snapshot of signal level in decibels."""

    peak_db: float
    rms_db: float


def _linear_to_db(value: float) -> float:
    if value <= 0.0:
        return -float("inf")
    return 20.0 * math.log10(value)


def rms_per_channel(buffer: np.ndarray) -> np.ndarray:
    """Return root-mean-square level for each channel of a ``(frames, channels)`` buffer."""

    if buffer.ndim == 1:
        buffer = buffer[:, None]
    if buffer.size == 0:
        return np.zeros(buffer.shape[1], dtype=np.float32)
    squared = np.square(buffer, dtype=np.float32)
    return np.sqrt(np.mean(squared, axis=0), dtype=np.float32)


def peak_per_channel(buffer: np.ndarray) -> np.ndarray:
    if buffer.ndim == 1:
        buffer = buffer[:, None]
    if buffer.size == 0:
        return np.zeros(buffer.shape[1], dtype=np.float32)
    return np.max(np.abs(buffer), axis=0).astype(np.float32)


def channel_meters(buffer: np.ndarray) -> list[MeterReading]:
    """Return a :class:`MeterReading` for every channel."""

    peaks = peak_per_channel(buffer)
    rms = rms_per_channel(buffer)
    return [
        MeterReading(peak_db=_linear_to_db(float(peak)), rms_db=_linear_to_db(float(level)))
        for peak, level in zip(peaks, rms)
    ]


def clipped_sample_count(buffer: np.ndarray) -> int:
    """Count samples the encoder will clamp (magnitude above full scale)."""

    return int(np.count_nonzero(np.abs(buffer) > 1.0))


def summarize(buffer: np.ndarray) -> Dict[str, float]:
    """Return a flat, serialisable level summary for a stereo buffer."""

    meters = channel_meters(buffer)
    summary: Dict[str, float] = {"clipped_samples": float(clipped_sample_count(buffer))}
    for label, meter in zip(("left", "right"), meters):
        summary[f"{label}_peak_db"] = meter.peak_db
        summary[f"{label}_rms_db"] = meter.rms_db
    return summary


__all__ = [
    "MeterReading",
    "channel_meters",
    "clipped_sample_count",
    "peak_per_channel",
    "rms_per_channel",
    "summarize",
]
