"""Two-source hard-pan mixer shared by live playback and offline renders.

Each source is folded to mono, scaled by its own gain, and written entirely
to one side of the stereo output. The left source sits at pan ``-1`` and the
right source at pan ``+1``; pan is not adjustable, only gain is. The two
contributions are summed without normalization or limiting, so the encoder's
clamp is the only place where overs are tamed.

:meth:`MixGraph.mix_block` is the single mixing law. Live playback pulls
blocks from it at the output device's pace and the offline renderer pulls
every block back to back, so both paths produce identical samples.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional

import numpy as np

from .buffers import SampleBuffer

PAN_LEFT = -1.0
PAN_RIGHT = 1.0

_PAN_TO_CHANNEL: Dict[float, int] = {PAN_LEFT: 0, PAN_RIGHT: 1}


def _validate_gain(value: float) -> float:
    gain = float(value)
    if math.isnan(gain) or gain < 0.0:
        raise ValueError(f"Gain must be a non-negative number; got {value!r}")
    return gain


def fold_to_mono(buffer: SampleBuffer) -> np.ndarray:
    """Average all channels with equal weight; mono sources pass through."""

    if buffer.channel_count == 1:
        return buffer.channels[0]
    stacked = np.stack(buffer.channels, axis=0)
    return stacked.mean(axis=0, dtype=np.float32)


class GainCell:
    """Mutable gain shared between a control surface and a live mix.

    Writes are single assignments and the mixer reads the value once per
    block, so the last write wins without any locking.
    """

    def __init__(self, value: float = 1.0) -> None:
        self._value = _validate_gain(value)

    @property
    def value(self) -> float:
        return self._value

    def set(self, value: float) -> None:
        self._value = _validate_gain(value)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"GainCell({self._value!r})"


class MixSource:
    """One decoded source with its gain cell and fixed hard-pan side."""

    def __init__(
        self,
        name: str,
        *,
        buffer: SampleBuffer,
        pan: float,
        gain: GainCell | None = None,
    ) -> None:
        if pan not in _PAN_TO_CHANNEL:
            raise ValueError(f"Pan is fixed at -1 or +1; got {pan!r}")
        self.name = name
        self._buffer = buffer
        self._pan = float(pan)
        self._gain = gain or GainCell()
        self._mono = fold_to_mono(buffer)

    @property
    def buffer(self) -> SampleBuffer:
        return self._buffer

    @property
    def pan(self) -> float:
        return self._pan

    @property
    def output_channel(self) -> int:
        return _PAN_TO_CHANNEL[self._pan]

    @property
    def gain(self) -> GainCell:
        return self._gain

    @property
    def mono(self) -> np.ndarray:
        return self._mono

    @property
    def frame_count(self) -> int:
        return int(self._mono.shape[0])

    def segment(self, start: int, frames: int) -> np.ndarray:
        """Return gain-scaled mono samples for ``[start, start + frames)``.

        The result may be shorter than *frames* (or empty) once the source
        runs out; callers treat the remainder as silence.
        """

        if start >= self.frame_count or frames <= 0:
            return np.zeros(0, dtype=np.float32)
        end = min(start + frames, self.frame_count)
        gain = np.float32(self._gain.value)
        return self._mono[start:end] * gain


def contribution(buffer: SampleBuffer, gain: float, pan: float) -> np.ndarray:
    """Return the full ``(frames, 2)`` contribution of a single source."""

    source = MixSource("solo", buffer=buffer, pan=pan, gain=GainCell(gain))
    graph = MixGraph()
    graph.add_source(source)
    return graph.mix_block(0, source.frame_count)


class MixGraph:
    """Sums at most one left-panned and one right-panned source."""

    def __init__(self) -> None:
        self._sources: Dict[float, MixSource] = {}

    def add_source(self, source: MixSource) -> None:
        if source.pan in self._sources:
            side = "left" if source.pan == PAN_LEFT else "right"
            raise ValueError(f"A {side} source is already registered")
        self._sources[source.pan] = source

    @property
    def sources(self) -> Mapping[float, MixSource]:  # pragma: no cover - trivial view
        return dict(self._sources)

    @property
    def left(self) -> Optional[MixSource]:
        return self._sources.get(PAN_LEFT)

    @property
    def right(self) -> Optional[MixSource]:
        return self._sources.get(PAN_RIGHT)

    @property
    def frame_count(self) -> int:
        """Frames needed to cover the longer source."""

        return max((source.frame_count for source in self._sources.values()), default=0)

    def mix_block(self, start: int, frames: int) -> np.ndarray:
        """Mix ``frames`` stereo frames beginning at source frame ``start``."""

        output = np.zeros((max(0, frames), 2), dtype=np.float32)
        for source in self._sources.values():
            segment = source.segment(start, frames)
            if segment.size:
                output[: segment.shape[0], source.output_channel] += segment
        return output

    def render(self, total_frames: int, *, block_size: int = 512) -> np.ndarray:
        """Mix ``total_frames`` frames from the start in ``block_size`` blocks."""

        output = np.zeros((total_frames, 2), dtype=np.float32)
        for frame_start in range(0, total_frames, block_size):
            block_frames = min(block_size, total_frames - frame_start)
            output[frame_start : frame_start + block_frames, :] = self.mix_block(
                frame_start, block_frames
            )
        return output

    def describe(self) -> List[Dict[str, object]]:
        """Return a serialisable summary of the registered sources."""

        return [
            {
                "name": source.name,
                "pan": source.pan,
                "gain": source.gain.value,
                "frames": source.frame_count,
                "channels": source.buffer.channel_count,
                "sample_rate": source.buffer.sample_rate,
            }
            for _, source in sorted(self._sources.items())
        ]


__all__ = [
    "GainCell",
    "MixGraph",
    "MixSource",
    "PAN_LEFT",
    "PAN_RIGHT",
    "contribution",
    "fold_to_mono",
]
