"""Deadline-scheduled pull source feeding the live output stream."""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from audio.mixer import MixGraph

logger = logging.getLogger(__name__)


class ScheduledMix:
    """Streams a :class:`MixGraph` starting at a shared output-clock deadline.

    Both sources advance from the same frame counter, so once the deadline is
    reached they start in the same output frame. Until :meth:`schedule` is
    called, and again after :meth:`cancel`, the mix renders silence.
    """

    def __init__(self, graph: MixGraph, *, sample_rate: int) -> None:
        if sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        self._graph = graph
        self._sample_rate = int(sample_rate)
        self._start_time: Optional[float] = None
        self._position = 0
        self._cancelled = False

    @property
    def graph(self) -> MixGraph:
        return self._graph

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def position(self) -> int:
        """Source frames already sent to the output."""

        return self._position

    @property
    def started(self) -> bool:
        return self._position > 0

    @property
    def finished(self) -> bool:
        return self._position >= self._graph.frame_count

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def schedule(self, start_time: float) -> None:
        if self._start_time is not None:
            raise RuntimeError("ScheduledMix already has a start deadline")
        logger.debug("Scheduling synchronized start at t=%.4f", start_time)
        self._start_time = float(start_time)

    def cancel(self) -> None:
        self._cancelled = True

    def fill(self, frames: int, block_time: float) -> np.ndarray:
        """Return the ``(frames, 2)`` block whose first frame plays at *block_time*."""

        output = np.zeros((frames, 2), dtype=np.float32)
        if self._cancelled or self._start_time is None or frames <= 0:
            return output
        if self._position == 0:
            lead = int(math.ceil((self._start_time - block_time) * self._sample_rate - 1e-9))
            lead = max(0, lead)
            if lead >= frames:
                return output
        else:
            lead = 0
        mixed = self._graph.mix_block(self._position, frames - lead)
        output[lead:, :] = mixed
        self._position += frames - lead
        return output


__all__ = ["ScheduledMix"]
