"""Offline (non real-time) render of the two-source hard-pan mix."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .buffers import RenderedMix, SampleBuffer
from .decoder import AudioDecoder, Decoder
from .engine import EngineConfig
from .mixer import PAN_LEFT, PAN_RIGHT, GainCell, MixGraph, MixSource
from .errors import RenderFailure

logger = logging.getLogger(__name__)


def frames_at_rate(buffer: SampleBuffer, sample_rate: int) -> int:
    """Return ``ceil(sample_rate * duration)`` for *buffer* using exact integers."""

    return -(-buffer.frame_count * int(sample_rate) // buffer.sample_rate)


class OfflineRenderer:
    """Compute every output frame of the mix as one finite buffer.

    Source A feeds the left output and source B the right output. No
    resampling is performed: a source whose native rate differs from the
    render rate is read sample-for-sample at the render rate and a warning
    is logged.
    """

    def __init__(self, config: EngineConfig | None = None, *, decoder: Decoder | None = None) -> None:
        self.config = config or EngineConfig()
        self._decoder = decoder or AudioDecoder()

    def render(
        self,
        source_a: SampleBuffer,
        gain_a: float,
        source_b: SampleBuffer,
        gain_b: float,
        sample_rate: Optional[int] = None,
    ) -> RenderedMix:
        rate = int(sample_rate or self.config.sample_rate or source_a.sample_rate)
        if rate <= 0:
            raise RenderFailure(f"Render sample rate must be positive; got {rate}")
        for label, source in (("left", source_a), ("right", source_b)):
            if source.sample_rate != rate:
                logger.warning(
                    "The %s source is %d Hz but the render runs at %d Hz; no resampling is applied",
                    label,
                    source.sample_rate,
                    rate,
                )

        graph = MixGraph()
        try:
            graph.add_source(MixSource("left", buffer=source_a, pan=PAN_LEFT, gain=GainCell(gain_a)))
            graph.add_source(MixSource("right", buffer=source_b, pan=PAN_RIGHT, gain=GainCell(gain_b)))
        except ValueError as exc:
            raise RenderFailure(str(exc)) from exc

        total_frames = max(frames_at_rate(source_a, rate), frames_at_rate(source_b, rate))
        if total_frames <= 0:
            raise RenderFailure("Both sources are empty; nothing to render")

        logger.info("Rendering %d frames at %d Hz", total_frames, rate)
        try:
            samples = graph.render(total_frames, block_size=self.config.block_size)
        except MemoryError as exc:
            raise RenderFailure(f"Not enough memory to render {total_frames} frames") from exc
        return RenderedMix(sample_rate=rate, samples=samples)

    def render_bytes(
        self,
        data_a: bytes,
        gain_a: float,
        data_b: bytes,
        gain_b: float,
        sample_rate: Optional[int] = None,
    ) -> RenderedMix:
        """Decode both sources and render them; :class:`DecodeError` propagates."""

        source_a = self._decoder.decode(data_a)
        source_b = self._decoder.decode(data_b)
        return self.render(source_a, gain_a, source_b, gain_b, sample_rate)

    async def render_bytes_async(
        self,
        data_a: bytes,
        gain_a: float,
        data_b: bytes,
        gain_b: float,
        sample_rate: Optional[int] = None,
    ) -> RenderedMix:
        """Decode both sources concurrently, then render in a worker thread."""

        source_a, source_b = await asyncio.gather(
            asyncio.to_thread(self._decoder.decode, data_a),
            asyncio.to_thread(self._decoder.decode, data_b),
        )
        return await asyncio.to_thread(self.render, source_a, gain_a, source_b, gain_b, sample_rate)


__all__ = ["OfflineRenderer", "frames_at_rate"]
