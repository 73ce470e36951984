"""High-level helper that renders the mix and offers it as a WAV download."""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from audio.buffers import RenderedMix, SampleBuffer
from audio.decoder import AudioDecoder, Decoder
from audio.engine import EngineConfig
from audio.errors import RenderFailure, SelectionIncomplete
from audio.metrics import summarize
from audio.renderer import OfflineRenderer
from audio.wav import WavEncoder

from .models import MixSpec, SourceSelection

logger = logging.getLogger(__name__)

FileOffer = Callable[[str, bytes], object]


class DirectoryFileOffer:
    """Offer downloads by writing them into a directory.

    Files are written to a temporary sibling first and renamed into place, so
    a failed write never leaves a partial WAV behind.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    def __call__(self, filename: str, data: bytes) -> Path:
        self.base_path.mkdir(parents=True, exist_ok=True)
        destination = self.base_path / filename
        staging = destination.with_name(f".{destination.name}.part")
        try:
            staging.write_bytes(data)
            os.replace(staging, destination)
        finally:
            if staging.exists():
                staging.unlink()
        return destination


@dataclass(frozen=True)
class MixExportResult:
    """Summary of an export useful for status lines or tooling."""

    filename: str
    byte_length: int
    frame_count: int
    sample_rate: int
    offered: object = None
    levels: Dict[str, float] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)


class MixExportService:
    """Decode, render, encode, and offer the mix in one step."""

    def __init__(
        self,
        offer: FileOffer,
        *,
        config: EngineConfig | None = None,
        decoder: Decoder | None = None,
        encoder: WavEncoder | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._offer = offer
        self._decoder = decoder or AudioDecoder()
        self._renderer = OfflineRenderer(self.config, decoder=self._decoder)
        self._encoder = encoder or WavEncoder()

    def export(
        self,
        left: Optional[SourceSelection],
        right: Optional[SourceSelection],
        mix: MixSpec,
        *,
        sample_rate: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> MixExportResult:
        left, right = self._require_selection(left, right)
        source_left = self._decoder.decode(left.data)
        source_right = self._decoder.decode(right.data)
        return self._render_and_offer(source_left, source_right, mix, sample_rate, filename)

    async def export_async(
        self,
        left: Optional[SourceSelection],
        right: Optional[SourceSelection],
        mix: MixSpec,
        *,
        sample_rate: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> MixExportResult:
        """Decode both sources concurrently, then render off the event loop."""

        left, right = self._require_selection(left, right)
        source_left, source_right = await asyncio.gather(
            asyncio.to_thread(self._decoder.decode, left.data),
            asyncio.to_thread(self._decoder.decode, right.data),
        )
        return await asyncio.to_thread(
            self._render_and_offer, source_left, source_right, mix, sample_rate, filename
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _require_selection(
        left: Optional[SourceSelection], right: Optional[SourceSelection]
    ) -> Tuple[SourceSelection, SourceSelection]:
        if left is None or right is None:
            raise SelectionIncomplete("Both a left and a right source must be selected")
        return left, right

    def _render_and_offer(
        self,
        source_left: SampleBuffer,
        source_right: SampleBuffer,
        mix: MixSpec,
        sample_rate: Optional[int],
        filename: Optional[str],
    ) -> MixExportResult:
        try:
            rendered = self._renderer.render(
                source_left, mix.gain_left, source_right, mix.gain_right, sample_rate
            )
            payload = self._encoder.encode(rendered)
        except RenderFailure:
            raise
        except Exception as exc:
            raise RenderFailure(f"Offline render failed: {exc}") from exc

        name = filename or self.config.output_filename
        try:
            offered = self._offer(name, payload)
        except Exception as exc:
            raise RenderFailure(f"Unable to save {name}: {exc}") from exc
        result = self._result(name, payload, rendered, offered)
        logger.info(
            "Exported %s: %d frames at %d Hz (%d bytes)",
            name,
            result.frame_count,
            result.sample_rate,
            result.byte_length,
        )
        return result

    @staticmethod
    def _result(name: str, payload: bytes, rendered: RenderedMix, offered: object) -> MixExportResult:
        return MixExportResult(
            filename=name,
            byte_length=len(payload),
            frame_count=rendered.frame_count,
            sample_rate=rendered.sample_rate,
            offered=offered,
            levels=summarize(rendered.samples),
        )


__all__ = ["DirectoryFileOffer", "FileOffer", "MixExportResult", "MixExportService"]
