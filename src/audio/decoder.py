"""Turn raw audio file bytes into :class:`SampleBuffer` instances."""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Protocol

import soundfile as sf

from .buffers import SampleBuffer
from .errors import DecodeError

logger = logging.getLogger(__name__)


class Decoder(Protocol):
    """Anything able to decode a complete file held in memory."""

    def decode(self, data: bytes) -> SampleBuffer:
        """Return the decoded audio or raise :class:`DecodeError`."""


class AudioDecoder:
    """libsndfile-backed decoder preserving native rate and channel layout.

    No resampling or down-mixing happens here; folding to mono is the mixer's
    job.
    """

    def decode(self, data: bytes) -> SampleBuffer:
        if not data:
            raise DecodeError("No audio data supplied")
        try:
            frames, sample_rate = sf.read(io.BytesIO(bytes(data)), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, TypeError, ValueError) as exc:
            raise DecodeError(f"Unsupported or corrupt audio data: {exc}") from exc
        if frames.shape[0] == 0:
            raise DecodeError("Audio data contains no frames")
        buffer = SampleBuffer.from_interleaved(frames, sample_rate)
        logger.debug(
            "Decoded %d frames x %d channels at %d Hz",
            buffer.frame_count,
            buffer.channel_count,
            buffer.sample_rate,
        )
        return buffer

    def decode_file(self, path: Path) -> SampleBuffer:
        """Read *path* fully into memory and decode it."""

        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise DecodeError(f"Unable to read {path}: {exc}") from exc
        return self.decode(data)


__all__ = ["AudioDecoder", "Decoder"]
