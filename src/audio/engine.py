"""Engine-wide configuration shared by the live and offline mix paths."""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

DEFAULT_OUTPUT_FILENAME = "DualStereo_Mix.wav"


@dataclass
class EngineConfig:
    """Global audio configuration shared across components.

    ``sample_rate`` is an optional override for offline renders; when left as
    ``None`` the render follows the left source's native rate.
    """

    sample_rate: Optional[int] = None
    block_size: int = 512
    channels: int = 2
    start_lead_seconds: float = 0.1
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    def __post_init__(self) -> None:
        if self.sample_rate is not None and self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if self.block_size <= 0:
            raise ValueError("block_size must be positive")
        if self.channels != 2:
            raise ValueError("The dual stereo mixer always renders two channels")
        if self.start_lead_seconds < 0.0:
            raise ValueError("start_lead_seconds cannot be negative")

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None) -> "EngineConfig":
        """Build a config from ``DUAL_STEREO_*`` environment variables.

        ``DUAL_STEREO_SAMPLE_RATE`` (optional)
            Render sample rate override in Hz.
        ``DUAL_STEREO_BLOCK_SIZE`` (optional)
            Frames mixed per block; defaults to ``512``.
        ``DUAL_STEREO_START_LEAD_MS`` (optional)
            Lead time before the synchronized start; defaults to ``100``.
        ``DUAL_STEREO_OUTPUT_FILENAME`` (optional)
            Name offered for rendered downloads.
        """

        environment: Mapping[str, str]
        environment = env if env is not None else os.environ
        sample_rate = environment.get("DUAL_STEREO_SAMPLE_RATE")
        block_size = environment.get("DUAL_STEREO_BLOCK_SIZE")
        lead_ms = environment.get("DUAL_STEREO_START_LEAD_MS")
        return cls(
            sample_rate=int(sample_rate) if sample_rate else None,
            block_size=int(block_size) if block_size else 512,
            start_lead_seconds=float(lead_ms) / 1_000.0 if lead_ms else 0.1,
            output_filename=environment.get("DUAL_STEREO_OUTPUT_FILENAME", DEFAULT_OUTPUT_FILENAME),
        )


__all__ = ["DEFAULT_OUTPUT_FILENAME", "EngineConfig"]
