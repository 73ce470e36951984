"""Pydantic-powered models for the user-facing mix configuration.

These models carry the values a control surface collects (selected source
files and gain positions) and validate them before they reach the audio
package. Pan is deliberately absent: the left source is always hard left and
the right source always hard right.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from audio.engine import DEFAULT_OUTPUT_FILENAME


class MixSpec(BaseModel):
    """Independent, non-negative gains for the left and right sources."""

    gain_left: float = Field(1.0, ge=0.0, description="Linear gain applied to the left source")
    gain_right: float = Field(1.0, ge=0.0, description="Linear gain applied to the right source")

    @field_validator("gain_left", "gain_right")
    @classmethod
    def reject_nan(cls, value: float) -> float:
        if value != value:
            raise ValueError("Gain cannot be NaN")
        return value


class SourceSelection(BaseModel):
    """Raw bytes for one selected source file."""

    name: str = Field("", description="Display name, usually the picked file name")
    data: bytes = Field(..., min_length=1, repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


class MixSettings(BaseModel):
    """Persisted mixer preferences restored between sessions."""

    mix: MixSpec = Field(default_factory=MixSpec)
    render_sample_rate: Optional[int] = Field(
        None, gt=0, description="Override for offline renders; defaults to the left source rate"
    )
    output_filename: str = Field(DEFAULT_OUTPUT_FILENAME, min_length=1)

    @field_validator("output_filename")
    @classmethod
    def validate_filename(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("output_filename must be a bare file name")
        if not value.lower().endswith(".wav"):
            raise ValueError("output_filename must use the .wav extension")
        return value
