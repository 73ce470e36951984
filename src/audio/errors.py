"""Error taxonomy shared by the decode, playback, and render paths."""
from __future__ import annotations


class DualStereoError(Exception):
    """Base error for every recoverable mixer failure."""


class SelectionIncomplete(DualStereoError):
    """Raised when play or render is requested without both sources selected."""


class DecodeError(DualStereoError):
    """Raised when source bytes are empty, unsupported, truncated, or corrupt."""


class OutputUnavailable(DualStereoError):
    """Raised when the live audio output stream cannot be opened."""


class RenderFailure(DualStereoError):
    """Raised when the offline render cannot produce a complete mix."""


__all__ = [
    "DecodeError",
    "DualStereoError",
    "OutputUnavailable",
    "RenderFailure",
    "SelectionIncomplete",
]
