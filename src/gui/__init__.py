"""Headless control and status surfaces consumed by a GUI shell."""

from .controls import DualStereoControls
from .state import STATUS_MESSAGES, SourceStripState, StatusKind, StatusPanelState

__all__ = [
    "DualStereoControls",
    "STATUS_MESSAGES",
    "SourceStripState",
    "StatusKind",
    "StatusPanelState",
]
