"""Dataclasses describing the status surface shown next to the controls."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from playback.controller import PlaybackState


class StatusKind(str, Enum):
    NO_SELECTION = "no-selection"
    READY = "ready"
    LOADING = "loading"
    PLAYING = "playing"
    STOPPED = "stopped"
    DECODE_ERROR = "decode-error"
    OUTPUT_ERROR = "output-error"
    RENDERING = "rendering"
    RENDER_COMPLETE = "render-complete"
    RENDER_FAILED = "render-failed"


STATUS_MESSAGES: Dict[StatusKind, str] = {
    StatusKind.NO_SELECTION: "Please upload both audio files.",
    StatusKind.READY: "Ready to play.",
    StatusKind.LOADING: "Loading audio...",
    StatusKind.PLAYING: "Playing: left file in the left ear, right file in the right ear.",
    StatusKind.STOPPED: "Playback stopped.",
    StatusKind.DECODE_ERROR: "Could not decode one of the audio files.",
    StatusKind.OUTPUT_ERROR: "Could not open the audio output device.",
    StatusKind.RENDERING: "Rendering mix...",
    StatusKind.RENDER_COMPLETE: "Mix rendered: {filename}",
    StatusKind.RENDER_FAILED: "Rendering failed; no file was saved.",
}


@dataclass
class SourceStripState:
    """Per-side view model: which file is loaded and where its fader sits."""

    side: str
    source_name: Optional[str] = None
    gain: float = 1.0

    @property
    def selected(self) -> bool:
        return self.source_name is not None


@dataclass
class StatusPanelState:
    """State bundle rendered into the status line and transport buttons."""

    playback_state: PlaybackState = PlaybackState.IDLE
    kind: StatusKind = StatusKind.NO_SELECTION
    message: str = STATUS_MESSAGES[StatusKind.NO_SELECTION]
    detail: Optional[str] = None
    left: SourceStripState = field(default_factory=lambda: SourceStripState(side="left"))
    right: SourceStripState = field(default_factory=lambda: SourceStripState(side="right"))
    last_export: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        return self.playback_state == PlaybackState.PLAYING

    @property
    def can_play(self) -> bool:
        return self.left.selected and self.right.selected
