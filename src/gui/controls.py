"""Headless control surface binding file pickers and faders to the mixer.

A GUI shell (or the CLI tools) forwards user gestures to
:class:`DualStereoControls` and renders :class:`~gui.state.StatusPanelState`.
This is the only layer that turns mixer errors into status messages; the
audio, playback, and domain packages raise and leave reporting to it.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from audio.errors import DecodeError, OutputUnavailable, RenderFailure, SelectionIncomplete
from domain.export_service import MixExportResult, MixExportService
from domain.models import MixSettings, MixSpec, SourceSelection
from playback.controller import PlaybackController, PlaybackSession, PlaybackState

from .state import STATUS_MESSAGES, StatusKind, StatusPanelState

logger = logging.getLogger(__name__)

StatusListener = Callable[[StatusPanelState], None]

_STATE_TO_STATUS = {
    PlaybackState.LOADING: StatusKind.LOADING,
    PlaybackState.PLAYING: StatusKind.PLAYING,
    PlaybackState.STOPPED: StatusKind.STOPPED,
}


class DualStereoControls:
    """Control surface: select, set gains, play, stop, and render to file."""

    def __init__(
        self,
        controller: PlaybackController,
        exporter: MixExportService,
        *,
        settings: MixSettings | None = None,
    ) -> None:
        self._controller = controller
        self._exporter = exporter
        self._settings = settings or MixSettings()
        self._left: Optional[SourceSelection] = None
        self._right: Optional[SourceSelection] = None
        self._listeners: List[StatusListener] = []
        self._status = StatusPanelState()
        self._controller.set_gain_left(self._settings.mix.gain_left)
        self._controller.set_gain_right(self._settings.mix.gain_right)
        self._status.left.gain = self._settings.mix.gain_left
        self._status.right.gain = self._settings.mix.gain_right
        self._controller.add_state_listener(self._on_playback_state)

    @property
    def status(self) -> StatusPanelState:
        return self._status

    @property
    def settings(self) -> MixSettings:
        return self._settings

    @property
    def mix(self) -> MixSpec:
        return self._settings.mix

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Selection and gain
    # ------------------------------------------------------------------
    def select_left(self, data: bytes, name: str = "left") -> None:
        self._left = SourceSelection(name=name, data=data)
        self._status.left.source_name = name
        self._refresh_selection_status()

    def select_right(self, data: bytes, name: str = "right") -> None:
        self._right = SourceSelection(name=name, data=data)
        self._status.right.source_name = name
        self._refresh_selection_status()

    def set_gain_left(self, value: float) -> None:
        mix = MixSpec(gain_left=value, gain_right=self.mix.gain_right)
        self._controller.set_gain_left(mix.gain_left)
        self._settings.mix = mix
        self._status.left.gain = mix.gain_left
        self._notify()

    def set_gain_right(self, value: float) -> None:
        mix = MixSpec(gain_left=self.mix.gain_left, gain_right=value)
        self._controller.set_gain_right(mix.gain_right)
        self._settings.mix = mix
        self._status.right.gain = mix.gain_right
        self._notify()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def play(self) -> Optional[PlaybackSession]:
        left = self._left.data if self._left is not None else None
        right = self._right.data if self._right is not None else None
        try:
            return await self._controller.play(left, right)
        except SelectionIncomplete:
            logger.info("Play requested without both sources selected")
            self._set_status(StatusKind.NO_SELECTION)
        except DecodeError as exc:
            logger.warning("Decode failed: %s", exc)
            self._set_status(StatusKind.DECODE_ERROR, detail=str(exc))
        except OutputUnavailable as exc:
            logger.error("Audio output unavailable: %s", exc)
            self._set_status(StatusKind.OUTPUT_ERROR, detail=str(exc))
        return None

    def stop(self) -> None:
        self._controller.stop()

    async def render_to_file(self) -> Optional[MixExportResult]:
        """Render the current selection and gains and offer the WAV file."""

        if self._left is None or self._right is None:
            self._set_status(StatusKind.NO_SELECTION)
            return None
        self._set_status(StatusKind.RENDERING)
        try:
            result = await self._exporter.export_async(
                self._left,
                self._right,
                self.mix,
                sample_rate=self._settings.render_sample_rate,
                filename=self._settings.output_filename,
            )
        except SelectionIncomplete:
            self._set_status(StatusKind.NO_SELECTION)
            return None
        except DecodeError as exc:
            logger.warning("Decode failed during render: %s", exc)
            self._set_status(StatusKind.DECODE_ERROR, detail=str(exc))
            return None
        except RenderFailure as exc:
            logger.exception("Render failed")
            self._set_status(StatusKind.RENDER_FAILED, detail=str(exc))
            return None
        self._status.last_export = result.filename
        self._set_status(StatusKind.RENDER_COMPLETE, filename=result.filename)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _refresh_selection_status(self) -> None:
        if self._controller.state != PlaybackState.IDLE:
            self._notify()
            return
        if self._left is not None and self._right is not None:
            self._set_status(StatusKind.READY)
        else:
            self._set_status(StatusKind.NO_SELECTION)

    def _on_playback_state(self, state: PlaybackState) -> None:
        self._status.playback_state = state
        kind = _STATE_TO_STATUS.get(state)
        if kind is not None:
            self._set_status(kind)
        else:
            self._notify()

    def _set_status(self, kind: StatusKind, *, detail: str | None = None, filename: str = "") -> None:
        self._status.kind = kind
        self._status.message = STATUS_MESSAGES[kind].format(filename=filename)
        self._status.detail = detail
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._status)


__all__ = ["DualStereoControls", "StatusListener"]
