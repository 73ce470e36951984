"""Live playback state machine for the left/right source pair."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from audio.buffers import SampleBuffer
from audio.decoder import AudioDecoder, Decoder
from audio.engine import EngineConfig
from audio.errors import OutputUnavailable, SelectionIncomplete
from audio.mixer import PAN_LEFT, PAN_RIGHT, GainCell, MixGraph, MixSource

from .output import AudioOutput, OutputStreamHandle
from .schedule import ScheduledMix

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    STOPPED = "stopped"


StateListener = Callable[[PlaybackState], None]


@dataclass
class PlaybackSession:
    """Resources owned by one ``play()`` call; only one is live at a time."""

    generation: int
    state: PlaybackState = PlaybackState.LOADING
    scheduled: Optional[ScheduledMix] = None
    stream: Optional[OutputStreamHandle] = None
    start_deadline: Optional[float] = None

    @property
    def finished(self) -> bool:
        return self.scheduled is not None and self.scheduled.finished

    def close(self) -> None:
        """Halt both sources and release the output stream."""

        if self.scheduled is not None:
            self.scheduled.cancel()
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        self.state = PlaybackState.STOPPED


class PlaybackController:
    """Drives ``IDLE -> LOADING -> PLAYING -> STOPPED -> IDLE``.

    Gains live in :class:`GainCell` instances owned by the controller and
    shared with every session's mix graph, so gain changes reach the running
    session on its next output block without a restart.
    """

    def __init__(
        self,
        output: AudioOutput,
        *,
        decoder: Decoder | None = None,
        config: EngineConfig | None = None,
        gain_left: float = 1.0,
        gain_right: float = 1.0,
    ) -> None:
        self._output = output
        self._decoder = decoder or AudioDecoder()
        self.config = config or EngineConfig()
        self._gain_left = GainCell(gain_left)
        self._gain_right = GainCell(gain_right)
        self._state = PlaybackState.IDLE
        self._session: Optional[PlaybackSession] = None
        self._generation = 0
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def gain_left(self) -> GainCell:
        return self._gain_left

    @property
    def gain_right(self) -> GainCell:
        return self._gain_right

    def set_gain_left(self, value: float) -> None:
        self._gain_left.set(value)

    def set_gain_right(self, value: float) -> None:
        self._gain_right.set(value)

    def add_state_listener(self, listener: StateListener) -> None:
        """Register a function invoked on every state transition."""

        self._listeners.append(listener)

    async def load(self, left: bytes, right: bytes) -> Tuple[SampleBuffer, SampleBuffer]:
        """Decode both sources concurrently; both must succeed."""

        left_buffer, right_buffer = await asyncio.gather(
            asyncio.to_thread(self._decoder.decode, left),
            asyncio.to_thread(self._decoder.decode, right),
        )
        return left_buffer, right_buffer

    async def play(self, left: bytes | None, right: bytes | None) -> Optional[PlaybackSession]:
        """Decode both sources and start them at one shared deadline.

        Returns the live session, or ``None`` when the load was superseded by
        :meth:`stop` or another :meth:`play` before decoding finished.
        """

        if not left or not right:
            raise SelectionIncomplete("Both a left and a right source must be selected")

        if self._session is not None:
            self.stop()

        self._generation += 1
        session = PlaybackSession(generation=self._generation)
        self._session = session
        self._set_state(PlaybackState.LOADING)

        try:
            left_buffer, right_buffer = await self.load(left, right)
        except Exception:
            superseded = self._session is not session
            self._abandon(session)
            if superseded:
                logger.debug("Discarding decode failure for superseded session %d", session.generation)
                return None
            raise

        if self._session is not session:
            logger.debug("Discarding decode results for superseded session %d", session.generation)
            return None

        try:
            self._start(session, left_buffer, right_buffer)
        except Exception:
            self._abandon(session)
            raise
        return session

    def stop(self) -> None:
        """Halt playback immediately; a no-op when nothing is live."""

        session = self._session
        if session is None:
            return
        self._session = None
        session.close()
        logger.info("Stopped playback session %d", session.generation)
        self._set_state(PlaybackState.STOPPED)
        self._set_state(PlaybackState.IDLE)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _start(self, session: PlaybackSession, left: SampleBuffer, right: SampleBuffer) -> None:
        if left.sample_rate != right.sample_rate:
            logger.warning(
                "Sources use different sample rates (%d Hz / %d Hz); playing both at %d Hz",
                left.sample_rate,
                right.sample_rate,
                left.sample_rate,
            )
        graph = MixGraph()
        graph.add_source(MixSource("left", buffer=left, pan=PAN_LEFT, gain=self._gain_left))
        graph.add_source(MixSource("right", buffer=right, pan=PAN_RIGHT, gain=self._gain_right))

        scheduled = ScheduledMix(graph, sample_rate=left.sample_rate)
        session.scheduled = scheduled
        try:
            session.stream = self._output.open(
                sample_rate=left.sample_rate,
                channels=self.config.channels,
                block_size=self.config.block_size,
                callback=scheduled.fill,
            )
        except Exception as exc:
            raise OutputUnavailable(f"Unable to open the audio output: {exc}") from exc
        deadline = session.stream.time + self.config.start_lead_seconds
        scheduled.schedule(deadline)
        session.start_deadline = deadline
        session.state = PlaybackState.PLAYING
        logger.info(
            "Playing session %d: %d frames at %d Hz, start deadline t=%.3f",
            session.generation,
            graph.frame_count,
            left.sample_rate,
            deadline,
        )
        self._set_state(PlaybackState.PLAYING)

    def _abandon(self, session: PlaybackSession) -> None:
        session.close()
        if self._session is session:
            self._session = None
            self._set_state(PlaybackState.IDLE)

    def _set_state(self, state: PlaybackState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in self._listeners:
            listener(state)


__all__ = ["PlaybackController", "PlaybackSession", "PlaybackState", "StateListener"]
