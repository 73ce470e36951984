"""Audio output backends driving :class:`~playback.schedule.ScheduledMix`.

``SoundDeviceOutput`` opens a PortAudio stream through ``sounddevice`` and
pulls blocks from the mix inside the driver callback. ``ManualOutput`` offers
the same contract against a clock that only moves when :meth:`ManualStream.advance`
is called, which suits headless hosts, CLI dry runs, and tests.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Protocol

import numpy as np

logger = logging.getLogger(__name__)

BlockCallback = Callable[[int, float], np.ndarray]


class OutputStreamHandle(Protocol):
    """Live stream opened by an :class:`AudioOutput`."""

    @property
    def time(self) -> float:
        """Current output clock time in seconds."""

    @property
    def active(self) -> bool:
        """Whether the stream is still producing audio."""

    def close(self) -> None:
        """Stop the stream immediately and release its resources."""


class AudioOutput(Protocol):
    """Factory for live stereo output streams."""

    def open(
        self,
        *,
        sample_rate: int,
        channels: int,
        block_size: int,
        callback: BlockCallback,
    ) -> OutputStreamHandle:
        """Open and start a stream that pulls blocks from *callback*."""


class SoundDeviceStream:
    """Wraps a started ``sounddevice.OutputStream``."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream
        self._closed = False

    @property
    def time(self) -> float:
        return float(self._stream.time)

    @property
    def active(self) -> bool:
        return not self._closed and bool(self._stream.active)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.abort()
        finally:
            self._stream.close()


class SoundDeviceOutput:
    """PortAudio output through the ``sounddevice`` package."""

    def __init__(self, *, device: int | str | None = None, latency: str | float = "low") -> None:
        self._device = device
        self._latency = latency

    def open(
        self,
        *,
        sample_rate: int,
        channels: int,
        block_size: int,
        callback: BlockCallback,
    ) -> SoundDeviceStream:
        import sounddevice as sd

        def _callback(outdata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
            block_time = time_info.outputBufferDacTime or time_info.currentTime
            outdata[:] = callback(frames, float(block_time))

        stream = sd.OutputStream(
            samplerate=sample_rate,
            blocksize=block_size,
            channels=channels,
            dtype="float32",
            device=self._device,
            latency=self._latency,
            callback=_callback,
        )
        stream.start()
        logger.info("Audio stream started: %d Hz, blocksize=%d", sample_rate, block_size)
        return SoundDeviceStream(stream)


class ManualStream:
    """Stream whose clock advances only when blocks are pulled explicitly."""

    def __init__(self, *, sample_rate: int, channels: int, block_size: int, callback: BlockCallback) -> None:
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.block_size = int(block_size)
        self._callback = callback
        self._time = 0.0
        self._closed = False
        self.blocks: List[np.ndarray] = []

    @property
    def time(self) -> float:
        return self._time

    @property
    def active(self) -> bool:
        return not self._closed

    def advance(self, frames: int | None = None) -> np.ndarray:
        """Pull one block (``block_size`` frames by default) and move the clock."""

        frames = self.block_size if frames is None else int(frames)
        if self._closed:
            raise RuntimeError("Stream has been closed")
        block = np.array(self._callback(frames, self._time), dtype=np.float32, copy=True)
        self.blocks.append(block)
        self._time += frames / float(self.sample_rate)
        return block

    def rendered(self) -> np.ndarray:
        """Return every block pulled so far as one ``(frames, channels)`` array."""

        if not self.blocks:
            return np.zeros((0, self.channels), dtype=np.float32)
        return np.concatenate(self.blocks, axis=0)

    def close(self) -> None:
        self._closed = True


class ManualOutput:
    """Driver-less :class:`AudioOutput` that keeps every stream it opened."""

    def __init__(self) -> None:
        self.streams: List[ManualStream] = []

    def open(
        self,
        *,
        sample_rate: int,
        channels: int,
        block_size: int,
        callback: BlockCallback,
    ) -> ManualStream:
        stream = ManualStream(
            sample_rate=sample_rate,
            channels=channels,
            block_size=block_size,
            callback=callback,
        )
        self.streams.append(stream)
        return stream

    def active_streams(self) -> List[ManualStream]:
        return [stream for stream in self.streams if stream.active]


__all__ = [
    "AudioOutput",
    "BlockCallback",
    "ManualOutput",
    "ManualStream",
    "OutputStreamHandle",
    "SoundDeviceOutput",
    "SoundDeviceStream",
]
