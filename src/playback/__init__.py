"""Live, deadline-synchronized playback of the left/right source pair."""

from .controller import PlaybackController, PlaybackSession, PlaybackState
from .output import AudioOutput, ManualOutput, ManualStream, SoundDeviceOutput
from .schedule import ScheduledMix

__all__ = [
    "AudioOutput",
    "ManualOutput",
    "ManualStream",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "ScheduledMix",
    "SoundDeviceOutput",
]
