"""Decode, mix, render, and encode the two-source hard-panned stereo mix."""
from .buffers import RenderedMix, SampleBuffer
from .decoder import AudioDecoder, Decoder
from .engine import DEFAULT_OUTPUT_FILENAME, EngineConfig
from .errors import DecodeError, DualStereoError, OutputUnavailable, RenderFailure, SelectionIncomplete
from .metrics import MeterReading, channel_meters, rms_per_channel, summarize
from .mixer import PAN_LEFT, PAN_RIGHT, GainCell, MixGraph, MixSource, contribution, fold_to_mono
from .renderer import OfflineRenderer
from .wav import WavEncoder, parse_header, quantize

__all__ = [
    "AudioDecoder",
    "DEFAULT_OUTPUT_FILENAME",
    "DecodeError",
    "Decoder",
    "DualStereoError",
    "EngineConfig",
    "GainCell",
    "MeterReading",
    "MixGraph",
    "MixSource",
    "OfflineRenderer",
    "OutputUnavailable",
    "PAN_LEFT",
    "PAN_RIGHT",
    "RenderFailure",
    "RenderedMix",
    "SampleBuffer",
    "SelectionIncomplete",
    "WavEncoder",
    "channel_meters",
    "contribution",
    "fold_to_mono",
    "parse_header",
    "quantize",
    "rms_per_channel",
    "summarize",
]
