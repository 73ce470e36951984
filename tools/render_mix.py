#!/usr/bin/env python3
"""Render two audio files to a hard-panned stereo WAV.

The left file is folded to mono and placed entirely in the left channel, the
right file likewise in the right channel, each scaled by its own gain. The
render runs as long as the longer file; the shorter one trails into silence.

Run with ``python tools/render_mix.py left.flac right.wav --gain-right 0.5``.
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from audio.engine import EngineConfig
from audio.errors import DecodeError, RenderFailure
from domain.export_service import DirectoryFileOffer, MixExportService
from domain.models import MixSpec, SourceSelection

logger = logging.getLogger("render_mix")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    defaults = EngineConfig.from_environment()
    parser = argparse.ArgumentParser(description="Render two audio files to a hard-panned stereo WAV.")
    parser.add_argument("left", type=Path, help="Audio file routed to the left channel.")
    parser.add_argument("right", type=Path, help="Audio file routed to the right channel.")
    parser.add_argument("--gain-left", type=float, default=1.0, help="Linear gain for the left file.")
    parser.add_argument("--gain-right", type=float, default=1.0, help="Linear gain for the right file.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(defaults.output_filename),
        help="Destination WAV path (defaults to DualStereo_Mix.wav).",
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=defaults.sample_rate,
        help="Render sample rate; defaults to the left file's native rate.",
    )
    parser.add_argument("--json", action="store_true", help="Emit a JSON summary.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING...).")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(message)s")

    try:
        mix = MixSpec(gain_left=args.gain_left, gain_right=args.gain_right)
        left = SourceSelection(name=args.left.name, data=args.left.read_bytes())
        right = SourceSelection(name=args.right.name, data=args.right.read_bytes())
    except (OSError, ValueError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2

    output = args.output.expanduser().resolve()
    service = MixExportService(DirectoryFileOffer(output.parent), config=EngineConfig.from_environment())
    try:
        result = service.export(left, right, mix, sample_rate=args.sample_rate, filename=output.name)
    except DecodeError as exc:
        logger.error("Could not decode input: %s", exc)
        return 2
    except RenderFailure as exc:
        logger.error("Render failed: %s", exc)
        return 1

    summary = {
        "output": str(result.offered),
        "frames": result.frame_count,
        "sample_rate": result.sample_rate,
        "seconds": round(result.duration_seconds, 3),
        "bytes": result.byte_length,
        "levels": result.levels,
    }
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Wrote {summary['output']} ({result.frame_count} frames @ {result.sample_rate} Hz)")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
