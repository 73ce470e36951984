#!/usr/bin/env python3
"""Play two audio files hard-panned left/right through the default device.

``--dry-run`` swaps the sound card for a manually clocked output and pulls
every block in memory, which is handy on headless machines.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from audio.engine import EngineConfig
from domain.export_service import DirectoryFileOffer, MixExportService
from gui.controls import DualStereoControls
from gui.state import StatusPanelState
from playback.controller import PlaybackController
from playback.output import AudioOutput, ManualOutput, ManualStream, SoundDeviceOutput

logger = logging.getLogger("play_mix")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play two audio files hard-panned left/right.")
    parser.add_argument("left", type=Path, help="Audio file heard in the left ear.")
    parser.add_argument("right", type=Path, help="Audio file heard in the right ear.")
    parser.add_argument("--gain-left", type=float, default=1.0)
    parser.add_argument("--gain-right", type=float, default=1.0)
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (defaults to the longer file).",
    )
    parser.add_argument("--dry-run", action="store_true", help="Render blocks without a sound card.")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def _print_status(status: StatusPanelState) -> None:
    logger.info("%s", status.message)


async def run(args: argparse.Namespace, output: AudioOutput) -> int:
    config = EngineConfig.from_environment()
    controller = PlaybackController(output, config=config)
    exporter = MixExportService(DirectoryFileOffer(Path.cwd()), config=config)
    controls = DualStereoControls(controller, exporter)
    controls.add_status_listener(_print_status)
    controls.select_left(args.left.read_bytes(), args.left.name)
    controls.select_right(args.right.read_bytes(), args.right.name)
    controls.set_gain_left(args.gain_left)
    controls.set_gain_right(args.gain_right)

    session = await controls.play()
    if session is None or session.scheduled is None:
        return 2

    scheduled = session.scheduled
    total_seconds = scheduled.graph.frame_count / float(scheduled.sample_rate)
    duration = args.duration if args.duration is not None else total_seconds
    try:
        if isinstance(session.stream, ManualStream):
            stream = session.stream
            deadline = (session.start_deadline or 0.0) + duration
            while stream.time < deadline and not scheduled.finished:
                stream.advance()
        else:
            await asyncio.sleep(config.start_lead_seconds + duration)
    finally:
        controls.stop()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(message)s")
    output: AudioOutput = ManualOutput() if args.dry_run else SoundDeviceOutput()
    try:
        return asyncio.run(run(args, output))
    except (OSError, ValueError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2
    except KeyboardInterrupt:  # pragma: no cover - interactive
        return 130


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
