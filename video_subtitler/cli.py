"""Command-line interface for the Video Subtitler pipeline.

WHY: Operators need to process a video without running the web server,
for batch jobs, debugging a provider, or regenerating captions. The CLI
runs exactly the same SubtitlePipeline as the HTTP upload endpoint.

HOW: argparse collects the input file and overrides for the config loaded
from the environment. The async pipeline runs via asyncio.run(). Status
messages go to stderr; the result record is printed to stdout as JSON so
the CLI can be piped. ``--serve`` starts the HTTP API instead.

RULES:
- Validates the input file exists before any stage runs
- Status output goes to stderr (not stdout)
- Exit code 1 on a failed stage or bad arguments, 130 on Ctrl-C
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from video_subtitler.config import PipelineConfig
from video_subtitler.core.pipeline import SubtitlePipeline
from video_subtitler.errors import PipelineFailed
from video_subtitler.formatters import FORMATTERS


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _result_payload(result) -> dict:
    payload = dataclasses.asdict(result)
    payload["media_stream_path"] = str(result.media_stream_path)
    payload["caption_paths"] = {
        "original": str(result.caption_paths.original),
        "translated": str(result.caption_paths.translated) if result.caption_paths.translated else None,
    }
    return payload


def _build_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_env()
    overrides = {}
    if args.uploads_root:
        overrides["uploads_root"] = Path(args.uploads_root)
    if args.caption_format:
        overrides["caption_format"] = args.caption_format
    if args.ffmpeg:
        overrides["ffmpeg_path"] = args.ffmpeg
    return dataclasses.replace(config, **overrides) if overrides else config


async def _run_pipeline(args: argparse.Namespace, config: PipelineConfig) -> int:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        return 1

    try:
        pipeline = SubtitlePipeline(config)
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    try:
        result = await pipeline.process(
            input_path,
            target_language=args.target_lang,
            source_language=args.source_lang,
            on_status=_status,
        )
    except PipelineFailed as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        return 1

    print(json.dumps(_result_payload(result), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="video_subtitler",
        description="Convert a video to HLS, transcribe it, translate the "
                    "transcript, and write time-aligned subtitle files.",
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        help="Path to the video file to process.",
    )
    parser.add_argument(
        "--target-lang",
        default=None,
        help="Target language code for translated subtitles "
             "(default: DEFAULT_TARGET_LANGUAGE or 'en').",
    )
    parser.add_argument(
        "--source-lang",
        default=None,
        help="Source language hint used when the provider detects none.",
    )
    parser.add_argument(
        "--uploads-root",
        default=None,
        help="Directory that holds job working directories (default: UPLOADS_ROOT or ./uploads).",
    )
    parser.add_argument(
        "--caption-format",
        choices=sorted(FORMATTERS),
        default=None,
        help="Subtitle file format (default: CAPTION_FORMAT or webvtt).",
    )
    parser.add_argument(
        "--ffmpeg",
        default=None,
        help="Path to the ffmpeg binary (default: FFMPEG_PATH or 'ffmpeg').",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP upload API instead of processing a file.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m video_subtitler``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        config = _build_config(args)
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    if args.serve:
        from video_subtitler.server.app import run_api
        run_api(config)
        return

    if not args.input_file:
        parser.error("input_file is required unless --serve is given")

    try:
        code = asyncio.run(_run_pipeline(args, config))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
