"""Command-line interface for fingersnake.

Provides the main entry point for playing the game and for testing the
camera on its own.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="fingersnake",
        description="Snake steered by your fingertip through a live vision model",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/fingersnake.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Open the game window and play")
    play_parser.add_argument(
        "--no-ai", action="store_true",
        help="Skip camera and AI session; the snake only wanders",
    )

    subparsers.add_parser("capture-test", help="Test webcam capture (saves a frame)")

    return parser.parse_args(argv)


async def _play(settings, args) -> None:
    """Build the app from settings and run it until the window closes."""
    from fingersnake.app import FingerSnakeApp

    app = FingerSnakeApp.from_settings(settings, use_ai=not args.no_ai)
    await app.run()
    state = app.game.state
    print(f"\nFinal score: {state.score}")
    print(f"Length: {state.length} segments, {state.tick} ticks")


async def _capture_test(settings) -> None:
    """Capture a single frame and save it as the sampler would send it."""
    import base64

    from fingersnake.capture.webcam import WebcamCapture
    from fingersnake.utils.imaging import fit_within, numpy_to_base64_jpeg

    cap_cfg = settings.capture
    resolution = (cap_cfg.resolution_width, cap_cfg.resolution_height)
    capture = WebcamCapture(device_index=cap_cfg.device_index, resolution=resolution)

    async with capture:
        frame = await capture.capture_frame()
    image = fit_within(frame.image, *resolution)
    data = numpy_to_base64_jpeg(image, cap_cfg.jpeg_quality)
    outfile = "capture_test.jpg"
    with open(outfile, "wb") as f:
        f.write(base64.b64decode(data))
    print(f"Saved frame to {outfile} ({image.shape[1]}x{image.shape[0]}, {len(data)} base64 chars)")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the fingersnake CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from fingersnake.config.settings import load_settings
    from fingersnake.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "play":
        logger.info("Starting game (ai=%s)", not args.no_ai)
        asyncio.run(_play(settings, args))

    elif args.command == "capture-test":
        logger.info("Running capture test")
        asyncio.run(_capture_test(settings))


if __name__ == "__main__":
    main()
