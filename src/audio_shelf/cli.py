"""
Command-line entry point that serves the Audio Shelf web API.
"""

import argparse
import os
from pathlib import Path

import uvicorn
from loguru import logger

from audio_shelf.core import config
from audio_shelf.core.output import setup_from_config

APP_PATH = "web.backend.main:app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Audio Shelf - manage a directory of MP3/WAV files over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", help="Interface to bind (default from config)")
    parser.add_argument("--port", type=int, help="Port to bind (default from config)")
    parser.add_argument(
        "--audio-dir", help="Directory holding audio files (overrides config)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development)",
    )
    return parser


def main(argv=None) -> None:
    """Main entry point for the audio-shelf command."""
    args = build_parser().parse_args(argv)

    current_config = config.load_config()
    if args.audio_dir:
        current_config.library.audio_dir = str(Path(args.audio_dir).expanduser())
        # Picked up by web.backend.deps.get_config in the server process
        os.environ["AUDIO_SHELF_AUDIO_DIR"] = current_config.library.audio_dir

    setup_from_config(current_config.logging)
    config.ensure_directories(current_config)

    host = args.host or current_config.web.host
    port = args.port or current_config.web.port
    logger.info(
        f"Serving {current_config.library.audio_dir} on http://{host}:{port}"
    )

    uvicorn.run(APP_PATH, host=host, port=port, reload=args.reload, log_config=None)


if __name__ == "__main__":
    main()
