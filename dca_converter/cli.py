"""Command-line interface for the DCA converter.

WHY: Bots and scripts need a single command that turns a downloaded
audio file plus its yt-dlp info JSON into a .dca file ready for a voice
connection.

HOW: Uses argparse to accept the input, output and metadata paths and an
optional start offset and duration. Loads the metadata, runs the
pipeline (ffmpeg, Ogg extraction, DCA building) and saves the result.
Status messages go to stderr; errors become exit status 1.

RULES:
- -i/--input, -o/--output, -j/--json are required
- -s/--start and -t/--time are non-negative whole seconds, optional
- --raw-ogg skips ffmpeg and reads the input as Opus-in-Ogg
- Status output goes to stderr (not stdout)
- Any DcaError, OSError or ValueError exits with status 1; Ctrl-C exits 130
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dca_converter import __version__
from dca_converter.core.errors import DcaError
from dca_converter.metadata import load_metadata
from dca_converter.pipeline import convert_file


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _seconds(value: str) -> int:
    """argparse type for a non-negative number of whole seconds."""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("'{}' is not a whole number of seconds".format(value))
    if seconds < 0:
        raise argparse.ArgumentTypeError("seconds must not be negative, got {}".format(seconds))
    return seconds


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="dca_converter",
        description="Ogg to DCA converter: re-encode audio to Opus and wrap it "
                    "in a DCA1 container with track metadata.",
    )

    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Audio file to convert.",
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Path of the .dca file to write.",
    )

    parser.add_argument(
        "-j", "--json",
        required=True,
        help="Metadata JSON from yt-dlp or a songbird-style player.",
    )

    parser.add_argument(
        "-s", "--start",
        type=_seconds,
        default=None,
        help="Start time offset in seconds.",
    )

    parser.add_argument(
        "-t", "--time",
        type=_seconds,
        default=None,
        help="Total duration of audio to convert, in seconds.",
    )

    parser.add_argument(
        "--raw-ogg",
        action="store_true",
        help="Treat the input as Opus-in-Ogg and skip ffmpeg.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def run(args: argparse.Namespace) -> int:
    """Execute one conversion and return the process exit status."""
    input_path = Path(args.input)
    if not input_path.is_file():
        _status("Error: File not found: {}".format(input_path))
        return 1

    if args.raw_ogg and (args.start is not None or args.time is not None):
        _status("Warning: --start/--time are ignored with --raw-ogg")

    try:
        metadata = load_metadata(args.json)
        _status("Converting {} ({} - {})".format(
            input_path.name, metadata.artist, metadata.title,
        ))
        size = convert_file(
            input_path,
            args.output,
            metadata,
            start=args.start,
            duration=args.time,
            transcode_input=not args.raw_ogg,
        )
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    except (DcaError, OSError, ValueError) as e:
        _status("Error: {}".format(e))
        return 1

    _status("Done! Saved {} bytes to {}".format(size, args.output))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
