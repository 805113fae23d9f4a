"""
Command-Line Interface (CLI) setup for the HLS Muxer.

This module uses Python's `argparse` to define the command-line arguments and
provides the interactive prompt the operator uses to pick streams.
"""
import argparse
from typing import Callable, List, Optional, Sequence

from loguru import logger

from .config.hls import HLS_ROOT, MANIFEST_NAME
from .domain.exceptions import SelectionException
from .domain.media import StreamDescriptor


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the HLS Muxer.

    Args:
        argv: Argument list to parse; defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(
        prog="hls-muxer",
        description="Opens an AV stream and creates a series of realtime HLS playlists.",
    )
    parser.add_argument(
        "input",
        metavar="INPUT",
        help="The main input file, containing at least one video & audio track.",
    )
    parser.add_argument(
        "subtitle",
        metavar="SUBTITLE",
        nargs="?",
        default=None,
        help="A secondary input file containing at least one subtitle track, and any number of attachments.",
    )
    parser.add_argument(
        "--output-root", type=str, default=str(HLS_ROOT),
        help=f"HLS output directory (default: {HLS_ROOT}).",
    )
    parser.add_argument(
        "--manifest-name", type=str, default=MANIFEST_NAME,
        help=f"File name of the master playlist (default: {MANIFEST_NAME}).",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    parser.add_argument(
        "--skip-ffmpeg-check", action="store_true",
        help="Do not run `ffmpeg -version` before starting."
    )
    return parser.parse_args(argv)


def prompt_stream_index(
    name: str,
    streams: Sequence[StreamDescriptor],
    input_func: Callable[[str], str] = input,
    print_func: Callable[[str], None] = print,
) -> int:
    """
    Asks the operator to pick one stream of a bucket.

    The numbered list shows bucket positions, which is what the encoder's
    stream maps use. Input that is not an integer, or an integer outside the
    list, is rejected and asked for again.

    Args:
        name: Bucket label shown to the operator, e.g. "video".
        streams: The bucket's streams in prober order.
        input_func: Reads one line from the operator.
        print_func: Writes one line to the operator.

    Returns:
        The chosen zero-based position.

    Raises:
        SelectionException: If input ends before a valid position was given.
    """
    print_func(f"select {name} track:")
    for position, stream in enumerate(streams):
        print_func(f"{position}: {stream.codec_name}")

    while True:
        try:
            line = input_func("> ")
        except EOFError as e:
            raise SelectionException(f"Input closed while selecting the {name} track.") from e

        try:
            position = int(line.strip())
        except ValueError as e:
            logger.warning(f"err: {e}")
            continue

        if 0 <= position < len(streams):
            return position
        logger.warning(f"{name} track {position} does not exist, choose 0..{len(streams) - 1}")
