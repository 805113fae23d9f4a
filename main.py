"""
Main entry point for the HLS Muxer application.

This script configures logging, parses command-line arguments, resolves the
effective configuration and runs the HLS pipeline: probe the inputs, let the
operator pick the streams, start one encoder per rendition, write the master
playlist and wait for all encoders to finish.
"""

import sys
from pathlib import Path

from loguru import logger

from hls_muxer.cli import get_args
from hls_muxer.config.common import LOGGER_FORMAT
from hls_muxer.config.hls import USER_PROFILES, load_profiles
from hls_muxer.domain.exceptions import HlsMuxerException
from hls_muxer.pipeline.hls_pipeline import HlsPipeline
from hls_muxer.utils.module_updater import Modules


# Configure the logger for initial setup.
# The level is overridden later by command-line arguments.
logger.remove()
log_level = "DEBUG" if __debug__ else "INFO"
logger.add(sys.stderr, level=log_level, format=LOGGER_FORMAT)


def main(argv=None) -> int:
    """
    Runs the muxer and returns the process exit status.

    0 means every rendition finished successfully. 1 means the run was
    aborted (probe or selection failure, bad configuration) or at least one
    rendition failed. argparse itself exits with 2 on missing arguments.
    """
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.info("starting HLS stream")
    logger.debug(f"Parsed arguments: {args}")

    ffmpeg_path = Modules.get_ffmpeg_path()
    ffprobe_path = Modules.get_ffprobe_path()
    if not args.skip_ffmpeg_check:
        Modules.verify_ffmpeg(ffmpeg_path)

    try:
        profiles = load_profiles(USER_PROFILES)
        logger.debug(f"Rendition profiles: {profiles}")

        pipeline = HlsPipeline(
            av_path=args.input,
            st_path=args.subtitle,
            output_root=Path(args.output_root),
            profiles=profiles,
            manifest_name=args.manifest_name,
            ffmpeg_path=ffmpeg_path,
            ffprobe_path=ffprobe_path,
        )
        exit_code = pipeline.run()
    except HlsMuxerException as e:
        cause = f" (caused by {type(e.__cause__).__name__}: {e.__cause__})" if e.__cause__ else ""
        logger.error(f"{type(e).__name__}: {e}{cause}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Aborted by user.")
        return 130

    if exit_code == 0:
        logger.success("all done :-)")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
