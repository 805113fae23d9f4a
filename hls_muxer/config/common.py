"""
Common configuration settings used throughout the application.

This module contains the shared constants of the HLS Muxer: the logger format,
the run-log file names and the job status values. It also loads the optional
user configuration file, so that the location of FFmpeg and the HLS output
settings can be changed without modifying the source code.
"""
from pathlib import Path
import yaml
from loguru import logger

# --- User-Defined Configuration ---
# This block loads user-specific settings from a 'config.user.yaml' file located
# at the project root. Example:
#
#   paths:
#     ffmpeg_dir: /opt/ffmpeg/bin
#   hls:
#     output_root: /srv/hls
#     manifest_name: cdn00.m3u8
#     profiles:
#       - {name: cdn00_src, video_bitrate: 3000k, audio_bitrate: 192k,
#          bandwidth: 4000000, resolution: 1920x1080}

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# The directory containing the ffmpeg and ffprobe executables. If None, the
# executables are expected on the system's PATH.
MODULE_PATH: Path | None = None

# The raw 'hls' section of the user config. Interpreted by `config.hls`.
USER_HLS_CONFIG: dict = {}


def load_user_config(config_path: Path) -> dict:
    """
    Reads a YAML user configuration file.

    Returns an empty dict when the file is missing, empty or unparsable; a
    broken user config only produces a warning so the defaults still apply.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using defaults.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': top level is not a mapping.")
        return {}
    return user_config


_user_config = load_user_config(USER_CONFIG_PATH)
_paths_config = _user_config.get("paths") or {}
if _paths_config.get("ffmpeg_dir"):
    MODULE_PATH = Path(_paths_config["ffmpeg_dir"])
USER_HLS_CONFIG = _user_config.get("hls") or {}


# --- Logging Configuration ---
# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{process} - <level>{message}</level>"
)


# --- Run Log Files ---
# Written to the output root at the end of every run.

# Plain text record of every rendition job that did not succeed.
ERROR_LOG_FILE_NAME = "error.txt"

# YAML summary of all rendition jobs of the last run. Rewritten each run.
RUN_SUMMARY_FILE_NAME = "run_summary.yaml"

# The ffmpeg command of a rendition, appended inside the rendition directory.
COMMAND_TEXT = "cmd.txt"


# --- Job Status Constants ---
JOB_STATUS_PENDING = "pending"  # Created, not launched yet.
JOB_STATUS_RUNNING = "running"  # Encoder process launched.
JOB_STATUS_SUCCEEDED = "succeeded"  # Encoder exited with status 0.
JOB_STATUS_FAILED = "failed"  # Encoder exited with a non-zero status.
JOB_STATUS_LAUNCH_FAILED = "launch_failed"  # Encoder process could not be started.

JOB_TERMINAL_STATUSES = (JOB_STATUS_SUCCEEDED, JOB_STATUS_FAILED, JOB_STATUS_LAUNCH_FAILED)
