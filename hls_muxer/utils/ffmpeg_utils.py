"""
This module provides utility functions for starting FFmpeg processes.
It includes a launch wrapper that starts a command without waiting for it,
plus helpers for displaying commands and escaping filter arguments.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from ..services.logging_service import ErrorLog


def format_cmd(cmd_list: List[str]) -> str:
    """
    Joins a command list into a single, shell-quoted string for display.

    Uses `subprocess.list2cmdline` on Windows and `shlex.join` elsewhere.
    """
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def escape_filter_value(value: Union[str, Path]) -> str:
    """
    Escapes a value for use as an option inside an ffmpeg filtergraph.

    Backslashes, colons and single quotes are significant to the filtergraph
    parser; a Windows path like ``C:\\subs.ass`` must become ``C\\:\\\\subs.ass``.
    """
    escaped = str(value).replace("\\", "\\\\")
    escaped = escaped.replace(":", "\\:")
    escaped = escaped.replace("'", "\\'")
    return escaped


def launch_cmd(
    cmd_parts: Union[str, List[str]],
    error_log_dir_for_launch: Optional[Path] = None,
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
) -> Optional[subprocess.Popen]:
    """
    Starts an external command and returns immediately.

    This is a wrapper around `subprocess.Popen` that adds logging and error
    handling. stdout and stderr of the child go to DEVNULL; a long-running
    encoder would otherwise block on a full pipe nobody reads.

    Args:
        cmd_parts: The command to start, as a single string or a list of strings.
                   A list is preferred for safety (avoids shell injection).
        error_log_dir_for_launch: The directory where an error log should be
                                  written if the command cannot be started.
        show_cmd: If True, the command will be logged at the DEBUG level before launch.
        cmd_log_file_path: If provided, the command string will be appended
                           to this file.

    Returns:
        The live `subprocess.Popen` handle, or `None` if the process could
        not be started (missing executable, permission error).
    """
    cmd_list: List[str]

    # --- Step 1: Normalize the input command to a list of strings ---
    if isinstance(cmd_parts, str):
        logger.warning(
            f"launch_cmd received a command string, attempting to split with shlex: {cmd_parts[:100]}..."
        )
        try:
            cmd_list = shlex.split(cmd_parts)
        except ValueError as e:
            logger.error(f"Error splitting command string with shlex: '{cmd_parts}'. Error: {e}")
            return None
    elif isinstance(cmd_parts, list):
        cmd_list = [str(part) for part in cmd_parts]
    else:
        logger.error(f"launch_cmd expects a command string or list, but received {type(cmd_parts)}.")
        return None

    if not cmd_list:
        logger.error("launch_cmd received an empty command list.")
        return None

    display_cmd_str = format_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"About to run: {display_cmd_str}")

    # --- Step 2: Log the command to a file if requested ---
    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    # --- Step 3: Start the process ---
    try:
        return subprocess.Popen(
            cmd_list,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            shell=False,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found (e.g., '{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        reason = "Error: Command not found (FileNotFoundError)."
    except PermissionError as e:
        logger.error(f"Error: Permission denied starting '{cmd_list[0]}': {e}")
        reason = f"Error: Permission denied ({e})."
    except OSError as e:
        logger.error(f"An OS error occurred while starting command: {display_cmd_str}: {e}")
        reason = f"Exception: {type(e).__name__} - {e}"

    if error_log_dir_for_launch:
        ErrorLog(error_log_dir_for_launch).write(
            "Command launch error",
            f"Command: {display_cmd_str}",
            reason,
        )
    return None
