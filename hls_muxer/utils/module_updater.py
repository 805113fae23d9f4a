"""
This module provides the Modules class to locate and verify the external
tools the muxer drives, ffmpeg and ffprobe.
"""
import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.common import MODULE_PATH


class Modules:
    """
    A utility class to handle operations related to external modules like FFmpeg.

    It reads the tool directory from the user's `config.user.yaml` file and
    falls back to the system's PATH if no directory is configured.
    """

    @staticmethod
    def _get_tool_path(tool_name: str, module_path: Optional[Path] = MODULE_PATH) -> str:
        """
        Determines the executable to use for `tool_name`.

        The configured `ffmpeg_dir` wins if it contains the executable;
        otherwise the bare tool name is returned so the system PATH is used.
        """
        exe_name = f"{tool_name}.exe" if sys.platform == "win32" else tool_name

        if module_path and module_path.is_dir():
            configured_path = module_path / exe_name
            if configured_path.is_file():
                logger.debug(f"Using {tool_name} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )

        return tool_name

    @staticmethod
    def get_ffmpeg_path(module_path: Optional[Path] = MODULE_PATH) -> str:
        return Modules._get_tool_path("ffmpeg", module_path)

    @staticmethod
    def get_ffprobe_path(module_path: Optional[Path] = MODULE_PATH) -> str:
        return Modules._get_tool_path("ffprobe", module_path)

    @staticmethod
    def verify_ffmpeg(ffmpeg_cmd: Optional[str] = None) -> bool:
        """
        Verifies that FFmpeg can be executed.

        Runs `ffmpeg -version` and logs the first line of its output. A
        failure is only logged: each rendition launch reports its own error.

        Returns:
            True if the version check succeeded.
        """
        ffmpeg_cmd = ffmpeg_cmd or Modules.get_ffmpeg_path()

        try:
            result = subprocess.run(
                [ffmpeg_cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"FFmpeg version command failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except FileNotFoundError:
            logger.error(
                "FFmpeg command not found. Please ensure FFmpeg is installed and accessible.\n"
                "You can either add it to your system's PATH or specify its location in the 'config.user.yaml' file."
            )
            return False
        except OSError as e:
            logger.error(f"An unexpected error occurred while checking FFmpeg version: {e}")
            return False

        version_output_lines = result.stdout.splitlines()
        first_line = version_output_lines[0] if version_output_lines else "(no output)"
        logger.info(f"FFmpeg version check successful. Output (first line):\n{first_line}")
        return True
