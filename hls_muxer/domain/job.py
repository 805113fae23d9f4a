"""
Runtime state of a single rendition encode.
"""
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..config.common import (
    JOB_STATUS_FAILED,
    JOB_STATUS_LAUNCH_FAILED,
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    JOB_STATUS_SUCCEEDED,
    JOB_TERMINAL_STATUSES,
)
from ..utils.format_utils import format_timedelta, format_timestamp
from .exceptions import TranscodeException
from .rendition import RenditionProfile


class TranscodeJob:
    """
    Tracks one encoder process from launch to its terminal status.

    The process handle is dropped as soon as the terminal status has been
    recorded, so a finished job only carries its outcome.

    Attributes:
        profile (RenditionProfile): The profile the job was launched with.
        output_dir (Path): The rendition directory the encoder writes to.
        cmd (list): The full encoder argument list.
        process (subprocess.Popen | None): The live handle while running.
        status (str): One of the JOB_STATUS_* constants.
        return_code (int | None): The encoder exit status once terminated.
        error_message (str | None): Why the job did not succeed.
    """

    def __init__(self, profile: RenditionProfile, output_dir: Path, cmd: List[str]):
        self.profile = profile
        self.output_dir = output_dir
        self.cmd = cmd
        self.process: Optional[subprocess.Popen] = None
        self.status: str = JOB_STATUS_PENDING
        self.return_code: Optional[int] = None
        self.error_message: Optional[str] = None
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def is_running(self) -> bool:
        return self.status == JOB_STATUS_RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.status in JOB_TERMINAL_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == JOB_STATUS_SUCCEEDED

    def mark_running(self, process: subprocess.Popen):
        self.process = process
        self.status = JOB_STATUS_RUNNING
        self.started_at = datetime.now()

    def mark_launch_failed(self, reason: str):
        self.status = JOB_STATUS_LAUNCH_FAILED
        self.error_message = reason
        self.finished_at = datetime.now()

    def mark_finished(self, return_code: int):
        """Records the exit status and releases the process handle."""
        if self.is_terminal:
            raise TranscodeException(f"{self.name} already finished with status {self.status!r}")
        self.return_code = return_code
        if return_code == 0:
            self.status = JOB_STATUS_SUCCEEDED
        else:
            self.status = JOB_STATUS_FAILED
            self.error_message = f"ffmpeg exited with status {return_code}"
        self.finished_at = datetime.now()
        self.process = None

    def as_dict(self) -> dict:
        elapsed = None
        if self.started_at and self.finished_at:
            elapsed = self.finished_at - self.started_at
        return {
            "rendition": self.name,
            "status": self.status,
            "return_code": self.return_code,
            "error": self.error_message,
            "output_dir": str(self.output_dir),
            "video_bitrate": self.profile.video_bitrate,
            "audio_bitrate": self.profile.audio_bitrate,
            "started_at": format_timestamp(self.started_at),
            "finished_at": format_timestamp(self.finished_at),
            "elapsed": format_timedelta(elapsed),
        }

    def __repr__(self) -> str:
        return f"TranscodeJob({self.name!r}, status={self.status!r}, rc={self.return_code})"
