"""
This module provides classes for writing run logs to the output root.

It separates logging concerns into specific classes for handling errors
(ErrorLog) and the per-run job summary (SummaryLog). The summary is written in
a machine-readable YAML format for scripts that watch the HLS root, while error
logs are in a human-readable text format for easy debugging.

Real-time console logging is done with loguru and configured in `main.py`.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Union

import yaml
from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME, JOB_STATUS_SUCCEEDED, RUN_SUMMARY_FILE_NAME


class Log:
    """
    A base class for all run log writers.

    It resolves the log directory from a base path and makes sure it exists.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_base_path: Path):
        """
        Args:
            log_base_path: The base path for logging. If it's a directory (or
                           has no suffix), log files are created inside it.
                           If it's a file path, its parent is used.
        """
        self.log_file_path: Path
        if log_base_path.is_dir() or not log_base_path.suffix:
            self.log_dir: Path = log_base_path.resolve()
        else:
            self.log_dir: Path = log_base_path.parent.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends human-readable error blocks to a plain text file.

    Each call adds the given lines followed by a separator, so the file is a
    chronological record of failed launches and failed encodes.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        if not error_messages:
            return

        content_to_write = (
            f"[{datetime.now().isoformat(timespec='seconds')}]\n"
            + "\n".join(error_messages)
            + "\n"
            + self.linesep_marker
            + "\n"
        )

        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Fall back to the console so the message is not lost.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class SummaryLog(Log):
    """
    Writes the YAML summary of one run's rendition jobs.

    The file is rewritten from scratch on every run; it describes the last
    run only.
    """

    def __init__(self, summary_dir: Path, filename: str = RUN_SUMMARY_FILE_NAME):
        super().__init__(summary_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, run_info: Dict, job_entries: Iterable[Dict] = ()):
        """
        Args:
            run_info: Run-level fields (inputs, selection, timings).
            job_entries: One mapping per rendition job, in profile order.
        """
        jobs: List[Dict] = list(job_entries)
        document = dict(run_info)
        document["jobs"] = jobs
        document["failed"] = [job["rendition"] for job in jobs if job.get("status") != JOB_STATUS_SUCCEEDED]

        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    document,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except OSError as e:
            logger.error(f"Failed to write run summary {self.log_file_path}: {e}")
