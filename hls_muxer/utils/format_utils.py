"""
Helpers that turn run timings into strings for logs and the run summary.
"""

from datetime import datetime, timedelta
from typing import Optional, Union


def format_timedelta(duration: Union[timedelta, float, int, None]) -> str:
    """
    Formats a duration as "HH:MM:SS".

    Accepts a timedelta or a number of seconds. Hours are not wrapped at 24,
    so a long-running live encode shows e.g. "27:00:05". Anything else
    (including None, for a job that never started) yields "--:--:--".
    """
    if isinstance(duration, timedelta):
        total_seconds = int(duration.total_seconds())
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        total_seconds = int(duration)
    else:
        return "--:--:--"

    total_seconds = max(total_seconds, 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def format_timestamp(moment: Optional[datetime]) -> Optional[str]:
    """ISO timestamp at second precision, or None."""
    if moment is None:
        return None
    return moment.isoformat(timespec="seconds")
