"""
Clock access and elapsed-time helpers.

The engine never reads the wall clock directly; transition functions take a
`now` value so tests can pin time. Elapsed-time display is a read-side concern:
hosts poll `elapsed_seconds` and re-render, nothing here mutates state.

The format_* helpers are the host-side display forms: the service exposes
the running timer through `CourtService.elapsed_display`; hosts listing
history call format_duration and format_timestamp on each HistoryRecord.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from courts.logic.state import CourtSession

Clock = Callable[[], datetime]

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def elapsed_seconds(session: CourtSession, now: datetime) -> int:
    """
    Whole seconds played on a session.

    Counts from start_time up to pause_time while paused, otherwise up to now.
    Returns 0 for sessions that have not started.
    """
    if not session.is_active or session.start_time is None:
        return 0
    until = session.pause_time if session.is_paused and session.pause_time is not None else now
    return max(0, int((until - session.start_time).total_seconds()))


def format_elapsed(seconds: int) -> str:
    """Format a running timer as MM:SS (minutes keep counting past 59)."""
    minutes, secs = divmod(max(0, seconds), SECONDS_PER_MINUTE)
    return f"{minutes:02d}:{secs:02d}"


def format_duration(start: datetime, end: datetime) -> str:
    """Format a finished game length: MM:SS under an hour, H:MM:SS otherwise."""
    seconds = max(0, int((end - start).total_seconds()))
    if seconds < SECONDS_PER_HOUR:
        return format_elapsed(seconds)
    hours, rest = divmod(seconds, SECONDS_PER_HOUR)
    minutes, secs = divmod(rest, SECONDS_PER_MINUTE)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_timestamp(moment: datetime) -> str:
    """Short 24-hour display form, e.g. '19 Oct, 14:05:09'."""
    return f"{moment.day} {moment.strftime('%b')}, {moment.strftime('%H:%M:%S')}"
