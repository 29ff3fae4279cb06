"""
Clock and calendar helpers for stop records.

Stops are stored as a calendar day plus time-of-day values, so a stop time
earlier than its start time means the stop crossed midnight.
"""
import re
from datetime import date, datetime, time
from typing import List, Optional, Tuple, Union

from line_dashboard.errors import ValidationError

SECONDS_PER_DAY = 24 * 3600

SHIFT_1_START = 6 * 3600
SHIFT_2_START = 14 * 3600
SHIFT_3_START = 22 * 3600

SHIFTS = (1, 2, 3)

_TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d)?$")
_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

TimeLike = Union[time, datetime, str]


def parse_time(value: TimeLike, field: str = "time") -> time:
    """Accept HH:MM or HH:MM:SS (or a time/datetime) and drop sub-seconds."""
    if isinstance(value, datetime):
        return value.time().replace(microsecond=0)
    if isinstance(value, time):
        return value.replace(microsecond=0)
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        raise ValidationError(f"{field} must be HH:MM or HH:MM:SS")

    parts = [int(p) for p in value.strip().split(":")]
    if len(parts) == 2:
        parts.append(0)
    return time(*parts)


def parse_day(value: Union[date, str], field: str = "day") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DAY_RE.match(value.strip()):
        raise ValidationError(f"{field} must be YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date")


def seconds_of_day(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def duration_seconds(start, end) -> Optional[int]:
    """
    Duration of a stop in whole seconds.

    Returns None while the stop is open (no end). Full datetimes are
    subtracted and must not run backwards; time-of-day values wrap around
    midnight.
    """
    if end is None:
        return None

    if isinstance(start, datetime) and isinstance(end, datetime):
        delta = int((end - start).total_seconds())
        if delta < 0:
            raise ValidationError("stop instant must be >= start instant")
        return delta

    if isinstance(start, datetime) or isinstance(end, datetime):
        raise ValidationError("start and stop must both be timestamps or both be times of day")

    start_t = parse_time(start, "start_time")
    end_t = parse_time(end, "stop_time")
    return (seconds_of_day(end_t) - seconds_of_day(start_t)) % SECONDS_PER_DAY


def shift_of(start: TimeLike) -> int:
    """
    Shift (équipe) derived from the start time of day.

    1 = [06:00, 14:00), 2 = [14:00, 22:00), 3 = [22:00, 06:00)
    """
    seconds = seconds_of_day(parse_time(start, "start_time"))
    if SHIFT_1_START <= seconds < SHIFT_2_START:
        return 1
    if SHIFT_2_START <= seconds < SHIFT_3_START:
        return 2
    return 3


def is_micro_stop(duration: Optional[int], threshold_seconds: int = 30) -> bool:
    return duration is not None and duration < threshold_seconds


def shift_windows(shift: int) -> List[Tuple[int, int]]:
    """[start, end) seconds-of-day segments covered by a shift on one calendar day."""
    if shift == 1:
        return [(SHIFT_1_START, SHIFT_2_START)]
    if shift == 2:
        return [(SHIFT_2_START, SHIFT_3_START)]
    if shift == 3:
        # night shift straddles midnight
        return [(0, SHIFT_1_START), (SHIFT_3_START, SECONDS_PER_DAY)]
    raise ValidationError("shift must be 1, 2 or 3")


def parse_shift(value) -> Optional[int]:
    if value is None or value == "" or value == "all":
        return None
    try:
        shift = int(value)
    except (TypeError, ValueError):
        raise ValidationError("shift must be 1, 2 or 3")
    if shift not in SHIFTS:
        raise ValidationError("shift must be 1, 2 or 3")
    return shift
