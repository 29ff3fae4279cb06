from datetime import date, time
from typing import Optional

from line_dashboard.domain.time_utils import seconds_of_day, shift_windows

SHIFTS_PER_DAY = 3


def reference_seconds(shift: Optional[int], shift_seconds: int) -> int:
    """One shift when a shift filter is active, otherwise the whole day."""
    return shift_seconds * (1 if shift else SHIFTS_PER_DAY)


def capped_work_seconds(total_downtime_seconds: int, shift: Optional[int], shift_seconds: int) -> int:
    """Available time minus downtime; downtime is capped so work time never goes negative."""
    capped_max = reference_seconds(shift, shift_seconds)
    return capped_max - min(total_downtime_seconds, capped_max)


def elapsed_in_shift(shift: int, now_time: time) -> int:
    """Seconds of the shift already elapsed on the current calendar day."""
    now_seconds = seconds_of_day(now_time)
    elapsed = 0
    for start, end in shift_windows(shift):
        elapsed += max(0, min(now_seconds, end) - start)
    return elapsed


def available_seconds(day: date, shift: Optional[int], today: date, now_time: time,
                      shift_seconds: int) -> int:
    reference = reference_seconds(shift, shift_seconds)

    if day > today:
        return 0
    if day < today or not shift:
        return reference
    return max(0, min(elapsed_in_shift(shift, now_time), reference))


def trs_percentage(available: int, trs_downtime_seconds: int, reference: int) -> float:
    """
    TRS = (available - TRS-impacting downtime) / reference * 100

    Floored at 0 when recorded downtime exceeds the time available so far.
    """
    if reference <= 0:
        return 0.0
    value = (available - trs_downtime_seconds) / reference * 100
    return round(max(value, 0.0), 2)
