"""
Downtime Analysis Module
Aggregates committed stops into downtime-by-cause and per-day summaries
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from line_dashboard.domain.filters import DateRange, StopFilter
from line_dashboard.errors import ConfigurationError
from line_dashboard.metrics.trs import (
    available_seconds, capped_work_seconds, reference_seconds, trs_percentage
)

logger = logging.getLogger(__name__)


# ==================== OPEN STOP POLICIES ====================

class QueryTimeOpenStops:
    """An open stop lasts until now."""

    name = "now"

    def effective_duration(self, stop, now: datetime) -> int:
        if not stop.is_open:
            return stop.computed_duration
        return max(0, int((now - stop.start_instant).total_seconds()))


class ExcludeOpenStops:
    """An open stop contributes no downtime until it is closed."""

    name = "exclude"

    def effective_duration(self, stop, now: datetime) -> int:
        if stop.is_open:
            return 0
        return stop.computed_duration


def open_stop_policy(name: str):
    policies = {
        "now": QueryTimeOpenStops,
        "exclude": ExcludeOpenStops
    }
    key = (name or "now").strip().lower()
    if key not in policies:
        raise ConfigurationError(f"Unknown OPEN_STOP_POLICY: {name}")
    return policies[key]()


# ==================== ANALYZER ====================

class DowntimeAnalyzer:
    """
    Read-only analytics over stop records.

    Rows are fetched unpaginated from the stop repository and aggregated in
    process, so open-stop and midnight-rollover rules behave the same on
    every storage backend.
    """

    def __init__(self, stop_repository, cause_repository, open_stops=None,
                 shift_seconds: int = 8 * 3600, now: Optional[datetime] = None):
        """
        Args:
            stop_repository: source of Stop rows (in_range)
            cause_repository: source of every Cause (all)
            open_stops: open stop policy, defaults to QueryTimeOpenStops
            shift_seconds: length of one shift
            now: query time, defaults to datetime.now() per call
        """
        self.stops = stop_repository
        self.causes = cause_repository
        self.open_stops = open_stops or QueryTimeOpenStops()
        self.shift_seconds = shift_seconds
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or datetime.now()

    def _matching_stops(self, date_range: DateRange, shift: Optional[int]):
        return self.stops.in_range(StopFilter(date_range=date_range, shift=shift))

    def downtime_by_cause(self, date_range: DateRange = DateRange(),
                          shift: Optional[int] = None) -> List[Dict]:
        """
        Total downtime per cause. Causes without matching stops are
        reported with 0 so the chart always lists every cause.
        """
        now = self.now
        totals = defaultdict(int)

        for stop in self._matching_stops(date_range, shift):
            totals[stop.cause_id] += self.open_stops.effective_duration(stop, now)

        results = [
            {
                "cause_id": cause.id,
                "cause_code": cause.code,
                "cause_name": cause.name or "Unnamed",
                "total_downtime_seconds": totals.get(cause.id, 0)
            }
            for cause in self.causes.all()
        ]

        results.sort(key=lambda r: (-r["total_downtime_seconds"], r["cause_code"]))
        return results

    def daily_summary(self, date_range: DateRange = DateRange(),
                      shift: Optional[int] = None) -> List[Dict]:
        """
        Per-day stop count, downtime, TRS-impacting downtime and capped work
        time, newest day first.
        """
        now = self.now
        days = {}

        for stop in self._matching_stops(date_range, shift):
            row = days.setdefault(stop.day, {
                "stops_count": 0,
                "total_downtime_seconds": 0,
                "trs_downtime_seconds": 0
            })
            duration = self.open_stops.effective_duration(stop, now)

            row["stops_count"] += 1
            row["total_downtime_seconds"] += duration
            if stop.cause is not None and stop.cause.affects_efficiency:
                row["trs_downtime_seconds"] += duration

        reference = reference_seconds(shift, self.shift_seconds)
        results = []

        for day in sorted(days, reverse=True):
            row = days[day]
            available = available_seconds(day, shift, now.date(), now.time(), self.shift_seconds)
            results.append({
                "day": day.isoformat(),
                **row,
                "total_work_seconds": capped_work_seconds(
                    row["total_downtime_seconds"], shift, self.shift_seconds
                ),
                "available_seconds": available,
                "trs_percentage": trs_percentage(available, row["trs_downtime_seconds"], reference)
            })

        logger.debug("Daily summary computed for %d day(s), shift=%s", len(results), shift)
        return results
