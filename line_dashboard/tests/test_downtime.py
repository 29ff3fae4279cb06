from datetime import date, datetime, time

import pytest

from line_dashboard.analysis.downtime import (
    DowntimeAnalyzer, ExcludeOpenStops, QueryTimeOpenStops, open_stop_policy
)
from line_dashboard.domain.filters import DateRange
from line_dashboard.domain.time_utils import duration_seconds, shift_of
from line_dashboard.errors import ConfigurationError, ValidationError
from line_dashboard.models import Cause, Stop

NOW = datetime(2026, 5, 20, 15, 0, 0)

NC = Cause(id=1, code="NC", name="Non considéré", affects_efficiency=False)
MEC = Cause(id=2, code="MEC", name="Panne mécanique", affects_efficiency=True)
PAUSE = Cause(id=3, code="PAUSE", name="Pause", affects_efficiency=False)


class FakeStops:
    def __init__(self, stops):
        self.stops = stops

    def in_range(self, stop_filter):
        return [
            s for s in self.stops
            if stop_filter.date_range.contains(s.day)
            and (not stop_filter.shift or s.shift == stop_filter.shift)
        ]


class FakeCauses:
    def all(self):
        return [NC, MEC, PAUSE]


def make_stop(day, start, stop, cause):
    start_t = time.fromisoformat(start)
    stop_t = time.fromisoformat(stop) if stop else None
    return Stop(
        day=date.fromisoformat(day),
        start_time=start_t,
        stop_time=stop_t,
        cause_id=cause.id,
        cause=cause,
        duration_seconds=duration_seconds(start_t, stop_t),
        shift=shift_of(start_t)
    )


def analyzer(stops, open_stops=None):
    return DowntimeAnalyzer(FakeStops(stops), FakeCauses(), open_stops=open_stops, now=NOW)


def test_downtime_by_cause_lists_every_cause_sorted_desc():
    stops = [
        make_stop("2026-05-18", "08:00:00", "08:10:00", MEC),
        make_stop("2026-05-18", "09:00:00", "09:00:10", NC),
        make_stop("2026-05-19", "15:00:00", "15:05:00", MEC),
    ]

    rows = analyzer(stops).downtime_by_cause()

    assert [r["cause_code"] for r in rows] == ["MEC", "NC", "PAUSE"]
    assert rows[0]["total_downtime_seconds"] == 900
    assert rows[1]["total_downtime_seconds"] == 10
    assert rows[2]["total_downtime_seconds"] == 0


def test_downtime_by_cause_filters_shift_and_range():
    stops = [
        make_stop("2026-05-18", "08:00:00", "08:10:00", MEC),
        make_stop("2026-05-19", "15:00:00", "15:05:00", MEC),
        make_stop("2026-05-19", "16:00:00", "17:00:00", PAUSE),
    ]

    rows = analyzer(stops).downtime_by_cause(DateRange(date(2026, 5, 19), date(2026, 5, 19)), shift=2)

    totals = {r["cause_code"]: r["total_downtime_seconds"] for r in rows}
    assert totals == {"PAUSE": 3600, "MEC": 300, "NC": 0}


def test_open_stop_uses_query_time():
    stops = [make_stop("2026-05-20", "14:30:00", None, MEC)]

    rows = analyzer(stops).downtime_by_cause()

    assert rows[0]["cause_code"] == "MEC"
    assert rows[0]["total_downtime_seconds"] == 1800


def test_open_stop_excluded_under_exclude_policy():
    stops = [make_stop("2026-05-20", "14:30:00", None, MEC)]

    rows = analyzer(stops, ExcludeOpenStops()).daily_summary()

    assert rows[0]["stops_count"] == 1
    assert rows[0]["total_downtime_seconds"] == 0


def test_daily_summary_groups_by_day_newest_first():
    stops = [
        make_stop("2026-05-18", "08:00:00", "09:00:00", MEC),
        make_stop("2026-05-18", "10:00:00", "10:30:00", PAUSE),
        make_stop("2026-05-19", "07:00:00", "07:00:20", NC),
    ]

    rows = analyzer(stops).daily_summary()

    assert [r["day"] for r in rows] == ["2026-05-19", "2026-05-18"]
    day = rows[1]
    assert day["stops_count"] == 2
    assert day["total_downtime_seconds"] == 5400
    assert day["trs_downtime_seconds"] == 3600
    assert day["total_work_seconds"] == 86400 - 5400


def test_daily_summary_whole_day_work_time():
    stops = [make_stop("2026-05-18", "08:00:00", "09:00:00", MEC)]

    rows = analyzer(stops).daily_summary()

    assert rows[0]["total_work_seconds"] == 82800


def test_daily_summary_work_time_capped_with_shift_filter():
    # 30000s of downtime inside shift 1 on the same day
    stops = [
        make_stop("2026-05-18", "06:00:00", "13:00:00", MEC),
        make_stop("2026-05-18", "13:00:00", "13:40:00", MEC),
    ]

    rows = analyzer(stops).daily_summary(shift=1)

    assert rows[0]["total_downtime_seconds"] == 27600
    assert rows[0]["total_work_seconds"] == 1200


def test_daily_summary_thirty_thousand_seconds_in_one_shift_gives_zero_work():
    stops = [make_stop("2026-05-18", "13:00:00", "21:20:00", MEC)]
    # starts in shift 1, so it is attributed to shift 1 in full
    rows = analyzer(stops).daily_summary(shift=1)

    assert rows[0]["total_downtime_seconds"] == 30000
    assert rows[0]["total_work_seconds"] == 0
    assert rows[0]["trs_percentage"] == 0.0


def test_daily_summary_trs_for_today_uses_elapsed_shift_time():
    stops = [make_stop("2026-05-20", "14:10:00", "14:16:00", MEC)]

    rows = analyzer(stops).daily_summary(shift=2)

    # one hour of shift 2 elapsed at 15:00, six minutes lost
    assert rows[0]["available_seconds"] == 3600
    assert rows[0]["trs_percentage"] == round((3600 - 360) / 28800 * 100, 2)


def test_daily_summary_trs_for_past_day():
    stops = [make_stop("2026-05-18", "08:00:00", "08:48:00", MEC)]

    rows = analyzer(stops).daily_summary(shift=1)

    assert rows[0]["trs_percentage"] == 90.0


def test_range_validation():
    with pytest.raises(ValidationError):
        analyzer([]).daily_summary(DateRange(date(2026, 5, 20), date(2026, 5, 1)))


def test_open_stop_policy_lookup():
    assert isinstance(open_stop_policy("now"), QueryTimeOpenStops)
    assert isinstance(open_stop_policy("EXCLUDE"), ExcludeOpenStops)
    with pytest.raises(ConfigurationError):
        open_stop_policy("later")
