import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Mapping

from line_dashboard.domain.filters import DateRange
from line_dashboard.errors import ValidationError
from line_dashboard.metrics.throughput import (
    daily_meterage_series, daily_speed_series, meterage_total, speed_summary
)
from line_dashboard.models import MeterageEntry, SpeedSample

logger = logging.getLogger(__name__)


def parse_recorded_at(value) -> datetime:
    if value is None or value == "":
        return datetime.now()
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("recorded_at must be an ISO 8601 datetime")


def parse_measure(value, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required and must be a number")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number")
    if number < 0:
        raise ValidationError(f"{field} must be >= 0")
    return number


class SampleService:
    """Shared create / list behaviour for timestamped measurements."""

    model = None

    def __init__(self, sample_repository, note_max_length: int = 40):
        self.samples = sample_repository
        self.note_max_length = note_max_length

    def _note(self, value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError("note must be a string")
        note = value.strip() or None
        if note and len(note) > self.note_max_length:
            raise ValidationError(f"note must be <= {self.note_max_length} characters")
        return note

    def create(self, data: Mapping):
        field = self.model.value_field
        sample = self.model(
            recorded_at=parse_recorded_at(data.get("recorded_at")),
            note=self._note(data.get("note")),
            **{field: parse_measure(data.get(field), field)}
        )
        self.samples.create(sample)
        logger.info("Recorded %s=%s at %s", field, getattr(sample, field), sample.recorded_at)
        return sample

    def list(self, date_range: DateRange, page: int, limit: int):
        items, total = self.samples.query(date_range, page, limit)
        return {
            "items": [s.to_dict() for s in items],
            "total": total,
            "page": page,
            "limit": limit
        }


class MeterageService(SampleService):
    model = MeterageEntry

    def daily_series(self, date_range: DateRange):
        return daily_meterage_series(self.samples.in_range(date_range))

    def total(self, date_range: DateRange):
        return {
            **date_range.to_dict(),
            "total_meters": meterage_total(self.samples.in_range(date_range))
        }


class SpeedService(SampleService):
    model = SpeedSample

    def daily_series(self, date_range: DateRange):
        return daily_speed_series(self.samples.in_range(date_range))

    def summary(self, date_range: DateRange):
        return {
            **date_range.to_dict(),
            **speed_summary(self.samples.in_range(date_range))
        }
