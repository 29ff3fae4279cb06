from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from line_dashboard.domain.time_utils import parse_day, parse_shift
from line_dashboard.errors import ValidationError

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


def to_bool(value) -> Optional[bool]:
    """Loose boolean parsing for query strings and JSON bodies."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    raise ValidationError(f"invalid boolean value: {value!r}")


def parse_page(args: Mapping, default_limit: int, max_limit: Optional[int] = None):
    try:
        page = int(args.get("page") or 1)
        limit = int(args.get("limit") or default_limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be >= 1")
    if max_limit is not None and limit > max_limit:
        raise ValidationError(f"limit must be <= {max_limit}")
    return page, limit


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range; either end may be open."""
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise ValidationError("from must be <= to")

    @classmethod
    def from_args(cls, args: Mapping) -> "DateRange":
        start = args.get("from")
        end = args.get("to")
        return cls(
            start=parse_day(start, "from") if start else None,
            end=parse_day(end, "to") if end else None
        )

    def contains(self, day: date) -> bool:
        if self.start and day < self.start:
            return False
        if self.end and day > self.end:
            return False
        return True

    def to_dict(self):
        return {
            "from": self.start.isoformat() if self.start else None,
            "to": self.end.isoformat() if self.end else None
        }


@dataclass(frozen=True)
class StopFilter:
    date_range: DateRange = DateRange()
    shift: Optional[int] = None
    cause_code: Optional[str] = None
    page: int = 1
    limit: int = 50

    @classmethod
    def from_args(cls, args: Mapping, default_limit: int = 50, max_limit: int = 100) -> "StopFilter":
        page, limit = parse_page(args, default_limit, max_limit)
        cause_code = (args.get("cause_code") or "").strip() or None
        return cls(
            date_range=DateRange.from_args(args),
            shift=parse_shift(args.get("shift")),
            cause_code=cause_code,
            page=page,
            limit=limit
        )


@dataclass(frozen=True)
class CauseFilter:
    category: Optional[str] = None
    is_active: Optional[bool] = None
    affects_efficiency: Optional[bool] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 1000

    @classmethod
    def from_args(cls, args: Mapping, default_limit: int = 1000) -> "CauseFilter":
        page, limit = parse_page(args, default_limit)
        return cls(
            category=(args.get("category") or "").strip() or None,
            is_active=to_bool(args.get("is_active")),
            affects_efficiency=to_bool(args.get("affects_efficiency")),
            search=(args.get("search") or "").strip() or None,
            page=page,
            limit=limit
        )
