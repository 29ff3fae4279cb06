import logging
from datetime import date
from typing import Mapping

from line_dashboard.domain.classifier import StopCandidate, StopClassifier
from line_dashboard.domain.filters import StopFilter
from line_dashboard.domain.time_utils import parse_day, parse_time
from line_dashboard.errors import NotFoundError, ValidationError
from line_dashboard.models import Stop

logger = logging.getLogger(__name__)


def _optional_time(value, field):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_time(value, field)


class StopService:
    """
    Create, read and edit stops.

    Every write runs the classifier from scratch, so editing times can turn a
    real stop into a micro-stop (and back) and the cause follows.
    """

    def __init__(self, classifier: StopClassifier, stop_repository, cause_repository):
        self.classifier = classifier
        self.stops = stop_repository
        self.causes = cause_repository

    @property
    def reserved_code(self):
        return self.classifier.policy.non_considered_cause_code

    def _classify(self, start, stop_time, cause_code, allow_inactive_cause=False):
        candidate = StopCandidate(
            start=start,
            stop=stop_time,
            supplied_cause_code=cause_code,
            allow_inactive_cause=allow_inactive_cause
        )
        return self.classifier.classify(candidate, self.causes.find_by_key)

    def create_stop(self, data: Mapping) -> Stop:
        if not data.get("start_time"):
            raise ValidationError("start_time is required")

        day = parse_day(data["day"]) if data.get("day") else date.today()
        start = parse_time(data["start_time"], "start_time")
        stop_time = _optional_time(data.get("stop_time"), "stop_time")

        result = self._classify(start, stop_time, data.get("cause_code"))

        stop = Stop(
            day=day,
            start_time=start,
            stop_time=stop_time,
            cause_id=result.effective_cause.id,
            duration_seconds=result.duration_seconds,
            shift=result.shift
        )
        self.stops.create(stop)

        logger.info(
            "Created stop %s on %s %s (cause=%s, micro=%s)",
            stop.id, day, start, result.effective_cause.code, result.is_micro
        )
        return stop

    def get_stop(self, stop_id) -> Stop:
        stop = self.stops.find_by_id(stop_id)
        if stop is None:
            raise NotFoundError(f"Stop id={stop_id} not found")
        return stop

    def list_stops(self, stop_filter: StopFilter):
        items, total = self.stops.query(stop_filter)
        return {
            "items": [s.to_dict() for s in items],
            "total": total,
            "page": stop_filter.page,
            "limit": stop_filter.limit
        }

    def update_stop(self, stop_id, patch: Mapping) -> Stop:
        stop = self.get_stop(stop_id)

        day = parse_day(patch["day"]) if patch.get("day") else stop.day
        start = parse_time(patch["start_time"], "start_time") if patch.get("start_time") else stop.start_time
        if "stop_time" in patch:
            stop_time = _optional_time(patch["stop_time"], "stop_time")
        else:
            stop_time = stop.stop_time

        kept_cause = False
        if "cause_code" in patch:
            cause_code = patch["cause_code"]
        elif stop.cause is not None and stop.cause.code != self.reserved_code:
            cause_code = stop.cause.code
            kept_cause = True
        else:
            # the reserved cause is only ever assigned by the classifier
            cause_code = None

        result = self._classify(start, stop_time, cause_code, allow_inactive_cause=kept_cause)

        stop.day = day
        stop.start_time = start
        stop.stop_time = stop_time
        stop.cause_id = result.effective_cause.id
        stop.cause = result.effective_cause
        stop.duration_seconds = result.duration_seconds
        stop.shift = result.shift
        self.stops.update(stop)

        logger.info(
            "Updated stop %s (cause=%s, micro=%s)",
            stop.id, result.effective_cause.code, result.is_micro
        )
        return stop
