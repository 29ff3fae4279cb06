import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from line_dashboard.domain.filters import StopFilter
from line_dashboard.models import db, Cause, Stop

logger = logging.getLogger(__name__)


class StopRepository:

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def find_by_id(self, stop_id) -> Optional[Stop]:
        return self.session.get(Stop, stop_id)

    def _filtered(self, stop_filter: StopFilter):
        query = self.session.query(Stop)

        date_range = stop_filter.date_range
        if date_range.start:
            query = query.filter(Stop.day >= date_range.start)
        if date_range.end:
            query = query.filter(Stop.day <= date_range.end)
        if stop_filter.shift:
            query = query.filter(Stop.shift == stop_filter.shift)
        if stop_filter.cause_code:
            query = query.join(Stop.cause).filter(Cause.code == stop_filter.cause_code)

        return query

    def query(self, stop_filter: StopFilter) -> Tuple[List[Stop], int]:
        """Paginated listing, newest stops first."""
        query = self._filtered(stop_filter)
        total = query.count()
        items = (
            query.options(joinedload(Stop.cause))
            .order_by(Stop.day.desc(), Stop.start_time.desc(), Stop.id.desc())
            .offset((stop_filter.page - 1) * stop_filter.limit)
            .limit(stop_filter.limit)
            .all()
        )
        return items, total

    def in_range(self, stop_filter: StopFilter) -> List[Stop]:
        """Every matching stop, unpaginated, for in-process aggregation."""
        return (
            self._filtered(stop_filter)
            .options(joinedload(Stop.cause))
            .order_by(Stop.day.asc(), Stop.start_time.asc())
            .all()
        )

    def create(self, stop: Stop) -> Stop:
        self.session.add(stop)
        return self.update(stop)

    def update(self, stop: Stop) -> Stop:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to save stop")
            raise
        return stop
