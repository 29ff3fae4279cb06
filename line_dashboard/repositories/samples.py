import logging
from datetime import datetime, time, timedelta
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError

from line_dashboard.domain.filters import DateRange
from line_dashboard.models import db

logger = logging.getLogger(__name__)


class SampleRepository:
    """
    Storage for timestamped measurements (MeterageEntry, SpeedSample).
    """

    def __init__(self, model, session=None):
        self.model = model
        self.session = session if session is not None else db.session

    def _filtered(self, date_range: DateRange):
        query = self.session.query(self.model)
        if date_range.start:
            query = query.filter(self.model.recorded_at >= datetime.combine(date_range.start, time.min))
        if date_range.end:
            end = datetime.combine(date_range.end + timedelta(days=1), time.min)
            query = query.filter(self.model.recorded_at < end)
        return query

    def create(self, sample):
        self.session.add(sample)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to save %s", self.model.__tablename__)
            raise
        return sample

    def query(self, date_range: DateRange, page: int, limit: int) -> Tuple[List, int]:
        query = self._filtered(date_range)
        total = query.count()
        items = (
            query.order_by(self.model.recorded_at.desc(), self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def in_range(self, date_range: DateRange) -> List:
        return self._filtered(date_range).order_by(self.model.recorded_at.asc()).all()
