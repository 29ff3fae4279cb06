import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from line_dashboard.domain.filters import CauseFilter
from line_dashboard.errors import ConflictError
from line_dashboard.models import db, Cause

logger = logging.getLogger(__name__)


class CauseRepository:

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def find_by_key(self, code: str) -> Optional[Cause]:
        if not code:
            return None
        return self.session.query(Cause).filter(Cause.code == code).one_or_none()

    def find_by_id(self, cause_id) -> Optional[Cause]:
        return self.session.get(Cause, cause_id)

    def all(self) -> List[Cause]:
        return self.session.query(Cause).order_by(Cause.code.asc()).all()

    def list(self, cause_filter: CauseFilter) -> Tuple[List[Cause], int]:
        query = self.session.query(Cause)

        if cause_filter.category:
            query = query.filter(Cause.category == cause_filter.category)
        if cause_filter.is_active is not None:
            query = query.filter(Cause.is_active == cause_filter.is_active)
        if cause_filter.affects_efficiency is not None:
            query = query.filter(Cause.affects_efficiency == cause_filter.affects_efficiency)
        if cause_filter.search:
            pattern = f"%{cause_filter.search}%"
            query = query.filter(or_(Cause.code.like(pattern), Cause.name.like(pattern)))

        total = query.count()
        items = (
            query.order_by(Cause.code.asc(), Cause.id.asc())
            .offset((cause_filter.page - 1) * cause_filter.limit)
            .limit(cause_filter.limit)
            .all()
        )
        return items, total

    def add(self, cause: Cause) -> Cause:
        self.session.add(cause)
        return self.save(cause)

    def save(self, cause: Cause) -> Cause:
        code = cause.code
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f'Cause with code "{code}" already exists.')
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to save cause %s", code)
            raise
        return cause
