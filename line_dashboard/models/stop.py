from datetime import datetime

from sqlalchemy import Column, Integer, Date, Time, ForeignKey, Index
from sqlalchemy.orm import relationship

from line_dashboard.models.cause import db
from line_dashboard.domain.time_utils import duration_seconds, shift_of


class Stop(db.Model):
    """
    One machine stoppage on the line.

    duration_seconds and shift are written by the stop service on every
    mutation, the way a database generated column would be. Reads go
    through the computed properties so a backend that cannot keep the
    stored copies in sync still serves consistent values.
    """
    __tablename__ = "stops"
    __table_args__ = (
        Index("idx_stops_day_start_time", "day", "start_time"),
        Index("idx_stops_day_shift_start_time", "day", "shift", "start_time"),
    )

    id = Column(Integer, primary_key=True)

    day = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    stop_time = Column(Time)  # NULL while the line is still stopped

    cause_id = Column(Integer, ForeignKey("causes.id"), nullable=False, index=True)

    duration_seconds = Column(Integer)
    shift = Column(Integer, nullable=False)

    cause = relationship("Cause")

    @property
    def is_open(self):
        return self.stop_time is None

    @property
    def computed_duration(self):
        return duration_seconds(self.start_time, self.stop_time)

    @property
    def computed_shift(self):
        return shift_of(self.start_time)

    @property
    def start_instant(self):
        return datetime.combine(self.day, self.start_time)

    def to_dict(self):
        return {
            "id": self.id,
            "day": self.day.isoformat(),
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "stop_time": self.stop_time.strftime("%H:%M:%S") if self.stop_time else None,
            "duration_seconds": self.computed_duration,
            "shift": self.computed_shift,
            "cause_id": self.cause_id,
            "cause_code": self.cause.code if self.cause else None,
            "cause_name": self.cause.name if self.cause else None,
            "cause_category": self.cause.category if self.cause else None
        }
