"""
Timestamped line measurements (meterage and speed).
Both are immutable once recorded.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Numeric, String

from line_dashboard.models.cause import db


class MeterageEntry(db.Model):
    __tablename__ = "metrage_entries"

    id = Column(Integer, primary_key=True)
    recorded_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    meters = Column(Numeric(12, 3), nullable=False)
    note = Column(String(40))

    # name of the measured column, used by the generic sample repository
    value_field = "meters"

    def to_dict(self):
        return {
            "id": self.id,
            "recorded_at": self.recorded_at.isoformat(),
            "meters": float(self.meters),
            "note": self.note
        }


class SpeedSample(db.Model):
    __tablename__ = "speed_samples"

    id = Column(Integer, primary_key=True)
    recorded_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    speed = Column(Numeric(10, 3), nullable=False)
    note = Column(String(40))

    value_field = "speed"

    def to_dict(self):
        return {
            "id": self.id,
            "recorded_at": self.recorded_at.isoformat(),
            "speed": float(self.speed),
            "note": self.note
        }
