from line_dashboard.models.cause import db, Cause
from line_dashboard.models.stop import Stop
from line_dashboard.models.samples import MeterageEntry, SpeedSample

__all__ = ["db", "Cause", "Stop", "MeterageEntry", "SpeedSample"]
