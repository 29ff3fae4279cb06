from line_dashboard.repositories.causes import CauseRepository
from line_dashboard.repositories.stops import StopRepository
from line_dashboard.repositories.samples import SampleRepository

__all__ = ["CauseRepository", "StopRepository", "SampleRepository"]
