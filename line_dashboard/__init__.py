from line_dashboard.app import create_app
from line_dashboard.models import db

__all__ = ["create_app", "db"]
