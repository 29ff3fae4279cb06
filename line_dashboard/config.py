"""
Configuration Management
Loads settings from environment variables (and a local .env file)
"""
import os
from dotenv import load_dotenv

from line_dashboard.errors import ConfigurationError

load_dotenv()

INTEGER_SETTINGS = (
    "MICRO_STOP_THRESHOLD_SECONDS",
    "SHIFT_SECONDS",
    "STOPS_PAGE_LIMIT",
    "STOPS_MAX_LIMIT",
    "CAUSES_PAGE_LIMIT",
    "SAMPLES_PAGE_LIMIT",
    "SAMPLES_MAX_LIMIT",
    "NOTE_MAX_LENGTH",
)


class Config:
    """Application configuration"""

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///line_dashboard.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Stop classification
    MICRO_STOP_THRESHOLD_SECONDS = os.getenv("MICRO_STOP_THRESHOLD_SECONDS", 30)
    NON_CONSIDERED_CAUSE_CODE = os.getenv("NON_CONSIDERED_CAUSE_CODE", "NC")
    NON_CONSIDERED_CAUSE_NAME = os.getenv("NON_CONSIDERED_CAUSE_NAME", "Non considéré")
    MISSING_CAUSE_POLICY = os.getenv("MISSING_CAUSE_POLICY", "reject")  # reject | default
    DEFAULT_CAUSE_CODE = os.getenv("DEFAULT_CAUSE_CODE") or None

    # Aggregation
    OPEN_STOP_POLICY = os.getenv("OPEN_STOP_POLICY", "now")  # now | exclude
    SHIFT_SECONDS = os.getenv("SHIFT_SECONDS", 8 * 3600)

    # Listings
    STOPS_PAGE_LIMIT = os.getenv("STOPS_PAGE_LIMIT", 50)
    STOPS_MAX_LIMIT = os.getenv("STOPS_MAX_LIMIT", 100)
    CAUSES_PAGE_LIMIT = os.getenv("CAUSES_PAGE_LIMIT", 1000)
    SAMPLES_PAGE_LIMIT = os.getenv("SAMPLES_PAGE_LIMIT", 50)
    SAMPLES_MAX_LIMIT = os.getenv("SAMPLES_MAX_LIMIT", 100)

    NOTE_MAX_LENGTH = os.getenv("NOTE_MAX_LENGTH", 40)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    MICRO_STOP_THRESHOLD_SECONDS = 30
    NON_CONSIDERED_CAUSE_CODE = "NC"
    MISSING_CAUSE_POLICY = "reject"
    DEFAULT_CAUSE_CODE = None
    OPEN_STOP_POLICY = "now"


def coerce_integer_settings(config):
    """Convert the numeric settings in place; all of them must be positive."""
    for key in INTEGER_SETTINGS:
        raw = config.get(key)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {value}")
        config[key] = value
