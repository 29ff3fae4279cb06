"""
Error taxonomy for the line dashboard.

Every error carries the HTTP status it maps to so the Flask error handlers
can serialize it without a lookup table.
"""


class LineDashboardError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {
            "status": "error",
            "error": self.__class__.__name__,
            "message": self.message
        }


class ValidationError(LineDashboardError):
    """Malformed or logically inconsistent input."""
    status_code = 400


class NotFoundError(LineDashboardError):
    """Referenced stop or cause does not exist."""
    status_code = 404


class ConflictError(LineDashboardError):
    """Uniqueness violation, e.g. a duplicate cause code."""
    status_code = 409


class ConfigurationError(LineDashboardError):
    """
    Required reserved data or settings are missing.

    This is a setup fault, not a user input fault, and is logged at ERROR.
    """
    status_code = 500
