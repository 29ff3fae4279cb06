import logging
from typing import Mapping, Optional

from line_dashboard.domain.filters import CauseFilter, to_bool
from line_dashboard.errors import NotFoundError, ValidationError
from line_dashboard.models import Cause

logger = logging.getLogger(__name__)

FIELD_LIMITS = {
    "code": 32,
    "name": 128,
    "category": 64,
    "description": 255
}


def clean_text(data: Mapping, field: str, required: bool = False) -> Optional[str]:
    value = data.get(field)
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")

    value = value.strip()
    if not value:
        if required:
            raise ValidationError(f"{field} must not be empty")
        return None
    if len(value) > FIELD_LIMITS[field]:
        raise ValidationError(f"{field} must be <= {FIELD_LIMITS[field]} characters")
    return value


class CauseService:

    def __init__(self, cause_repository, reserved_code: Optional[str] = None):
        self.causes = cause_repository
        self.reserved_code = reserved_code

    def create_cause(self, data: Mapping) -> Cause:
        affects_efficiency = to_bool(data.get("affects_efficiency"))
        is_active = to_bool(data.get("is_active"))

        cause = Cause(
            code=clean_text(data, "code", required=True),
            name=clean_text(data, "name", required=True),
            category=clean_text(data, "category"),
            description=clean_text(data, "description"),
            affects_efficiency=True if affects_efficiency is None else affects_efficiency,
            is_active=True if is_active is None else is_active
        )

        self.causes.add(cause)
        logger.info("Created cause %s (%s)", cause.code, cause.name)
        return cause

    def list_causes(self, cause_filter: CauseFilter):
        items, total = self.causes.list(cause_filter)
        return {
            "items": [c.to_dict() for c in items],
            "total": total,
            "page": cause_filter.page,
            "limit": cause_filter.limit
        }

    def get_cause(self, cause_id) -> Cause:
        cause = self.causes.find_by_id(cause_id)
        if cause is None:
            raise NotFoundError(f"Cause id={cause_id} not found")
        return cause

    def update_cause(self, cause_id, patch: Mapping) -> Cause:
        cause = self.get_cause(cause_id)

        if self.reserved_code and cause.code == self.reserved_code:
            self._check_reserved_patch(patch)

        if "code" in patch:
            cause.code = clean_text(patch, "code", required=True)
        if "name" in patch:
            cause.name = clean_text(patch, "name", required=True)
        if "category" in patch:
            cause.category = clean_text(patch, "category")
        if "description" in patch:
            cause.description = clean_text(patch, "description")

        for flag in ("affects_efficiency", "is_active"):
            if flag in patch:
                value = to_bool(patch[flag])
                if value is None:
                    raise ValidationError(f"{flag} must be a boolean")
                setattr(cause, flag, value)

        self.causes.save(cause)
        logger.info("Updated cause %s", cause.code)
        return cause

    def _check_reserved_patch(self, patch: Mapping):
        # the classifier looks the reserved cause up by code
        if "code" in patch and clean_text(patch, "code", required=True) != self.reserved_code:
            raise ValidationError(f'code of reserved cause "{self.reserved_code}" cannot be changed')
        if "is_active" in patch and to_bool(patch["is_active"]) is False:
            raise ValidationError(f'reserved cause "{self.reserved_code}" cannot be deactivated')

    def ensure_cause(self, code: str, name: str, affects_efficiency: bool = False) -> Cause:
        """Provision a reserved cause if it does not exist yet."""
        cause = self.causes.find_by_key(code)
        if cause is not None:
            return cause

        cause = Cause(
            code=code,
            name=name,
            category="Système",
            affects_efficiency=affects_efficiency,
            is_active=True
        )
        self.causes.add(cause)
        logger.info("Provisioned reserved cause %s", code)
        return cause
