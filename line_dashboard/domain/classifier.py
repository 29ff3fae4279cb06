"""
Stop classification: micro-stop detection and effective cause resolution.

The classifier is pure. It never patches a previous decision; callers run it
again from scratch every time start, stop or cause changes.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from line_dashboard.domain.time_utils import duration_seconds, is_micro_stop, shift_of
from line_dashboard.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

CauseLookup = Callable[[str], Optional[Any]]


@dataclass(frozen=True)
class StopCandidate:
    start: Any
    stop: Any = None
    supplied_cause_code: Optional[str] = None
    # an edit that keeps the stored cause may keep a cause deactivated since
    allow_inactive_cause: bool = False


@dataclass(frozen=True)
class Classification:
    effective_cause: Any
    is_micro: bool
    duration_seconds: Optional[int]
    shift: int


# ----------------------------
# Missing cause strategies
# ----------------------------

class RejectMissingCause:
    """A real stop without a cause is refused."""

    name = "reject"

    def resolve(self, cause_lookup: CauseLookup):
        raise ValidationError("cause required")


class DefaultMissingCause:
    """A real stop without a cause falls back to a configured default."""

    name = "default"

    def __init__(self, cause_code: str):
        if not cause_code:
            raise ConfigurationError("DEFAULT_CAUSE_CODE must be set when MISSING_CAUSE_POLICY is 'default'")
        self.cause_code = cause_code

    def resolve(self, cause_lookup: CauseLookup):
        cause = cause_lookup(self.cause_code)
        if cause is None:
            raise ConfigurationError(f'Default cause "{self.cause_code}" is not provisioned')
        logger.info("No cause supplied, falling back to default cause %s", self.cause_code)
        return cause


@dataclass(frozen=True)
class ClassificationPolicy:
    micro_stop_threshold_seconds: int = 30
    non_considered_cause_code: str = "NC"
    missing_cause: Any = RejectMissingCause()

    @classmethod
    def from_config(cls, config: Mapping) -> "ClassificationPolicy":
        raw_threshold = config.get("MICRO_STOP_THRESHOLD_SECONDS", 30)
        try:
            threshold = int(raw_threshold)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"MICRO_STOP_THRESHOLD_SECONDS must be an integer, got {raw_threshold!r}"
            ) from None
        if threshold <= 0:
            raise ConfigurationError("MICRO_STOP_THRESHOLD_SECONDS must be positive")

        reserved = config.get("NON_CONSIDERED_CAUSE_CODE") or ""
        if not reserved.strip():
            raise ConfigurationError("NON_CONSIDERED_CAUSE_CODE must be set")

        policy_name = (config.get("MISSING_CAUSE_POLICY") or "reject").strip().lower()
        if policy_name == "reject":
            missing = RejectMissingCause()
        elif policy_name == "default":
            missing = DefaultMissingCause((config.get("DEFAULT_CAUSE_CODE") or "").strip())
        else:
            raise ConfigurationError(f"Unknown MISSING_CAUSE_POLICY: {policy_name}")

        return cls(
            micro_stop_threshold_seconds=threshold,
            non_considered_cause_code=reserved.strip(),
            missing_cause=missing
        )


class StopClassifier:

    def __init__(self, policy: ClassificationPolicy = None):
        self.policy = policy or ClassificationPolicy()

    def classify(self, candidate: StopCandidate, cause_lookup: CauseLookup) -> Classification:
        if candidate.supplied_cause_code is not None and not isinstance(candidate.supplied_cause_code, str):
            raise ValidationError("cause_code must be a string")

        duration = duration_seconds(candidate.start, candidate.stop)
        shift = shift_of(candidate.start)

        if is_micro_stop(duration, self.policy.micro_stop_threshold_seconds):
            reserved = cause_lookup(self.policy.non_considered_cause_code)
            if reserved is None:
                raise ConfigurationError(
                    f'Reserved cause "{self.policy.non_considered_cause_code}" is not provisioned'
                )
            if candidate.supplied_cause_code and candidate.supplied_cause_code != reserved.code:
                logger.info(
                    "Micro-stop of %ss: cause %s replaced by %s",
                    duration, candidate.supplied_cause_code, reserved.code
                )
            return Classification(reserved, True, duration, shift)

        code = (candidate.supplied_cause_code or "").strip()
        if code:
            if code == self.policy.non_considered_cause_code:
                raise ValidationError(f'cause "{code}" is reserved for micro-stops')
            cause = cause_lookup(code)
            if cause is None:
                raise ValidationError(f'unknown cause "{code}"')
            if getattr(cause, "is_active", True) is False and not candidate.allow_inactive_cause:
                raise ValidationError(f'inactive cause "{code}"')
        else:
            cause = self.policy.missing_cause.resolve(cause_lookup)

        return Classification(cause, False, duration, shift)
