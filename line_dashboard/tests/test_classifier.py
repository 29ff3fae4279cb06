from dataclasses import dataclass

import pytest

from line_dashboard.domain.classifier import (
    ClassificationPolicy, DefaultMissingCause, RejectMissingCause, StopCandidate, StopClassifier
)
from line_dashboard.errors import ConfigurationError, ValidationError


@dataclass(frozen=True)
class FakeCause:
    code: str
    id: int = 0
    is_active: bool = True


CAUSES = {
    "NC": FakeCause("NC", 1),
    "MEC": FakeCause("MEC", 2),
    "DEF": FakeCause("DEF", 3),
    "OLD": FakeCause("OLD", 4, is_active=False),
}


def lookup(code):
    return CAUSES.get(code)


def test_micro_stop_gets_reserved_cause_regardless_of_supplied_cause():
    classifier = StopClassifier()

    result = classifier.classify(StopCandidate("10:00:00", "10:00:20", "MEC"), lookup)

    assert result.is_micro is True
    assert result.effective_cause.code == "NC"
    assert result.duration_seconds == 20


def test_micro_stop_ignores_unknown_supplied_cause():
    result = StopClassifier().classify(StopCandidate("10:00:00", "10:00:05", "NOPE"), lookup)
    assert result.effective_cause.code == "NC"


def test_micro_stop_without_reserved_cause_is_configuration_error():
    with pytest.raises(ConfigurationError):
        StopClassifier().classify(StopCandidate("10:00:00", "10:00:20"), lambda code: None)


def test_real_stop_keeps_supplied_cause():
    result = StopClassifier().classify(StopCandidate("10:00:00", "10:05:00", "MEC"), lookup)

    assert result.is_micro is False
    assert result.effective_cause.code == "MEC"
    assert result.shift == 1


def test_real_stop_unknown_cause_rejected():
    with pytest.raises(ValidationError, match="unknown cause"):
        StopClassifier().classify(StopCandidate("10:00:00", "10:05:00", "NOPE"), lookup)


@pytest.mark.parametrize("code", [5, ["MEC"], {"code": "MEC"}])
def test_non_string_cause_code_rejected(code):
    with pytest.raises(ValidationError, match="must be a string"):
        StopClassifier().classify(StopCandidate("10:00:00", "10:05:00", code), lookup)


def test_reserved_cause_cannot_be_supplied_for_real_stop():
    with pytest.raises(ValidationError, match="reserved"):
        StopClassifier().classify(StopCandidate("10:00:00", "10:05:00", "NC"), lookup)

    result = StopClassifier().classify(StopCandidate("10:00:00", "10:00:05", "NC"), lookup)
    assert result.effective_cause.code == "NC"


def test_inactive_cause_rejected_unless_kept():
    with pytest.raises(ValidationError, match="inactive cause"):
        StopClassifier().classify(StopCandidate("10:00:00", "10:05:00", "OLD"), lookup)

    kept = StopCandidate("10:00:00", "10:05:00", "OLD", allow_inactive_cause=True)
    assert StopClassifier().classify(kept, lookup).effective_cause.code == "OLD"


def test_real_stop_without_cause_rejected_by_default():
    with pytest.raises(ValidationError, match="cause required"):
        StopClassifier().classify(StopCandidate("10:00:00", "10:05:00"), lookup)


def test_real_stop_without_cause_uses_default_when_configured():
    policy = ClassificationPolicy(missing_cause=DefaultMissingCause("DEF"))

    result = StopClassifier(policy).classify(StopCandidate("10:00:00", "10:05:00"), lookup)

    assert result.effective_cause.code == "DEF"
    assert result.is_micro is False


def test_default_cause_must_exist():
    policy = ClassificationPolicy(missing_cause=DefaultMissingCause("GONE"))
    with pytest.raises(ConfigurationError):
        StopClassifier(policy).classify(StopCandidate("10:00:00", "10:05:00"), lookup)


def test_open_stop_is_not_micro_and_needs_cause():
    result = StopClassifier().classify(StopCandidate("10:00:00", None, "MEC"), lookup)
    assert result.is_micro is False
    assert result.duration_seconds is None

    with pytest.raises(ValidationError):
        StopClassifier().classify(StopCandidate("10:00:00", None), lookup)


def test_midnight_crossing_stop_is_real_stop_in_night_shift():
    result = StopClassifier().classify(StopCandidate("23:59:50", "00:05:00", "MEC"), lookup)
    assert result.duration_seconds == 310
    assert result.shift == 3
    assert result.is_micro is False


def test_classification_is_idempotent():
    classifier = StopClassifier()
    candidate = StopCandidate("14:00:00", "14:00:10", "MEC")

    first = classifier.classify(candidate, lookup)
    second = classifier.classify(candidate, lookup)

    assert first == second


def test_policy_from_config_defaults_to_reject():
    policy = ClassificationPolicy.from_config({"NON_CONSIDERED_CAUSE_CODE": "NC"})
    assert isinstance(policy.missing_cause, RejectMissingCause)
    assert policy.micro_stop_threshold_seconds == 30


def test_policy_from_config_default_policy():
    policy = ClassificationPolicy.from_config({
        "NON_CONSIDERED_CAUSE_CODE": "NC",
        "MISSING_CAUSE_POLICY": "default",
        "DEFAULT_CAUSE_CODE": "DEF",
        "MICRO_STOP_THRESHOLD_SECONDS": 45,
    })
    assert policy.missing_cause.cause_code == "DEF"
    assert policy.micro_stop_threshold_seconds == 45


@pytest.mark.parametrize("config", [
    {"NON_CONSIDERED_CAUSE_CODE": "NC", "MISSING_CAUSE_POLICY": "default"},
    {"NON_CONSIDERED_CAUSE_CODE": "NC", "MISSING_CAUSE_POLICY": "guess"},
    {"NON_CONSIDERED_CAUSE_CODE": ""},
    {"NON_CONSIDERED_CAUSE_CODE": "NC", "MICRO_STOP_THRESHOLD_SECONDS": 0},
    {"NON_CONSIDERED_CAUSE_CODE": "NC", "MICRO_STOP_THRESHOLD_SECONDS": "abc"},
])
def test_policy_from_config_rejects_bad_settings(config):
    with pytest.raises(ConfigurationError):
        ClassificationPolicy.from_config(config)
