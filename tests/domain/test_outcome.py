"""Tests for DeploymentOutcome and the call models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from macdeploy.domain.models import CallAttempt, CallResult, DeploymentOutcome
from macdeploy.domain.types import CallStatus, DeploymentStage, Severity, severity_for


class TestDeploymentOutcome:
    def test_starts_successful(self) -> None:
        outcome = DeploymentOutcome(network_id="8056c2e21c000001")

        assert outcome.success is True
        assert outcome.errors == ()
        assert outcome.finalized is False

    def test_record_error_flips_success(self) -> None:
        outcome = DeploymentOutcome(network_id="n")
        outcome.record_error("join failed")

        assert outcome.success is False
        assert outcome.errors == ("join failed",)

    def test_success_is_monotonic(self) -> None:
        outcome = DeploymentOutcome(network_id="n")
        outcome.record_error("install failed")

        with pytest.raises(ValueError):
            outcome.success = True

    def test_finalized_outcome_is_read_only(self) -> None:
        outcome = DeploymentOutcome(network_id="n")
        outcome.mark_stage(DeploymentStage.RECONCILE)

        assert outcome.finalize() is outcome
        with pytest.raises(AttributeError):
            outcome.network_name = "Office"
        with pytest.raises(AttributeError):
            outcome.record_error("late")
        with pytest.raises(AttributeError):
            outcome.mark_stage(DeploymentStage.JOIN)
        assert outcome.stages == (DeploymentStage.RECONCILE,)

    def test_histories_cannot_be_mutated_in_place(self) -> None:
        outcome = DeploymentOutcome(network_id="n")
        outcome.record_error("authorize failed")
        outcome.finalize()

        with pytest.raises(AttributeError):
            outcome.errors.append("late")  # type: ignore[attr-defined]
        with pytest.raises(AttributeError):
            outcome.stages.append(DeploymentStage.JOIN)  # type: ignore[attr-defined]
        assert outcome.errors == ("authorize failed",)


class TestCallModels:
    def test_attempt_is_one_based(self) -> None:
        with pytest.raises(ValidationError):
            CallAttempt(attempt=0, timeout=10.0)

    def test_json_body(self) -> None:
        assert CallResult(status=CallStatus.OK, response='{"a": 1}').json_body() == {"a": 1}
        assert CallResult(status=CallStatus.OK, response="[1]").json_body() is None
        assert CallResult(status=CallStatus.OK, response="oops").json_body() is None
        assert CallResult(status=CallStatus.FAILED).json_body() is None


class TestSeverityFor:
    @pytest.mark.parametrize(
        ("success", "interrupted", "expected"),
        [
            (True, False, Severity.SUCCESS),
            (False, False, Severity.FAILURE),
            (False, True, Severity.INTERRUPTED),
            (True, True, Severity.INTERRUPTED),
        ],
    )
    def test_mapping(self, success, interrupted, expected) -> None:
        assert severity_for(success, interrupted) is expected
