"""Pydantic v2 models for remote calls, deployment outcomes, and notifications."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from macdeploy.domain.types import CallStatus, DeploymentStage, Severity


class CallAttempt(BaseModel):
    """One try of a remote operation inside the retry loop.

    ``delay_before_next`` is ``None`` for the attempt that ended the loop,
    either by succeeding or by exhausting the attempt budget.
    """

    model_config = ConfigDict(frozen=True)

    attempt: int
    timeout: float
    delay_before_next: float | None = None
    response: str | None = None
    error: str | None = None

    @field_validator("attempt")
    @classmethod
    def attempt_must_be_one_based(cls, v: int) -> int:
        """Ensure the attempt index starts at 1."""
        if v < 1:
            raise ValueError("attempt index is 1-based")
        return v


class CallResult(BaseModel):
    """Classified result of ``call_with_retry``.

    Carries the response body on success, the last observed error on failure,
    and the full attempt history either way.
    """

    model_config = ConfigDict(frozen=True)

    status: CallStatus
    response: str | None = None
    error: str | None = None
    attempts: list[CallAttempt] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if the call produced a non-empty response."""
        return self.status is CallStatus.OK

    @property
    def attempt_count(self) -> int:
        """Return how many attempts were made."""
        return len(self.attempts)

    def json_body(self) -> dict[str, Any] | None:
        """Decode the response as a JSON object, or ``None`` if it is not one."""
        if not self.response:
            return None
        try:
            data = json.loads(self.response)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None


class DeploymentOutcome(BaseModel):
    """Aggregate result of the install -> join -> authorize -> rename sequence.

    Mutated incrementally by the sequencer through :meth:`record_error` and
    :meth:`mark_stage`. ``success`` is monotonic: once a step fails it can
    never be set back to ``True``. ``errors`` and ``stages`` are tuples, so
    they only grow through those methods. After :meth:`finalize` the outcome
    is read-only.
    """

    network_id: str
    hostname: str = ""
    member_id: str = ""
    network_name: str = ""
    success: bool = True
    interrupted: bool = False
    completed: bool = False
    errors: tuple[str, ...] = ()
    stages: tuple[DeploymentStage, ...] = ()

    _finalized: bool = PrivateAttr(default=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_"):
            if self._finalized:
                raise AttributeError(f"DeploymentOutcome is finalized; cannot set {name!r}")
            if name == "success" and value and not self.success:
                raise ValueError("success cannot be reset to True after a failure")
        super().__setattr__(name, value)

    @property
    def finalized(self) -> bool:
        """Return True once the sequence has terminated."""
        return self._finalized

    def record_error(self, message: str) -> None:
        """Append an error message and permanently flip ``success`` to False."""
        if self._finalized:
            raise AttributeError("DeploymentOutcome is finalized; cannot record errors")
        self.errors = (*self.errors, message)
        self.success = False

    def mark_stage(self, stage: DeploymentStage) -> None:
        """Record that *stage* has been reached."""
        if self._finalized:
            raise AttributeError("DeploymentOutcome is finalized; cannot mark stages")
        self.stages = (*self.stages, stage)

    def finalize(self) -> DeploymentOutcome:
        """Freeze the outcome and return it."""
        self._finalized = True
        return self


class NotificationField(BaseModel):
    """A single title/value pair in a notification attachment."""

    model_config = ConfigDict(frozen=True)

    title: str
    value: str
    short: bool = True


class NotificationAction(BaseModel):
    """A link button attached to a notification."""

    model_config = ConfigDict(frozen=True)

    text: str
    url: str
    style: str = "primary"


class NotificationMessage(BaseModel):
    """A formatted deployment status report, created once per run."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    title: str
    color: str
    icon: str
    field_list: list[NotificationField]
    action: NotificationAction | None = None
