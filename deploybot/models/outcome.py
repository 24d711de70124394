"""Handler outcome models.

Handlers for automatic triggers never raise; what happened, including
failures, is reported through these models instead.
"""

from enum import Enum

from pydantic import BaseModel, Field


class OutcomeStatus(str, Enum):
    """What a handler did with an event."""

    DISPATCHED = "dispatched"
    SKIPPED = "skipped"
    IGNORED = "ignored"
    DENIED = "denied"
    FAILED = "failed"
    COMPLETED = "completed"


class TargetOutcome(BaseModel):
    """Result of evaluating one target."""

    target: str
    status: OutcomeStatus
    reason: str | None = None
    ref: str | None = None
    sha: str | None = None
    deployment_ids: list[int] = Field(default_factory=list)
    error: str | None = None


class AutoDeployOutcome(BaseModel):
    """Result of an auto-deploy evaluation across all configured targets."""

    status: OutcomeStatus = OutcomeStatus.COMPLETED
    error: str | None = None
    targets: list[TargetOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> list[TargetOutcome]:
        return [t for t in self.targets if t.status == OutcomeStatus.FAILED]


class CommandOutcome(BaseModel):
    """Result of handling a ``/deploy`` comment."""

    status: OutcomeStatus
    target: str | None = None
    deployment_ids: list[int] = Field(default_factory=list)
    error: str | None = None
    comment_posted: bool = False


class TeardownOutcome(BaseModel):
    """Result of tearing down a closed pull request's deployments."""

    status: OutcomeStatus = OutcomeStatus.COMPLETED
    ref: str
    marked_inactive: list[int] = Field(default_factory=list)
    removed_environments: list[str] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)
    error: str | None = None


HandlerOutcome = AutoDeployOutcome | CommandOutcome | TeardownOutcome
