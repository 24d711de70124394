"""Data models for Deploybot."""

from deploybot.models.config import (
    DeploymentSpec,
    LookupStatus,
    Target,
    TargetLookup,
    Targets,
)
from deploybot.models.deployment import (
    CommitContext,
    DeploymentRecord,
    DeploymentRequest,
    DeploymentState,
    RepoRef,
)
from deploybot.models.events import (
    CheckRunEvent,
    IssueCommentCreatedEvent,
    PullRequestClosedEvent,
    PushEvent,
    RefStateEvent,
    StatusEvent,
    WebhookEvent,
)
from deploybot.models.outcome import (
    AutoDeployOutcome,
    CommandOutcome,
    HandlerOutcome,
    OutcomeStatus,
    TargetOutcome,
    TeardownOutcome,
)

__all__ = [
    # Config models
    "DeploymentSpec",
    "LookupStatus",
    "Target",
    "TargetLookup",
    "Targets",
    # Deployment models
    "CommitContext",
    "DeploymentRecord",
    "DeploymentRequest",
    "DeploymentState",
    "RepoRef",
    # Event models
    "CheckRunEvent",
    "IssueCommentCreatedEvent",
    "PullRequestClosedEvent",
    "PushEvent",
    "RefStateEvent",
    "StatusEvent",
    "WebhookEvent",
    # Outcome models
    "AutoDeployOutcome",
    "CommandOutcome",
    "HandlerOutcome",
    "OutcomeStatus",
    "TargetOutcome",
    "TeardownOutcome",
]
