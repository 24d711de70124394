"""Inbound webhook event models.

The set of events is closed: anything that is not one of these variants is
ignored before it reaches a handler.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from deploybot.models.deployment import RepoRef


class RepositoryEvent(BaseModel):
    """Fields shared by every event."""

    repository: RepoRef
    default_branch: str = "main"

    @property
    def refs(self) -> list[str]:
        """Refs (without ``refs/``) the event relates to."""
        return []


class PushEvent(RepositoryEvent):
    kind: Literal["push"] = "push"
    ref: str
    sha: str

    @property
    def refs(self) -> list[str]:
        ref = self.ref
        if ref.startswith("refs/"):
            ref = ref[len("refs/") :]
        return [ref]


class StatusEvent(RepositoryEvent):
    kind: Literal["status"] = "status"
    sha: str
    branches: list[str] = Field(default_factory=list)

    @property
    def refs(self) -> list[str]:
        return [f"heads/{branch}" for branch in self.branches]


class CheckRunEvent(RepositoryEvent):
    kind: Literal["check_run"] = "check_run"
    sha: str
    head_branch: str | None = None

    @property
    def refs(self) -> list[str]:
        return [f"heads/{self.head_branch}"] if self.head_branch else []


class IssueCommentCreatedEvent(RepositoryEvent):
    kind: Literal["issue_comment.created"] = "issue_comment.created"
    issue_number: int
    body: str
    user: str


class PullRequestClosedEvent(RepositoryEvent):
    kind: Literal["pull_request.closed"] = "pull_request.closed"
    number: int
    head_ref: str
    head_sha: str
    merged: bool = False


WebhookEvent = Annotated[
    Union[
        PushEvent,
        StatusEvent,
        CheckRunEvent,
        IssueCommentCreatedEvent,
        PullRequestClosedEvent,
    ],
    Field(discriminator="kind"),
]

# Events that can change the commit a ref points at, or its readiness.
RefStateEvent = PushEvent | StatusEvent | CheckRunEvent
