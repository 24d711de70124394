"""Deployment data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RepoRef(BaseModel):
    """Owner/name pair identifying a repository."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class DeploymentState(str, Enum):
    """Deployment status states accepted by the provider."""

    ERROR = "error"
    FAILURE = "failure"
    INACTIVE = "inactive"
    IN_PROGRESS = "in_progress"
    QUEUED = "queued"
    PENDING = "pending"
    SUCCESS = "success"


class CommitContext(BaseModel):
    """Everything known about the commit being deployed."""

    owner: str
    repo: str
    ref: str
    sha: str
    commit: dict[str, Any] = Field(default_factory=dict)
    pull_request: dict[str, Any] | None = None

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def repository(self) -> RepoRef:
        return RepoRef(owner=self.owner, repo=self.repo)

    def template_data(self, target: str) -> dict[str, Any]:
        """Data exposed to deployment templates.

        Keys are part of the public contract with config authors; only ever
        add to them.
        """
        return {
            "ref": self.ref,
            "target": target,
            "owner": self.owner,
            "repo": self.repo,
            "sha": self.sha,
            "short_sha": self.short_sha,
            "commit": self.commit,
            "pr": self.pull_request.get("number") if self.pull_request else None,
            "pull_request": self.pull_request,
        }


class DeploymentRequest(BaseModel):
    """Body sent to the provider to create a deployment."""

    ref: str
    task: str = "deploy"
    environment: str = "production"
    description: str = ""
    payload: Any = None
    auto_merge: bool = False
    required_contexts: list[str] = Field(default_factory=list)
    transient_environment: bool = False
    production_environment: bool = False


class DeploymentRecord(BaseModel):
    """A deployment as stored by the provider. Read-only here."""

    model_config = ConfigDict(extra="ignore")

    id: int
    ref: str = ""
    sha: str = ""
    task: str = "deploy"
    environment: str = "production"
    description: str | None = None
    payload: Any = None
    transient_environment: bool = False
    production_environment: bool = False
    created_at: str | None = None
    status: DeploymentState | None = None
