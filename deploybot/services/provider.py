"""Remote deployment provider interface."""

from abc import ABC, abstractmethod
from typing import Any

from deploybot.models.deployment import (
    DeploymentRecord,
    DeploymentRequest,
    DeploymentState,
    RepoRef,
)


class DeploymentProvider(ABC):
    """Everything the orchestration core needs from the remote provider.

    Implementations raise ``ProviderError`` when the remote rejects a call.
    """

    @abstractmethod
    async def get_commit(self, repo: RepoRef, sha: str) -> dict[str, Any]:
        """Fetch commit metadata."""

    @abstractmethod
    async def get_ref(self, repo: RepoRef, ref: str) -> str:
        """Resolve a ref such as ``heads/main`` to a commit sha."""

    @abstractmethod
    async def list_deployments(
        self,
        repo: RepoRef,
        sha: str | None = None,
        ref: str | None = None,
    ) -> list[DeploymentRecord]:
        """List deployments, most recent first."""

    @abstractmethod
    async def create_deployment(
        self, repo: RepoRef, request: DeploymentRequest
    ) -> DeploymentRecord:
        """Create a deployment."""

    @abstractmethod
    async def create_deployment_status(
        self, repo: RepoRef, deployment_id: int, state: DeploymentState
    ) -> None:
        """Record a status transition for a deployment."""

    @abstractmethod
    async def get_file_contents(self, repo: RepoRef, ref: str, path: str) -> str:
        """Return the base64 encoded contents of a file at a ref."""

    @abstractmethod
    async def get_pull_request(self, repo: RepoRef, number: int) -> dict[str, Any]:
        """Fetch a pull request."""

    @abstractmethod
    async def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> None:
        """Comment on an issue or pull request."""

    @abstractmethod
    async def get_collaborator_permission(self, repo: RepoRef, username: str) -> str:
        """Return the user's permission level (admin, maintain, write, ...)."""
