"""Repository permission checks."""

from deploybot.models.deployment import RepoRef
from deploybot.services.provider import DeploymentProvider

WRITE_PERMISSIONS = frozenset({"admin", "maintain", "write"})


async def can_write(provider: DeploymentProvider, repo: RepoRef, username: str) -> bool:
    """Check whether a user may push to the repository."""
    permission = await provider.get_collaborator_permission(repo, username)
    return permission in WRITE_PERMISSIONS
