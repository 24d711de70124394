"""External service integrations."""

from deploybot.services.github import GitHubProvider
from deploybot.services.permissions import can_write
from deploybot.services.provider import DeploymentProvider

__all__ = ["DeploymentProvider", "GitHubProvider", "can_write"]
