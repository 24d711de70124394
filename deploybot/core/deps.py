"""Collaborators handed to event handlers."""

from dataclasses import dataclass, field

from deploybot.config import Settings, settings as default_settings
from deploybot.core.dispatcher import DeploymentDispatcher
from deploybot.core.locks import LockStore
from deploybot.core.resolver import ConfigResolver
from deploybot.core.templates import TemplateRenderer
from deploybot.models.deployment import RepoRef
from deploybot.services.provider import DeploymentProvider


@dataclass
class HandlerDeps:
    """Everything a handler may touch. Passed explicitly, never global."""

    provider: DeploymentProvider
    resolver: ConfigResolver
    dispatcher: DeploymentDispatcher
    locks: LockStore
    settings: Settings = field(default_factory=lambda: default_settings)

    @classmethod
    def create(
        cls,
        provider: DeploymentProvider,
        locks: LockStore | None = None,
        settings: Settings | None = None,
    ) -> "HandlerDeps":
        """Wire the default resolver, renderer and dispatcher around a provider."""
        settings = settings or default_settings
        return cls(
            provider=provider,
            resolver=ConfigResolver(provider, settings.deploy_config_path),
            dispatcher=DeploymentDispatcher(provider, TemplateRenderer()),
            locks=locks or LockStore(),
            settings=settings,
        )


def lock_key(repo: RepoRef, target: str, ref: str) -> str:
    """Key serializing deploys of one target at one ref."""
    return f"{repo.full_name}:{target}:{ref}"
