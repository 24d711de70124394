"""Deployment Dispatcher.

All deployments go through here so that every one of them is templated and
flagged the same way. Deployments are created against the branch ref so
they can later be found by listing deployments for that ref.
"""

from typing import Any

from deploybot.core.exceptions import (
    ProviderError,
    ProviderRequestFailedError,
    TargetHasNoDeploymentsError,
    TargetNotFoundError,
)
from deploybot.core.templates import TemplateRenderer
from deploybot.models.config import DeploymentSpec, LookupStatus, Target, Targets
from deploybot.models.deployment import (
    CommitContext,
    DeploymentRecord,
    DeploymentRequest,
    RepoRef,
)
from deploybot.services.provider import DeploymentProvider
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)


async def build_commit_context(
    provider: DeploymentProvider,
    repo: RepoRef,
    ref: str,
    sha: str,
    pull_request: dict[str, Any] | None = None,
) -> CommitContext:
    """Fetch commit metadata and assemble the context templates render against."""
    commit = await provider.get_commit(repo, sha)
    return CommitContext(
        owner=repo.owner,
        repo=repo.repo,
        ref=ref,
        sha=sha,
        commit=commit,
        pull_request=pull_request,
    )


class DeploymentDispatcher:
    """Turns a target into deployment requests and submits them in order."""

    def __init__(self, provider: DeploymentProvider, renderer: TemplateRenderer):
        self.provider = provider
        self.renderer = renderer

    def build_request(
        self,
        target: Target,
        deployment: DeploymentSpec,
        context: CommitContext,
    ) -> DeploymentRequest:
        """Render one deployment spec into a provider request."""
        data = context.template_data(target.name)

        payload = self.renderer.render(deployment.payload, data)
        if payload is None or isinstance(payload, dict):
            payload = {"target": target.name, **(payload or {})}

        return DeploymentRequest(
            ref=context.ref,
            task=deployment.task or "deploy",
            environment=self.renderer.render(deployment.environment or "production", data),
            description=self.renderer.render(deployment.description, data) or "",
            payload=payload,
            auto_merge=deployment.auto_merge,
            required_contexts=list(target.required_contexts),
            transient_environment=target.transient_environment,
            production_environment=target.production_environment,
        )

    def environments(self, target: Target, context: CommitContext) -> set[str]:
        """Rendered environment names the target deploys to."""
        data = context.template_data(target.name)
        return {
            self.renderer.render(d.environment or "production", data)
            for d in target.deployments
        }

    async def dispatch(
        self, target: Target, context: CommitContext
    ) -> list[DeploymentRecord]:
        """Create every deployment of ``target`` for the commit, in order.

        Stops at the first provider failure. Deployments created before the
        failure are left in place.

        Raises:
            TargetHasNoDeploymentsError: If the target declares nothing to deploy
            ProviderRequestFailedError: With the request body that was rejected
        """
        log = logger.bind(
            repo=f"{context.owner}/{context.repo}",
            target=target.name,
            ref=context.ref,
            sha=context.sha,
        )
        if not target.deployments:
            log.info("deploy.failed", reason="no_deployments")
            raise TargetHasNoDeploymentsError(target.name)

        deployed: list[DeploymentRecord] = []
        for deployment in target.deployments:
            request = self.build_request(target, deployment, context)
            body = request.model_dump(mode="json")
            log.info("deploy.deploying", body=body)
            try:
                record = await self.provider.create_deployment(context.repository, request)
            except ProviderError as e:
                log.error("deploy.failed", error=e.message, body=body)
                raise ProviderRequestFailedError(e.message, body) from e

            log.info("deploy.successful", deployment_id=record.id, environment=record.environment)
            deployed.append(record)

        return deployed

    async def deploy(
        self, targets: Targets, name: str, context: CommitContext
    ) -> list[DeploymentRecord]:
        """Look a target up by name and dispatch it.

        Raises:
            TargetNotFoundError: If no target has that name
            TargetHasNoDeploymentsError: If the target declares nothing to deploy
            ProviderRequestFailedError: If the provider rejects a deployment
        """
        lookup = targets.lookup(name)
        if lookup.status == LookupStatus.MISSING:
            logger.info("deploy.failed", target=name, ref=context.ref, reason="no_target")
            raise TargetNotFoundError(name)
        if lookup.status == LookupStatus.EMPTY:
            logger.info("deploy.failed", target=name, ref=context.ref, reason="no_deployments")
            raise TargetHasNoDeploymentsError(name)

        return await self.dispatch(lookup.target, context)
