"""Teardown Handler for closed pull requests."""

from deploybot.core.deps import HandlerDeps
from deploybot.core.exceptions import DeploybotError
from deploybot.models.deployment import (
    DeploymentRecord,
    DeploymentRequest,
    DeploymentState,
)
from deploybot.models.events import PullRequestClosedEvent
from deploybot.models.outcome import OutcomeStatus, TeardownOutcome
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)


def removal_request(deployment: DeploymentRecord, sha: str) -> DeploymentRequest:
    """Build the ``remove`` deployment undoing ``deployment``.

    Removal targets the exact head commit and is never gated on statuses.
    """
    return DeploymentRequest(
        ref=sha,
        task="remove",
        required_contexts=[],
        payload=deployment.payload,
        environment=deployment.environment,
        description=deployment.description or "",
        transient_environment=deployment.transient_environment,
        production_environment=deployment.production_environment,
    )


async def handle_pr_close(event: PullRequestClosedEvent, deps: HandlerDeps) -> TeardownOutcome:
    """Deactivate a closed pull request's transient deployments.

    Every transient deployment on the head ref is marked inactive, then one
    ``remove`` deployment is created per environment using the latest
    deployment to it as the template. Non-transient deployments are left
    alone. Individual failures are logged and do not stop the pass.
    """
    repo = event.repository
    ref = event.head_ref
    log = logger.bind(repo=repo.full_name, ref=ref, pr=event.number)
    outcome = TeardownOutcome(ref=ref)

    try:
        deployments = await deps.provider.list_deployments(repo, ref=ref)
    except DeploybotError as e:
        log.error("pr_close.list_failed", error=e.message)
        outcome.status = OutcomeStatus.FAILED
        outcome.error = e.message
        return outcome
    log.info("pr_close.listed_deploys", count=len(deployments), merged=event.merged)

    # Oldest first, so the latest deployment per environment wins.
    environments: dict[str, DeploymentRecord] = {}
    for deployment in reversed(deployments):
        if not deployment.transient_environment:
            log.info("pr_close.not_transient", deployment=deployment.id)
            continue

        try:
            log.info("pr_close.mark_inactive", deployment=deployment.id)
            await deps.provider.create_deployment_status(
                repo, deployment.id, DeploymentState.INACTIVE
            )
            outcome.marked_inactive.append(deployment.id)
        except DeploybotError as e:
            log.error("pr_close.marking_inactive_failed", deployment=deployment.id, error=e.message)
            outcome.failures.append(f"inactive:{deployment.id}: {e.message}")

        environments[deployment.environment] = deployment

    log.info("pr_close.remove_deploys", environments=list(environments))
    for environment, deployment in environments.items():
        try:
            log.info("pr_close.remove_deploy", deployment=deployment.id, environment=environment)
            await deps.provider.create_deployment(
                repo, removal_request(deployment, event.head_sha)
            )
            outcome.removed_environments.append(environment)
        except DeploybotError as e:
            log.error("pr_close.failed_to_undeploy", deployment=deployment.id, error=e.message)
            outcome.failures.append(f"remove:{environment}: {e.message}")

    return outcome
