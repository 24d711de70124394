"""Auto-Deploy Evaluator.

Runs on every event that can move a ref or change its readiness. Each target
with ``auto_deploy_on`` set is deployed unless the commit its ref points at
already has a deployment to one of the target's environments. The
deployments themselves come from the configuration on the branch being
deployed. Nothing is kept locally; the provider is the source of truth.
"""

from deploybot.core.deps import HandlerDeps, lock_key
from deploybot.core.dispatcher import build_commit_context
from deploybot.core.exceptions import ConfigNotFoundError, DeploybotError
from deploybot.models.config import Target
from deploybot.models.events import RefStateEvent
from deploybot.models.outcome import AutoDeployOutcome, OutcomeStatus, TargetOutcome
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)


def deploy_ref(git_ref: str) -> str:
    """Branch or tag name for a git ref like ``heads/main``."""
    for prefix in ("heads/", "tags/"):
        if git_ref.startswith(prefix):
            return git_ref[len(prefix) :]
    return git_ref


async def handle_auto_deploy(event: RefStateEvent, deps: HandlerDeps) -> AutoDeployOutcome:
    """Evaluate every auto-deploy target. Never raises."""
    repo = event.repository
    logger.info("auto_deploy.checking", repo=repo.full_name, event_kind=event.kind)

    try:
        targets = await deps.resolver.resolve(repo, event.default_branch)
    except ConfigNotFoundError as e:
        logger.info("auto_deploy.no_config", repo=repo.full_name)
        return AutoDeployOutcome(status=OutcomeStatus.SKIPPED, error=e.message)
    except DeploybotError as e:
        logger.error("auto_deploy.config_failed", repo=repo.full_name, error=e.message)
        return AutoDeployOutcome(status=OutcomeStatus.FAILED, error=e.message)

    outcome = AutoDeployOutcome()
    for target in targets.auto_deploy_targets():
        outcome.targets.append(await auto_deploy_target(event, target, deps))
    return outcome


async def auto_deploy_target(
    event: RefStateEvent, target: Target, deps: HandlerDeps
) -> TargetOutcome:
    """Evaluate a single target, isolating its failures from the others."""
    repo = event.repository
    git_ref = target.auto_deploy_ref
    log = logger.bind(repo=repo.full_name, target=target.name, ref=git_ref)

    if event.refs and git_ref not in event.refs:
        log.debug("auto_deploy.ref_mismatch", event_refs=event.refs)
        return TargetOutcome(
            target=target.name,
            status=OutcomeStatus.SKIPPED,
            reason="ref_mismatch",
            ref=git_ref,
        )

    async def evaluate() -> TargetOutcome:
        log.info("auto_deploy.verifying")
        sha = await deps.provider.get_ref(repo, git_ref)
        existing = await deps.provider.list_deployments(repo, sha=sha)
        context = await build_commit_context(deps.provider, repo, deploy_ref(git_ref), sha)

        environments = deps.dispatcher.environments(target, context)
        if any(d.environment in environments for d in existing):
            log.info("auto_deploy.already_deployed", sha=sha)
            return TargetOutcome(
                target=target.name,
                status=OutcomeStatus.SKIPPED,
                reason="already_deployed",
                ref=git_ref,
                sha=sha,
            )

        # The branch being deployed governs its own deployments.
        log.info("auto_deploy.deploying", sha=sha)
        branch_targets = await deps.resolver.resolve(repo, context.ref)
        records = await deps.dispatcher.deploy(branch_targets, target.name, context)
        log.info("auto_deploy.done", sha=sha, deployments=[r.id for r in records])
        return TargetOutcome(
            target=target.name,
            status=OutcomeStatus.DISPATCHED,
            ref=git_ref,
            sha=sha,
            deployment_ids=[r.id for r in records],
        )

    try:
        key = lock_key(repo, target.name, deploy_ref(git_ref))
        return await deps.locks.lock(key, evaluate)
    except Exception as e:
        message = e.message if isinstance(e, DeploybotError) else str(e)
        log.error("auto_deploy.failed", error=message, exc_info=True)
        return TargetOutcome(
            target=target.name,
            status=OutcomeStatus.FAILED,
            ref=git_ref,
            error=message,
        )
