"""Command Handler for ``/deploy <target>`` pull request comments."""

from deploybot.core.deps import HandlerDeps, lock_key
from deploybot.core.dispatcher import build_commit_context
from deploybot.core.exceptions import (
    DeploybotError,
    MalformedCommandError,
    PermissionDeniedError,
)
from deploybot.models.deployment import DeploymentRecord
from deploybot.models.events import IssueCommentCreatedEvent
from deploybot.models.outcome import CommandOutcome, OutcomeStatus
from deploybot.services.permissions import can_write
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)

FAILURE_PREFIX = ":rotating_light: Failed to trigger deployment. :rotating_light:"


def parse_command(body: str, prefix: str = "/deploy") -> str:
    """Extract the target name from a command comment.

    Raises:
        MalformedCommandError: If the comment is not ``<prefix> <target>``
    """
    tokens = body.split()
    if not tokens or tokens[0] != prefix:
        raise MalformedCommandError(f"Not a {prefix} command")
    if len(tokens) < 2:
        raise MalformedCommandError(f"{prefix} requires a target")
    return tokens[1]


async def handle_deploy_command(
    event: IssueCommentCreatedEvent, deps: HandlerDeps
) -> CommandOutcome:
    """Deploy the commented pull request's head commit to a target.

    Failures are reported back as a single comment on the pull request.
    Malformed commands and users without write access are ignored without
    any visible response.
    """
    repo = event.repository
    try:
        target = parse_command(event.body, deps.settings.command_prefix)
    except MalformedCommandError as e:
        logger.debug("pr_deploy.malformed_command", repo=repo.full_name, reason=e.message)
        return CommandOutcome(status=OutcomeStatus.IGNORED)

    log = logger.bind(
        repo=repo.full_name,
        issue=event.issue_number,
        user=event.user,
        target=target,
    )
    log.info("pr_deploy.handling_command", command=event.body)

    try:
        pr = await deps.provider.get_pull_request(repo, event.issue_number)
        if not await can_write(deps.provider, repo, event.user):
            raise PermissionDeniedError(event.user, repo.full_name)

        head_ref = pr["head"]["ref"]
        head_sha = pr["head"]["sha"]

        async def deploy() -> list[DeploymentRecord]:
            targets = await deps.resolver.resolve(repo, head_ref)
            context = await build_commit_context(
                deps.provider, repo, head_ref, head_sha, pull_request=pr
            )
            return await deps.dispatcher.deploy(targets, target, context)

        records = await deps.locks.lock(lock_key(repo, target, head_ref), deploy)
    except PermissionDeniedError:
        log.info("pr_deploy.no_write_privileges")
        return CommandOutcome(status=OutcomeStatus.DENIED, target=target)
    except Exception as e:
        message = e.message if isinstance(e, DeploybotError) else str(e)
        log.warning("pr_deploy.failed", error=message)
        posted = await _report_failure(deps, event, message)
        return CommandOutcome(
            status=OutcomeStatus.FAILED,
            target=target,
            error=message,
            comment_posted=posted,
        )

    log.info("pr_deploy.dispatched", deployments=[r.id for r in records])
    return CommandOutcome(
        status=OutcomeStatus.DISPATCHED,
        target=target,
        deployment_ids=[r.id for r in records],
    )


async def _report_failure(
    deps: HandlerDeps, event: IssueCommentCreatedEvent, message: str
) -> bool:
    try:
        await deps.provider.create_comment(
            event.repository,
            event.issue_number,
            f"{FAILURE_PREFIX}\n{message}",
        )
    except DeploybotError as e:
        logger.error(
            "pr_deploy.comment_failed",
            repo=event.repository.full_name,
            issue=event.issue_number,
            error=e.message,
        )
        return False
    return True
