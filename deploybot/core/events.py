"""Inbound event parsing and routing."""

from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from deploybot.core.auto_deploy import handle_auto_deploy
from deploybot.core.commands import handle_deploy_command
from deploybot.core.deps import HandlerDeps
from deploybot.core.exceptions import WebhookPayloadError
from deploybot.core.teardown import handle_pr_close
from deploybot.models.deployment import RepoRef
from deploybot.models.events import (
    CheckRunEvent,
    IssueCommentCreatedEvent,
    PullRequestClosedEvent,
    PushEvent,
    StatusEvent,
    WebhookEvent,
)
from deploybot.models.outcome import HandlerOutcome
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any, HandlerDeps], Awaitable[HandlerOutcome]]


def _repository_fields(payload: dict[str, Any]) -> dict[str, Any]:
    repository = payload["repository"]
    return {
        "repository": RepoRef(
            owner=repository["owner"]["login"],
            repo=repository["name"],
        ),
        "default_branch": repository.get("default_branch") or "main",
    }


def _parse_push(payload: dict[str, Any]) -> PushEvent | None:
    # Branch deletions point at the null sha.
    if payload.get("deleted"):
        return None
    return PushEvent(ref=payload["ref"], sha=payload["after"], **_repository_fields(payload))


def _parse_status(payload: dict[str, Any]) -> StatusEvent:
    return StatusEvent(
        sha=payload["sha"],
        branches=[branch["name"] for branch in payload.get("branches") or []],
        **_repository_fields(payload),
    )


def _parse_check_run(payload: dict[str, Any]) -> CheckRunEvent | None:
    if payload.get("action") != "completed":
        return None
    check_run = payload["check_run"]
    check_suite = check_run.get("check_suite") or {}
    return CheckRunEvent(
        sha=check_run["head_sha"],
        head_branch=check_suite.get("head_branch"),
        **_repository_fields(payload),
    )


def _parse_issue_comment(payload: dict[str, Any]) -> IssueCommentCreatedEvent | None:
    if payload.get("action") != "created":
        return None
    issue = payload["issue"]
    comment = payload["comment"]
    return IssueCommentCreatedEvent(
        issue_number=issue["number"],
        body=comment.get("body") or "",
        user=comment["user"]["login"],
        **_repository_fields(payload),
    )


def _parse_pull_request(payload: dict[str, Any]) -> PullRequestClosedEvent | None:
    if payload.get("action") != "closed":
        return None
    pull_request = payload["pull_request"]
    return PullRequestClosedEvent(
        number=pull_request["number"],
        head_ref=pull_request["head"]["ref"],
        head_sha=pull_request["head"]["sha"],
        merged=bool(pull_request.get("merged")),
        **_repository_fields(payload),
    )


_PARSERS: dict[str, Callable[[dict[str, Any]], WebhookEvent | None]] = {
    "push": _parse_push,
    "status": _parse_status,
    "check_run": _parse_check_run,
    "issue_comment": _parse_issue_comment,
    "pull_request": _parse_pull_request,
}


def parse_event(name: str, payload: Any) -> WebhookEvent | None:
    """Turn a GitHub webhook into an event, or ``None`` if it is not handled.

    Raises:
        WebhookPayloadError: If a handled event is missing required fields
    """
    parser = _PARSERS.get(name)
    if parser is None:
        return None
    if not isinstance(payload, dict):
        raise WebhookPayloadError(name, "payload must be a JSON object")
    try:
        return parser(payload)
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise WebhookPayloadError(name, str(e)) from e


class EventRouter:
    """Routes each event variant to its handler."""

    def __init__(self) -> None:
        self._handlers: dict[type, Handler] = {
            PushEvent: handle_auto_deploy,
            StatusEvent: handle_auto_deploy,
            CheckRunEvent: handle_auto_deploy,
            IssueCommentCreatedEvent: handle_deploy_command,
            PullRequestClosedEvent: handle_pr_close,
        }

    async def handle(self, event: WebhookEvent, deps: HandlerDeps) -> HandlerOutcome:
        """Run the handler for ``event`` and return its outcome."""
        handler = self._handlers[type(event)]
        logger.info(
            "event.received",
            kind=event.kind,
            repo=event.repository.full_name,
        )
        outcome = await handler(event, deps)
        logger.info("event.handled", kind=event.kind, status=outcome.status.value)
        return outcome
