"""Unit tests for webhook event parsing and routing."""

from typing import Any

import pytest

from deploybot.core.deps import HandlerDeps
from deploybot.core.events import EventRouter, parse_event
from deploybot.core.exceptions import WebhookPayloadError
from deploybot.models.events import (
    CheckRunEvent,
    IssueCommentCreatedEvent,
    PullRequestClosedEvent,
    PushEvent,
    StatusEvent,
)
from deploybot.models.outcome import (
    AutoDeployOutcome,
    CommandOutcome,
    OutcomeStatus,
    TeardownOutcome,
)
from tests.fakes import MAIN_SHA, PR_SHA, FakeProvider

REPOSITORY = {
    "name": "web",
    "owner": {"login": "acme"},
    "default_branch": "main",
}


def payload(**fields: Any) -> dict[str, Any]:
    return {"repository": REPOSITORY, "installation": {"id": 77}, **fields}


class TestParseEvent:
    """Tests for parse_event."""

    def test_push(self):
        event = parse_event("push", payload(ref="refs/heads/main", after=MAIN_SHA))

        assert isinstance(event, PushEvent)
        assert event.repository.full_name == "acme/web"
        assert event.refs == ["heads/main"]

    def test_branch_deletion_ignored(self):
        assert parse_event("push", payload(ref="refs/heads/x", after="0" * 40, deleted=True)) is None

    def test_status(self):
        event = parse_event(
            "status",
            payload(
                sha=MAIN_SHA,
                state="success",
                context="ci/build",
                branches=[{"name": "main"}, {"name": "release"}],
            ),
        )

        assert isinstance(event, StatusEvent)
        assert event.refs == ["heads/main", "heads/release"]

    def test_check_run_completed(self):
        event = parse_event(
            "check_run",
            payload(
                action="completed",
                check_run={
                    "head_sha": MAIN_SHA,
                    "name": "build",
                    "conclusion": "success",
                    "check_suite": {"head_branch": "main"},
                },
            ),
        )

        assert isinstance(event, CheckRunEvent)
        assert event.refs == ["heads/main"]

    def test_check_run_in_progress_ignored(self):
        event = parse_event(
            "check_run",
            payload(action="created", check_run={"head_sha": MAIN_SHA}),
        )
        assert event is None

    def test_issue_comment(self):
        event = parse_event(
            "issue_comment",
            payload(
                action="created",
                issue={"number": 42, "pull_request": {"url": "https://example"}},
                comment={"body": "/deploy preview", "user": {"login": "octocat"}},
            ),
        )

        assert isinstance(event, IssueCommentCreatedEvent)
        assert event.user == "octocat"

    def test_edited_comment_ignored(self):
        event = parse_event(
            "issue_comment",
            payload(
                action="edited",
                issue={"number": 42},
                comment={"body": "/deploy preview", "user": {"login": "octocat"}},
            ),
        )
        assert event is None

    def test_pull_request_closed(self):
        event = parse_event(
            "pull_request",
            payload(
                action="closed",
                pull_request={
                    "number": 42,
                    "merged": True,
                    "head": {"ref": "feature/login", "sha": PR_SHA},
                },
            ),
        )

        assert isinstance(event, PullRequestClosedEvent)
        assert event.head_ref == "feature/login"
        assert event.merged is True

    def test_pull_request_opened_ignored(self):
        assert parse_event("pull_request", payload(action="opened")) is None

    def test_unknown_event(self):
        assert parse_event("deployment_status", payload()) is None

    def test_missing_fields(self):
        with pytest.raises(WebhookPayloadError):
            parse_event("push", {"ref": "refs/heads/main"})

    @pytest.mark.parametrize("body", [[], "push", 42])
    def test_non_object_payload(self, body):
        with pytest.raises(WebhookPayloadError):
            parse_event("push", body)

    def test_non_object_field(self):
        with pytest.raises(WebhookPayloadError):
            parse_event("check_run", payload(action="completed", check_run="abc"))


class TestEventRouter:
    """Tests for EventRouter."""

    @pytest.fixture
    def router(self) -> EventRouter:
        return EventRouter()

    @pytest.mark.asyncio
    async def test_push_runs_auto_deploy(self, router: EventRouter, deps: HandlerDeps):
        event = parse_event("push", payload(ref="refs/heads/main", after=MAIN_SHA))

        outcome = await router.handle(event, deps)

        assert isinstance(outcome, AutoDeployOutcome)
        assert outcome.targets[0].status == OutcomeStatus.DISPATCHED

    @pytest.mark.asyncio
    async def test_comment_runs_command(
        self, router: EventRouter, deps: HandlerDeps, provider: FakeProvider
    ):
        event = parse_event(
            "issue_comment",
            payload(
                action="created",
                issue={"number": 42},
                comment={"body": "looks good", "user": {"login": "octocat"}},
            ),
        )

        outcome = await router.handle(event, deps)

        assert isinstance(outcome, CommandOutcome)
        assert outcome.status == OutcomeStatus.IGNORED

    @pytest.mark.asyncio
    async def test_close_runs_teardown(self, router: EventRouter, deps: HandlerDeps):
        event = parse_event(
            "pull_request",
            payload(
                action="closed",
                pull_request={"number": 42, "head": {"ref": "feature/login", "sha": PR_SHA}},
            ),
        )

        outcome = await router.handle(event, deps)

        assert isinstance(outcome, TeardownOutcome)
        assert outcome.ref == "feature/login"
