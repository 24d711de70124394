"""Unit tests for the /deploy command handler."""

import pytest

from deploybot.core.commands import FAILURE_PREFIX, handle_deploy_command, parse_command
from deploybot.core.deps import HandlerDeps
from deploybot.core.exceptions import MalformedCommandError
from deploybot.models.deployment import RepoRef
from deploybot.models.events import IssueCommentCreatedEvent
from deploybot.models.outcome import OutcomeStatus
from tests.fakes import PR_SHA, SAMPLE_CONFIG, FakeProvider


def comment(repo: RepoRef, body: str, user: str = "octocat") -> IssueCommentCreatedEvent:
    return IssueCommentCreatedEvent(
        repository=repo,
        issue_number=42,
        body=body,
        user=user,
    )


class TestParseCommand:
    def test_target(self):
        assert parse_command("/deploy staging") == "staging"

    def test_extra_whitespace_and_words(self):
        assert parse_command("  /deploy   preview please\n") == "preview"

    def test_missing_target(self):
        with pytest.raises(MalformedCommandError):
            parse_command("/deploy")

    def test_not_a_command(self):
        with pytest.raises(MalformedCommandError):
            parse_command("/deployment staging")
        with pytest.raises(MalformedCommandError):
            parse_command("please /deploy staging")

    def test_custom_prefix(self):
        assert parse_command("/ship web", prefix="/ship") == "web"


class TestDeployCommand:
    """Tests for handle_deploy_command."""

    @pytest.fixture(autouse=True)
    def pull_request(self, provider: FakeProvider):
        provider.add_pull(42, "feature/login", PR_SHA)
        provider.add_config("feature/login", SAMPLE_CONFIG)
        provider.permissions["octocat"] = "write"

    @pytest.mark.asyncio
    async def test_deploys_pull_request_head(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        outcome = await handle_deploy_command(comment(repo, "/deploy preview"), deps)

        assert outcome.status == OutcomeStatus.DISPATCHED
        assert outcome.target == "preview"
        assert len(outcome.deployment_ids) == 2
        assert [r.environment for r in provider.created] == ["pr-42", "pr-42-worker"]
        assert all(r.ref == "feature/login" for r in provider.created)
        assert provider.created[0].payload == {"target": "preview", "pr": "42"}
        assert provider.created[0].transient_environment is True
        assert provider.comments == []

    @pytest.mark.asyncio
    async def test_user_without_write_access(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        """No deployments and no comments for non-collaborators."""
        provider.permissions["mallory"] = "read"

        outcome = await handle_deploy_command(
            comment(repo, "/deploy staging", user="mallory"), deps
        )

        assert outcome.status == OutcomeStatus.DENIED
        assert provider.created == []
        assert provider.comments == []

    @pytest.mark.asyncio
    async def test_malformed_command_is_ignored(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        outcome = await handle_deploy_command(comment(repo, "/deploy"), deps)

        assert outcome.status == OutcomeStatus.IGNORED
        assert provider.created == []
        assert provider.comments == []

    @pytest.mark.asyncio
    async def test_unknown_target_is_reported(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        outcome = await handle_deploy_command(comment(repo, "/deploy staging"), deps)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.comment_posted is True
        assert provider.created == []
        [(issue, body)] = provider.comments
        assert issue == 42
        assert body.startswith(FAILURE_PREFIX)
        assert 'Deployment target "staging" does not exist' in body

    @pytest.mark.asyncio
    async def test_target_without_deployments_is_reported(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        outcome = await handle_deploy_command(comment(repo, "/deploy empty"), deps)

        assert outcome.status == OutcomeStatus.FAILED
        assert "has no deployments" in provider.comments[0][1]

    @pytest.mark.asyncio
    async def test_provider_failure_is_reported(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        provider.fail_environments.add("pr-42-worker")

        outcome = await handle_deploy_command(comment(repo, "/deploy preview"), deps)

        assert outcome.status == OutcomeStatus.FAILED
        assert len(provider.created) == 1
        assert len(provider.comments) == 1
        assert "status checks failed" in provider.comments[0][1]

    @pytest.mark.asyncio
    async def test_missing_config_is_reported(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        del provider.files[("feature/login", ".github/deploy.yml")]

        outcome = await handle_deploy_command(comment(repo, "/deploy preview"), deps)

        assert outcome.status == OutcomeStatus.FAILED
        assert "not found" in provider.comments[0][1]

    @pytest.mark.asyncio
    async def test_issue_without_pull_request_is_reported(
        self, deps: HandlerDeps, provider: FakeProvider, repo: RepoRef
    ):
        event = comment(repo, "/deploy preview").model_copy(update={"issue_number": 7})

        outcome = await handle_deploy_command(event, deps)

        assert outcome.status == OutcomeStatus.FAILED
        assert provider.comments[0][0] == 7
