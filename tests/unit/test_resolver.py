"""Unit tests for configuration resolution."""

import base64

import pytest

from deploybot.core.exceptions import (
    ConfigInvalidError,
    ConfigNotFoundError,
    ProviderError,
)
from deploybot.core.resolver import ConfigResolver, parse_targets
from deploybot.models.config import LookupStatus
from deploybot.models.deployment import RepoRef
from tests.fakes import FakeProvider


class TestParseTargets:
    """Tests for parse_targets."""

    def test_empty_document(self):
        targets = parse_targets(None)
        assert len(targets) == 0

    def test_names_and_defaults(self):
        targets = parse_targets(
            {
                "web": {
                    "auto_deploy_on": "refs/heads/main",
                    "deployments": [{"description": "Deploy web"}],
                },
                "docs": {},
            }
        )

        assert targets.names() == ["web", "docs"]
        web = targets["web"]
        assert web.name == "web"
        assert web.auto_deploy_ref == "heads/main"
        assert web.required_contexts == []
        assert web.transient_environment is False
        assert web.deployments[0].task == "deploy"
        assert web.deployments[0].environment == "production"
        assert web.deployments[0].auto_merge is False
        assert targets["docs"].deployments == []

    def test_null_deployments_default_to_empty(self):
        targets = parse_targets({"web": {"deployments": None}})
        assert targets["web"].deployments == []

    def test_missing_required_field(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            parse_targets({"web": {"deployments": [{"environment": "staging"}]}})

        assert exc_info.value.property == "config.web.deployments[0].description"
        assert "description" in exc_info.value.message

    def test_wrong_type(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            parse_targets({"web": {"required_contexts": "ci/build"}})

        assert exc_info.value.property == "config.web.required_contexts"

    def test_document_not_a_mapping(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            parse_targets(["web"])

        assert exc_info.value.property == "config"

    def test_unknown_attributes_allowed(self):
        targets = parse_targets({"web": {"owner_team": "platform", "deployments": []}})
        assert "web" in targets

    def test_lookup_distinguishes_missing_and_empty(self):
        targets = parse_targets(
            {
                "web": {"deployments": [{"description": "Deploy"}]},
                "docs": {"deployments": []},
            }
        )

        assert targets.lookup("web").status == LookupStatus.FOUND
        assert targets.lookup("docs").status == LookupStatus.EMPTY
        assert targets.lookup("api").status == LookupStatus.MISSING
        assert targets.lookup("api").target is None


class TestConfigResolver:
    """Tests for ConfigResolver."""

    @pytest.fixture
    def resolver(self, provider: FakeProvider) -> ConfigResolver:
        return ConfigResolver(provider, ".github/deploy.yml")

    @pytest.mark.asyncio
    async def test_resolve(self, resolver: ConfigResolver, repo: RepoRef):
        targets = await resolver.resolve(repo, "main")

        assert targets.names() == ["production", "preview", "empty"]
        assert targets["preview"].transient_environment is True
        assert len(targets["preview"].deployments) == 2

    @pytest.mark.asyncio
    async def test_missing_file(self, resolver: ConfigResolver, repo: RepoRef):
        with pytest.raises(ConfigNotFoundError):
            await resolver.resolve(repo, "feature")

    @pytest.mark.asyncio
    async def test_empty_file(
        self, resolver: ConfigResolver, provider: FakeProvider, repo: RepoRef
    ):
        provider.add_config("empty-branch", "")

        targets = await resolver.resolve(repo, "empty-branch")

        assert len(targets) == 0

    @pytest.mark.asyncio
    async def test_invalid_yaml(
        self, resolver: ConfigResolver, provider: FakeProvider, repo: RepoRef
    ):
        provider.add_config("bad", "web: [unclosed")

        with pytest.raises(ConfigInvalidError) as exc_info:
            await resolver.resolve(repo, "bad")

        assert exc_info.value.property == "config"

    @pytest.mark.asyncio
    async def test_schema_violation(
        self, resolver: ConfigResolver, provider: FakeProvider, repo: RepoRef
    ):
        provider.add_config(
            "bad",
            "web:\n  deployments:\n    - environment: staging\n",
        )

        with pytest.raises(ConfigInvalidError) as exc_info:
            await resolver.resolve(repo, "bad")

        assert exc_info.value.property == "config.web.deployments[0].description"

    @pytest.mark.asyncio
    async def test_base64_with_newlines(
        self, resolver: ConfigResolver, provider: FakeProvider, repo: RepoRef
    ):
        encoded = base64.b64encode(b"web:\n  deployments: []\n").decode()
        provider.files[("wrapped", ".github/deploy.yml")] = "\n".join(
            encoded[i : i + 8] for i in range(0, len(encoded), 8)
        )

        targets = await resolver.resolve(repo, "wrapped")

        assert targets.names() == ["web"]

    @pytest.mark.asyncio
    async def test_other_provider_errors_propagate(self, repo: RepoRef):
        class BrokenProvider(FakeProvider):
            async def get_file_contents(self, repo, ref, path):
                raise ProviderError("Bad credentials", status_code=401)

        resolver = ConfigResolver(BrokenProvider(), ".github/deploy.yml")

        with pytest.raises(ProviderError) as exc_info:
            await resolver.resolve(repo, "main")

        assert exc_info.value.status_code == 401
