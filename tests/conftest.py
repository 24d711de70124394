"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from deploybot.api.deps import get_handler_deps
from deploybot.config import Settings
from deploybot.core.deps import HandlerDeps
from deploybot.core.locks import LockStore
from deploybot.main import app
from deploybot.models.deployment import RepoRef
from tests.fakes import MAIN_SHA, SAMPLE_CONFIG, FakeProvider


@pytest.fixture
def repo() -> RepoRef:
    return RepoRef(owner="acme", repo="web")


@pytest.fixture
def provider() -> FakeProvider:
    """Provider seeded with a main branch and its configuration."""
    fake = FakeProvider()
    fake.refs["heads/main"] = MAIN_SHA
    fake.add_config("main", SAMPLE_CONFIG)
    return fake


@pytest.fixture
def test_settings() -> Settings:
    return Settings(webhook_secret="", deploy_config_path=".github/deploy.yml")


@pytest.fixture
def deps(provider: FakeProvider, test_settings: Settings) -> HandlerDeps:
    return HandlerDeps.create(provider, LockStore(), test_settings)


@pytest.fixture
async def client(deps: HandlerDeps) -> AsyncClient:
    """Create an async test client wired to the fake provider."""
    app.dependency_overrides[get_handler_deps] = lambda: deps

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
