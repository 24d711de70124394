"""GitHub REST API implementation of the deployment provider."""

from typing import Any

import httpx

from deploybot.config import settings
from deploybot.core.exceptions import ProviderError
from deploybot.models.deployment import (
    DeploymentRecord,
    DeploymentRequest,
    DeploymentState,
    RepoRef,
)
from deploybot.services.provider import DeploymentProvider
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)

# Preview media types enabling transient/production environments and the
# inactive deployment state.
PREVIEW_ANT_MAN = "application/vnd.github.ant-man-preview+json"
PREVIEW_FLASH = "application/vnd.github.flash-preview+json"
DEPLOYMENT_ACCEPT = f"{PREVIEW_ANT_MAN},{PREVIEW_FLASH}"


class GitHubProvider(DeploymentProvider):
    """GitHub API client for deployments."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.token = token if token is not None else settings.github_token
        self.timeout = timeout or settings.github_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> Any:
        """Make a request and return the decoded JSON body.

        Raises:
            ProviderError: On transport failure or a non-2xx response
        """
        client = self._get_client()
        headers = {"Accept": accept} if accept else None

        try:
            response = await client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("github.request_failed", method=method, path=path, error=str(e))
            raise ProviderError(f"GitHub request failed: {e}") from e

        if response.status_code >= 400:
            message = response.reason_phrase
            try:
                message = response.json().get("message", message)
            except ValueError:
                pass
            logger.warning(
                "github.request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise ProviderError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _repo_path(repo: RepoRef) -> str:
        return f"/repos/{repo.owner}/{repo.repo}"

    async def get_commit(self, repo: RepoRef, sha: str) -> dict[str, Any]:
        return await self._request("GET", f"{self._repo_path(repo)}/git/commits/{sha}")

    async def get_ref(self, repo: RepoRef, ref: str) -> str:
        data = await self._request("GET", f"{self._repo_path(repo)}/git/ref/{ref}")
        return data["object"]["sha"]

    async def list_deployments(
        self,
        repo: RepoRef,
        sha: str | None = None,
        ref: str | None = None,
    ) -> list[DeploymentRecord]:
        params: dict[str, Any] = {"per_page": 100}
        if sha:
            params["sha"] = sha
        if ref:
            params["ref"] = ref
        data = await self._request(
            "GET",
            f"{self._repo_path(repo)}/deployments",
            params=params,
            accept=DEPLOYMENT_ACCEPT,
        )
        return [DeploymentRecord.model_validate(item) for item in data or []]

    async def create_deployment(
        self, repo: RepoRef, request: DeploymentRequest
    ) -> DeploymentRecord:
        data = await self._request(
            "POST",
            f"{self._repo_path(repo)}/deployments",
            json=request.model_dump(mode="json", exclude_none=True),
            accept=DEPLOYMENT_ACCEPT,
        )
        # A 202 with only a message means the default branch was merged in
        # and no deployment was created.
        if not data or "id" not in data:
            message = (data or {}).get("message", "Deployment was not created")
            raise ProviderError(message, status_code=202)
        return DeploymentRecord.model_validate(data)

    async def create_deployment_status(
        self, repo: RepoRef, deployment_id: int, state: DeploymentState
    ) -> None:
        await self._request(
            "POST",
            f"{self._repo_path(repo)}/deployments/{deployment_id}/statuses",
            json={"state": state.value},
            accept=DEPLOYMENT_ACCEPT,
        )

    async def get_file_contents(self, repo: RepoRef, ref: str, path: str) -> str:
        data = await self._request(
            "GET",
            f"{self._repo_path(repo)}/contents/{path}",
            params={"ref": ref},
        )
        return data.get("content", "")

    async def get_pull_request(self, repo: RepoRef, number: int) -> dict[str, Any]:
        return await self._request("GET", f"{self._repo_path(repo)}/pulls/{number}")

    async def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> None:
        await self._request(
            "POST",
            f"{self._repo_path(repo)}/issues/{issue_number}/comments",
            json={"body": body},
        )

    async def get_collaborator_permission(self, repo: RepoRef, username: str) -> str:
        data = await self._request(
            "GET",
            f"{self._repo_path(repo)}/collaborators/{username}/permission",
        )
        return data.get("permission", "none")
