from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "Portfolio-Generator"


class RepositorySourceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFound(RepositorySourceError):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class RepositorySource(Protocol):
    async def get_readme(self, owner: str, repo: str) -> str: ...

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]: ...

    async def get_languages(self, owner: str, repo: str) -> list[str]: ...


class GitHubRepositorySource:
    """Read-only access to the GitHub REST API on behalf of the signed-in user."""

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.github_api_url,
            timeout=timeout_s if timeout_s is not None else settings.github_timeout_s,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def __aenter__(self) -> "GitHubRepositorySource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, *, accept: str | None = None) -> httpx.Response:
        headers = {"Accept": accept} if accept else None
        try:
            response = await self._client.get(path, headers=headers)
        except httpx.TimeoutException as exc:
            raise RepositorySourceError("GitHub request timed out.", status_code=504) from exc
        except httpx.HTTPError as exc:
            logger.warning("github_request_failed path=%s: %s", path, exc)
            raise RepositorySourceError("GitHub request failed.") from exc

        if response.status_code == 404:
            raise RepositoryNotFound(f"GitHub resource not found: {path}")
        if response.status_code in {401, 403}:
            raise RepositorySourceError("GitHub rejected the access token.", status_code=401)
        if response.status_code >= 400:
            logger.warning("github_request_failed path=%s status=%s", path, response.status_code)
            raise RepositorySourceError(f"GitHub returned HTTP {response.status_code}.")
        return response

    async def get_readme(self, owner: str, repo: str) -> str:
        response = await self._get(f"/repos/{owner}/{repo}/readme", accept="application/vnd.github.raw+json")
        return response.text

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        response = await self._get(f"/repos/{owner}/{repo}")
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def get_languages(self, owner: str, repo: str) -> list[str]:
        response = await self._get(f"/repos/{owner}/{repo}/languages")
        data = response.json()
        return list(data.keys()) if isinstance(data, dict) else []
