"""GitHub contents API client used to list repository directories."""

import logging
from typing import Any, Protocol

import httpx

from ghimg.config import Settings
from ghimg.models.content import ContentItem

logger = logging.getLogger("ghimg.github")


class ContentsLister(Protocol):
    """Anything that can list a repository directory."""

    async def get_contents(
        self,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        include_content: bool = False,
    ) -> list[ContentItem]: ...


class GitHubService:
    """Service for listing directory contents through the GitHub API."""

    USER_AGENT = "ghimg/0.1.0"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": self.USER_AGENT,
            }
            if self.settings.has_token:
                headers["Authorization"] = f"Bearer {self.settings.github_token}"
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        base = self.settings.github_api_base.rstrip("/")
        return f"{base}/repos/{owner}/{repo}/contents/{path.strip('/')}".rstrip("/")

    async def _fetch_text(self, url: str) -> str:
        client = await self._get_client()
        response = await client.get(url)
        response.raise_for_status()
        return response.text

    async def get_contents(
        self,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        include_content: bool = False,
    ) -> list[ContentItem]:
        """
        List a directory (or describe a single file) in a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch, tag, or commit to read from
            path: Repository-relative path; empty for the root
            include_content: Also download the text body of every file

        Returns:
            List of ContentItem, empty if the path does not exist

        Raises:
            httpx.HTTPError: On any failure other than a 404
        """
        client = await self._get_client()
        url = self._contents_url(owner, repo, path)

        logger.debug("Listing %s/%s@%s:%s", owner, repo, branch, path or "/")
        response = await client.get(url, params={"ref": branch})
        if response.status_code == 404:
            return []
        response.raise_for_status()

        payload: Any = response.json()
        # A file path returns a single object instead of a list
        raw_items = payload if isinstance(payload, list) else [payload]
        items = [ContentItem.model_validate(item) for item in raw_items]

        if include_content:
            for item in items:
                if item.type == "file" and item.download_url:
                    item.content = await self._fetch_text(item.download_url)

        return items


# Global service instance
_github_service: GitHubService | None = None


def get_github_service() -> GitHubService:
    """Get the global GitHub service instance."""
    global _github_service
    if _github_service is None:
        from ghimg.config import get_settings

        _github_service = GitHubService(get_settings())
    return _github_service


async def shutdown_github_service() -> None:
    """Shutdown the global GitHub service."""
    global _github_service
    if _github_service:
        await _github_service.close()
        _github_service = None
