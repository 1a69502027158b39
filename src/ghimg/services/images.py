"""Resolve repository-relative image paths to raw-content URLs.

Public repositories use the fixed raw.githubusercontent.com template. Private
repositories need the tokenized ``download_url`` returned by the contents API,
so the parent directory is listed once and every file in it is cached. Listing
markers expire after a short TTL, and concurrent lookups for the same
directory share a single in-flight request.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ghimg.models.content import ContentItem, RepoCoordinate
from ghimg.services.cache import DirectoryCache
from ghimg.services.github import ContentsLister
from ghimg.services.url_rewriter import build_raw_url, get_img_srcs, is_relative_src

logger = logging.getLogger("ghimg.images")

FileDescriptor = ContentItem | Mapping[str, Any]


class ImageUrlResolver:
    """Turns image paths into raw URLs, backed by a DirectoryCache."""

    def __init__(self, lister: ContentsLister, cache: DirectoryCache | None = None) -> None:
        self.lister = lister
        self.cache = cache or DirectoryCache()

    def add_raw_urls(self, owner: str, repo: str, branch: str, files: Iterable[FileDescriptor] | None) -> None:
        """Cache the download URL of every file in a directory listing."""
        if not files:
            return
        for file in files:
            if isinstance(file, ContentItem):
                path, url = file.path, file.download_url
            else:
                path, url = file["path"], file.get("download_url")
            if url:
                self.cache.set_url(RepoCoordinate(owner=owner, repo=repo, branch=branch, path=path).full_path, url)

    async def _list_directory(self, directory: RepoCoordinate) -> list[ContentItem]:
        """Await the shared listing for a directory, starting it if needed."""
        key = directory.full_path
        task = self.cache.requests.get(key)
        if task is None:
            logger.debug("Requesting listing for %s", key)
            task = asyncio.create_task(
                self.lister.get_contents(directory.owner, directory.repo, directory.branch, directory.path, False)
            )
            self.cache.requests[key] = task
            task.add_done_callback(lambda done: self._release_request(key, done))
        else:
            logger.debug("Joining in-flight listing for %s", key)

        # One cancelled caller must not cancel the listing for the others
        return await asyncio.shield(task)

    def _release_request(self, key: str, task: asyncio.Task[Any]) -> None:
        """Drop a finished listing from the in-flight map, even if nobody awaits it."""
        if self.cache.requests.get(key) is task:
            del self.cache.requests[key]
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Listing %s failed: %s", key, task.exception())

    async def get_raw_url(
        self,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        is_private: bool = False,
    ) -> str | None:
        """
        Resolve a repository-relative path to a raw-content URL.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch the path refers to
            path: Repository-relative file path
            is_private: Discover the URL through the contents API

        Returns:
            The raw URL, or None when a private file is not (yet) known
        """
        if not is_private:
            return build_raw_url(owner, repo, branch, path)

        file = RepoCoordinate(owner=owner, repo=repo, branch=branch, path=path)
        directory = file.parent

        if self.cache.is_listed(directory.full_path):
            return self.cache.get_url(file.full_path)

        files = await self._list_directory(directory)
        self.add_raw_urls(owner, repo, branch, files)
        self.cache.mark_listed(directory.full_path)
        return self.cache.get_url(file.full_path)

    async def relative_to_raw_urls(
        self,
        owner: str,
        repo: str,
        branch: str,
        html: str,
        is_private: bool = False,
    ) -> str:
        """Rewrite relative image sources in ``html`` to raw-content URLs."""
        new_html = html
        for match in get_img_srcs(html):
            if not is_relative_src(match.src):
                continue
            raw_url = await self.get_raw_url(owner, repo, branch, match.src, is_private)
            if raw_url:
                new_html = new_html.replace(match.attribute(), match.attribute(raw_url), 1)
        return new_html


# Global resolver instance
_image_resolver: ImageUrlResolver | None = None


def get_image_resolver() -> ImageUrlResolver:
    """Get the global image resolver instance."""
    global _image_resolver
    if _image_resolver is None:
        from ghimg.config import get_settings
        from ghimg.services.github import get_github_service

        settings = get_settings()
        if settings.debug:
            logging.getLogger("ghimg").setLevel(logging.DEBUG)
        _image_resolver = ImageUrlResolver(get_github_service(), DirectoryCache(ttl_ms=settings.listing_ttl_ms))
    return _image_resolver


def reset_image_resolver() -> None:
    """Reset the global image resolver instance. Useful for testing."""
    global _image_resolver
    _image_resolver = None


async def get_raw_url(owner: str, repo: str, branch: str, path: str, is_private: bool = False) -> str | None:
    return await get_image_resolver().get_raw_url(owner, repo, branch, path, is_private)


def add_raw_urls(owner: str, repo: str, branch: str, files: Iterable[FileDescriptor] | None) -> None:
    get_image_resolver().add_raw_urls(owner, repo, branch, files)


async def relative_to_raw_urls(owner: str, repo: str, branch: str, html: str, is_private: bool = False) -> str:
    return await get_image_resolver().relative_to_raw_urls(owner, repo, branch, html, is_private)
