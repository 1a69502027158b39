"""Tests for the GitHub contents API client."""

import httpx
import pytest

from ghimg.config import Settings
from ghimg.services import github
from ghimg.services.github import GitHubService

LISTING = [
    {
        "name": "a.png",
        "path": "docs/a.png",
        "sha": "abc",
        "size": 12,
        "type": "file",
        "download_url": "https://raw.githubusercontent.com/o/r/main/docs/a.png?token=t",
        "_links": {"self": "https://api.github.com/repos/o/r/contents/docs/a.png"},
    },
    {
        "name": "sub",
        "path": "docs/sub",
        "sha": "def",
        "size": 0,
        "type": "dir",
        "download_url": None,
    },
]


def _service(handler, **settings) -> GitHubService:
    return GitHubService(Settings(_env_file=None, **settings), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_lists_directory():
    """Test that a directory listing is parsed into content items."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=LISTING)

    service = _service(handler)
    try:
        items = await service.get_contents("o", "r", "main", "docs")
    finally:
        await service.close()

    assert [item.path for item in items] == ["docs/a.png", "docs/sub"]
    assert items[0].download_url == LISTING[0]["download_url"]
    assert items[1].download_url is None
    assert items[1].type == "dir"
    assert items[0].content is None

    request = seen[0]
    assert request.url.host == "api.github.com"
    assert request.url.path == "/repos/o/r/contents/docs"
    assert request.url.params["ref"] == "main"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_root_directory_and_token():
    """Test the root path URL and the bearer token header."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    service = _service(handler, github_token="secret")
    try:
        assert await service.get_contents("o", "r", "dev", "") == []
    finally:
        await service.close()

    assert seen[0].url.path == "/repos/o/r/contents"
    assert seen[0].url.params["ref"] == "dev"
    assert seen[0].headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_single_file_response():
    """Test that a file path (object response) is wrapped in a list."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=LISTING[0])

    service = _service(handler)
    try:
        items = await service.get_contents("o", "r", "main", "docs/a.png")
    finally:
        await service.close()

    assert len(items) == 1
    assert items[0].name == "a.png"


@pytest.mark.asyncio
async def test_not_found_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    service = _service(handler)
    try:
        assert await service.get_contents("o", "r", "main", "nope") == []
    finally:
        await service.close()


@pytest.mark.asyncio
async def test_server_error_raises():
    """Test that failures other than 404 propagate."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "Server Error"})

    service = _service(handler)
    try:
        with pytest.raises(httpx.HTTPStatusError):
            await service.get_contents("o", "r", "main", "docs")
    finally:
        await service.close()


@pytest.mark.asyncio
async def test_include_content():
    """Test that file bodies are downloaded when requested."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "raw.githubusercontent.com":
            return httpx.Response(200, text="PNGDATA")
        return httpx.Response(200, json=LISTING)

    service = _service(handler)
    try:
        items = await service.get_contents("o", "r", "main", "docs", include_content=True)
    finally:
        await service.close()

    assert items[0].content == "PNGDATA"
    assert items[1].content is None


@pytest.mark.asyncio
async def test_custom_api_base():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    service = _service(handler, github_api_base="https://ghe.example.com/api/v3/")
    try:
        await service.get_contents("o", "r", "main", "/docs/")
    finally:
        await service.close()

    assert str(seen[0].url).startswith("https://ghe.example.com/api/v3/repos/o/r/contents/docs?")


@pytest.mark.asyncio
async def test_global_service_lifecycle():
    """Test creating and shutting down the global service."""
    service = github.get_github_service()
    assert github.get_github_service() is service

    await github.shutdown_github_service()
    assert github.get_github_service() is not service
    await github.shutdown_github_service()


@pytest.mark.asyncio
async def test_empty_token_is_unauthenticated():
    """Test that an empty GHIMG_GITHUB_TOKEN sends no Authorization header."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    service = _service(handler, github_token="")
    try:
        await service.get_contents("o", "r", "main", "docs")
    finally:
        await service.close()

    assert "Authorization" not in seen[0].headers
