"""Pydantic models for repository coordinates and directory listings."""

from pydantic import BaseModel


class RepoCoordinate(BaseModel):
    """A file or directory inside a GitHub repository at a given branch."""

    owner: str
    repo: str
    branch: str
    path: str = ""  # Repository-relative, no leading slash

    model_config = {"frozen": True}

    @property
    def full_path(self) -> str:
        """Return the fully-qualified path, e.g. ``owner/repo/main/docs/a.png``."""
        return f"{self.owner}/{self.repo}/{self.branch}/{self.path}"

    @property
    def parent(self) -> "RepoCoordinate":
        """Return the coordinate of the directory containing this path."""
        parent_path = "/".join(self.path.split("/")[:-1])
        return self.model_copy(update={"path": parent_path})


class ContentItem(BaseModel):
    """One entry of a GitHub contents API directory listing."""

    path: str
    download_url: str | None = None  # None for directories and submodules
    name: str = ""
    type: str = "file"
    sha: str | None = None
    size: int = 0
    content: str | None = None  # Only filled when content is requested

    # GitHub returns many more fields (_links, url, git_url, ...)
    model_config = {"extra": "ignore"}
