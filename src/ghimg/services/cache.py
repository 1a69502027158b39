"""In-memory directory listing cache with TTL and in-flight request tracking."""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class DirectoryCache:
    """
    Per-directory state used to resolve private raw URLs.

    All keys are fully-qualified paths (``owner/repo/branch/path``).

    Attributes:
        urls: File path to raw-content URL. Entries are only ever added or overwritten.
        listed_at: Directory path to the time (ms since epoch) it was last listed.
        requests: Directory path to the listing currently in flight, if any.
    """

    ttl_ms: int = 10_000
    clock: Callable[[], int] = _now_ms
    urls: dict[str, str] = field(default_factory=dict)
    listed_at: dict[str, int] = field(default_factory=dict)
    requests: dict[str, asyncio.Task[Any]] = field(default_factory=dict)

    def get_url(self, full_path: str) -> str | None:
        """Return the cached raw URL for a file, or None if not known."""
        return self.urls.get(full_path)

    def set_url(self, full_path: str, url: str) -> None:
        self.urls[full_path] = url

    def is_listed(self, full_dir_path: str) -> bool:
        """
        Check if a directory has a fresh listing marker.

        An expired marker is removed as a side effect.
        """
        listed_at = self.listed_at.get(full_dir_path)
        if listed_at is None:
            return False
        if listed_at < self.clock() - self.ttl_ms:
            del self.listed_at[full_dir_path]
            return False
        return True

    def mark_listed(self, full_dir_path: str) -> None:
        self.listed_at[full_dir_path] = self.clock()

    def clear(self) -> int:
        """
        Drop all state. Returns the number of cached URLs removed.

        Listings still in flight are cancelled; their awaiters get CancelledError.
        """
        count = len(self.urls)
        self.urls.clear()
        self.listed_at.clear()
        for task in self.requests.values():
            task.cancel()
        self.requests.clear()
        return count

    @property
    def size(self) -> int:
        """Return the current number of cached URLs."""
        return len(self.urls)
