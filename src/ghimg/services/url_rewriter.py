"""URL rewriting for image sources in HTML rendered from GitHub content."""

import re
from collections.abc import Iterator
from dataclasses import dataclass

RAW_BASE_URL = "https://raw.githubusercontent.com/"

# No HTML parser on purpose: callers rely on this exact regex-level behaviour.
IMG_SRC_PATTERN = re.compile(r"""<img [^>]*src=(?:"([^"]+)"|'([^']+)')[^>]*>""")

_ABSOLUTE_PREFIXES = ("http://", "https://", "data:image/")


@dataclass(frozen=True)
class ImgSrcMatch:
    """A single ``<img>`` tag found by :data:`IMG_SRC_PATTERN`."""

    tag: str
    double: str | None = None
    single: str | None = None

    @property
    def src(self) -> str:
        return self.double if self.double is not None else self.single or ""

    @property
    def quote(self) -> str:
        return '"' if self.double is not None else "'"

    def attribute(self, value: str | None = None) -> str:
        """Render ``src=<q>value<q>`` in this match's quote style."""
        value = self.src if value is None else value
        return f"src={self.quote}{value}{self.quote}"


def get_img_srcs(html: str) -> Iterator[ImgSrcMatch]:
    """Yield every ``<img ... src=...>`` occurrence in ``html``, in document order."""
    for match in IMG_SRC_PATTERN.finditer(html):
        yield ImgSrcMatch(tag=match.group(0), double=match.group(1), single=match.group(2))


def _substitute(html: str, match: ImgSrcMatch, new_src: str) -> str:
    """Replace the first textual occurrence of the match's src attribute."""
    return html.replace(match.attribute(), match.attribute(new_src), 1)


def is_relative_src(src: str) -> bool:
    """Check if a source is repository-relative (not rooted, not absolute, not a data URI)."""
    return not src.startswith(("/", *_ABSOLUTE_PREFIXES))


def _has_prefix(src: str, prefix: str) -> bool:
    # A "/" prefix must not swallow the first slash of a protocol-relative "//host" URL
    return src.startswith(prefix) and not (prefix == "/" and src.startswith("//"))


def raw_url_prefix(owner: str, repo: str, branch: str) -> str:
    """Return the raw-content URL prefix for a repository branch (with trailing slash)."""
    return f"{RAW_BASE_URL}{owner}/{repo}/{branch}/"


def build_raw_url(owner: str, repo: str, branch: str, path: str) -> str:
    """Return the public raw-content URL for a file."""
    return f"{raw_url_prefix(owner, repo, branch)}{path}"


def get_relative_url(owner: str, repo: str, branch: str, path: str) -> str:
    """
    Convert a raw-content URL back to a repository-relative path.

    Paths that are not raw URLs for this owner/repo/branch are returned as-is.
    Any query string (e.g. the ``?token=`` of private raw URLs) is dropped.
    """
    prefix = raw_url_prefix(owner, repo, branch)
    if not path.startswith(prefix):
        return path
    return path[len(prefix) :].split("?", 1)[0]


def raw_to_relative_urls(owner: str, repo: str, branch: str, html: str) -> str:
    """Rewrite raw-content image URLs in ``html`` to repository-relative paths."""
    prefix = raw_url_prefix(owner, repo, branch)
    for match in get_img_srcs(html):
        if match.src.startswith(prefix):
            html = _substitute(html, match, get_relative_url(owner, repo, branch, match.src))
    return html


def swap_prefix(path: str | None, from_: str | None, to: str | None) -> str | None:
    """Replace a leading ``from_`` with ``to`` in a single non-absolute path."""
    if path is None or from_ is None or to is None:
        return path
    if _has_prefix(path, from_) and not path.startswith(_ABSOLUTE_PREFIXES):
        return path.replace(from_, to, 1)
    return path


def html_swap_prefix(html: str | None, from_: str | None, to: str | None) -> str | None:
    """Apply :func:`swap_prefix` to every image source in ``html``."""
    if html is None or from_ is None or to is None:
        return html
    for match in get_img_srcs(html):
        new_src = swap_prefix(match.src, from_, to)
        if new_src != match.src:
            html = _substitute(html, match, new_src)
    return html


def remove_prefix(html: str | None, prefix: str | None) -> str | None:
    """Strip a literal leading ``prefix`` from every image source in ``html``."""
    if html is None or prefix is None:
        return html
    for match in get_img_srcs(html):
        if _has_prefix(match.src, prefix):
            html = _substitute(html, match, match.src.replace(prefix, "", 1))
    return html


def add_prefix(html: str | None, prefix: str | None) -> str | None:
    """Prepend ``prefix`` to every repository-relative image source in ``html``."""
    if html is None or prefix is None:
        return html
    for match in get_img_srcs(html):
        if is_relative_src(match.src):
            html = _substitute(html, match, f"{prefix}{match.src}")
    return html
