"""Value types used throughout the sitemap builder."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import urljoin
from xml.sax.saxutils import escape

from .config import DEFAULT_PUBLIC_PATH
from .errors import SitemapError, SitemapFinalizedError
from .utils import bytesize

Timestamp = Union[dt.date, dt.datetime]


class ChangeFreq(str, Enum):
    """How often the page behind a link is expected to change."""

    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


def format_lastmod(value: Timestamp) -> str:
    """Format a date or datetime as W3C/ISO-8601; naive datetimes are UTC."""
    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        return value.isoformat(timespec="seconds")
    return value.isoformat()


def _absolute_url(host: Optional[str], path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    if not host:
        raise SitemapError(f"No host set for link {path!r}; configure default_host")
    return urljoin(host.rstrip("/") + "/", path.lstrip("/"))


@dataclass(frozen=True)
class Link:
    """A single page entry destined for a sitemap file."""

    path: str
    host: Optional[str] = None
    lastmod: Optional[Timestamp] = None
    changefreq: ChangeFreq = ChangeFreq.WEEKLY
    priority: float = 0.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "changefreq", ChangeFreq(self.changefreq))
        priority = float(self.priority)
        if not 0.0 <= priority <= 1.0:
            raise ValueError(f"priority must be between 0.0 and 1.0, got {priority}")
        object.__setattr__(self, "priority", priority)

    @property
    def loc(self) -> str:
        return _absolute_url(self.host, self.path)

    @cached_property
    def xml(self) -> str:
        """Serialized ``<url>`` element for this link."""
        parts = [f"<url><loc>{escape(self.loc)}</loc>"]
        if self.lastmod is not None:
            parts.append(f"<lastmod>{format_lastmod(self.lastmod)}</lastmod>")
        parts.append(f"<changefreq>{self.changefreq.value}</changefreq>")
        parts.append(f"<priority>{self.priority:.1f}</priority>")
        parts.append("</url>")
        return "".join(parts)

    @property
    def byte_size(self) -> int:
        return bytesize(self.xml)


@dataclass(frozen=True)
class IndexEntry:
    """Reference from a sitemap index to one sitemap document."""

    loc: str
    lastmod: Optional[Timestamp] = None
    filesize: Optional[int] = None

    @classmethod
    def from_link(cls, link: Link) -> "IndexEntry":
        return cls(loc=link.loc, lastmod=link.lastmod)

    @cached_property
    def xml(self) -> str:
        parts = [f"<sitemap><loc>{escape(self.loc)}</loc>"]
        if self.lastmod is not None:
            parts.append(f"<lastmod>{format_lastmod(self.lastmod)}</lastmod>")
        parts.append("</sitemap>")
        return "".join(parts)

    @property
    def byte_size(self) -> int:
        return bytesize(self.xml)


@dataclass
class Location:
    """Where a sitemap file lives on disk and under which public URL.

    Files are written to ``public_path / sitemaps_path / filename`` and are
    served from ``host + sitemaps_path + filename``.
    """

    public_path: Path = DEFAULT_PUBLIC_PATH
    sitemaps_path: Optional[str] = None
    host: Optional[str] = None
    filename: Optional[str] = None
    locked: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.public_path = Path(self.public_path)

    @property
    def directory(self) -> Path:
        if self.sitemaps_path:
            return self.public_path / self.sitemaps_path
        return self.public_path

    @property
    def path(self) -> Path:
        if not self.filename:
            raise SitemapError("Location has no filename")
        return self.directory / self.filename

    @property
    def path_in_public(self) -> str:
        if not self.filename:
            raise SitemapError("Location has no filename")
        if self.sitemaps_path:
            return str(PurePosixPath(self.sitemaps_path) / self.filename)
        return self.filename

    @property
    def url(self) -> str:
        if not self.host:
            raise SitemapError("No host set; configure default_host or sitemaps_host")
        return _absolute_url(self.host, self.path_in_public)

    @property
    def filesize(self) -> int:
        """Size of the file on disk, in bytes."""
        return self.path.stat().st_size

    def with_(self, **changes) -> "Location":
        """Return an unlocked copy with ``changes`` applied."""
        return replace(self, **changes)

    def update(self, **changes) -> None:
        if self.locked:
            raise SitemapFinalizedError(
                f"Location of finalized sitemap {self.filename} cannot change"
            )
        for key, value in changes.items():
            if key not in ("public_path", "sitemaps_path", "host", "filename"):
                raise TypeError(f"Unknown location attribute: {key}")
            setattr(self, key, Path(value) if key == "public_path" else value)

    def lock(self) -> None:
        self.locked = True
