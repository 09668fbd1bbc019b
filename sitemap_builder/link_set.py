"""High-level orchestration of a link stream into sitemap files and an index."""

from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .builder import AddResult, SitemapFile, SitemapIndexFile
from .config import LinkSetConfig
from .errors import SitemapError
from .models import ChangeFreq, Link, Location
from .namer import SitemapNamer

logger = logging.getLogger("sitemap_builder")

MAX_ROLLOVERS = 1

LinkLike = Union[Link, str]


class LinkSet:
    """Route a stream of links into rolling sitemap files referenced by one index.

    Sitemaps are written as they fill up; the last sitemap and the index are
    written by ``finalize``. A link set built with an existing
    ``sitemap_index`` (as groups are) never finalizes that index, its owner
    does.
    """

    def __init__(
        self,
        config: Optional[LinkSetConfig] = None,
        sitemap_index: Optional[SitemapIndexFile] = None,
    ) -> None:
        self.config = config or LinkSetConfig()
        self.location = Location(
            public_path=self.config.public_path,
            sitemaps_path=self.config.sitemaps_path,
            host=self.config.default_host,
        )
        self.protect_index = sitemap_index is not None
        self._sitemap_index = sitemap_index
        self._namer: Optional[SitemapNamer] = None
        self._sitemap: Optional[SitemapFile] = None
        self._files_written = 0

    def __repr__(self) -> str:
        return f"<LinkSet {self.filename} protect_index={self.protect_index}>"

    def __enter__(self) -> "LinkSet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finalize()

    # Configuration -----------------------------------------------------

    @property
    def default_host(self) -> Optional[str]:
        return self.config.default_host

    @default_host.setter
    def default_host(self, value: Optional[str]) -> None:
        self.config = replace(self.config, default_host=value)
        self.location.update(host=value)
        self._update_file_locations(host=self.sitemaps_host)

    @property
    def sitemaps_host(self) -> Optional[str]:
        return self.config.sitemaps_host or self.config.default_host

    @sitemaps_host.setter
    def sitemaps_host(self, value: Optional[str]) -> None:
        self.config = replace(self.config, sitemaps_host=value)
        self._update_file_locations(host=self.sitemaps_host)

    @property
    def public_path(self) -> Path:
        return self.config.public_path

    @public_path.setter
    def public_path(self, value: Union[str, Path]) -> None:
        self.config = replace(self.config, public_path=Path(value))
        self.location.update(public_path=self.config.public_path)
        self._update_file_locations(public_path=self.config.public_path)

    @property
    def sitemaps_path(self) -> Optional[str]:
        return self.config.sitemaps_path

    @sitemaps_path.setter
    def sitemaps_path(self, value: Optional[str]) -> None:
        self.config = replace(self.config, sitemaps_path=value)
        self.location.update(sitemaps_path=value)
        self._update_file_locations(sitemaps_path=value)

    @property
    def filename(self) -> str:
        return self.config.filename

    @filename.setter
    def filename(self, value: str) -> None:
        """Switch the filename base used for sitemaps created from now on.

        A current sitemap that already holds links is finalized into the
        index under its old name; an empty one is discarded.
        """
        self.config = replace(self.config, filename=value)
        if self._sitemap is not None and not self._sitemap.finalized:
            if not self._sitemap.empty:
                self._finalize_sitemap()
            self._sitemap = None
        self._namer = None
        index = self._sitemap_index
        if (
            index is not None
            and not self.protect_index
            and not index.finalized
            and index.empty
        ):
            self._sitemap_index = None

    @property
    def include_root(self) -> bool:
        return self.config.include_root

    @include_root.setter
    def include_root(self, value: bool) -> None:
        self.config = replace(self.config, include_root=value)

    @property
    def include_index(self) -> bool:
        return self.config.include_index

    @include_index.setter
    def include_index(self, value: bool) -> None:
        self.config = replace(self.config, include_index=value)

    def _file_location(self) -> Location:
        return self.location.with_(host=self.sitemaps_host)

    def _update_file_locations(self, **changes) -> None:
        if self._sitemap is not None and not self._sitemap.finalized:
            self._sitemap.location.update(**changes)
        index = self._sitemap_index
        if index is not None and not self.protect_index and not index.finalized:
            index.location.update(**changes)

    # Files -------------------------------------------------------------

    @property
    def namer(self) -> SitemapNamer:
        if self._namer is None:
            self._namer = self.sitemap_index.namer_for(self.filename, self.config.compress)
        return self._namer

    @property
    def sitemap(self) -> SitemapFile:
        """The sitemap currently receiving links, created on first access."""
        if self._sitemap is None:
            self._sitemap = SitemapFile(location=self._file_location(), namer=self.namer)
        return self._sitemap

    @property
    def sitemap_index(self) -> SitemapIndexFile:
        if self._sitemap_index is None:
            namer = SitemapNamer(self.filename, zero="_index", compress=self.config.compress)
            self._sitemap_index = SitemapIndexFile(location=self._file_location(), namer=namer)
        return self._sitemap_index

    @property
    def link_count(self) -> int:
        """Links in the finalized files of the index plus the open sitemap."""
        count = self.sitemap_index.total_link_count
        if self._sitemap is not None and not self._sitemap.finalized:
            count += self._sitemap.link_count
        return count

    # Stream ------------------------------------------------------------

    def _coerce(self, link: LinkLike, options: dict) -> Link:
        if isinstance(link, Link):
            if options:
                raise TypeError("Options cannot be combined with a Link instance")
            if link.host is None and self.default_host:
                link = replace(link, host=self.default_host)
            return link
        options.setdefault("host", self.default_host)
        return Link(link, **options)

    def add(self, link: LinkLike, **options) -> int:
        """Add a link to the current sitemap, rolling over when it is full.

        ``link`` is a ``Link`` or a path; with a path, ``options`` are passed
        to ``Link`` (``host``, ``lastmod``, ``changefreq``, ``priority``).
        Returns the aggregate link count.
        """
        link = self._coerce(link, options)
        for _ in range(MAX_ROLLOVERS + 1):
            result = self.sitemap.try_add(link)
            if result is AddResult.ADDED:
                return self.link_count
            if result is AddResult.FULL and self.sitemap.empty:
                raise SitemapError(
                    f"Link {link.loc} is too large to fit in an empty sitemap"
                )
            # A sitemap finalized outside the coordinator still gets indexed.
            self._finalize_sitemap()
            self._sitemap = self.sitemap.next()
        raise SitemapError(
            f"Could not add {link.loc} after rolling over to {self.sitemap.filename}"
        )

    def create(self, links: Iterable[LinkLike] = ()) -> SitemapIndexFile:
        """Write a fresh set of sitemaps for ``links`` and return the index."""
        self._sitemap = None
        self._files_written = 0
        self._namer = None
        if not self.protect_index:
            self._sitemap_index = None

        start_time = time.perf_counter()
        now = dt.datetime.now(dt.timezone.utc)
        if self.include_root:
            self.add(
                Link(
                    "/",
                    host=self.default_host,
                    lastmod=now,
                    changefreq=ChangeFreq.ALWAYS,
                    priority=1.0,
                )
            )
        if self.include_index:
            index_location = self.sitemap_index.location
            self.add(
                Link(
                    index_location.path_in_public,
                    host=index_location.host,
                    lastmod=now,
                    changefreq=ChangeFreq.ALWAYS,
                    priority=1.0,
                )
            )
        for link in links:
            self.add(link)
        self.finalize()
        end_time = time.perf_counter()
        logger.info("%s", self.sitemap_index.stats_summary(start_time, end_time))
        return self.sitemap_index

    def group(self, **overrides) -> "LinkSet":
        """Start a sibling link set that writes into the same index.

        ``include_root`` and ``include_index`` default to False; every other
        option is inherited unless overridden. Names are drawn from the
        index's series for the filename base, so groups sharing a base
        continue one sequence.
        """
        overrides.setdefault("include_root", False)
        overrides.setdefault("include_index", False)
        config = replace(self.config, **overrides)
        return LinkSet(config, sitemap_index=self.sitemap_index)

    def finalize(self) -> None:
        """Write the current sitemap and, unless protected, the index. Idempotent."""
        self._finalize_sitemap()
        self._finalize_index()

    def _finalize_sitemap(self) -> None:
        if self._sitemap is None and self._files_written:
            return
        sitemap = self.sitemap
        if sitemap.finalized and self.sitemap_index.references(sitemap):
            return
        result = self.sitemap_index.try_add(sitemap)
        if result is AddResult.FULL:
            raise SitemapError(
                f"Sitemap index {self.sitemap_index.filename} cannot reference more files"
            )
        if result is AddResult.FINALIZED:
            raise SitemapError(
                f"Sitemap index {self.sitemap_index.filename} was finalized before "
                f"{sitemap.filename}"
            )
        self._files_written += 1
        logger.info("%s", sitemap.summary())

    def _finalize_index(self) -> None:
        if self.protect_index:
            return
        index = self.sitemap_index
        if index.finalized:
            return
        index.finalize()
        logger.info("%s", index.summary())

    def clean(self) -> List[Path]:
        """Delete previously generated files for this filename base."""
        directory = self.location.directory
        if not directory.is_dir():
            return []
        removed: List[Path] = []
        for pattern in (f"{self.filename}*.xml.gz", f"{self.filename}*.xml"):
            for path in sorted(directory.glob(pattern)):
                if not path.is_file():
                    continue
                path.unlink()
                removed.append(path)
                logger.info("Removed %s", path)
        return removed
