"""Bounded sitemap and sitemap index documents.

General usage::

    sitemap = SitemapFile(location=Location(public_path="public", host="https://example.com"))
    sitemap.add(Link("/about"))   # buffer a link
    sitemap.finalize()            # write the gzipped file; the object is frozen afterwards
"""

from __future__ import annotations

import datetime as dt
import gzip
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .config import (
    CompressPolicy,
    GEO_NS,
    IMAGE_NS,
    MAX_FILESIZE,
    MAX_LINKS,
    SITEMAP_NS,
    VIDEO_NS,
    XSI_NS,
)
from .errors import SitemapError, SitemapFinalizedError, SitemapFullError
from .models import IndexEntry, Link, Location
from .namer import SitemapNamer
from .utils import bytesize, format_duration, human_size, with_delimiter

logger = logging.getLogger("sitemap_builder")

URLSET_START = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    f'<urlset xmlns:xsi="{XSI_NS}" xmlns:image="{IMAGE_NS}"'
    f' xsi:schemaLocation="{SITEMAP_NS} {SITEMAP_NS}/sitemap.xsd"'
    f' xmlns="{SITEMAP_NS}" xmlns:video="{VIDEO_NS}" xmlns:geo="{GEO_NS}">'
)
URLSET_END = "</urlset>"

SITEMAPINDEX_START = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    f'<sitemapindex xmlns:xsi="{XSI_NS}"'
    f' xsi:schemaLocation="{SITEMAP_NS} {SITEMAP_NS}/siteindex.xsd"'
    f' xmlns="{SITEMAP_NS}">'
)
SITEMAPINDEX_END = "</sitemapindex>"


class AddResult(Enum):
    """Outcome of offering an entry to a sitemap file."""

    ADDED = "added"
    FULL = "full"
    FINALIZED = "finalized"


@dataclass
class _Buffer:
    entries: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FinalizedFile:
    """What remains of a sitemap once it has been written to disk."""

    path: Path
    filesize: int
    lastmod: dt.datetime


class SitemapFile:
    """A single append-only sitemap document bounded by the protocol limits."""

    max_links = MAX_LINKS
    max_filesize = MAX_FILESIZE
    xml_wrapper_start = URLSET_START
    xml_wrapper_end = URLSET_END
    default_filename = "sitemap"

    def __init__(
        self,
        location: Optional[Location] = None,
        namer: Optional[SitemapNamer] = None,
        filename: Optional[str] = None,
    ) -> None:
        self.location = location if location is not None else Location()
        self.namer = namer or SitemapNamer(filename or self.default_filename)
        self._filename = self.namer.next()
        self.location.update(filename=self._filename)
        self.link_count = 0
        self.byte_size = bytesize(self.xml_wrapper_start) + bytesize(self.xml_wrapper_end)
        self._state: Union[_Buffer, FinalizedFile] = _Buffer()

    def __repr__(self) -> str:
        state = "finalized" if self.finalized else "writable"
        return f"<{type(self).__name__} {self._filename} links={self.link_count} {state}>"

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def finalized(self) -> bool:
        return isinstance(self._state, FinalizedFile)

    @property
    def empty(self) -> bool:
        return self.link_count == 0

    @property
    def lastmod(self) -> Optional[dt.datetime]:
        if isinstance(self._state, FinalizedFile):
            return self._state.lastmod
        return None

    @property
    def filesize(self) -> Optional[int]:
        """Compressed size on disk, known once the file is finalized."""
        if isinstance(self._state, FinalizedFile):
            return self._state.filesize
        return None

    def can_fit(self, size: Union[int, str]) -> bool:
        """Whether another entry of ``size`` bytes fits within both limits."""
        return (
            self.byte_size + bytesize(size) < self.max_filesize
            and self.link_count < self.max_links
        )

    def _serialize(self, entry) -> str:
        if isinstance(entry, str):
            entry = Link(entry, host=self.location.host)
        return entry.xml

    def _append(self, xml: str) -> None:
        if not isinstance(self._state, _Buffer):
            raise SitemapFinalizedError(f"{self._filename} has already been finalized")
        self._state.entries.append(xml)
        self.byte_size += bytesize(xml)
        self.link_count += 1

    def try_add(self, entry) -> AddResult:
        """Buffer ``entry`` if possible and report what happened."""
        if self.finalized:
            return AddResult.FINALIZED
        xml = self._serialize(entry)
        if not self.can_fit(xml):
            return AddResult.FULL
        self._append(xml)
        return AddResult.ADDED

    def add(self, entry) -> int:
        """Add a link and return the new link count.

        Raises ``SitemapFullError`` when the link does not fit and
        ``SitemapFinalizedError`` when the file was already written.
        """
        result = self.try_add(entry)
        if result is AddResult.FULL:
            raise SitemapFullError(f"{self._filename} is full")
        if result is AddResult.FINALIZED:
            raise SitemapFinalizedError(f"{self._filename} has already been finalized")
        return self.link_count

    def finalize(self) -> None:
        """Write the document to disk and freeze this object.

        The buffered XML is released; counters, filename and location stay
        readable. If writing fails the file remains writable.
        """
        if not isinstance(self._state, _Buffer):
            raise SitemapFinalizedError(f"{self._filename} has already been finalized")

        directory = self.location.directory
        if directory.exists() and not directory.is_dir():
            raise SitemapError(f"{directory} should be a directory!")
        directory.mkdir(parents=True, exist_ok=True)

        path = self.location.path
        opener = gzip.open if path.suffix == ".gz" else open
        with opener(path, "wb") as handle:
            handle.write(self.xml_wrapper_start.encode("utf-8"))
            for xml in self._state.entries:
                handle.write(xml.encode("utf-8"))
            handle.write(self.xml_wrapper_end.encode("utf-8"))

        stat = path.stat()
        self._state = FinalizedFile(
            path=path,
            filesize=stat.st_size,
            lastmod=dt.datetime.fromtimestamp(stat.st_mtime, tz=dt.timezone.utc),
        )
        self.location.lock()
        logger.debug("Wrote %s (%d links)", path, self.link_count)

    def next(self) -> "SitemapFile":
        """Return a new file with the same options and the next name in the sequence."""
        return type(self)(location=self.location.with_(), namer=self.namer)

    def summary(self) -> str:
        compressed = human_size(self.filesize) if self.filesize is not None else "-"
        return "+ %-21s %13s links / %10s / %10s gzipped" % (
            self.location.path_in_public,
            with_delimiter(self.link_count),
            human_size(self.byte_size),
            compressed,
        )


class SitemapIndexFile(SitemapFile):
    """A sitemap document whose entries reference other sitemap files.

    Adding a ``SitemapFile`` finalizes it and records it in ``sitemaps``.
    Any other entry is written as a raw reference, which lets several
    independent sitemap groups share one umbrella index.
    """

    xml_wrapper_start = SITEMAPINDEX_START
    xml_wrapper_end = SITEMAPINDEX_END
    default_filename = "sitemap_index"

    def __init__(
        self,
        location: Optional[Location] = None,
        namer: Optional[SitemapNamer] = None,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__(location=location, namer=namer, filename=filename)
        self.sitemaps: List[SitemapFile] = []
        self._namers: Dict[Tuple[str, CompressPolicy], SitemapNamer] = {}

    def _serialize(self, entry) -> str:
        if isinstance(entry, IndexEntry):
            return entry.xml
        if isinstance(entry, str):
            entry = Link(entry, host=self.location.host)
        return IndexEntry.from_link(entry).xml

    def try_add(self, entry) -> AddResult:
        if not isinstance(entry, SitemapFile):
            return super().try_add(entry)
        if self.finalized:
            return AddResult.FINALIZED
        # Sized before the file is written; lastmod serializes to a fixed length.
        loc = entry.location.url
        lastmod = entry.lastmod or dt.datetime.now(dt.timezone.utc)
        if not self.can_fit(IndexEntry(loc=loc, lastmod=lastmod).xml):
            return AddResult.FULL
        if not entry.finalized:
            entry.finalize()
        reference = IndexEntry(loc=loc, lastmod=entry.lastmod, filesize=entry.filesize)
        self._append(reference.xml)
        self.sitemaps.append(entry)
        return AddResult.ADDED

    def references(self, sitemap: SitemapFile) -> bool:
        """Whether ``sitemap`` has already been added to this index."""
        return any(existing is sitemap for existing in self.sitemaps)

    def namer_for(self, base: str, compress: CompressPolicy = True) -> SitemapNamer:
        """The shared name series for sitemaps with ``base`` referenced by this index.

        Every link set writing into this index draws names from the same
        series per base, so sequences never restart and files are never
        overwritten.
        """
        key = (base, compress)
        if key not in self._namers:
            self._namers[key] = SitemapNamer(base, zero=None, compress=compress)
        return self._namers[key]

    @property
    def total_link_count(self) -> int:
        return sum(sitemap.link_count for sitemap in self.sitemaps)

    @property
    def file_count(self) -> int:
        return len(self.sitemaps)

    def stats_summary(
        self,
        start_time: Optional[float] = None,
        end_time: Optional[float] = None,
    ) -> str:
        """Summarize links and files written, plus elapsed time when known."""
        summary = "Sitemap stats: %s links / %d files" % (
            with_delimiter(self.total_link_count),
            self.file_count,
        )
        if start_time is not None and end_time is not None:
            summary += " / " + format_duration(end_time - start_time)
        return summary
