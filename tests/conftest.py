from __future__ import annotations

import gzip
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from sitemap_builder import (
    MAX_FILESIZE,
    MAX_LINKS,
    LinkSet,
    LinkSetConfig,
    SitemapFile,
    SitemapIndexFile,
)
from sitemap_builder.builder import URLSET_END, URLSET_START
from sitemap_builder.utils import bytesize

HOST = "https://example.com"


def read_document(path: Path) -> BeautifulSoup:
    """Parse a generated sitemap or index, gzipped or not."""
    if path.suffix == ".gz":
        with gzip.open(path, "rt", encoding="utf-8") as handle:
            text = handle.read()
    else:
        text = path.read_text(encoding="utf-8")
    return BeautifulSoup(text, "xml")


def locs(path: Path) -> list:
    return [tag.get_text() for tag in read_document(path).find_all("loc")]


@pytest.fixture
def make_link_set(tmp_path):
    def factory(**overrides) -> LinkSet:
        overrides.setdefault("public_path", tmp_path / "public")
        overrides.setdefault("default_host", HOST)
        return LinkSet(LinkSetConfig(**overrides))

    return factory


@pytest.fixture
def limit_sitemaps(monkeypatch):
    """Shrink sitemap limits while the index keeps the protocol limits.

    ``entry_bytes`` is the room left for entries on top of the
    urlset wrapper.
    """

    def apply(max_links=None, entry_bytes=None):
        if max_links is not None:
            monkeypatch.setattr(SitemapFile, "max_links", max_links)
            monkeypatch.setattr(SitemapIndexFile, "max_links", MAX_LINKS)
        if entry_bytes is not None:
            wrapper = bytesize(URLSET_START) + bytesize(URLSET_END)
            monkeypatch.setattr(SitemapFile, "max_filesize", wrapper + entry_bytes)
            monkeypatch.setattr(SitemapIndexFile, "max_filesize", MAX_FILESIZE)

    return apply
