import datetime as dt
from pathlib import Path

import pytest

from sitemap_builder import (
    ChangeFreq,
    IndexEntry,
    Link,
    Location,
    SitemapError,
    SitemapFinalizedError,
)


def test_link_xml():
    link = Link(
        "/about",
        host="https://example.com",
        lastmod=dt.date(2024, 1, 2),
        changefreq="daily",
        priority=0.8,
    )
    assert link.xml == (
        "<url><loc>https://example.com/about</loc><lastmod>2024-01-02</lastmod>"
        "<changefreq>daily</changefreq><priority>0.8</priority></url>"
    )
    assert link.changefreq is ChangeFreq.DAILY


def test_link_defaults_and_escaping():
    link = Link("/search?q=a&b=c", host="https://example.com")
    assert link.xml == (
        "<url><loc>https://example.com/search?q=a&amp;b=c</loc>"
        "<changefreq>weekly</changefreq><priority>0.5</priority></url>"
    )


def test_link_byte_size_counts_utf8_bytes():
    link = Link("/café", host="https://example.com")
    assert link.byte_size == len(link.xml.encode("utf-8"))
    assert link.byte_size > len(link.xml)


def test_naive_datetime_is_utc():
    link = Link("/", host="https://example.com", lastmod=dt.datetime(2024, 5, 1, 12, 30))
    assert "<lastmod>2024-05-01T12:30:00+00:00</lastmod>" in link.xml


def test_absolute_path_ignores_host():
    assert Link("https://other.org/page").loc == "https://other.org/page"


def test_host_with_path_prefix():
    assert Link("/about", host="https://example.com/blog").loc == "https://example.com/blog/about"


def test_relative_link_without_host_fails():
    with pytest.raises(SitemapError):
        Link("/about").xml


@pytest.mark.parametrize("priority", [-0.1, 1.5])
def test_priority_range(priority):
    with pytest.raises(ValueError):
        Link("/", priority=priority)


def test_unknown_changefreq():
    with pytest.raises(ValueError):
        Link("/", changefreq="sometimes")


def test_index_entry_xml():
    entry = IndexEntry(
        loc="https://example.com/sitemap1.xml.gz",
        lastmod=dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc),
    )
    assert entry.xml == (
        "<sitemap><loc>https://example.com/sitemap1.xml.gz</loc>"
        "<lastmod>2024-01-02T03:04:05+00:00</lastmod></sitemap>"
    )


def test_location_paths_and_url(tmp_path):
    location = Location(
        public_path=tmp_path,
        sitemaps_path="sitemaps/",
        host="http://one.com",
        filename="sitemap1.xml.gz",
    )
    assert location.directory == tmp_path / "sitemaps"
    assert location.path == tmp_path / "sitemaps" / "sitemap1.xml.gz"
    assert location.path_in_public == "sitemaps/sitemap1.xml.gz"
    assert location.url == "http://one.com/sitemaps/sitemap1.xml.gz"


def test_location_url_requires_host():
    with pytest.raises(SitemapError):
        Location(filename="sitemap.xml.gz").url


def test_location_copy_is_independent():
    location = Location(public_path="public", host="http://one.com")
    copy = location.with_(host="http://two.com")
    copy.update(sitemaps_path="en/")
    assert location.host == "http://one.com"
    assert location.sitemaps_path is None
    assert copy.directory == Path("public") / "en/"


def test_locked_location_rejects_updates():
    location = Location(filename="sitemap.xml.gz")
    location.lock()
    with pytest.raises(SitemapFinalizedError):
        location.update(host="http://one.com")
    assert not location.with_().locked
