"""Exceptions raised while building sitemaps."""

from __future__ import annotations


class SitemapError(Exception):
    """Base error; also raised for unrecoverable configuration and IO problems."""


class SitemapFullError(SitemapError):
    """The sitemap cannot take another link without breaking the protocol limits."""


class SitemapFinalizedError(SitemapError):
    """The sitemap was already written to disk and can no longer change."""


class SitemapSequenceError(SitemapError):
    """A namer was asked to step before the start of its series."""
