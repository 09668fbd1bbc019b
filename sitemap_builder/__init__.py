"""Write size-capped, gzipped sitemap files and the index that references them."""

from .builder import AddResult, FinalizedFile, SitemapFile, SitemapIndexFile
from .config import MAX_FILESIZE, MAX_LINKS, LinkSetConfig
from .errors import (
    SitemapError,
    SitemapFinalizedError,
    SitemapFullError,
    SitemapSequenceError,
)
from .link_set import LinkSet
from .models import ChangeFreq, IndexEntry, Link, Location
from .namer import SitemapNamer

__version__ = "0.1.0"

__all__ = [
    "AddResult",
    "ChangeFreq",
    "FinalizedFile",
    "IndexEntry",
    "Link",
    "LinkSet",
    "LinkSetConfig",
    "Location",
    "MAX_FILESIZE",
    "MAX_LINKS",
    "SitemapError",
    "SitemapFile",
    "SitemapFinalizedError",
    "SitemapFullError",
    "SitemapIndexFile",
    "SitemapNamer",
    "SitemapSequenceError",
]
