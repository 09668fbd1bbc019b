"""Configuration objects and protocol constants for sitemap generation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .utils import validate_filename_base

MAX_LINKS = 50_000
MAX_FILESIZE = 10 * 1024 * 1024

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"
VIDEO_NS = "http://www.google.com/schemas/sitemap-video/1.1"
GEO_NS = "http://www.google.com/geo/schemas/sitemap/1.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

DEFAULT_FILENAME = "sitemap"
DEFAULT_EXTENSION = ".xml.gz"
DEFAULT_PUBLIC_PATH = Path("public")
ALL_BUT_FIRST = "all_but_first"

CompressPolicy = Union[bool, str]


def validate_compress(compress: CompressPolicy) -> CompressPolicy:
    """Return ``compress`` unchanged if it is a supported policy."""
    if compress is True or compress is False or compress == ALL_BUT_FIRST:
        return compress
    raise ValueError(
        f"compress must be True, False or {ALL_BUT_FIRST!r}, got {compress!r}"
    )


def _validate_host(name: str, host: Optional[str]) -> None:
    if host is None:
        return
    if not host.startswith(("http://", "https://")):
        raise ValueError(f"{name} must include the protocol, got {host!r}")


@dataclass
class LinkSetConfig:
    """Settings that control where and how a link set writes its sitemaps.

    ``default_host`` is used for the links inside each sitemap, while
    ``sitemaps_host`` (falling back to ``default_host``) is used for the
    URLs of the sitemap files themselves as listed in the index.
    """

    public_path: Path = DEFAULT_PUBLIC_PATH
    sitemaps_path: Optional[str] = None
    default_host: Optional[str] = None
    sitemaps_host: Optional[str] = None
    filename: str = DEFAULT_FILENAME
    include_root: bool = True
    include_index: bool = True
    compress: CompressPolicy = True

    def __post_init__(self) -> None:
        self.public_path = Path(self.public_path)
        self.filename = validate_filename_base(self.filename)
        self.compress = validate_compress(self.compress)
        _validate_host("default_host", self.default_host)
        _validate_host("sitemaps_host", self.sitemaps_host)
        if self.sitemaps_path is not None and Path(self.sitemaps_path).is_absolute():
            raise ValueError(
                f"sitemaps_path must be relative to public_path, got {self.sitemaps_path!r}"
            )
