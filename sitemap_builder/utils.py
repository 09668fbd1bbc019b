"""Utility helpers for sizes, counts and filename handling."""

from __future__ import annotations

import re
from typing import Union

FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def bytesize(value: Union[str, bytes, int]) -> int:
    """Return the UTF-8 encoded length of ``value`` (ints pass through)."""
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    return len(value)


def human_size(num_bytes: int) -> str:
    """Format a byte count the way file listings do, e.g. ``1.5 KB``."""
    size = float(num_bytes)
    for unit in _SIZE_UNITS:
        if size < 1024 or unit == _SIZE_UNITS[-1]:
            break
        size /= 1024
    if unit == "Bytes":
        return f"{int(size)} Bytes"
    return f"{size:.1f} {unit}".replace(".0 ", " ")


def with_delimiter(number: int) -> str:
    return f"{number:,}"


def format_duration(seconds: float) -> str:
    """Render elapsed seconds as ``<minutes>m<seconds>s``."""
    minutes, secs = divmod(int(seconds), 60)
    return "%dm%02ds" % (minutes, secs)


def validate_filename_base(value: str) -> str:
    """Ensure a filename base is non-empty and safe to use inside a directory."""
    value = str(value)
    if not FILENAME_PATTERN.match(value):
        raise ValueError(f"Invalid sitemap filename base: {value!r}")
    return value
