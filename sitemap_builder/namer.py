"""Filename sequences for sitemap and sitemap index files."""

from __future__ import annotations

from typing import Optional

from .config import ALL_BUT_FIRST, DEFAULT_EXTENSION, CompressPolicy, validate_compress
from .errors import SitemapSequenceError
from .utils import validate_filename_base


class SitemapNamer:
    """Generate an ordered, non-repeating series of sitemap filenames.

    With base ``sitemap`` and the default options the series is::

        sitemap.xml.gz, sitemap1.xml.gz, sitemap2.xml.gz, ...

    ``zero`` is appended to ``base`` to build the first name of the series
    (``"_index"`` gives ``sitemap_index.xml.gz``). Pass ``zero=None`` to start
    directly at the numbered names. ``compress`` controls the ``.gz`` suffix:
    ``True`` keeps it, ``False`` strips it from every name and
    ``"all_but_first"`` strips it from the zero name only.
    """

    def __init__(
        self,
        base: str,
        zero: Optional[str] = "",
        start: int = 1,
        extension: str = DEFAULT_EXTENSION,
        compress: CompressPolicy = True,
    ) -> None:
        self.base = validate_filename_base(base)
        self.zero = zero
        self.start = start
        self.extension = extension
        self.compress = validate_compress(compress)
        self._started = False
        self._count: Optional[int] = None

    def __repr__(self) -> str:
        return f"SitemapNamer(base={self.base!r}, zero={self.zero!r}, start={self.start})"

    @property
    def at_zero(self) -> bool:
        return self._started and self._count is None

    @property
    def at_start(self) -> bool:
        """True before the first name or while on the first name of the series."""
        if not self._started or self._count is None:
            return True
        return self.zero is None and self._count <= self.start

    @property
    def current(self) -> str:
        if not self._started:
            raise SitemapSequenceError("next() has not been called yet")
        return self._format()

    def _format(self) -> str:
        extension = self.extension
        if self.compress is False or (self.compress == ALL_BUT_FIRST and self.at_zero):
            extension = extension.replace(".gz", "")
        if self._count is None:
            return f"{self.base}{self.zero}{extension}"
        return f"{self.base}{self._count}{extension}"

    def next(self) -> str:
        """Advance to and return the next name."""
        if not self._started:
            self._started = True
            self._count = None if self.zero is not None else self.start
        elif self._count is None:
            self._count = self.start
        else:
            self._count += 1
        return self._format()

    def previous(self) -> str:
        """Step back to and return the previous name."""
        if self.at_start or self._count is None:
            raise SitemapSequenceError("Already at the start of the series")
        if self._count <= self.start:
            self._count = None
        else:
            self._count -= 1
        return self._format()

    def reset(self) -> None:
        """Return to the state before the first name."""
        self._started = False
        self._count = None
