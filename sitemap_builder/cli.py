"""Command-line entry point for the sitemap builder."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, TextIO

from dateutil.parser import isoparse

from .config import ALL_BUT_FIRST, DEFAULT_FILENAME, DEFAULT_PUBLIC_PATH, LinkSetConfig
from .errors import SitemapError
from .link_set import LinkSet
from .models import Link

logger = logging.getLogger("sitemap_builder.cli")

_COMPRESS_CHOICES = {"true": True, "false": False, ALL_BUT_FIRST: ALL_BUT_FIRST}


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or (first.startswith("-") and first != "-"):
        return argv
    return ("generate", *argv)


def parse_link_line(line: str, line_number: int) -> Optional[Link]:
    """Parse ``path [lastmod [changefreq [priority]]]``; blank and comment lines give None."""
    stripped = line.split("#", 1)[0].strip()
    if not stripped:
        return None
    fields = stripped.split()
    if len(fields) > 4:
        raise ValueError(f"line {line_number}: expected at most 4 fields, got {len(fields)}")
    options = {}
    try:
        if len(fields) > 1 and fields[1] != "-":
            options["lastmod"] = isoparse(fields[1])
        if len(fields) > 2:
            options["changefreq"] = fields[2]
        if len(fields) > 3:
            options["priority"] = float(fields[3])
        return Link(fields[0], **options)
    except ValueError as exc:
        raise ValueError(f"line {line_number}: {exc}") from exc


def read_links(stream: TextIO) -> Iterator[Link]:
    for line_number, line in enumerate(stream, start=1):
        link = parse_link_line(line, line_number)
        if link is not None:
            yield link


def _add_location_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default=DEFAULT_PUBLIC_PATH,
        type=Path,
        help="Public directory the sitemaps are written under",
    )
    parser.add_argument(
        "--sitemaps-path",
        default=None,
        help="Sub-path inside the output directory, e.g. 'sitemaps/'",
    )
    parser.add_argument(
        "--filename",
        default=DEFAULT_FILENAME,
        help="Base name of the generated files",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_generate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "urls",
        help="File listing one 'path [lastmod [changefreq [priority]]]' per line ('-' for stdin)",
    )
    _add_location_arguments(parser)
    parser.add_argument(
        "--host",
        default=None,
        help="Host, including protocol, used for every link, e.g. https://example.com",
    )
    parser.add_argument(
        "--sitemaps-host",
        default=None,
        help="Host serving the sitemap files, when it differs from --host",
    )
    parser.add_argument(
        "--compress",
        choices=sorted(_COMPRESS_CHOICES),
        default="true",
        help="Gzip every file, none, or all but the index",
    )
    parser.add_argument(
        "--no-root",
        dest="include_root",
        action="store_false",
        help="Do not add the root URL",
    )
    parser.add_argument(
        "--no-index",
        dest="include_index",
        action="store_false",
        help="Do not add the sitemap index URL",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Write gzipped sitemap files and a sitemap index from a list of URLs.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Generate sitemaps and their index"
    )
    _add_generate_arguments(generate_parser)

    clean_parser = subparsers.add_parser(
        "clean", help="Remove previously generated sitemap files"
    )
    _add_location_arguments(clean_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_generate(args: argparse.Namespace) -> int:
    config = LinkSetConfig(
        public_path=Path(args.output).resolve(),
        sitemaps_path=args.sitemaps_path,
        default_host=args.host,
        sitemaps_host=args.sitemaps_host,
        filename=args.filename,
        include_root=args.include_root,
        include_index=args.include_index,
        compress=_COMPRESS_CHOICES[args.compress],
    )
    link_set = LinkSet(config)

    overall_start = time.perf_counter()
    if args.urls == "-":
        index = link_set.create(read_links(sys.stdin))
    else:
        with open(args.urls, encoding="utf-8") as handle:
            index = link_set.create(read_links(handle))
    total_elapsed = time.perf_counter() - overall_start

    logger.info("Sitemap index written to %s", index.location.path)
    logger.debug(
        "Generated %d links in %d files in %.2fs",
        index.total_link_count,
        index.file_count,
        total_elapsed,
    )
    return 0


def _run_clean(args: argparse.Namespace) -> int:
    config = LinkSetConfig(
        public_path=Path(args.output).resolve(),
        sitemaps_path=args.sitemaps_path,
        filename=args.filename,
    )
    removed = LinkSet(config).clean()
    logger.info("Removed %d file%s", len(removed), "" if len(removed) == 1 else "s")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        if args.command == "generate":
            return _run_generate(args)
        return _run_clean(args)
    except (SitemapError, ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
