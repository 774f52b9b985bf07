#!/usr/bin/env python3
"""Print one canto, or list the cantos of a cantica.

Usage:
    # List cantos of Inferno with line counts
    python3 scripts/canto_reader.py --book inferno

    # Read Inferno I
    python3 scripts/canto_reader.py --book inferno --canto 1

    # Same, as JSON
    python3 scripts/canto_reader.py --book paradiso --canto 33 --json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from duca.corpus import load_document
from duca.document import Book, NotFound, Section
from duca.io_utils import dumps_pretty


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print one canto, or list the cantos of a cantica."
    )
    parser.add_argument(
        "--book", required=True, help="Cantica (inferno, purgatorio, paradiso)"
    )
    parser.add_argument(
        "--canto",
        type=int,
        default=None,
        help="Canto number. If omitted, list all cantos of the cantica.",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON to stdout")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory with the cantica texts (default: $DUCA_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--cache", type=Path, default=None, help="Parsed JSON cache to prefer"
    )
    parser.add_argument(
        "--no-cache", action="store_true", help="Always parse the source texts"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def canto_title(book: Book, section: Section) -> str:
    return f"{book.display_name} Canto {section.roman_label}"


def format_canto(book: Book, section: Section) -> list[str]:
    """Title, blank line, then '  1: text' per line."""
    out = [canto_title(book, section), ""]
    out.extend(f"{line.number:3}: {line.text}" for line in section.lines)
    return out


def section_to_dict(book: Book, section: Section) -> dict[str, object]:
    return {
        "book": book.value,
        "section_number": section.number,
        "roman_label": section.roman_label,
        "lines": [{"number": ln.number, "text": ln.text} for ln in section.lines],
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        book = Book.from_name(args.book)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        document = load_document(
            args.data_dir, cache_path=args.cache, use_cache=not args.no_cache,
        )
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.canto is None:
        sections = document.sections(book)
        print(f"Found {len(sections)} cantos in {book.display_name}", file=sys.stderr)
        if args.json:
            sys.stdout.buffer.write(dumps_pretty([
                {
                    "section_number": s.number,
                    "roman_label": s.roman_label,
                    "line_count": len(s.lines),
                }
                for s in sections
            ]))
            sys.stdout.flush()
        else:
            for s in sections:
                print(f"{canto_title(book, s)} ({len(s.lines)} lines)")
        return 0

    try:
        section = document.section(book, args.canto)
    except NotFound as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        sys.stdout.buffer.write(dumps_pretty(section_to_dict(book, section)))
        sys.stdout.flush()
    else:
        print("\n".join(format_canto(book, section)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
