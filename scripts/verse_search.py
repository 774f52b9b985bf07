#!/usr/bin/env python3
"""Fuzzy search across the verse lines of the Commedia.

Scores the pattern against every line (case-insensitive subsequence match)
and prints ranked hits to stdout, with summary messages to stderr.
Exit code 1 when nothing matches.

Usage:
    python3 scripts/verse_search.py --pattern "stelle"
    python3 scripts/verse_search.py --pattern "stelle" --book paradiso --exact
    python3 scripts/verse_search.py --pattern "selva" --json --max-results 20
    python3 scripts/verse_search.py --pattern "^E quindi" --regex
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from duca.corpus import load_document
from duca.document import Book
from duca.io_utils import dumps_pretty
from duca.search import SearchMatch, search

log = logging.getLogger("verse_search")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fuzzy search across the verse lines of the Commedia."
    )
    parser.add_argument("--pattern", required=True, help="Search query")
    parser.add_argument(
        "--book",
        default=None,
        help="Limit search to one cantica (inferno, purgatorio, paradiso)",
    )
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Only lines containing the pattern as a substring",
    )
    parser.add_argument(
        "--regex",
        action="store_true",
        help="Treat the pattern as a case-insensitive regex (invalid regexes match literally)",
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=None,
        help="Maximum number of results (default: all)",
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


def format_match(match: SearchMatch) -> str:
    """'Inferno 1.2: mi ritrovai per una selva oscura'"""
    return (
        f"{match.book.display_name} {match.section_number}.{match.line_number}: "
        f"{match.text}"
    )


def match_to_dict(match: SearchMatch) -> dict[str, object]:
    book, section_number, line_number, text, score = match.as_row()
    return {
        "book": book,
        "section_number": section_number,
        "line_number": line_number,
        "text": text,
        "score": score,
        "highlight_positions": list(match.highlight_positions),
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    book: Book | None = None
    if args.book is not None:
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

    results = search(
        document, args.pattern, book,
        exact=args.exact, regex=args.regex, max_results=args.max_results,
    )
    log.debug("Scored %d lines", document.line_count(book))

    if not results:
        print(f"No matches found for '{args.pattern}'", file=sys.stderr)
        return 1

    print(f"Found {len(results)} matches for '{args.pattern}'", file=sys.stderr)
    if args.json:
        sys.stdout.buffer.write(dumps_pretty([match_to_dict(m) for m in results]))
        sys.stdout.flush()
    else:
        for match in results:
            print(format_match(match))
    return 0


if __name__ == "__main__":
    sys.exit(main())
