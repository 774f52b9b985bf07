#!/usr/bin/env python3
"""Parse the three cantica texts and write the JSON document cache.

Reads inferno.txt, purgatorio.txt and paradiso.txt from the data directory,
parses them, and writes the Document as JSON so later sessions can skip
parsing. The cache is re-read after writing and compared to the fresh parse.

Usage:
    python3 scripts/build_commedia_cache.py --data-dir data/
    python3 scripts/build_commedia_cache.py --data-dir data/ --output /tmp/commedia.json
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from duca.corpus import (
    default_cache_path,
    load_document_cache,
    parse_source_dir,
    resolve_data_dir,
    save_document_cache,
)
from duca.document import Book

log = logging.getLogger("build_commedia_cache")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parse the cantica texts and write the JSON document cache.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory with the cantica texts (default: $DUCA_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Cache path (default: <data-dir>/commedia.json)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    t0 = time.time()
    data_dir = resolve_data_dir(args.data_dir)
    output: Path = args.output if args.output is not None else default_cache_path(data_dir)

    try:
        document = parse_source_dir(data_dir)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    save_document_cache(document, output)
    if load_document_cache(output) != document:
        print(f"Error: cache {output} does not reproduce the parsed text", file=sys.stderr)
        return 1

    for book in Book:
        print(
            f"{book.display_name} cantos: {len(document.sections(book))}",
            file=sys.stderr,
        )
    log.info("Done in %.2fs", time.time() - t0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
