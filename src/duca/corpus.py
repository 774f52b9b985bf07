"""Loader for the Commedia corpus: source texts, parsing, and JSON cache.

Source layout (one Gutenberg plain-text file per cantica)::

    <data-dir>/inferno.txt
    <data-dir>/purgatorio.txt
    <data-dir>/paradiso.txt
    <data-dir>/commedia.json     # optional parsed cache

The data directory comes from ``--data-dir``, else ``$DUCA_DATA_DIR``, else
``./data``. ``load_document`` prefers the cache when present and otherwise
parses the three texts; either way the result is the same Document.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from duca.document import Book, Document, Line, Section
from duca.io_utils import load_json, read_text, save_json
from duca.numerals import number_to_roman
from duca.section_parser import parse_sections

log = logging.getLogger(__name__)

DATA_DIR_ENV = "DUCA_DATA_DIR"
DEFAULT_DATA_DIR = Path("data")
CACHE_FILENAME = "commedia.json"

SOURCE_FILENAMES: dict[Book, str] = {
    Book.INFERNO: "inferno.txt",
    Book.PURGATORIO: "purgatorio.txt",
    Book.PARADISO: "paradiso.txt",
}


class CacheFormatError(ValueError):
    """Raised when a cache file does not hold a serialized Document."""


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def resolve_data_dir(data_dir: Path | None = None) -> Path:
    """Explicit argument, then $DUCA_DATA_DIR, then ./data."""
    if data_dir is not None:
        return data_dir
    env = os.environ.get(DATA_DIR_ENV, "").strip()
    if env:
        return Path(env)
    return DEFAULT_DATA_DIR


def default_cache_path(data_dir: Path) -> Path:
    return data_dir / CACHE_FILENAME


# ---------------------------------------------------------------------------
# Building from source text
# ---------------------------------------------------------------------------


def build_document(texts: Mapping[Book, str]) -> Document:
    """Parse one raw text per Book into a Document.

    All three Books are required. Any parse error propagates; no partial
    Document is returned.
    """
    missing = [b.value for b in Book if b not in texts]
    if missing:
        raise ValueError(f"Missing source text for: {', '.join(missing)}")
    return Document({book: parse_sections(texts[book], book) for book in Book})


def read_source_texts(data_dir: Path) -> dict[Book, str]:
    """Read the three cantica files from *data_dir*."""
    texts: dict[Book, str] = {}
    for book, filename in SOURCE_FILENAMES.items():
        path = data_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"Source text not found: {path}")
        texts[book] = read_text(path)
    return texts


def parse_source_dir(data_dir: Path) -> Document:
    log.info("Parsing source texts in %s", data_dir)
    document = build_document(read_source_texts(data_dir))
    for book in Book:
        log.debug(
            "%s: %d cantos, %d lines",
            book.display_name, len(document.sections(book)), document.line_count(book),
        )
    return document


# ---------------------------------------------------------------------------
# JSON cache
# ---------------------------------------------------------------------------


def document_to_payload(document: Document) -> dict[str, Any]:
    """Serialize to plain JSON types: {book: [{number, roman_label, lines}]}."""
    return {
        book.value: [
            {
                "number": s.number,
                "roman_label": s.roman_label,
                "lines": [{"number": ln.number, "text": ln.text} for ln in s.lines],
            }
            for s in document.sections(book)
        ]
        for book in Book
    }


def document_from_payload(payload: Any) -> Document:
    """Inverse of ``document_to_payload``. Validates shape and labels."""
    if not isinstance(payload, dict):
        raise CacheFormatError("Cache payload must be an object")
    books: dict[Book, tuple[Section, ...]] = {}
    for book in Book:
        raw_sections = payload.get(book.value)
        if not isinstance(raw_sections, list):
            raise CacheFormatError(f"Cache has no section list for {book.value!r}")
        sections: list[Section] = []
        seen: set[int] = set()
        for raw in raw_sections:
            try:
                number = int(raw["number"])
                label = number_to_roman(number)
                lines = tuple(
                    Line(number=int(ln["number"]), text=str(ln["text"]))
                    for ln in raw["lines"]
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise CacheFormatError(
                    f"Malformed section entry in {book.value!r}: {exc}"
                ) from exc
            if raw.get("roman_label", label) != label:
                raise CacheFormatError(
                    f"{book.value} canto {number}: label {raw['roman_label']!r} "
                    f"does not match {label!r}"
                )
            if number in seen:
                raise CacheFormatError(f"{book.value} canto {number} appears twice")
            seen.add(number)
            if [ln.number for ln in lines] != list(range(1, len(lines) + 1)):
                raise CacheFormatError(
                    f"{book.value} canto {number}: line numbers are not 1..{len(lines)}"
                )
            sections.append(Section(number=number, roman_label=label, lines=lines))
        books[book] = tuple(sections)
    return Document(books)


def save_document_cache(document: Document, path: Path) -> None:
    save_json(document_to_payload(document), path)
    log.info("Wrote document cache to %s", path)


def load_document_cache(path: Path) -> Document:
    return document_from_payload(load_json(path))


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def load_document(
    data_dir: Path | None = None,
    *,
    cache_path: Path | None = None,
    use_cache: bool = True,
) -> Document:
    """Load the Document for a session.

    Args:
        data_dir: Directory holding the source texts (see module docstring).
        cache_path: JSON cache to prefer; defaults to ``<data-dir>/commedia.json``.
        use_cache: If False, always parse the source texts.
    """
    root = resolve_data_dir(data_dir)
    cache = cache_path if cache_path is not None else default_cache_path(root)
    if use_cache and cache.exists():
        log.info("Loading document cache %s", cache)
        return load_document_cache(cache)
    return parse_source_dir(root)
