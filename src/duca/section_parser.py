"""Canto parser for the Project Gutenberg text of one cantica.

Turns the raw text of a single Book into an ordered tuple of Sections:
- Canto detection ("Canto I", "CANTO XXXIV", "Canto XIV.")
- Verse lines numbered from 1 within each canto, blank lines skipped
- Gutenberg framing lines skipped, end-of-work notice stops the scan

2-phase approach:
    1. Classify each line (blank / sentinel / header / boilerplate / content).
    2. Walk the classified lines, opening a canto on each header and
       numbering content lines into the open canto.

Headers are assumed to sit flush on their own line; a verse consisting of
exactly "canto" plus a numeral would be read as a header. The Gutenberg
texts never do this, and the canto boundaries depend on the rule.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from duca.document import Book, Line, Section
from duca.numerals import InvalidNumeral, ROMAN_DIGITS, number_to_roman, roman_to_number

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class MalformedHeader(ValueError):
    """Raised when a canto header carries an undecodable numeral."""

    def __init__(self, book: Book, source_line: int, raw: str) -> None:
        super().__init__(
            f"{book.display_name} line {source_line}: "
            f"malformed canto header {raw!r}"
        )
        self.book = book
        self.source_line = source_line
        self.raw = raw


class EmptyDocument(ValueError):
    """Raised when no canto was found before the end-of-work notice."""

    def __init__(self, book: Book) -> None:
        super().__init__(f"No cantos found in {book.display_name} text")
        self.book = book


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

HEADER_KEYWORD = "canto"

# Start of the Gutenberg license notice that follows the last canto.
END_SENTINEL = "Updated editions will replace"

# Gutenberg framing that can leak into the body of a canto.
_BOILERPLATE_PREFIX = "*** "
_BOILERPLATE_MARKER = "Project Gutenberg"


class LineKind(Enum):
    BLANK = "blank"
    SENTINEL = "sentinel"
    HEADER = "header"
    BOILERPLATE = "boilerplate"
    CONTENT = "content"


@dataclass(frozen=True, slots=True)
class ClassifiedLine:
    """One source line after classification."""

    kind: LineKind
    text: str           # stripped line
    numeral: str = ""   # header numeral with any trailing "." removed


def _header_numeral(stripped: str) -> str | None:
    """Return the numeral token if *stripped* has the shape of a canto header."""
    tokens = stripped.split()
    if len(tokens) != 2 or tokens[0].lower() != HEADER_KEYWORD:
        return None
    numeral = tokens[1]
    if numeral.endswith("."):
        numeral = numeral[:-1]
    if not numeral or any(c not in ROMAN_DIGITS for c in numeral):
        return None
    return numeral


def classify_line(line: str) -> ClassifiedLine:
    """Classify one raw line. Precedence: blank, sentinel, header, boilerplate."""
    stripped = line.strip()
    if not stripped:
        return ClassifiedLine(LineKind.BLANK, stripped)
    if stripped.startswith(END_SENTINEL):
        return ClassifiedLine(LineKind.SENTINEL, stripped)
    numeral = _header_numeral(stripped)
    if numeral is not None:
        return ClassifiedLine(LineKind.HEADER, stripped, numeral)
    if stripped.startswith(_BOILERPLATE_PREFIX) or _BOILERPLATE_MARKER in stripped:
        return ClassifiedLine(LineKind.BOILERPLATE, stripped)
    return ClassifiedLine(LineKind.CONTENT, stripped)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_sections(text: str, book: Book) -> tuple[Section, ...]:
    """Parse the raw text of one cantica into cantos.

    Args:
        text: Full source text of the cantica (front matter and license
            included).
        book: Which cantica the text belongs to; used in errors and logs.

    Returns:
        Cantos ascending by number, each with its verse lines numbered 1..k.

    Raises:
        MalformedHeader: a header line whose numeral does not decode.
        EmptyDocument: no canto header before the sentinel or end of text.
    """
    by_number: dict[int, Section] = {}

    current_number = 0
    current_lines: list[Line] = []

    def close_current() -> None:
        if current_number <= 0:
            return
        if current_number in by_number:
            log.warning(
                "%s: canto %s appears more than once; keeping the later one",
                book.display_name, number_to_roman(current_number),
            )
        by_number[current_number] = Section(
            number=current_number,
            roman_label=number_to_roman(current_number),
            lines=tuple(current_lines),
        )

    for source_line, raw in enumerate(text.splitlines(), start=1):
        classified = classify_line(raw)

        if classified.kind is LineKind.SENTINEL:
            log.debug("%s: end-of-work notice at line %d", book.display_name, source_line)
            break

        if classified.kind is LineKind.HEADER:
            close_current()
            try:
                current_number = roman_to_number(classified.numeral)
            except InvalidNumeral as exc:
                raise MalformedHeader(book, source_line, classified.text) from exc
            current_lines = []
            continue

        if classified.kind is LineKind.CONTENT and current_number > 0:
            current_lines.append(
                Line(number=len(current_lines) + 1, text=classified.text)
            )

    close_current()

    if not by_number:
        raise EmptyDocument(book)

    sections = tuple(by_number[n] for n in sorted(by_number))
    log.debug(
        "%s: parsed %d cantos, %d lines",
        book.display_name, len(sections), sum(len(s.lines) for s in sections),
    )
    return sections
