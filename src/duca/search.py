"""Ranked fuzzy search over the verse lines of a Document.

Linear scan: every line in scope is scored with ``textmatch.fuzzy_match``, or
with ``textmatch.regex_match`` when the query is a regular expression.
No state is kept between calls, so concurrent callers can share one
Document.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from duca.document import Book, Document
from duca.textmatch import FuzzyHit, fuzzy_match, regex_match

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """One scored verse line."""

    book: Book
    section_number: int
    line_number: int
    text: str
    score: int
    highlight_positions: tuple[int, ...]

    @property
    def location_key(self) -> tuple[int, int, int]:
        return (self.book.ordinal, self.section_number, self.line_number)

    @property
    def sort_key(self) -> tuple[int, int, int, int]:
        """Descending score, then ascending (book, canto, line)."""
        return (-self.score, *self.location_key)

    def as_row(self) -> tuple[str, int, int, str, int]:
        """(book, section_number, line_number, text, score) for CLI output."""
        return (
            self.book.value, self.section_number, self.line_number,
            self.text, self.score,
        )


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile *pattern* case-insensitively; invalid regexes match literally."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        log.debug("Pattern %r is not a valid regex (%s); matching literally", pattern, exc)
        return re.compile(re.escape(pattern), re.IGNORECASE)


def search(
    document: Document,
    query: str,
    book: Book | None = None,
    *,
    exact: bool = False,
    regex: bool = False,
    max_results: int | None = None,
) -> list[SearchMatch]:
    """Score *query* against every line in scope and rank the hits.

    Args:
        document: Parsed Document to search.
        query: Free-text query. Empty or whitespace-only queries match nothing.
        book: Restrict the scan to one Book.
        exact: Keep only lines containing the query as a case-insensitive
            substring (scattered subsequence hits are dropped).
        regex: Treat the query as a case-insensitive regular expression; a
            pattern that does not compile is matched literally. Highlights
            cover the first non-empty match span.
        max_results: Truncate the ranked list to this many entries.

    Returns:
        Matches sorted by descending score, ties by (book, canto, line).
    """
    if not query.strip():
        return []

    pattern = compile_pattern(query) if regex else None
    matches: list[SearchMatch] = []
    for b, section, line in document.all_lines(book):
        hit: FuzzyHit | None
        if pattern is not None:
            hit = regex_match(line.text, pattern)
        else:
            hit = fuzzy_match(line.text, query)
        if hit is None or (exact and not hit.contiguous):
            continue
        matches.append(SearchMatch(
            book=b,
            section_number=section.number,
            line_number=line.number,
            text=line.text,
            score=hit.score,
            highlight_positions=hit.positions,
        ))

    matches.sort(key=lambda m: m.sort_key)
    if max_results is not None:
        del matches[max(max_results, 0):]
    return matches
