"""Fuzzy subsequence scoring for verse search.

Pure text operations with zero domain dependencies. The scorer follows the
fzf "v1" family: find a tight window containing the query as a subsequence,
then score the aligned characters with boundary and adjacency bonuses and
gap penalties.

Contiguous (substring) hits are scored separately and always outrank a
scattered alignment of the same query in a line of the same length.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Scoring constants
# ---------------------------------------------------------------------------

SCORE_MATCH = 16
BONUS_BOUNDARY = 8
BONUS_CONSECUTIVE = 4
BONUS_FIRST_CHAR_MULTIPLIER = 2
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1

# Points off per character of candidate text; shorter lines win ties.
PENALTY_LENGTH = 1


@dataclass(frozen=True, slots=True)
class FuzzyHit:
    """Score and aligned character positions of a query inside a text."""

    score: int
    positions: tuple[int, ...]  # ascending indices into the original text
    contiguous: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def fold_char(c: str) -> str:
    """Lower-case one character without changing string length.

    Characters whose lower-case form is longer than one code point (e.g.
    U+0130) are compared as-is, so positions stay valid indices.
    """
    low = c.lower()
    return low if len(low) == 1 else c


def fold(text: str) -> str:
    return "".join(fold_char(c) for c in text)


def is_boundary(text: str, index: int) -> bool:
    """True if *index* starts a word: text start or after a non-alphanumeric."""
    return index == 0 or not text[index - 1].isalnum()


def substring_bonus(query_len: int) -> int:
    """Bonus for a contiguous hit.

    Exceeds the largest boundary/adjacency advantage a scattered alignment
    of the same query can collect, so substring hits always rank first.
    """
    return BONUS_BOUNDARY * (query_len + 1)


def score_positions(text: str, positions: tuple[int, ...]) -> int:
    """Score an alignment (no substring bonus, no length penalty)."""
    score = 0
    prev = -1
    for i, pos in enumerate(positions):
        score += SCORE_MATCH
        if is_boundary(text, pos):
            bonus = BONUS_BOUNDARY
            if i == 0:
                bonus *= BONUS_FIRST_CHAR_MULTIPLIER
            score += bonus
        if i > 0:
            gap = pos - prev - 1
            if gap == 0:
                score += BONUS_CONSECUTIVE
            else:
                score -= PENALTY_GAP_START + PENALTY_GAP_EXTENSION * (gap - 1)
        prev = pos
    return score


def _best_substring(
    text: str, folded_text: str, folded_query: str,
) -> tuple[int, ...] | None:
    """Best-scoring contiguous occurrence (earliest on ties), or None."""
    m = len(folded_query)
    best: tuple[int, ...] | None = None
    best_score = 0
    start = folded_text.find(folded_query)
    while start >= 0:
        positions = tuple(range(start, start + m))
        score = score_positions(text, positions)
        if best is None or score > best_score:
            best, best_score = positions, score
        start = folded_text.find(folded_query, start + 1)
    return best


def _subsequence_window(
    folded_text: str, folded_query: str,
) -> tuple[int, ...] | None:
    """Greedy alignment inside the tightest window ending at the first full match."""
    # Forward: earliest index at which the whole query has been seen.
    qi = 0
    end = -1
    for ti, c in enumerate(folded_text):
        if c == folded_query[qi]:
            qi += 1
            if qi == len(folded_query):
                end = ti
                break
    if end < 0:
        return None

    # Backward from end: latest start that still contains the query.
    qi = len(folded_query) - 1
    start = end
    for ti in range(end, -1, -1):
        if folded_text[ti] == folded_query[qi]:
            qi -= 1
            if qi < 0:
                start = ti
                break

    # Forward greedy inside [start, end].
    positions: list[int] = []
    qi = 0
    for ti in range(start, end + 1):
        if qi < len(folded_query) and folded_text[ti] == folded_query[qi]:
            positions.append(ti)
            qi += 1
    return tuple(positions)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def fuzzy_match(text: str, query: str) -> FuzzyHit | None:
    """Score *query* as a case-insensitive subsequence of *text*.

    Args:
        text: Candidate text (one verse line).
        query: Search query. Empty query never matches.

    Returns:
        FuzzyHit with score and aligned positions, or None when the query's
        characters do not all appear in order. Deterministic: the same
        (text, query) always yields the same hit.
    """
    if not query or len(query) > len(text):
        return None
    folded_text = fold(text)
    folded_query = fold(query)

    positions = _best_substring(text, folded_text, folded_query)
    contiguous = positions is not None
    if positions is None:
        positions = _subsequence_window(folded_text, folded_query)
        if positions is None:
            return None

    score = score_positions(text, positions)
    if contiguous:
        score += substring_bonus(len(query))
    score -= PENALTY_LENGTH * len(text)
    return FuzzyHit(score=score, positions=positions, contiguous=contiguous)


def substring_positions(text: str, query: str) -> list[int]:
    """Start offsets of every case-insensitive occurrence of *query* in *text*."""
    if not query:
        return []
    folded_text = fold(text)
    folded_query = fold(query)
    starts: list[int] = []
    start = folded_text.find(folded_query)
    while start >= 0:
        starts.append(start)
        start = folded_text.find(folded_query, start + 1)
    return starts


def regex_match(text: str, pattern: re.Pattern[str]) -> FuzzyHit | None:
    """Score the first non-empty match of *pattern* in *text* as a contiguous hit.

    Empty matches (``a*`` against ``"xyz"``) do not count.
    """
    for m in pattern.finditer(text):
        if m.end() > m.start():
            positions = tuple(range(m.start(), m.end()))
            score = (
                score_positions(text, positions)
                + substring_bonus(len(positions))
                - PENALTY_LENGTH * len(text)
            )
            return FuzzyHit(score=score, positions=positions, contiguous=True)
    return None
