"""Tests for duca.search module."""
from __future__ import annotations

import re

import pytest

from duca.document import Book, Document, Line, Section
from duca.search import SearchMatch, compile_pattern, search
from duca.section_parser import parse_sections
from duca.textmatch import fold, substring_positions


def _section(number: int, label: str, *texts: str) -> Section:
    return Section(
        number=number,
        roman_label=label,
        lines=tuple(Line(i, t) for i, t in enumerate(texts, start=1)),
    )


@pytest.fixture()
def document() -> Document:
    return Document({
        Book.INFERNO: (
            _section(
                1, "I",
                "Nel mezzo del cammin di nostra vita",
                "mi ritrovai per una selva oscura",
                "esta selva selvaggia e aspra e forte",
            ),
            _section(34, "XXXIV", "E quindi uscimmo a riveder le stelle."),
        ),
        Book.PURGATORIO: (
            _section(33, "XXXIII", "puro e disposto a salire a le stelle."),
        ),
        Book.PARADISO: (
            _section(33, "XXXIII", "l'amor che move il sole e l'altre stelle."),
        ),
    })


def _assert_ranked(results: list[SearchMatch]) -> None:
    for a, b in zip(results, results[1:]):
        assert a.score >= b.score
        if a.score == b.score:
            assert a.location_key < b.location_key


class TestSearch:
    def test_ranked_and_tie_broken(self, document: Document) -> None:
        results = search(document, "e")
        assert len(results) == document.line_count()
        _assert_ranked(results)

    def test_deterministic(self, document: Document) -> None:
        assert search(document, "stelle") == search(document, "stelle")
        assert search(document, "sla", Book.INFERNO) == search(document, "sla", Book.INFERNO)

    @pytest.mark.parametrize("query", ["", " ", "\t  "])
    def test_blank_query(self, document: Document, query: str) -> None:
        assert search(document, query) == []

    def test_no_match_is_empty(self, document: Document) -> None:
        assert search(document, "qqq") == []

    def test_book_filter(self, document: Document) -> None:
        results = search(document, "stelle", Book.PURGATORIO)
        assert [m.book for m in results] == [Book.PURGATORIO]

    def test_highlights_spell_query(self, document: Document) -> None:
        for query in ("stelle", "SELVA", "nmv", "ea"):
            for match in search(document, query):
                spelled = "".join(match.text[p] for p in match.highlight_positions)
                assert fold(spelled) == fold(query)

    def test_substring_hits_rank_first(self, document: Document) -> None:
        results = search(document, "selva")
        contiguous = [fold("selva") in fold(m.text) for m in results]
        assert contiguous == sorted(contiguous, reverse=True)

    def test_exact_mode(self, document: Document) -> None:
        fuzzy = search(document, "sole")
        exact = search(document, "sole", exact=True)
        assert len(exact) < len(fuzzy)
        assert [(m.book, m.section_number, m.line_number) for m in exact] == [
            (Book.PARADISO, 33, 1),
        ]

    def test_max_results(self, document: Document) -> None:
        full = search(document, "e")
        assert search(document, "e", max_results=2) == full[:2]
        assert search(document, "e", max_results=0) == []

    def test_as_row(self, document: Document) -> None:
        match = search(document, "stelle", Book.PARADISO)[0]
        book, section_number, line_number, text, score = match.as_row()
        assert (book, section_number, line_number) == ("paradiso", 33, 1)
        assert text.endswith("stelle.")
        assert score == match.score


class TestEndToEnd:
    def test_first_and_second_line(self) -> None:
        sections = parse_sections(
            "CANTO I\nFirst line\nCANTO II\nSecond line\n", Book.INFERNO,
        )
        document = Document({Book.INFERNO: sections})
        results = search(document, "line")
        assert [(m.section_number, m.line_number) for m in results] == [(1, 1), (2, 1)]
        assert all(m.highlight_positions == tuple(range(len(m.text) - 4, len(m.text)))
                   for m in results)

    def test_shorter_line_wins_over_earlier_longer_line(self) -> None:
        sections = parse_sections(
            "CANTO I\nSecond line\nCANTO II\nFirst line\n", Book.INFERNO,
        )
        document = Document({Book.INFERNO: sections})
        results = search(document, "line")
        assert [m.text for m in results] == ["First line", "Second line"]
        assert results[0].score > results[1].score

    def test_substring_scan_agreement(self, document: Document) -> None:
        expected = [
            (b, s.number, ln.number)
            for b, s, ln in document.all_lines(Book.PARADISO)
            if substring_positions(ln.text, "stelle")
        ]
        exact = search(document, "stelle", Book.PARADISO, exact=True)
        assert [(m.book, m.section_number, m.line_number) for m in exact] == expected
        for m in exact:
            start = m.highlight_positions[0]
            assert start in substring_positions(m.text, "stelle")


class TestRegexSearch:
    def test_valid_pattern(self, document: Document) -> None:
        results = search(document, "ST[EA]LLE", regex=True)
        assert [(m.book, m.section_number) for m in results] == [
            (Book.INFERNO, 34), (Book.PURGATORIO, 33), (Book.PARADISO, 33),
        ]
        paradiso = results[-1]
        assert paradiso.highlight_positions == tuple(range(34, 40))

    def test_anchored_pattern(self, document: Document) -> None:
        results = search(document, "^e", regex=True, book=Book.INFERNO)
        # Same span and bonus; the 36-character line beats the 37-character one.
        assert [m.text[:8] for m in results] == ["esta sel", "E quindi"]
        assert all(m.highlight_positions == (0,) for m in results)

    def test_invalid_pattern_matches_literally(self) -> None:
        document = Document({
            Book.INFERNO: (_section(1, "I", "a (b c", "ab c", "b"),),
        })
        results = search(document, "(b", regex=True)
        assert [m.text for m in results] == ["a (b c"]
        assert results[0].highlight_positions == (2, 3)

    def test_empty_width_matches_ignored(self, document: Document) -> None:
        assert search(document, "x*", regex=True) == []

    def test_compile_pattern_fallback(self) -> None:
        assert compile_pattern("[sole").pattern == re.escape("[sole")
        assert compile_pattern("s.le").flags & re.IGNORECASE
