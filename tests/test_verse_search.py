"""Tests for the verse_search CLI."""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import orjson
import pytest

from duca.document import Book
from duca.search import SearchMatch

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def _load_module() -> object:
    root = Path(__file__).resolve().parents[1]
    script_path = root / "scripts" / "verse_search.py"
    spec = importlib.util.spec_from_file_location("verse_search", script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def mod() -> object:
    return _load_module()


def _run(mod: object, *args: str) -> int:
    return mod.main([*args, "--data-dir", str(FIXTURES_DIR), "--no-cache"])  # type: ignore[attr-defined]


class TestFormatting:
    def test_format_match(self, mod: object) -> None:
        match = SearchMatch(
            book=Book.INFERNO, section_number=1, line_number=2,
            text="mi ritrovai per una selva oscura", score=10,
            highlight_positions=(20, 21, 22, 23, 24),
        )
        assert mod.format_match(match) == "Inferno 1.2: mi ritrovai per una selva oscura"  # type: ignore[attr-defined]
        as_dict = mod.match_to_dict(match)  # type: ignore[attr-defined]
        assert as_dict["book"] == "inferno"
        assert as_dict["highlight_positions"] == [20, 21, 22, 23, 24]


class TestMain:
    def test_book_filtered_hit(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "stelle", "--book", "paradiso") == 0
        captured = capsys.readouterr()
        assert captured.out == "Paradiso 33.4: l'amor che move il sole e l'altre stelle.\n"
        assert "Found 1 matches for 'stelle'" in captured.err

    def test_exact_across_books(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "STELLE", "--exact") == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split(":")[0] for line in lines] == [
            "Inferno 34.4", "Purgatorio 33.4", "Paradiso 33.4",
        ]

    def test_max_results(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "e", "--max-results", "2") == 0
        assert len(capsys.readouterr().out.splitlines()) == 2

    def test_json(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "selva", "--exact", "--json") == 0
        rows = orjson.loads(capsys.readouterr().out)
        assert [(r["book"], r["section_number"], r["line_number"]) for r in rows] == [
            ("inferno", 1, 2), ("inferno", 1, 5),
        ]
        assert all(r["score"] == int(r["score"]) for r in rows)

    def test_regex(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "^e quindi", "--regex") == 0
        assert capsys.readouterr().out == "Inferno 34.4: E quindi uscimmo a riveder le stelle.\n"

    def test_regex_json_highlights_span(
        self, mod: object, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert _run(mod, "--pattern", "stell[ae]", "--regex", "--book", "paradiso", "--json") == 0
        rows = orjson.loads(capsys.readouterr().out)
        assert len(rows) == 1
        assert rows[0]["highlight_positions"] == list(range(34, 40))

    def test_invalid_regex_is_literal(
        self, mod: object, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert _run(mod, "--pattern", "stelle(", "--regex") == 1
        assert "No matches found for 'stelle('" in capsys.readouterr().err

    def test_no_matches(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "qqqq") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No matches found for 'qqqq'" in captured.err

    def test_invalid_book(self, mod: object, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(mod, "--pattern", "x", "--book", "limbo") == 1
        assert "Error: Invalid book" in capsys.readouterr().err

    def test_missing_data_dir(
        self, mod: object, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = mod.main(["--pattern", "x", "--data-dir", str(tmp_path)])  # type: ignore[attr-defined]
        assert code == 1
        assert "Error: Source text not found" in capsys.readouterr().err
