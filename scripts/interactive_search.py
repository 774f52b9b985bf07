#!/usr/bin/env python3
"""Interactive terminal browser with fzf-style live search.

Keys:
    Browse   h/l or Left/Right switch cantica, j/k or Down/Up select canto,
             J/K scroll, / search, q quit
    Search   type to filter, Backspace delete, Down/Up move, Enter open in
             context, Esc back to browse
    Context  J/K or Down/Up scroll, Esc/q back to results

The screen is a thin renderer over ``duca.filter_controller``; all state
lives in the controller.

Usage:
    python3 scripts/interactive_search.py --data-dir data/
"""
from __future__ import annotations

import argparse
import curses
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from duca.corpus import load_document
from duca.filter_controller import (
    BrowseView,
    Cancel,
    Confirm,
    ContextView,
    DeleteChar,
    EnterSearch,
    FilterController,
    InputEvent,
    Mode,
    MoveCursor,
    SearchView,
    SelectSection,
    SwitchBook,
    TypeChar,
    View,
)

log = logging.getLogger("interactive_search")

DEFAULT_MAX_RESULTS = 50
PREVIEW_CHARS = 80

_ESC = "\x1b"
_ENTER_KEYS = {"\n", "\r", curses.KEY_ENTER}
_BACKSPACE_KEYS = {"\x7f", "\b", curses.KEY_BACKSPACE}


class DriverAction(Enum):
    """Keys handled by the screen itself rather than the controller."""

    QUIT = "quit"
    SCROLL_DOWN = "scroll_down"
    SCROLL_UP = "scroll_up"


Key = str | int


def translate_key(mode: Mode, key: Key) -> InputEvent | DriverAction | None:
    """Map one key press to a controller event, a screen action, or nothing."""
    if mode is Mode.BROWSE:
        if key == "q":
            return DriverAction.QUIT
        if key in ("h", curses.KEY_LEFT):
            return SwitchBook(-1)
        if key in ("l", curses.KEY_RIGHT):
            return SwitchBook(1)
        if key in ("j", curses.KEY_DOWN):
            return SelectSection(1)
        if key in ("k", curses.KEY_UP):
            return SelectSection(-1)
        if key == "J":
            return DriverAction.SCROLL_DOWN
        if key == "K":
            return DriverAction.SCROLL_UP
        if key == "/":
            return EnterSearch()
        return None

    if mode is Mode.SEARCH:
        if key == _ESC:
            return Cancel()
        if key in _BACKSPACE_KEYS:
            return DeleteChar()
        if key in _ENTER_KEYS:
            return Confirm()
        if key == curses.KEY_DOWN:
            return MoveCursor(1)
        if key == curses.KEY_UP:
            return MoveCursor(-1)
        if isinstance(key, str) and key.isprintable():
            return TypeChar(key)
        return None

    if key in (_ESC, "q"):
        return Cancel()
    if key in ("J", curses.KEY_DOWN):
        return DriverAction.SCROLL_DOWN
    if key in ("K", curses.KEY_UP):
        return DriverAction.SCROLL_UP
    return None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ScreenLine:
    """One row of output: text plus which columns to emphasise."""

    text: str
    selected: bool = False
    emphasis: tuple[int, ...] = ()


def _preview(text: str) -> str:
    if len(text) > PREVIEW_CHARS:
        return text[: PREVIEW_CHARS - 3] + "..."
    return text


def layout(view: View, scroll: int = 0) -> list[ScreenLine]:
    """Title row followed by body rows for *view*."""
    if isinstance(view, SearchView):
        rows = [ScreenLine(f"Search: {view.query}")]
        if not view.ranked_matches and view.query:
            rows.append(ScreenLine("No matches found"))
            return rows
        rows.append(ScreenLine(
            f"Results ({len(view.ranked_matches)}) - Enter to view context"
        ))
        for i, match in enumerate(view.ranked_matches):
            prefix = (
                f"{match.book.display_name} "
                f"{match.section_number}.{match.line_number}: "
            )
            preview = _preview(match.text)
            visible = len(preview) if preview == match.text else PREVIEW_CHARS - 3
            emphasis = tuple(
                len(prefix) + p for p in match.highlight_positions if p < visible
            )
            rows.append(ScreenLine(
                prefix + preview, selected=i == view.selected_index, emphasis=emphasis,
            ))
        return rows

    if isinstance(view, ContextView):
        section = view.section
        rows = [ScreenLine(
            f"{view.book.display_name} Canto {section.roman_label} "
            "- Context View (Esc to return)"
        )]
        start = max(0, view.first_visible_line - 1 + scroll)
        for line in section.lines[start:]:
            rows.append(ScreenLine(
                f"{line.number:3}: {line.text}",
                selected=line.number == view.highlight_line,
            ))
        return rows

    assert isinstance(view, BrowseView)
    if view.section is None:
        rows = [ScreenLine(f"{view.book.display_name} - Select a Canto")]
        rows.append(ScreenLine(
            "Cantos: " + " ".join(str(n) for n in view.section_numbers)
        ))
        rows.append(ScreenLine("h/l cantica  j/k canto  J/K scroll  / search  q quit"))
        return rows
    rows = [ScreenLine(f"{view.book.display_name} Canto {view.section.roman_label}")]
    for line in view.section.lines[max(0, scroll):]:
        rows.append(ScreenLine(f"{line.number:3}: {line.text}"))
    return rows


# ---------------------------------------------------------------------------
# Curses loop
# ---------------------------------------------------------------------------


def visible_rows(rows: list[ScreenLine], height: int) -> list[ScreenLine]:
    """Clip *rows* to *height*, keeping the title and the selected row on screen."""
    if len(rows) <= height or height <= 1:
        return rows[:height]
    selected = next((i for i, row in enumerate(rows) if row.selected), None)
    if selected is None or selected < height:
        return rows[:height]
    start = selected - (height - 1) + 1
    return [rows[0], *rows[start : selected + 1]]


def _draw(screen: curses.window, rows: list[ScreenLine]) -> None:
    screen.erase()
    height, width = screen.getmaxyx()
    for y, row in enumerate(visible_rows(rows, height)):
        text = row.text[: width - 1]
        base = curses.A_REVERSE if row.selected else curses.A_NORMAL
        screen.addstr(y, 0, text, base | (curses.A_BOLD if y == 0 else 0))
        for x in row.emphasis:
            if x < len(text):
                screen.addstr(y, x, text[x], base | curses.A_BOLD | curses.A_UNDERLINE)
    screen.refresh()


def run(screen: curses.window, controller: FilterController) -> None:
    curses.curs_set(0)
    scroll = 0
    while True:
        _draw(screen, layout(controller.view(), scroll))
        key = screen.get_wch()
        action = translate_key(controller.mode, key)
        if action is None:
            continue
        if action is DriverAction.QUIT:
            return
        if action is DriverAction.SCROLL_DOWN:
            scroll += 1
            continue
        if action is DriverAction.SCROLL_UP:
            scroll = max(0, scroll - 1)
            continue
        before = controller.mode
        controller.handle(action)
        if controller.mode is not before or isinstance(action, SelectSection | SwitchBook):
            scroll = 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive terminal browser with live fuzzy search."
    )
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
    parser.add_argument(
        "--max-results",
        type=int,
        default=DEFAULT_MAX_RESULTS,
        help=f"Ranked hits kept per keystroke (default: {DEFAULT_MAX_RESULTS})",
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

    try:
        document = load_document(
            args.data_dir, cache_path=args.cache, use_cache=not args.no_cache,
        )
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    controller = FilterController(document, max_results=args.max_results)
    curses.wrapper(run, controller)
    return 0


if __name__ == "__main__":
    sys.exit(main())
