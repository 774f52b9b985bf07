"""Live-filter state machine behind the interactive search screen.

Three modes:

* **Browse** -- pick a cantica and canto to read.
* **Search** -- a query buffer re-scored on every keystroke, with a
  selection cursor over the ranked hits.
* **Context** -- the selected hit shown highlighted inside its full canto.

``apply_event`` is a pure ``(FilterState, InputEvent) -> FilterState``
function; the terminal driver owns the loop and feeds it one event at a
time. Each event, including the full re-score pass, completes before the
next is read.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from duca.document import Book, Document, Section
from duca.search import SearchMatch, search

# Lines of canto shown above the highlighted line in the context view.
CONTEXT_LEAD_LINES = 10

_BOOKS: tuple[Book, ...] = tuple(Book)


class Mode(Enum):
    BROWSE = "browse"
    SEARCH = "search"
    CONTEXT = "context"


# ---------------------------------------------------------------------------
# Input events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EnterSearch:
    """Open the search prompt (Browse only)."""


@dataclass(frozen=True, slots=True)
class TypeChar:
    char: str


@dataclass(frozen=True, slots=True)
class DeleteChar:
    """Backspace in the query buffer."""


@dataclass(frozen=True, slots=True)
class MoveCursor:
    step: int  # +1 down, -1 up


@dataclass(frozen=True, slots=True)
class Confirm:
    """Open the selected hit in context."""


@dataclass(frozen=True, slots=True)
class Cancel:
    """Leave the current mode (Context -> Search -> Browse)."""


@dataclass(frozen=True, slots=True)
class SwitchBook:
    step: int


@dataclass(frozen=True, slots=True)
class SelectSection:
    step: int


InputEvent = (
    EnterSearch | TypeChar | DeleteChar | MoveCursor | Confirm | Cancel
    | SwitchBook | SelectSection
)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FilterState:
    """Everything the interactive screen needs between events."""

    mode: Mode = Mode.BROWSE
    query: str = ""
    ranked_matches: tuple[SearchMatch, ...] = ()
    selected_index: int = 0
    active_match: SearchMatch | None = None  # set only in Context
    browse_book: Book = Book.INFERNO
    browse_section: int | None = None

    @property
    def selected_match(self) -> SearchMatch | None:
        if not self.ranked_matches:
            return None
        return self.ranked_matches[self.selected_index]


def _clamp(index: int, count: int) -> int:
    if count == 0:
        return 0
    return max(0, min(index, count - 1))


def _refilter(
    state: FilterState,
    query: str,
    document: Document,
    book: Book | None,
    max_results: int | None,
) -> FilterState:
    matches = tuple(search(document, query, book, max_results=max_results))
    return replace(
        state,
        query=query,
        ranked_matches=matches,
        selected_index=_clamp(state.selected_index, len(matches)),
    )


def _browse(state: FilterState, event: InputEvent, document: Document) -> FilterState:
    if isinstance(event, EnterSearch):
        return replace(
            state, mode=Mode.SEARCH, query="", ranked_matches=(), selected_index=0,
        )
    if isinstance(event, SwitchBook):
        i = (_BOOKS.index(state.browse_book) + event.step) % len(_BOOKS)
        return replace(state, browse_book=_BOOKS[i], browse_section=None)
    if isinstance(event, SelectSection):
        numbers = document.section_numbers(state.browse_book)
        if not numbers:
            return state
        if state.browse_section is None or state.browse_section not in numbers:
            return replace(state, browse_section=numbers[0])
        i = (numbers.index(state.browse_section) + event.step) % len(numbers)
        return replace(state, browse_section=numbers[i])
    return state


def _search(
    state: FilterState,
    event: InputEvent,
    document: Document,
    book: Book | None,
    max_results: int | None,
) -> FilterState:
    if isinstance(event, TypeChar):
        return _refilter(state, state.query + event.char, document, book, max_results)
    if isinstance(event, DeleteChar):
        return _refilter(state, state.query[:-1], document, book, max_results)
    if isinstance(event, MoveCursor):
        # Saturating, no wraparound.
        return replace(
            state,
            selected_index=_clamp(state.selected_index + event.step, len(state.ranked_matches)),
        )
    if isinstance(event, Confirm):
        selected = state.selected_match
        if selected is None:
            return state
        return replace(state, mode=Mode.CONTEXT, active_match=selected)
    if isinstance(event, Cancel):
        return replace(
            state, mode=Mode.BROWSE, query="", ranked_matches=(), selected_index=0,
        )
    return state


def apply_event(
    state: FilterState,
    event: InputEvent,
    document: Document,
    *,
    book: Book | None = None,
    max_results: int | None = None,
) -> FilterState:
    """Return the state after *event*. Events not valid in a mode are no-ops.

    Args:
        state: Current state (never mutated).
        event: One discrete input event.
        document: Document the query is scored against.
        book: Restrict live search to one Book.
        max_results: Keep only this many ranked hits per re-score.
    """
    if state.mode is Mode.BROWSE:
        return _browse(state, event, document)
    if state.mode is Mode.SEARCH:
        return _search(state, event, document, book, max_results)
    if isinstance(event, Cancel):
        return replace(state, mode=Mode.SEARCH, active_match=None)
    return state


# ---------------------------------------------------------------------------
# Views handed to the renderer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BrowseView:
    book: Book
    section_numbers: tuple[int, ...]
    section: Section | None


@dataclass(frozen=True, slots=True)
class SearchView:
    query: str
    ranked_matches: tuple[SearchMatch, ...]
    selected_index: int


@dataclass(frozen=True, slots=True)
class ContextView:
    book: Book
    section: Section
    highlight_line: int
    first_visible_line: int


View = BrowseView | SearchView | ContextView


class FilterController:
    """One interactive session: a Document, a state, and the event loop hook."""

    def __init__(
        self,
        document: Document,
        *,
        book: Book | None = None,
        max_results: int | None = None,
    ) -> None:
        self._document = document
        self._book = book
        self._max_results = max_results
        self._state = FilterState()

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def mode(self) -> Mode:
        return self._state.mode

    def handle(self, event: InputEvent) -> FilterState:
        self._state = apply_event(
            self._state, event, self._document,
            book=self._book, max_results=self._max_results,
        )
        return self._state

    def view(self) -> View:
        state = self._state
        if state.mode is Mode.CONTEXT and state.active_match is not None:
            match = state.active_match
            return ContextView(
                book=match.book,
                section=self._document.section(match.book, match.section_number),
                highlight_line=match.line_number,
                first_visible_line=max(1, match.line_number - CONTEXT_LEAD_LINES),
            )
        if state.mode is Mode.SEARCH:
            return SearchView(
                query=state.query,
                ranked_matches=state.ranked_matches,
                selected_index=state.selected_index,
            )
        section = None
        if state.browse_section is not None:
            section = self._document.section(state.browse_book, state.browse_section)
        return BrowseView(
            book=state.browse_book,
            section_numbers=tuple(self._document.section_numbers(state.browse_book)),
            section=section,
        )
