"""In-memory model of the Commedia: Book -> Section (canto) -> Line (verso).

The Document is built once by the corpus loader and never mutated; every
other component receives it explicitly and only reads from it.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class NotFound(LookupError):
    """Raised when a section or line lookup falls outside a Book."""


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class Book(Enum):
    """The three cantiche, in reading order."""

    INFERNO = "inferno"
    PURGATORIO = "purgatorio"
    PARADISO = "paradiso"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def ordinal(self) -> int:
        return _BOOK_ORDER[self]

    @classmethod
    def from_name(cls, name: str) -> Book:
        """Look up a Book by canonical name, ignoring case and whitespace."""
        key = name.strip().lower()
        for book in cls:
            if book.value == key:
                return book
        valid = ", ".join(b.value for b in cls)
        raise ValueError(f"Invalid book {name!r}. Use: {valid}")


_BOOK_ORDER: dict[Book, int] = {book: i for i, book in enumerate(Book)}


@dataclass(frozen=True, slots=True)
class Line:
    """A single verse line, numbered from 1 within its canto."""

    number: int
    text: str


@dataclass(frozen=True, slots=True)
class Section:
    """A canto: number, canonical Roman label, and its lines in order."""

    number: int
    roman_label: str    # "XXXIV"
    lines: tuple[Line, ...] = ()

    def line(self, number: int) -> Line:
        # Parsed cantos number lines densely from 1; fall back to a scan
        # for hand-built sections that skip numbers.
        if 1 <= number <= len(self.lines) and self.lines[number - 1].number == number:
            return self.lines[number - 1]
        for line in self.lines:
            if line.number == number:
                return line
        raise NotFound(
            f"Line {number} not found in canto {self.roman_label} "
            f"({len(self.lines)} lines)"
        )


@dataclass(frozen=True, slots=True)
class Document:
    """All three Books. Immutable once constructed.

    Books missing from *books* hold no sections.
    """

    books: Mapping[Book, tuple[Section, ...]] = field(default_factory=dict)
    _index: Mapping[Book, Mapping[int, Section]] = field(
        default_factory=dict, init=False, repr=False, compare=False,
    )

    def __post_init__(self) -> None:
        frozen = {
            book: tuple(sorted(self.books.get(book, ()), key=lambda s: s.number))
            for book in Book
        }
        object.__setattr__(self, "books", MappingProxyType(frozen))
        object.__setattr__(
            self,
            "_index",
            MappingProxyType({
                book: MappingProxyType({s.number: s for s in sections})
                for book, sections in frozen.items()
            }),
        )

    # -- lookups ------------------------------------------------------------

    def sections(self, book: Book) -> tuple[Section, ...]:
        """All sections of *book*, ascending by number."""
        return self.books[book]

    def section_numbers(self, book: Book) -> list[int]:
        return [s.number for s in self.books[book]]

    def section(self, book: Book, number: int) -> Section:
        """Look up a canto by number.

        Raises:
            NotFound: *number* is not a canto of *book*.
        """
        found = self._index[book].get(number)
        if found is None:
            raise NotFound(f"Canto {number} not found in {book.display_name}")
        return found

    def line(self, book: Book, section_number: int, line_number: int) -> Line:
        """Look up one verse line. Raises NotFound for either coordinate."""
        return self.section(book, section_number).line(line_number)

    # -- iteration ----------------------------------------------------------

    def all_lines(
        self, book: Book | None = None,
    ) -> Iterator[tuple[Book, Section, Line]]:
        """Yield (book, section, line) in ascending order.

        Each call returns a fresh generator; restricted to *book* if given.
        """
        books: Iterable[Book] = (book,) if book is not None else Book
        for b in books:
            for section in self.books[b]:
                for line in section.lines:
                    yield b, section, line

    def line_count(self, book: Book | None = None) -> int:
        books: Iterable[Book] = (book,) if book is not None else Book
        return sum(len(s.lines) for b in books for s in self.books[b])

    def is_empty(self) -> bool:
        return all(not sections for sections in self.books.values())
