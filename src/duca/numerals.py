"""Roman numeral utilities for canto numbering.

Canto headers in the source texts carry upper-case Roman numerals
(``CANTO XXXIV``); the parsed model stores the integer and re-derives the
canonical spelling for display.

Only canonical spellings are accepted: ``IIII``, ``VV`` or ``IC`` decode
"correctly" under a naive additive/subtractive walk, so decoding re-encodes
the value and rejects anything that does not spell back identically.
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InvalidNumeral(ValueError):
    """Raised when a string is not a canonical upper-case Roman numeral."""


class OutOfRange(ValueError):
    """Raised when an integer has no Roman numeral spelling."""


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

MAX_ROMAN = 3999

ROMAN_DIGITS: dict[str, int] = {
    "I": 1, "V": 5, "X": 10, "L": 50,
    "C": 100, "D": 500, "M": 1000,
}

# Greedy encoding table, largest first (subtractive pairs included).
_ENCODE_TABLE: tuple[tuple[int, str], ...] = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"),
    (1, "I"),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def number_to_roman(n: int) -> str:
    """Convert an int in 1..3999 to its canonical Roman numeral."""
    if n <= 0 or n > MAX_ROMAN:
        raise OutOfRange(f"{n} has no Roman numeral (supported: 1..{MAX_ROMAN})")
    parts: list[str] = []
    remaining = n
    for value, numeral in _ENCODE_TABLE:
        while remaining >= value:
            parts.append(numeral)
            remaining -= value
    return "".join(parts)


def roman_to_number(s: str) -> int:
    """Convert a canonical upper-case Roman numeral to int.

    Raises:
        InvalidNumeral: empty input, a character outside ``IVXLCDM``, or a
            non-canonical sequence such as ``IIII`` or ``IXIX``.
    """
    if not s:
        raise InvalidNumeral("empty Roman numeral")
    bad = sorted({c for c in s if c not in ROMAN_DIGITS})
    if bad:
        raise InvalidNumeral(
            f"{s!r} contains non-numeral characters: {''.join(bad)!r}"
        )

    total = 0
    prev = 0
    # Right-to-left: a digit smaller than its right neighbour subtracts.
    for c in reversed(s):
        value = ROMAN_DIGITS[c]
        if value < prev:
            total -= value
        else:
            total += value
            prev = value

    if total <= 0 or total > MAX_ROMAN or number_to_roman(total) != s:
        raise InvalidNumeral(f"{s!r} is not a canonical Roman numeral")
    return total


def is_roman_numeral(s: str) -> bool:
    """True if *s* is a canonical upper-case Roman numeral."""
    try:
        roman_to_number(s)
    except InvalidNumeral:
        return False
    return True
