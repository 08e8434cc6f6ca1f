from __future__ import annotations

import re

HEADER_RANGE = "A1:D1"
DATA_RANGE = "A2:D"
FIRST_DATA_ROW = 2

_CELL_RE = re.compile(r"^([A-Z]+)(\d*)$")
_PLAIN_TITLE_RE = re.compile(r"^[A-Za-z0-9_]+$")


def row_range(row_number: int) -> str:
    return f"A{row_number}:D{row_number}"


def role_cell(row_number: int) -> str:
    return f"D{row_number}:D{row_number}"


def quote_title(title: str) -> str:
    if _PLAIN_TITLE_RE.match(title):
        return title
    escaped = title.replace("'", "''")
    return f"'{escaped}'"


def qualified(partition: str, rng: str) -> str:
    return f"{quote_title(partition)}!{rng}"


def column_index(letters: str) -> int:
    """0-based index of an A1 column label (A -> 0, AA -> 26)."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def parse_range(rng: str) -> tuple[int, int, int, int | None]:
    """Parse ``A2:D`` style ranges into 0-based (col_start, row_start, col_end, row_end).

    Row numbers stay 1-based. ``row_end`` is ``None`` for open-ended ranges.
    """
    text = rng.strip().upper()
    if "!" in text:
        raise ValueError(f"Range must not carry a sheet name: {rng!r}")
    start, _, end = text.partition(":")
    start_match = _CELL_RE.match(start)
    end_match = _CELL_RE.match(end or start)
    if not start_match or not end_match or not start_match.group(2):
        raise ValueError(f"Unsupported A1 range: {rng!r}")
    col_start = column_index(start_match.group(1))
    row_start = int(start_match.group(2))
    col_end = column_index(end_match.group(1))
    row_end = int(end_match.group(2)) if end_match.group(2) else None
    if col_end < col_start or (row_end is not None and row_end < row_start):
        raise ValueError(f"Inverted A1 range: {rng!r}")
    return col_start, row_start, col_end, row_end
