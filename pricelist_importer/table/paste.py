from __future__ import annotations

from ..models.canonical import CanonicalRecord
from .resolver import coerce_number

"""Paste ingestion: free-form text -> canonical rows.

Pasted text follows a fixed five column convention, one row per line:

    brand, model, type, dp, mrp

The separator is chosen per line: a line containing a tab is split on tabs
only (a spreadsheet copy, where cells may hold "1,200"), any other line on
commas. Both kinds of line may appear in one paste. Lines without a
brand and a model are dropped silently, which also disposes of blank lines
and trailing separators-only lines.
"""

__all__ = [
    "PASTE_COLUMNS",
    "parse_pasted_rows",
]

PASTE_COLUMNS: tuple[str, ...] = ("brand", "model", "type", "dp", "mrp")


def _parse_line(line: str) -> CanonicalRecord | None:
    sep = "\t" if "\t" in line else ","
    parts = [p.strip() for p in line.split(sep)[: len(PASTE_COLUMNS)]]
    parts += [""] * (len(PASTE_COLUMNS) - len(parts))
    brand, model, type_, dp, mrp = parts
    if not brand and not model:
        return None
    return CanonicalRecord(
        brand=brand,
        model=model,
        type=type_,
        dp=coerce_number(dp),
        mrp=coerce_number(mrp),
    )


def parse_pasted_rows(text: str) -> list[CanonicalRecord]:
    """Parse a pasted block into canonical rows, in line order.

    >>> parse_pasted_rows("MRF,CZAR,Tubeless,1000,1200\\n,,,,")
    [{'brand': 'MRF', 'model': 'CZAR', 'type': 'Tubeless', 'dp': 1000.0, 'mrp': 1200.0}]
    """
    rows: list[CanonicalRecord] = []
    for line in (text or "").splitlines():
        row = _parse_line(line)
        if row is not None:
            rows.append(row)
    return rows
