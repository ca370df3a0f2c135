from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..models.canonical import CANONICAL_FIELDS
from ..models.config_models import DEFAULT_SERIAL_NUMBER_ALIASES

"""Working header inference.

The editable grid has no fixed columns: its headers are the union of keys of
the rows currently in the Row Store, in first-seen order, minus serial number
columns ("Sr No" and friends) which carry no price list data. With nothing to
infer from, the grid shows the canonical fields.
"""

__all__ = [
    "infer_headers",
    "is_serial_number_key",
]


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower()


def is_serial_number_key(key: Any, denylist: Iterable[str] = DEFAULT_SERIAL_NUMBER_ALIASES) -> bool:
    """True when `key` is one of the denylisted serial-number aliases (case-insensitive)."""
    normalized = _normalize_key(key)
    return any(normalized == _normalize_key(alias) for alias in denylist)


def infer_headers(
    records: Iterable[Mapping[str, Any]],
    denylist: Iterable[str] = DEFAULT_SERIAL_NUMBER_ALIASES,
) -> list[str]:
    """Derive the Working Header Set from the current rows.

    Union of keys in first-seen order, serial-number aliases removed. Falls
    back to the canonical field list when nothing is left.

    >>> infer_headers([{"Brand": "X", "Model": "Y"}, {"Brand": "X", "MRP": 10}])
    ['Brand', 'Model', 'MRP']
    >>> infer_headers([])
    ['brand', 'model', 'type', 'dp', 'mrp']
    """
    blocked = {_normalize_key(alias) for alias in denylist}
    # dict をキー順序保持の集合として使う
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            if key in seen or _normalize_key(key) in blocked:
                continue
            seen[key] = None
    if not seen:
        return list(CANONICAL_FIELDS)
    return list(seen)
