from __future__ import annotations

from typing import Any, TypedDict

"""Record and CanonicalRecord shapes for the price list importer.

A Record is whatever the extraction service (or a paste, or a local file)
hands us: arbitrary column names mapped to text or numbers. No shape is
enforced until submission, where every Record is resolved into the fixed
CanonicalRecord shape accepted by the import endpoint.
"""

__all__ = [
    "CANONICAL_FIELDS",
    "NUMERIC_FIELDS",
    "TEXT_FIELDS",
    "CanonicalRecord",
    "Record",
]

Record = dict[str, Any]

CANONICAL_FIELDS: tuple[str, ...] = ("brand", "model", "type", "dp", "mrp")
TEXT_FIELDS: tuple[str, ...] = ("brand", "model", "type")
NUMERIC_FIELDS: tuple[str, ...] = ("dp", "mrp")


class CanonicalRecord(TypedDict):
    """Normalized price list row (the only shape the import endpoint accepts)."""
    brand: str
    model: str
    type: str
    dp: float  # dealer price
    mrp: float  # maximum retail price
