"""Tabular normalization engine: header inference, field resolution, row store, paste parsing."""

from .headers import infer_headers
from .paste import parse_pasted_rows
from .resolver import FieldResolver, coerce_number, resolve_fields
from .row_store import RowStore

__all__ = [
    "FieldResolver",
    "RowStore",
    "coerce_number",
    "infer_headers",
    "parse_pasted_rows",
    "resolve_fields",
]
