from __future__ import annotations

import csv
import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.canonical import Record
from ..table.headers import infer_headers

"""Export encoders: read-only projections of the Row Store.

- CSV: header row, then one line per record in header order. Values use
  minimal CSV quoting (fields with commas, quotes or newlines are quoted,
  quotes doubled). Missing / None values are empty fields.
- JSON: indented list of objects, keys in stored order. decode_json is the
  inverse and is also used to reload an exported file.

Nothing here mutates the rows it is given or talks to the network.
"""

__all__ = [
    "ExportFormatError",
    "decode_json",
    "encode_csv",
    "encode_json",
    "write_export",
]

JSON_INDENT = 2


class ExportFormatError(Exception):
    """Raised when an export cannot be produced or decoded."""


def encode_csv(records: Sequence[Mapping[str, Any]], headers: Sequence[str] | None = None) -> str:
    """Encode records as CSV text.

    Args:
        records: Rows in display order
        headers: Column order. Defaults to the inferred working headers
    """
    columns = list(headers) if headers is not None else infer_headers(records)
    # dtype=object keeps ints as ints; a missing key becomes None -> na_rep
    df = pd.DataFrame(
        [[r.get(c) for c in columns] for r in records],
        columns=columns,
        dtype=object,
    )
    return df.to_csv(index=False, na_rep="", quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def encode_json(records: Sequence[Mapping[str, Any]]) -> str:
    """Encode records as indented JSON, preserving key order."""
    try:
        return json.dumps([dict(r) for r in records], indent=JSON_INDENT, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ExportFormatError(f"rows are not JSON serializable: {e}") from e


def decode_json(text: str) -> list[Record]:
    """Decode a JSON export back into records."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExportFormatError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ExportFormatError(f"expected a list of rows, got {type(data).__name__}")
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ExportFormatError(f"row {i} is {type(item).__name__}, expected an object")
    return data


def write_export(records: Sequence[Mapping[str, Any]], path: Path, headers: Sequence[str] | None = None) -> Path:
    """Write records to `path`, choosing the encoder from its suffix (.csv / .json)."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        text = encode_csv(records, headers)
    elif suffix == ".json":
        text = encode_json(records)
    else:
        raise ExportFormatError(f"unsupported export type '{suffix}' (expected .csv or .json)")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
