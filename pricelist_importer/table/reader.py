from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from ..export.encoders import ExportFormatError, decode_json
from ..models.canonical import Record

"""Local rows-file reader.

Loads rows from a file on disk so a previously exported (or hand-edited)
price list can be reloaded into a session:

- .json  structured export (list of objects), see export.encoders
- .csv   first line is the header
- .xlsx  first sheet (or `sheet_name`), first row is the header

Everything is read as text with pandas NA conversion disabled, so "NA" stays
a model name and blank cells become "". Fully blank rows are skipped.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "TableReadError",
    "normalize_frame",
    "read_rows_file",
]

SUPPORTED_SUFFIXES = (".json", ".csv", ".xlsx")


class TableReadError(Exception):
    """Raised when a rows file cannot be read into records."""


def normalize_frame(df: pd.DataFrame) -> list[Record]:
    """Turn a header-applied DataFrame into records.

    Steps:
    1. Strip header names (unnamed pandas columns are dropped)
    2. Strip text cells, map NaN to ""
    3. Skip rows where every cell is blank
    """
    columns = [str(c).strip() for c in df.columns]
    keep = [i for i, c in enumerate(columns) if c and not c.startswith("Unnamed:")]
    rows: list[Record] = []
    for raw in df.itertuples(index=False, name=None):
        row: Record = {}
        for i in keep:
            val = raw[i]
            if pd.isna(val):
                row[columns[i]] = ""
            elif isinstance(val, str):
                row[columns[i]] = val.strip()
            else:
                row[columns[i]] = val
        if all(v == "" for v in row.values()):
            continue
        rows.append(row)
    return rows


def read_rows_file(path: Path, sheet_name: str | int = 0) -> list[Record]:
    """Read records from a .json, .csv or .xlsx file."""
    if not path.exists():
        raise TableReadError(f"file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TableReadError(f"unsupported file type '{suffix}' (expected one of {', '.join(SUPPORTED_SUFFIXES)})")

    if suffix == ".json":
        try:
            return decode_json(path.read_text(encoding="utf-8"))
        except ExportFormatError as e:
            raise TableReadError(f"{path.name}: {e}") from e

    read_opts: dict[str, Any] = {"dtype": str, "keep_default_na": False}
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, **read_opts)
        else:
            df = pd.read_excel(path, sheet_name=sheet_name, **read_opts)
    except pd.errors.EmptyDataError:
        return []
    except (ValueError, OSError, pd.errors.ParserError) as e:
        raise TableReadError(f"{path.name}: {e}") from e
    return normalize_frame(df)
