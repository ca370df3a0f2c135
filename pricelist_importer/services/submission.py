from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..contracts import IMPORT_PAYLOAD_SCHEMA_PATH
from ..models.canonical import CanonicalRecord
from ..table.resolver import FieldResolver

"""Submission pipeline: Row Store contents -> import payload.

Every row goes through the field resolver, in display order, and the whole
list is handed to the import endpoint as one unit. There is no per-row
partial commit at this layer.
"""

__all__ = [
    "PayloadError",
    "build_payload",
    "validate_payload",
]


class PayloadError(Exception):
    """Raised when a built payload violates the import payload contract."""


@lru_cache(maxsize=1)
def _payload_schema() -> dict[str, Any]:
    return json.loads(IMPORT_PAYLOAD_SCHEMA_PATH.read_text(encoding="utf-8"))


def build_payload(
    records: Iterable[Mapping[str, Any]],
    resolver: FieldResolver | None = None,
) -> list[CanonicalRecord]:
    """Resolve every record into its canonical shape, preserving order."""
    resolve = resolver or FieldResolver()
    return [resolve(r) for r in records]


def validate_payload(payload: list[CanonicalRecord]) -> None:
    """Check the payload against contracts/import_payload_schema.json."""
    try:
        jsonschema.validate(payload, _payload_schema())
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise PayloadError(f"payload invalid at {location}: {e.message}") from e
