from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Each failed extraction or submission produces one ErrorRecord. Records are
buffered by ErrorLogBuffer and written as JSON Lines. row=-1 is the sentinel
for failures that concern the whole operation rather than a single row.

The record shape is fixed by pricelist_importer/contracts/error_log_schema.json.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        operation: EXTRACT | IMPORT
        source: File name (or "<paste>", "<session>") the operation worked on
        row: Row index (0-based). -1 when the failure is not row-specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    operation: str
    source: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(operation: str, source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            operation=operation,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict で余分なキーを出さない
        return json.dumps(asdict(self), ensure_ascii=False)
