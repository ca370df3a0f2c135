from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""SourceFile domain model and FileStatus enum for batch extraction.

A SourceFile is one price list document sent through an import session by the
batch orchestrator. It tracks the document from discovery to the end of its
session (extract, export, optional submit).
"""


class FileStatus(Enum):
    """Status enum for SourceFile processing lifecycle.

    State transitions: pending → processing → (success | failed)

    - PENDING: File discovered but not yet processed
    - PROCESSING: Extraction / submission in flight
    - SUCCESS: Rows extracted (and submitted, when commit was requested)
    - FAILED: Extraction or submission failed
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceFile:
    """Processing context for a single price list document."""
    path: Path                           # Full path to the document
    name: str                            # File name
    start_time: datetime | None = None   # Processing start (UTC)
    end_time: datetime | None = None     # Processing end (UTC)
    status: FileStatus = FileStatus.PENDING
    extracted_rows: int = 0              # Rows in the Row Store after extraction
    submitted_rows: int = 0              # Rows accepted by the import endpoint
    exports: tuple[Path, ...] = ()       # Files written by the export encoders
    error: str | None = None             # Failure reason summary (status message)
