from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..export.encoders import encode_csv, encode_json
from ..logging.error_log import ErrorLogBuffer
from ..models.canonical import CANONICAL_FIELDS, CanonicalRecord, Record
from ..models.config_models import EmptyExtractionPolicy, ImporterConfig
from ..models.error_record import ErrorRecord
from ..models.extraction import ExtractionResult
from ..table.headers import infer_headers
from ..table.paste import parse_pasted_rows
from ..table.resolver import FieldResolver
from ..table.row_store import RowStore
from .client import ClientError, ImporterClient
from .submission import PayloadError, build_payload, validate_payload

"""Import session: the state behind one review-and-commit screen.

An ImportSession owns the Row Store, derives the working headers from it,
keeps the operator-facing status message and guards the two remote requests
so that only one extraction and one submission can be in flight at a time.

Failure policy: every extraction / submission failure is caught here, turned
into a status message, logged, and appended to the session's error log.
The Row Store is left exactly as it was, so the operator can retry.
"""

__all__ = [
    "ImportSession",
]

logger = logging.getLogger(__name__)

OP_EXTRACT = "EXTRACT"
OP_IMPORT = "IMPORT"

MSG_SCANNING = "Scanning PDF... This may take a few seconds."
MSG_EXTRACTED = "Successfully extracted {count} items. Please review below."
MSG_EMPTY_EXTRACTION = "No rows were extracted from {name}."
MSG_ROW_ADDED = "New row added. Fill in the details manually."
MSG_PASTED = "Added {count} pasted rows."
MSG_NOTHING_PASTED = "No rows found in pasted text."
MSG_IMPORT_COMPLETE = "Import Complete."
MSG_IMPORT_FAILED = "Failed to import data."
MSG_IMPORT_ERROR = "Error importing data."
MSG_NOTHING_TO_IMPORT = "Nothing to import."
MSG_BUSY = "{what} already in progress."


class ImportSession:
    """Explicit session object; every operation of the review screen goes through it."""

    def __init__(
        self,
        config: ImporterConfig,
        client: ImporterClient | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.error_log = error_log if error_log is not None else ErrorLogBuffer(Path(config.error_log_dir))
        self.resolver = FieldResolver.from_defaults(config.defaults)
        self.store = RowStore()
        self.status = ""
        self.raw_text = ""
        self._extract_lock = threading.Lock()
        self._import_lock = threading.Lock()

    # -- state -----------------------------------------------------------

    @property
    def headers(self) -> list[str]:
        """Working Header Set, recomputed from the current rows."""
        return infer_headers(self.store.records, self.config.serial_number_aliases)

    @property
    def records(self) -> list[Record]:
        return self.store.records

    @property
    def extracting(self) -> bool:
        return self._extract_lock.locked()

    @property
    def importing(self) -> bool:
        return self._import_lock.locked()

    def __len__(self) -> int:
        return len(self.store)

    @contextmanager
    def _in_flight(self, lock: threading.Lock, what: str) -> Iterator[bool]:
        # 同種リクエストの二重送信を防ぐ (ボタン disable 相当)
        acquired = lock.acquire(blocking=False)
        if not acquired:
            self.status = MSG_BUSY.format(what=what)
            logger.warning(self.status)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def _record_failure(self, operation: str, source: str, error_type: str, message: str) -> None:
        logger.error("%s %s failed: [%s] %s", operation.lower(), source, error_type, message)
        self.error_log.append(ErrorRecord.create(operation, source, -1, error_type, message))

    def _require_client(self) -> ImporterClient:
        if self.client is None:
            self.client = ImporterClient(self.config.api)
        return self.client

    # -- extraction ------------------------------------------------------

    def extract(self, file_path: Path) -> bool:
        """Upload a document and replace the rows with the extraction result.

        Returns True when the Row Store was populated from the result.
        """
        with self._in_flight(self._extract_lock, "Extraction") as acquired:
            if not acquired:
                return False
            self.status = MSG_SCANNING
            logger.info("extracting %s", file_path.name)
            try:
                result = self._require_client().extract(file_path)
            except ClientError as e:
                # 形式不正はメッセージそのまま、それ以外は "Error: " 付き
                self.status = str(e) if e.error_type == "UNEXPECTED_FORMAT" else f"Error: {e}"
                self._record_failure(OP_EXTRACT, file_path.name, e.error_type, str(e))
                return False
            return self.apply_extraction(result, source=file_path.name)

    def apply_extraction(self, result: ExtractionResult, source: str = "<extraction>") -> bool:
        """Install an extraction result, applying the empty-result policy."""
        if result.is_empty:
            return self._apply_empty_extraction(result, source)
        self.store.replace_all(result.extracted_data)
        self.raw_text = result.raw_text
        self.status = MSG_EXTRACTED.format(count=len(result.extracted_data))
        logger.info("%s: %d rows extracted, headers=%s", source, len(result.extracted_data), self.headers)
        return True

    def _apply_empty_extraction(self, result: ExtractionResult, source: str) -> bool:
        policy = self.config.empty_extraction_policy
        self.status = MSG_EMPTY_EXTRACTION.format(name=source)
        if policy is EmptyExtractionPolicy.PRESERVE:
            self._record_failure(OP_EXTRACT, source, "EMPTY_RESULT", self.status)
            return False
        self.raw_text = result.raw_text
        if policy is EmptyExtractionPolicy.CLEAR:
            self.store.clear()
        else:
            self.store.replace_all([{f: "" for f in CANONICAL_FIELDS}])
        logger.warning("%s (policy=%s)", self.status, policy.value)
        return True

    # -- editing ---------------------------------------------------------

    def add_row(self) -> None:
        """Prepend a blank row seeded from the current headers."""
        self.store.insert_at_front({h: "" for h in self.headers})
        self.status = MSG_ROW_ADDED

    def edit(self, index: int, field: str, value: Any) -> bool:
        changed = self.store.set_field(index, field, value)
        if not changed:
            logger.debug("edit ignored: row %s out of range (rows=%d)", index, len(self.store))
        return changed

    def delete_row(self, index: int) -> bool:
        return self.store.delete_at(index)

    def clear(self) -> None:
        self.store.clear()
        self.raw_text = ""
        self.status = ""

    def load_records(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Replace the rows wholesale (local rows file, restored export)."""
        self.store.replace_all(records)
        return len(self.store)

    def paste(self, text: str) -> int:
        """Parse pasted text and prepend the rows ahead of the existing ones."""
        rows = parse_pasted_rows(text)
        if not rows:
            self.status = MSG_NOTHING_PASTED
            return 0
        self.store.replace_all([*rows, *self.store.records])
        self.status = MSG_PASTED.format(count=len(rows))
        logger.info(self.status)
        return len(rows)

    # -- export ----------------------------------------------------------

    def export_csv(self, headers: list[str] | None = None) -> str:
        return encode_csv(self.store.records, headers if headers is not None else self.headers)

    def export_json(self) -> str:
        return encode_json(self.store.records)

    # -- submission ------------------------------------------------------

    def build_payload(self) -> list[CanonicalRecord]:
        return build_payload(self.store.records, self.resolver)

    def submit(self, source: str = "<session>") -> bool:
        """Resolve every row and post the batch. On success the rows are cleared."""
        with self._in_flight(self._import_lock, "Import") as acquired:
            if not acquired:
                return False
            if self.store.is_empty():
                self.status = MSG_NOTHING_TO_IMPORT
                return False
            payload = self.build_payload()
            try:
                validate_payload(payload)
                self._require_client().submit(payload)
            except PayloadError as e:
                self.status = MSG_IMPORT_ERROR
                self._record_failure(OP_IMPORT, source, "PAYLOAD_INVALID", str(e))
                return False
            except ClientError as e:
                self.status = MSG_IMPORT_ERROR if e.error_type == "TRANSPORT_ERROR" else MSG_IMPORT_FAILED
                self._record_failure(OP_IMPORT, source, e.error_type, str(e))
                return False
            logger.info("%s: imported %d rows", source, len(payload))
            self.clear()
            self.status = MSG_IMPORT_COMPLETE
            return True
