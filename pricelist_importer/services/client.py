from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from ..models.canonical import CanonicalRecord
from ..models.config_models import ApiConfig
from ..models.extraction import ExtractionResult

"""HTTP client for the two remote collaborators.

- Extract: multipart POST of one file field named `file` to the parse
  endpoint. Success body {"extractedData": [...], "rawText": "..."}; a bare
  JSON array is accepted as extractedData. Error bodies carry {"error": ...}.
- Import: JSON POST of the canonical rows to the import endpoint. Success is
  any 2xx status; the body is ignored.

Failures are raised as ClientError subclasses carrying an UPPER_SNAKE
error_type. There is no retry here: retrying is the operator's decision.
"""

__all__ = [
    "ClientError",
    "ExtractionError",
    "ImporterClient",
    "SubmissionError",
]

logger = logging.getLogger(__name__)

GENERIC_PARSE_FAILURE = "Failed to parse PDF"
UNEXPECTED_FORMAT = "AI returned unexpected format. Try again."


class ClientError(Exception):
    """Failure talking to a remote collaborator."""

    def __init__(self, message: str, error_type: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code


class ExtractionError(ClientError):
    pass


class SubmissionError(ClientError):
    pass


def _maybe_json(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def parse_extraction_body(body: Any) -> ExtractionResult:
    """Interpret a parse endpoint success body.

    Raises:
        ExtractionError: UNEXPECTED_FORMAT when the body is neither a list of
            rows nor an object with an `extractedData` list of rows.
    """
    if isinstance(body, list):
        rows, raw_text = body, ""
    elif isinstance(body, dict) and isinstance(body.get("extractedData"), list):
        rows, raw_text = body["extractedData"], body.get("rawText") or ""
    else:
        raise ExtractionError(UNEXPECTED_FORMAT, "UNEXPECTED_FORMAT")
    if not all(isinstance(r, dict) for r in rows):
        raise ExtractionError(UNEXPECTED_FORMAT, "UNEXPECTED_FORMAT")
    return ExtractionResult(extracted_data=list(rows), raw_text=str(raw_text))


class ImporterClient:
    """Thin requests.Session wrapper around the parse and import endpoints."""

    def __init__(self, api: ApiConfig, session: requests.Session | None = None) -> None:
        self.api = api
        self.session = session or requests.Session()

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        logger.debug("API POST %s", url)
        return self.session.post(url, timeout=self.api.timeout, **kwargs)

    def extract(self, file_path: Path) -> ExtractionResult:
        """Upload one document and return the extracted rows."""
        url = self.api.parse_url
        try:
            with file_path.open("rb") as f:
                resp = self._post(url, files={"file": (file_path.name, f)})
        except OSError as e:
            raise ExtractionError(f"cannot read {file_path.name}: {e}", "FILE_READ_ERROR") from e
        except requests.RequestException as e:
            raise ExtractionError(str(e), "TRANSPORT_ERROR") from e

        body = _maybe_json(resp)
        if not resp.ok:
            message = GENERIC_PARSE_FAILURE
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            raise ExtractionError(message, "HTTP_ERROR", resp.status_code)
        if body is None:
            raise ExtractionError(GENERIC_PARSE_FAILURE, "PARSE_ERROR", resp.status_code)
        return parse_extraction_body(body)

    def submit(self, payload: list[CanonicalRecord]) -> None:
        """Post the whole payload as one unit. Returns normally on any 2xx."""
        url = self.api.import_url
        try:
            resp = self._post(url, json=payload)
        except requests.RequestException as e:
            raise SubmissionError(str(e), "TRANSPORT_ERROR") from e
        if not resp.ok:
            body = _maybe_json(resp)
            detail = body.get("error") if isinstance(body, dict) else None
            message = f"HTTP {resp.status_code}" + (f": {detail}" if detail else "")
            raise SubmissionError(message, "HTTP_ERROR", resp.status_code)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> ImporterClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
