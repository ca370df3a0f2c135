from __future__ import annotations

import dataclasses
import json
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pricelist_importer.models.config_models import EmptyExtractionPolicy, ImporterConfig
from pricelist_importer.models.extraction import ExtractionResult
from pricelist_importer.services.client import ExtractionError, ImporterClient, SubmissionError
from pricelist_importer.services.session import ImportSession

"""Unit tests for ImportSession (review screen state + failure policy)."""


@pytest.fixture()
def client() -> MagicMock:
    return MagicMock(spec=ImporterClient)


@pytest.fixture()
def session(config: ImporterConfig, client: MagicMock) -> ImportSession:
    return ImportSession(config, client=client)


def _with_policy(config: ImporterConfig, policy: EmptyExtractionPolicy) -> ImporterConfig:
    return dataclasses.replace(config, empty_extraction_policy=policy)


# -- extraction ------------------------------------------------------------


def test_extract_success_replaces_rows(session, client, extracted_rows):
    session.load_records([{"brand": "old"}])
    client.extract.return_value = ExtractionResult(extracted_data=extracted_rows, raw_text="raw")

    assert session.extract(Path("mrf.pdf")) is True
    assert len(session) == 3
    assert session.records == extracted_rows
    assert session.raw_text == "raw"
    assert session.status == "Successfully extracted 3 items. Please review below."
    # "Sr No" は列見出しに出ない
    assert session.headers == ["Brand", "Pattern", "Type", "Dealer Rate", "MRP"]
    assert len(session.error_log) == 0


def test_extract_failure_keeps_rows_and_logs(session, client):
    session.load_records([{"brand": "keep"}])
    client.extract.side_effect = ExtractionError("Gemini quota exceeded", "HTTP_ERROR", 500)

    assert session.extract(Path("mrf.pdf")) is False
    assert session.records == [{"brand": "keep"}]
    assert session.status == "Error: Gemini quota exceeded"
    [rec] = session.error_log.records
    assert rec.operation == "EXTRACT"
    assert rec.source == "mrf.pdf"
    assert rec.row == -1
    assert rec.error_type == "HTTP_ERROR"
    assert not session.extracting


def test_extract_unexpected_format_status(session, client):
    client.extract.side_effect = ExtractionError("AI returned unexpected format. Try again.", "UNEXPECTED_FORMAT")
    assert session.extract(Path("mrf.pdf")) is False
    assert session.status == "AI returned unexpected format. Try again."
    assert session.error_log.records[0].error_type == "UNEXPECTED_FORMAT"


def test_empty_extraction_preserve_policy(session, client):
    session.load_records([{"brand": "keep"}])
    client.extract.return_value = ExtractionResult(extracted_data=[], raw_text="")

    assert session.extract(Path("blank.pdf")) is False
    assert session.records == [{"brand": "keep"}]
    assert session.status == "No rows were extracted from blank.pdf."
    assert [r.error_type for r in session.error_log.records] == ["EMPTY_RESULT"]


def test_empty_extraction_clear_policy(config, client):
    session = ImportSession(_with_policy(config, EmptyExtractionPolicy.CLEAR), client=client)
    session.load_records([{"brand": "old"}])
    assert session.apply_extraction(ExtractionResult(extracted_data=[], raw_text="text"), "blank.pdf") is True
    assert len(session) == 0
    assert session.raw_text == "text"
    assert len(session.error_log) == 0


def test_empty_extraction_placeholder_policy(config, client):
    session = ImportSession(_with_policy(config, EmptyExtractionPolicy.PLACEHOLDER), client=client)
    session.load_records([{"brand": "old"}])
    assert session.apply_extraction(ExtractionResult(extracted_data=[]), "blank.pdf") is True
    assert session.records == [{"brand": "", "model": "", "type": "", "dp": "", "mrp": ""}]
    assert session.headers == ["brand", "model", "type", "dp", "mrp"]


def test_second_extraction_while_in_flight_is_rejected(session, client, extracted_rows):
    started = threading.Event()
    release = threading.Event()

    def slow_extract(path):
        started.set()
        release.wait(timeout=5)
        return ExtractionResult(extracted_data=extracted_rows)

    client.extract.side_effect = slow_extract
    results: list[bool] = []
    worker = threading.Thread(target=lambda: results.append(session.extract(Path("a.pdf"))))
    worker.start()
    assert started.wait(timeout=5)
    assert session.extracting

    assert session.extract(Path("b.pdf")) is False
    assert session.status == "Extraction already in progress."

    release.set()
    worker.join(timeout=5)
    assert results == [True]
    assert client.extract.call_count == 1
    assert not session.extracting


# -- editing ---------------------------------------------------------------


def test_add_row_seeds_from_headers(session):
    session.load_records([{"Sr No": 1, "Brand": "MRF", "MRP": 100}])
    session.add_row()
    assert session.records[0] == {"Brand": "", "MRP": ""}
    assert session.status == "New row added. Fill in the details manually."


def test_add_row_on_empty_store_uses_canonical_headers(session):
    session.add_row()
    assert session.records == [{"brand": "", "model": "", "type": "", "dp": "", "mrp": ""}]


def test_edit_and_delete(session):
    session.load_records([{"model": "A"}, {"model": "B"}, {"model": "C"}])
    assert session.edit(1, "mrp", "1,200") is True
    assert session.records[1] == {"model": "B", "mrp": "1,200"}
    assert session.edit(3, "mrp", "x") is False
    assert session.delete_row(0) is True
    assert [r["model"] for r in session.records] == ["B", "C"]
    assert session.delete_row(-1) is False


def test_paste_prepends_rows(session):
    session.load_records([{"brand": "existing", "model": "E"}])
    count = session.paste("MRF,CZAR,Tubeless,1000,1200\nCEAT,Milaze,Radial,900,1100")
    assert count == 2
    assert [r["model"] for r in session.records] == ["CZAR", "Milaze", "E"]
    assert session.status == "Added 2 pasted rows."


def test_paste_nothing(session):
    assert session.paste(",,,\n\n") == 0
    assert len(session) == 0
    assert session.status == "No rows found in pasted text."


# -- export ----------------------------------------------------------------


def test_exports_follow_working_headers(session, extracted_rows):
    session.load_records(extracted_rows[:1])
    assert session.export_csv().splitlines() == [
        "Brand,Pattern,Type,Dealer Rate,MRP",
        'MRF,ZLX 145/80 R12,Tubeless,"₹2,450.00","2,890"',
    ]
    assert json.loads(session.export_json()) == extracted_rows[:1]


# -- submission ------------------------------------------------------------


def test_submit_success_clears_rows(session, client, extracted_rows):
    session.load_records(extracted_rows)
    assert session.submit(source="mrf.pdf") is True
    payload = client.submit.call_args.args[0]
    assert len(payload) == 3
    assert payload[0]["mrp"] == 2890.0
    assert len(session) == 0
    assert session.status == "Import Complete."


def test_submit_http_failure_keeps_rows(session, client, extracted_rows):
    session.load_records(extracted_rows)
    client.submit.side_effect = SubmissionError("HTTP 500", "HTTP_ERROR", 500)
    assert session.submit(source="mrf.pdf") is False
    assert session.records == extracted_rows
    assert session.status == "Failed to import data."
    [rec] = session.error_log.records
    assert (rec.operation, rec.error_type, rec.row) == ("IMPORT", "HTTP_ERROR", -1)


def test_submit_transport_failure_keeps_rows(session, client, extracted_rows):
    session.load_records(extracted_rows)
    client.submit.side_effect = SubmissionError("connection refused", "TRANSPORT_ERROR")
    assert session.submit() is False
    assert len(session) == 3
    assert session.status == "Error importing data."
    assert not session.importing


def test_submit_empty_store_does_not_call_endpoint(session, client):
    assert session.submit() is False
    assert session.status == "Nothing to import."
    client.submit.assert_not_called()


def test_submit_while_in_flight_is_rejected(session, client):
    session.load_records([{"Model": "X"}])
    session._import_lock.acquire()
    try:
        assert session.submit() is False
        assert session.status == "Import already in progress."
    finally:
        session._import_lock.release()
    client.submit.assert_not_called()


def test_session_creates_client_lazily(config, monkeypatch):
    created = MagicMock(spec=ImporterClient)
    monkeypatch.setattr("pricelist_importer.services.session.ImporterClient", lambda api: created)
    session = ImportSession(config)
    session.load_records([{"Model": "X"}])
    assert session.submit() is True
    created.submit.assert_called_once()
