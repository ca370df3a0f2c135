from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from pricelist_importer.cli import main as cli_main
from pricelist_importer.logging.init import reset_logging

"""End-to-end extract run: CLI -> orchestrator -> session -> HTTP client.

Only requests.Session is replaced; the fake service routes by URL like the
real parse / import endpoints.
"""


class FakePriceListService:
    """Stands in for the extraction + import HTTP service."""

    def __init__(self, respond, extracted: dict[str, Any], import_status: int = 200) -> None:
        self.respond = respond
        self.extracted = extracted  # file name -> (status, body)
        self.import_status = import_status
        self.uploads: list[str] = []
        self.imports: list[list[dict[str, Any]]] = []

    def post(self, url: str, timeout: float | None = None, files: Any = None, json: Any = None) -> MagicMock:
        assert timeout == 30.0
        if url == "http://api.test/api/admin/parse-pdf":
            name, _fh = files["file"]
            self.uploads.append(name)
            status, body = self.extracted[name]
            return self.respond(status, body)
        if url == "http://api.test/api/admin/import":
            self.imports.append(json)
            return self.respond(self.import_status, {"ok": self.import_status == 200})
        raise AssertionError(f"unexpected url {url}")


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


def _run(service: FakePriceListService, argv: list[str]) -> int:
    session = MagicMock(spec=requests.Session)
    session.post.side_effect = service.post
    with patch("pricelist_importer.services.client.requests.Session", return_value=session):
        return cli_main(argv)


def test_extract_export_and_commit(write_config, sample_pdfs, temp_workdir: Path, response_factory, capsys):
    service = FakePriceListService(
        response_factory,
        {
            "mrf_2024.pdf": (200, {
                "extractedData": [
                    {"Sr No": 1, "Brand": "MRF", "Pattern": "ZLX 145/80 R12", "Type": "Tubeless",
                     "Dealer Rate": "₹2,450.00", "MRP": "2,890"},
                    {"Sr No": 2, "Brand": "MRF", "Pattern": "ZVTV 165/80 R14", "Type": "Tubeless",
                     "Dealer Rate": "3120", "MRP": "3,650"},
                ],
                "rawText": "MRF price list",
            }),
            "ceat_2024.pdf": (200, [
                {"BRAND": "CEAT", "Item Description": "Milaze X3", "Net Rate": 3100, "List Price": 3600},
            ]),
        }
    )
    code = _run(service, ["extract", "data", "--out-dir", "out", "--commit"])
    out = capsys.readouterr().out

    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0 rows=3 submitted=3" in out
    assert service.uploads == ["ceat_2024.pdf", "mrf_2024.pdf"]
    assert service.imports == [
        [{"brand": "CEAT", "model": "Milaze X3", "type": "Standard", "dp": 3100.0, "mrp": 3600.0}],
        [
            {"brand": "MRF", "model": "ZLX 145/80 R12", "type": "Tubeless", "dp": 2450.0, "mrp": 2890.0},
            {"brand": "MRF", "model": "ZVTV 165/80 R14", "type": "Tubeless", "dp": 3120.0, "mrp": 3650.0},
        ],
    ]

    # エクスポートはレビュー時点の生の行 (Sr No 列は CSV に出ない)
    df = pd.read_csv(temp_workdir / "out" / "mrf_2024.csv", dtype=str, keep_default_na=False)
    assert list(df.columns) == ["Brand", "Pattern", "Type", "Dealer Rate", "MRP"]
    assert df.iloc[0]["Dealer Rate"] == "₹2,450.00"
    exported = json.loads((temp_workdir / "out" / "mrf_2024.json").read_text(encoding="utf-8"))
    assert exported[1]["Sr No"] == 2


def test_extract_partial_failure_writes_error_log(write_config, sample_pdfs, temp_workdir: Path, response_factory, capsys):
    service = FakePriceListService(
        response_factory,
        {
            "mrf_2024.pdf": (200, {"extractedData": [{"Brand": "MRF", "Model": "CZAR", "MRP": "1200"}]}),
            "ceat_2024.pdf": (500, {"error": "Gemini quota exceeded"}),
        },
        import_status=200,
    )
    code = _run(service, ["extract", "data", "--commit"])
    out = capsys.readouterr().out

    assert code == 2
    assert "SUMMARY files=2/2 success=1 failed=1 rows=1 submitted=1" in out
    assert "Gemini quota exceeded" in out
    [log_file] = list((temp_workdir / "logs").glob("errors-*.log"))
    [line] = log_file.read_text(encoding="utf-8").splitlines()
    record = json.loads(line)
    assert record["operation"] == "EXTRACT"
    assert record["source"] == "ceat_2024.pdf"
    assert record["error_type"] == "HTTP_ERROR"
    assert record["message"] == "Gemini quota exceeded"


def test_rejected_import_marks_file_failed(write_config, sample_pdfs, temp_workdir: Path, response_factory, capsys):
    rows = {"extractedData": [{"Brand": "X", "Model": "Y"}]}
    service = FakePriceListService(response_factory, {"mrf_2024.pdf": (200, rows), "ceat_2024.pdf": (200, rows)}, import_status=422)
    code = _run(service, ["extract", "data", "--commit"])
    out = capsys.readouterr().out

    assert code == 2
    assert "success=0 failed=2 rows=2 submitted=0" in out
    assert len(service.imports) == 2
    lines = next((temp_workdir / "logs").glob("errors-*.log")).read_text(encoding="utf-8").splitlines()
    assert [json.loads(x)["operation"] for x in lines] == ["IMPORT", "IMPORT"]
