# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from pricelist_importer.models.config_models import ApiConfig, ImporterConfig, default_config


@pytest.fixture(autouse=True)
def _no_api_url_env(monkeypatch):
    # 開発者の環境変数 API_URL がテストに漏れないようにする
    monkeypatch.delenv("API_URL", raising=False)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: http://api.test
  parse_endpoint: /api/admin/parse-pdf
  import_endpoint: /api/admin/import
  timeout: 30
defaults:
  brand: Unknown
  type: Standard
serial_number_aliases: ["sr no", "sr. no", "s.no"]
empty_extraction_policy: preserve
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "importer.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def config(tmp_path: Path) -> ImporterConfig:
    base = default_config("http://api.test")
    return ImporterConfig(
        api=ApiConfig(base_url="http://api.test", timeout=5),
        defaults=base.defaults,
        serial_number_aliases=base.serial_number_aliases,
        empty_extraction_policy=base.empty_extraction_policy,
        error_log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture()
def sample_pdfs(temp_workdir: Path) -> list[Path]:
    # 中身は送信されるだけなので空の PDF プレースホルダで十分
    files = []
    for name in ["mrf_2024.pdf", "ceat_2024.pdf"]:
        f = temp_workdir / "data" / name
        f.write_bytes(b"%PDF-1.4\n%placeholder\n")
        files.append(f)
    return files


@pytest.fixture()
def extracted_rows() -> list[dict[str, Any]]:
    return [
        {"Sr No": 1, "Brand": "MRF", "Pattern": "ZLX 145/80 R12", "Type": "Tubeless", "Dealer Rate": "₹2,450.00", "MRP": "2,890"},
        {"Sr No": 2, "Brand": "MRF", "Pattern": "ZVTV 165/80 R14", "Type": "Tubeless", "Dealer Rate": "3120", "MRP": "3,650"},
        {"Sr No": 3, "Brand": "MRF", "Pattern": "Wanderer 205/55 R16", "Dealer Rate": "5400.5", "MRP": 6200},
    ]


def make_response(status_code: int = 200, body: Any = None, text: str | None = None) -> MagicMock:
    """Build a requests.Response stand-in.

    body is returned by .json(); pass text instead to simulate a non-JSON body.
    """
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    if text is not None:
        resp.text = text
        resp.json.side_effect = json.JSONDecodeError("Expecting value", text, 0)
    else:
        resp.text = json.dumps(body)
        resp.json.return_value = body
    return resp


@pytest.fixture()
def response_factory():
    return make_response


@pytest.fixture()
def http_session() -> MagicMock:
    """requests.Session stand-in; set .post.return_value / side_effect per test."""
    return MagicMock(spec=requests.Session)
