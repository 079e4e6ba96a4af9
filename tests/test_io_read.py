from __future__ import annotations

import io
import json
import urllib.error
from pathlib import Path

import pytest

from interaction_heatmap.config import AppConfig
from interaction_heatmap.io import read as read_module
from interaction_heatmap.io.read import (
    RecordFetchError,
    fetch_records,
    load_records,
    load_records_file,
    load_table,
)

RECORD = {
    "date": "2026-02-03",
    "type": "click",
    "device": "desktop",
    "page": "/example-page",
    "totalVisitors": 5,
    "totalInteractions": 9,
    "points": [{"x": 1, "y": 2, "value": 3}],
}


class _FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200) -> None:
        super().__init__(body)
        self.status = status


def _fake_urlopen(body: bytes, status: int = 200):
    def _urlopen(request, timeout: float):
        _ = (request, timeout)
        return _FakeResponse(body, status=status)

    return _urlopen


def test_load_records_file_reads_json_array(tmp_path: Path) -> None:
    path = tmp_path / "records.json"
    path.write_text(json.dumps([RECORD, RECORD]), encoding="utf-8")

    records = load_records_file(path)

    assert len(records) == 2
    assert records[0].total_interactions == 9


def test_fetch_records_parses_successful_response(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        read_module.urllib.request,
        "urlopen",
        _fake_urlopen(json.dumps([RECORD]).encode("utf-8")),
    )

    records = fetch_records("https://example.test/heatmaps")

    assert len(records) == 1
    assert records[0].points is not None
    assert records[0].points[0].value == 3


def test_fetch_records_maps_non_2xx_status(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_http_error(request, timeout: float):
        raise urllib.error.HTTPError(
            "https://example.test/heatmaps", 503, "Service Unavailable", None, None
        )

    monkeypatch.setattr(read_module.urllib.request, "urlopen", _raise_http_error)

    with pytest.raises(RecordFetchError, match="Failed to fetch data: 503"):
        fetch_records("https://example.test/heatmaps")


def test_fetch_records_maps_network_and_payload_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_url_error(request, timeout: float):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(read_module.urllib.request, "urlopen", _raise_url_error)
    with pytest.raises(RecordFetchError, match="connection refused"):
        fetch_records("https://example.test/heatmaps")

    monkeypatch.setattr(read_module.urllib.request, "urlopen", _fake_urlopen(b"not json"))
    with pytest.raises(RecordFetchError, match="Malformed"):
        fetch_records("https://example.test/heatmaps")

    monkeypatch.setattr(read_module.urllib.request, "urlopen", _fake_urlopen(b'{"a": 1}'))
    with pytest.raises(RecordFetchError, match="JSON array"):
        fetch_records("https://example.test/heatmaps")

    monkeypatch.setattr(read_module.urllib.request, "urlopen", _fake_urlopen(b"\xff\xfe[]"))
    with pytest.raises(RecordFetchError, match="Malformed"):
        fetch_records("https://example.test/heatmaps")

    class _StalledResponse(_FakeResponse):
        def read(self, *args: object) -> bytes:
            raise TimeoutError("timed out")

    monkeypatch.setattr(
        read_module.urllib.request, "urlopen", lambda request, timeout: _StalledResponse(b"")
    )
    with pytest.raises(RecordFetchError, match="Failed to fetch data: timed out"):
        fetch_records("https://example.test/heatmaps")


def test_load_records_dispatches_on_input_mode(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    mock_cfg = AppConfig.model_validate({"input": {"mode": "mock", "mock_days": 2}})
    assert len(load_records(mock_cfg)) == 2 * 3 * 3

    path = tmp_path / "records.json"
    path.write_text(json.dumps([RECORD]), encoding="utf-8")
    json_cfg = AppConfig.model_validate({"input": {"mode": "json", "records_path": str(path)}})
    assert len(load_records(json_cfg)) == 1
    assert len(load_records(mock_cfg, records_path=path)) == 1

    captured: dict[str, object] = {}

    def _fake_fetch(api_endpoint: str, timeout: float) -> list:
        captured["endpoint"] = api_endpoint
        captured["timeout"] = timeout
        return []

    monkeypatch.setattr(read_module, "fetch_records", _fake_fetch)
    api_cfg = AppConfig.model_validate(
        {"input": {"mode": "api", "api_endpoint": "https://example.test/h", "timeout_seconds": 5}}
    )
    assert load_records(api_cfg) == []
    assert captured == {"endpoint": "https://example.test/h", "timeout": 5.0}


def test_load_records_requires_source_settings() -> None:
    with pytest.raises(ValueError, match="input.api_endpoint"):
        load_records(AppConfig.model_validate({"input": {"mode": "api"}}))
    with pytest.raises(ValueError, match="input.records_path"):
        load_records(AppConfig.model_validate({"input": {"mode": "json"}}))


def test_load_table_supports_csv_and_rejects_unknown_types(tmp_path: Path) -> None:
    csv_path = tmp_path / "table.csv"
    csv_path.write_text("x,y,value\n1,2,3\n", encoding="utf-8")
    text_path = tmp_path / "table.txt"
    text_path.write_text("not-a-table", encoding="utf-8")

    assert list(load_table(csv_path).columns) == ["x", "y", "value"]
    with pytest.raises(ValueError, match="Unsupported table file type"):
        load_table(text_path)
