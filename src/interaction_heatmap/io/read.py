from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from pathlib import Path

import pandas as pd

from interaction_heatmap.config import AppConfig
from interaction_heatmap.io.mock import generate_mock_records
from interaction_heatmap.io.schema import InteractionRecord, parse_records

LOGGER = logging.getLogger(__name__)


class RecordFetchError(RuntimeError):
    """Raised when remote interaction records cannot be retrieved or decoded."""


def load_records_file(path: Path) -> list[InteractionRecord]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_records(payload)


def fetch_records(api_endpoint: str, timeout: float = 30.0) -> list[InteractionRecord]:
    """GET a JSON array of interaction records from ``api_endpoint``."""
    request = urllib.request.Request(api_endpoint, headers={"Accept": "application/json"})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if not 200 <= int(status) < 300:
                raise RecordFetchError(f"Failed to fetch data: {status}")
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise RecordFetchError(f"Failed to fetch data: {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise RecordFetchError(f"Failed to fetch data: {exc.reason}") from exc
    except OSError as exc:
        raise RecordFetchError(f"Failed to fetch data: {exc}") from exc

    try:
        payload = json.loads(body.decode("utf-8"))
        return parse_records(payload)
    except ValueError as exc:
        raise RecordFetchError(f"Malformed heatmap response: {exc}") from exc


def load_records(config: AppConfig, records_path: Path | None = None) -> list[InteractionRecord]:
    """Load records from the configured source; an explicit path always wins."""
    if records_path is not None:
        return load_records_file(records_path)

    mode = config.input.mode
    if mode == "api":
        if not config.input.api_endpoint:
            raise ValueError("input.api_endpoint must be set when input.mode is 'api'")
        records = fetch_records(config.input.api_endpoint, timeout=config.input.timeout_seconds)
        LOGGER.info(
            "Fetched %d interaction records from %s",
            len(records),
            config.input.api_endpoint,
        )
        return records
    if mode == "json":
        if not config.input.records_path:
            raise ValueError("input.records_path must be set when input.mode is 'json'")
        return load_records_file(Path(config.input.records_path))
    return generate_mock_records(
        days=config.input.mock_days,
        seed=config.input.mock_seed,
        page=config.dashboard.page_url,
    )


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported table file type: {path.suffix}")
