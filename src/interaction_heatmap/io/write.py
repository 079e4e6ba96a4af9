from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import pandas as pd

from interaction_heatmap.io.schema import InteractionRecord, records_to_payload


def _json_default(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(path, index=False)
    elif fmt == "csv":
        df.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported table format: {fmt}")
    return path


def write_summary(data: dict[str, Any], path: Path) -> Path:
    """Write a run summary; numpy scalars and dates from pandas tables are unboxed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, sort_keys=True, default=_json_default), encoding="utf-8"
    )
    return path


def write_records(records: Sequence[InteractionRecord], path: Path) -> Path:
    """Write records as the camelCase JSON array the loaders accept."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records_to_payload(records)), encoding="utf-8")
    return path
