from __future__ import annotations

import base64
import io
from datetime import date

import pandas as pd

from interaction_heatmap.features.aggregates import AggregateResult
from interaction_heatmap.viz.surface import Surface

CSV_COLUMNS: dict[str, list[str]] = {
    "click": ["x", "y", "value"],
    "scroll": ["depth", "percentage"],
    "engagement": ["id", "name", "timeSpent", "interactions"],
}


def export_frame(aggregate: AggregateResult, interaction_type: str) -> pd.DataFrame:
    """Tabular view of the aggregate payload for ``interaction_type``."""
    if interaction_type == "click":
        rows = [(point.x, point.y, point.value) for point in aggregate.points]
    elif interaction_type == "scroll":
        rows = [(item.depth, item.percentage) for item in aggregate.scroll_depth]
    elif interaction_type == "engagement":
        rows = [
            (zone.id, zone.name, zone.time_spent_seconds, zone.interactions)
            for zone in aggregate.engagement_zones
        ]
    else:
        raise ValueError(f"Unsupported interaction type: {interaction_type}")
    return pd.DataFrame(rows, columns=CSV_COLUMNS[interaction_type])


def export_csv(aggregate: AggregateResult, interaction_type: str) -> str:
    return export_frame(aggregate, interaction_type).to_csv(index=False, lineterminator="\n")


def read_export_csv(text: str) -> pd.DataFrame:
    return pd.read_csv(io.StringIO(text))


def png_data_url(surface: Surface) -> str:
    encoded = base64.b64encode(surface.to_png_bytes()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def _stamp(day: date | None) -> str:
    return (day or date.today()).strftime("%Y-%m-%d")


def image_export_name(interaction_type: str, device: str, day: date | None = None) -> str:
    return f"heatmap-{interaction_type}-{device}-{_stamp(day)}.png"


def data_export_name(interaction_type: str, device: str, day: date | None = None) -> str:
    return f"heatmap-data-{interaction_type}-{device}-{_stamp(day)}.csv"


def summary_export_name(interaction_type: str, device: str, day: date | None = None) -> str:
    return f"heatmap-summary-{interaction_type}-{device}-{_stamp(day)}.json"
