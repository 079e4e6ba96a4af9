from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable

from interaction_heatmap.config import AppConfig
from interaction_heatmap.features.aggregates import (
    AggregateResult,
    aggregate_records,
    build_scroll_depth_table,
    build_zone_table,
    format_count,
    format_rate,
    interaction_rate,
)
from interaction_heatmap.features.filters import FilterCriteria, filter_records
from interaction_heatmap.features.normalization import normalize_points
from interaction_heatmap.io.export import export_frame
from interaction_heatmap.io.read import RecordFetchError, load_records
from interaction_heatmap.io.schema import ClickPoint, InteractionRecord
from interaction_heatmap.io.write import write_summary, write_table
from interaction_heatmap.paths import build_output_paths, run_artifact_paths
from interaction_heatmap.report.insights import Narrative, narrate
from interaction_heatmap.viz.heatmaps import render_heatmap, surface_size_for_device
from interaction_heatmap.viz.surface import Surface

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeatmapRun:
    criteria: FilterCriteria
    records: list[InteractionRecord]
    aggregate: AggregateResult
    normalized_points: list[ClickPoint]
    surface: Surface
    narrative: Narrative


class AggregateCache:
    """Caller-owned memo of aggregates keyed by (criteria, records_version)."""

    def __init__(self) -> None:
        self._entries: dict[tuple[FilterCriteria, object], AggregateResult] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(
        self,
        criteria: FilterCriteria,
        records_version: object,
        compute: Callable[[], AggregateResult],
    ) -> AggregateResult:
        key = (criteria, records_version)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        result = compute()
        self._entries[key] = result
        return result

    def clear(self) -> None:
        self._entries.clear()


def run_heatmap(
    records: list[InteractionRecord],
    criteria: FilterCriteria,
    config: AppConfig,
    *,
    surface: Surface | None = None,
    cache: AggregateCache | None = None,
    records_version: object = None,
) -> HeatmapRun:
    """Filter, aggregate, normalize, render and narrate one pass over ``records``."""
    filtered = filter_records(records, criteria)
    LOGGER.info(
        "Filtered %d of %d records for %s/%s on %s",
        len(filtered),
        len(records),
        criteria.type,
        criteria.device,
        criteria.page,
    )

    def _compute() -> AggregateResult:
        return aggregate_records(
            filtered,
            tolerance=config.aggregation.merge_tolerance,
            average_mode=config.aggregation.average_mode,
        )

    if cache is not None:
        aggregate = cache.get_or_compute(criteria, records_version, _compute)
    else:
        aggregate = _compute()

    if surface is None:
        surface = Surface(*surface_size_for_device(criteria.device, config.render))
    render_heatmap(
        surface,
        aggregate,
        criteria.type,
        criteria.intensity_threshold,
        config.render,
        show_overlay=config.dashboard.show_overlay,
    )
    normalized = (
        normalize_points(aggregate.points, threshold=criteria.intensity_threshold)
        if criteria.type == "click"
        else []
    )
    return HeatmapRun(
        criteria=criteria,
        records=filtered,
        aggregate=aggregate,
        normalized_points=normalized,
        surface=surface,
        narrative=narrate(aggregate, criteria.type),
    )


def build_run_summary(run: HeatmapRun) -> dict[str, Any]:
    aggregate = run.aggregate
    rate = interaction_rate(aggregate)
    summary: dict[str, Any] = {
        "type": run.criteria.type,
        "device": run.criteria.device,
        "page": run.criteria.page,
        "date_from": run.criteria.date_from.isoformat(),
        "date_to": run.criteria.date_to.isoformat(),
        "date_range_label": (
            f"{run.criteria.date_from:%b} {run.criteria.date_from.day} - "
            f"{run.criteria.date_to:%b} {run.criteria.date_to.day}, {run.criteria.date_to:%Y}"
        ),
        "records_matched": len(run.records),
        "total_visitors": aggregate.total_visitors,
        "total_interactions": aggregate.total_interactions,
        "total_visitors_display": format_count(aggregate.total_visitors),
        "total_interactions_display": format_count(aggregate.total_interactions),
        "interaction_rate": rate,
        "interaction_rate_display": format_rate(rate),
        "intensity_threshold": run.criteria.intensity_threshold,
        "points_rendered": len(run.normalized_points),
        "narrative": run.narrative.to_dict(),
    }
    if run.criteria.type == "scroll":
        summary["scroll_depth"] = build_scroll_depth_table(aggregate).to_dict(orient="records")
    if run.criteria.type == "engagement":
        summary["engagement_zones"] = build_zone_table(aggregate).to_dict(orient="records")
    return summary


def write_run_outputs(
    run: HeatmapRun,
    out_dir: Path,
    config: AppConfig,
    *,
    day: date | None = None,
) -> dict[str, Path]:
    criteria = run.criteria
    artifacts = run_artifact_paths(
        build_output_paths(out_dir),
        criteria.type,
        criteria.device,
        day=day,
        figures_format=config.outputs.figures_format,
        tables_format=config.outputs.tables_format,
    )
    outputs = {
        "figure": run.surface.save_png(artifacts.figure),
        "table": write_table(
            export_frame(run.aggregate, criteria.type),
            artifacts.table,
            fmt=config.outputs.tables_format,
        ),
        "summary": write_summary(build_run_summary(run), artifacts.summary),
    }
    for name, path in outputs.items():
        LOGGER.info("Wrote %s: %s", name, path)
    return outputs


@dataclass
class HeatmapPanel:
    """Dashboard-panel state around one record source.

    Load failures are kept in ``error`` instead of propagating; ``retry`` re-runs the load.
    """

    config: AppConfig
    records_path: Path | None = None
    loader: Callable[[AppConfig, Path | None], list[InteractionRecord]] = load_records
    records: list[InteractionRecord] = field(default_factory=list)
    error: str | None = None
    version: int = 0
    cache: AggregateCache = field(default_factory=AggregateCache)

    def load(self) -> bool:
        self.error = None
        try:
            self.records = list(self.loader(self.config, self.records_path))
        except (RecordFetchError, ValueError, OSError) as exc:
            LOGGER.exception("Error fetching heatmap data")
            self.records = []
            self.error = str(exc) or "An unknown error occurred"
        self.version += 1
        self.cache.clear()
        return self.error is None

    def retry(self) -> bool:
        return self.load()

    def run(self, criteria: FilterCriteria, surface: Surface | None = None) -> HeatmapRun:
        if self.error is not None:
            raise RuntimeError(f"heatmap panel is in an error state: {self.error}")
        return run_heatmap(
            self.records,
            criteria,
            self.config,
            surface=surface,
            cache=self.cache,
            records_version=self.version,
        )
