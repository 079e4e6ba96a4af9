from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Literal

import pandas as pd

from interaction_heatmap.io.schema import (
    ClickPoint,
    EngagementZone,
    InteractionRecord,
    ScrollDepth,
)

AverageMode = Literal["running_pair", "mean"]

ENGAGEMENT_SCORE_SECONDS = 60.0


@dataclass(frozen=True)
class AggregateResult:
    total_visitors: int = 0
    total_interactions: int = 0
    points: list[ClickPoint] = field(default_factory=list)
    scroll_depth: list[ScrollDepth] = field(default_factory=list)
    engagement_zones: list[EngagementZone] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.points or self.scroll_depth or self.engagement_zones)


class _RunningValue:
    """Order-dependent two-term average, or a plain mean when mode is 'mean'."""

    def __init__(self, value: float, mode: AverageMode) -> None:
        self.value = float(value)
        self._mode = mode
        self._sum = float(value)
        self._count = 1

    def merge(self, incoming: float) -> None:
        if self._mode == "mean":
            self._sum += float(incoming)
            self._count += 1
            self.value = self._sum / self._count
        else:
            self.value = (self.value + float(incoming)) / 2.0


class _PointGrid:
    """Accumulated click points bucketed on a grid of cell size ``tolerance``.

    A match is any accumulated point closer than ``tolerance`` on both axes; when several
    qualify, the earliest accumulated one wins, exactly as a linear scan would.
    """

    def __init__(self, tolerance: float) -> None:
        self.tolerance = float(tolerance)
        self.x: list[float] = []
        self.y: list[float] = []
        self.value: list[float] = []
        self._cells: dict[tuple[int, int], list[int]] = {}

    def _cell(self, x: float, y: float) -> tuple[int, int]:
        return math.floor(x / self.tolerance), math.floor(y / self.tolerance)

    def _find(self, x: float, y: float) -> int | None:
        cx, cy = self._cell(x, y)
        best: int | None = None
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for index in self._cells.get((cx + dx, cy + dy), ()):
                    if best is not None and index >= best:
                        continue
                    if (
                        abs(self.x[index] - x) < self.tolerance
                        and abs(self.y[index] - y) < self.tolerance
                    ):
                        best = index
        return best

    def add(self, point: ClickPoint) -> None:
        match = self._find(point.x, point.y)
        if match is not None:
            self.value[match] += point.value
            return
        self._cells.setdefault(self._cell(point.x, point.y), []).append(len(self.x))
        self.x.append(point.x)
        self.y.append(point.y)
        self.value.append(point.value)

    def points(self) -> list[ClickPoint]:
        return [
            ClickPoint(x=x, y=y, value=value) for x, y, value in zip(self.x, self.y, self.value)
        ]


def merge_click_points(
    batches: Iterable[Iterable[ClickPoint]], tolerance: float = 1.0
) -> list[ClickPoint]:
    grid = _PointGrid(tolerance)
    for batch in batches:
        for point in batch:
            grid.add(point)
    return grid.points()


def merge_scroll_depths(
    batches: Iterable[Iterable[ScrollDepth]], mode: AverageMode = "running_pair"
) -> list[ScrollDepth]:
    by_depth: dict[int, _RunningValue] = {}
    for batch in batches:
        for item in batch:
            running = by_depth.get(item.depth)
            if running is None:
                by_depth[item.depth] = _RunningValue(item.percentage, mode)
            else:
                running.merge(item.percentage)
    return [
        ScrollDepth(depth=depth, percentage=by_depth[depth].value) for depth in sorted(by_depth)
    ]


def merge_engagement_zones(
    batches: Iterable[Iterable[EngagementZone]], mode: AverageMode = "running_pair"
) -> list[EngagementZone]:
    first_seen: dict[str, EngagementZone] = {}
    time_spent: dict[str, _RunningValue] = {}
    interactions: dict[str, _RunningValue] = {}
    for batch in batches:
        for zone in batch:
            if zone.id not in first_seen:
                first_seen[zone.id] = zone
                time_spent[zone.id] = _RunningValue(zone.time_spent_seconds, mode)
                interactions[zone.id] = _RunningValue(zone.interactions, mode)
                continue
            time_spent[zone.id].merge(zone.time_spent_seconds)
            interactions[zone.id].merge(zone.interactions)
    return [
        zone.model_copy(
            update={
                "time_spent_seconds": time_spent[zone_id].value,
                "interactions": interactions[zone_id].value,
            }
        )
        for zone_id, zone in first_seen.items()
    ]


def aggregate_records(
    records: Iterable[InteractionRecord],
    *,
    tolerance: float = 1.0,
    average_mode: AverageMode = "running_pair",
) -> AggregateResult:
    """Merge records into one summary; totals are summed across every input record."""
    records = list(records)
    return AggregateResult(
        total_visitors=sum(record.total_visitors for record in records),
        total_interactions=sum(record.total_interactions for record in records),
        points=merge_click_points(
            (record.points for record in records if record.points is not None),
            tolerance=tolerance,
        ),
        scroll_depth=merge_scroll_depths(
            (record.scroll_depth for record in records if record.scroll_depth is not None),
            mode=average_mode,
        ),
        engagement_zones=merge_engagement_zones(
            (
                record.engagement_zones
                for record in records
                if record.engagement_zones is not None
            ),
            mode=average_mode,
        ),
    )


def interaction_rate(aggregate: AggregateResult) -> float:
    if aggregate.total_visitors <= 0:
        return 0.0
    return aggregate.total_interactions / aggregate.total_visitors * 100.0


def format_rate(rate: float) -> str:
    return f"{rate:.1f}%" if rate else "0%"


def format_count(value: float) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def scroll_band(percentage: float) -> str:
    if percentage > 66:
        return "high"
    if percentage > 33:
        return "medium"
    return "low"


def zone_band(time_spent_seconds: float) -> str:
    if time_spent_seconds > 30:
        return "strong"
    if time_spent_seconds > 15:
        return "moderate"
    return "needs_improvement"


def build_scroll_depth_table(aggregate: AggregateResult) -> pd.DataFrame:
    frame = pd.DataFrame(
        {
            "depth": [item.depth for item in aggregate.scroll_depth],
            "percentage": [item.percentage for item in aggregate.scroll_depth],
        },
        columns=["depth", "percentage"],
    )
    frame["band"] = [scroll_band(value) for value in frame["percentage"]]
    return frame


def build_zone_table(aggregate: AggregateResult) -> pd.DataFrame:
    columns = ["id", "name", "time_spent_seconds", "interactions", "engagement_score", "band"]
    if not aggregate.engagement_zones:
        return pd.DataFrame(columns=columns)
    frame = pd.DataFrame(
        {
            "id": [zone.id for zone in aggregate.engagement_zones],
            "name": [zone.name for zone in aggregate.engagement_zones],
            "time_spent_seconds": [zone.time_spent_seconds for zone in aggregate.engagement_zones],
            "interactions": [zone.interactions for zone in aggregate.engagement_zones],
        }
    )
    frame["interactions"] = frame["interactions"].round().astype(int)
    frame["engagement_score"] = (
        frame["time_spent_seconds"] / ENGAGEMENT_SCORE_SECONDS * 100.0
    ).round()
    frame["band"] = frame["time_spent_seconds"].map(zone_band)
    return frame.sort_values("time_spent_seconds", ascending=False, kind="stable").reset_index(
        drop=True
    )[columns]
