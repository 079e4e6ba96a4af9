from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, get_args

from interaction_heatmap.config import DashboardConfig, DeviceType, FiltersConfig, InteractionType
from interaction_heatmap.io.schema import InteractionRecord


@dataclass(frozen=True)
class FilterCriteria:
    date_from: date
    date_to: date
    type: str
    device: str
    page: str
    intensity_threshold: float = 0.0
    inclusive_dates: bool = False

    def __post_init__(self) -> None:
        if self.type not in get_args(InteractionType):
            raise ValueError(f"Unsupported interaction type: {self.type}")
        if self.device not in get_args(DeviceType):
            raise ValueError(f"Unsupported device type: {self.device}")
        if not 0.0 <= float(self.intensity_threshold) <= 100.0:
            raise ValueError("intensity_threshold must be within [0, 100]")
        if self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")

    def matches(self, record: InteractionRecord) -> bool:
        if self.inclusive_dates:
            date_matches = self.date_from <= record.date <= self.date_to
        else:
            date_matches = self.date_from < record.date < self.date_to
        return (
            date_matches
            and record.type == self.type
            and record.device == self.device
            and record.page == self.page
        )


def default_date_range(days: int, today: date | None = None) -> tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=int(days)), end


def criteria_from_config(
    dashboard: DashboardConfig,
    filters: FiltersConfig,
    *,
    today: date | None = None,
    **overrides: object,
) -> FilterCriteria:
    """Build criteria from dashboard defaults; keyword overrides that are None are ignored."""
    date_from, date_to = default_date_range(dashboard.default_date_range_days, today=today)
    values: dict[str, object] = {
        "date_from": date_from,
        "date_to": date_to,
        "type": dashboard.default_type,
        "device": dashboard.default_device,
        "page": dashboard.page_url,
        "intensity_threshold": filters.intensity_threshold,
        "inclusive_dates": filters.inclusive_dates,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return FilterCriteria(**values)  # type: ignore[arg-type]


def filter_records(
    records: Iterable[InteractionRecord], criteria: FilterCriteria
) -> list[InteractionRecord]:
    """Return the records matching every criterion, in input order."""
    return [record for record in records if criteria.matches(record)]
