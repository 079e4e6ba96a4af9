from __future__ import annotations

import datetime as dt
from typing import Any, Iterable

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from interaction_heatmap.config import DeviceType, InteractionType

DEPTH_BUCKETS = tuple(range(0, 101, 10))

PAYLOAD_FIELD_BY_TYPE: dict[str, str] = {
    "click": "points",
    "scroll": "scroll_depth",
    "engagement": "engagement_zones",
}


class ClickPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0.0, le=100.0)
    y: float = Field(ge=0.0, le=100.0)
    value: float = Field(ge=0.0)


class ScrollDepth(BaseModel):
    model_config = ConfigDict(frozen=True)

    depth: int
    percentage: float = Field(ge=0.0, le=100.0)

    @model_validator(mode="after")
    def _depth_is_bucket(self) -> "ScrollDepth":
        if self.depth not in DEPTH_BUCKETS:
            raise ValueError(f"scroll depth must be one of 0,10,...,100; got {self.depth}")
        return self


class EngagementZone(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    selector: str = ""
    time_spent_seconds: float = Field(
        ge=0.0,
        validation_alias=AliasChoices("timeSpentSeconds", "timeSpent", "time_spent_seconds"),
        serialization_alias="timeSpentSeconds",
    )
    interactions: float = Field(ge=0.0)


class InteractionRecord(BaseModel):
    """One aggregate observation for a (date, type, device, page) combination.

    Exactly one payload field is populated and it must match ``type``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    date: dt.date
    type: InteractionType
    device: DeviceType
    page: str
    total_visitors: int = Field(
        ge=0,
        validation_alias=AliasChoices("totalVisitors", "total_visitors"),
        serialization_alias="totalVisitors",
    )
    total_interactions: int = Field(
        ge=0,
        validation_alias=AliasChoices("totalInteractions", "total_interactions"),
        serialization_alias="totalInteractions",
    )
    points: list[ClickPoint] | None = None
    scroll_depth: list[ScrollDepth] | None = Field(
        default=None,
        validation_alias=AliasChoices("scrollDepth", "scrollData", "scroll_depth"),
        serialization_alias="scrollDepth",
    )
    engagement_zones: list[EngagementZone] | None = Field(
        default=None,
        validation_alias=AliasChoices("engagementZones", "engagement_zones"),
        serialization_alias="engagementZones",
    )

    @model_validator(mode="after")
    def _single_matching_payload(self) -> "InteractionRecord":
        populated = [
            field_name
            for field_name in PAYLOAD_FIELD_BY_TYPE.values()
            if getattr(self, field_name) is not None
        ]
        expected = PAYLOAD_FIELD_BY_TYPE[self.type]
        if populated != [expected]:
            raise ValueError(
                f"{self.type} record must carry only '{expected}'; found: {populated or 'none'}"
            )

        if self.scroll_depth is not None:
            depths = [item.depth for item in self.scroll_depth]
            if any(later <= earlier for earlier, later in zip(depths, depths[1:])):
                raise ValueError("scroll depths must be strictly increasing")
        if self.engagement_zones is not None:
            zone_ids = [zone.id for zone in self.engagement_zones]
            if len(zone_ids) != len(set(zone_ids)):
                raise ValueError("engagement zone ids must be unique within a record")
        return self

    @property
    def payload(self) -> list[Any]:
        return list(getattr(self, PAYLOAD_FIELD_BY_TYPE[self.type]))


def parse_records(payload: Any) -> list[InteractionRecord]:
    """Validate a decoded JSON array into interaction records."""
    if not isinstance(payload, list):
        raise ValueError("interaction records payload must be a JSON array")
    records: list[InteractionRecord] = []
    for index, item in enumerate(payload):
        try:
            records.append(InteractionRecord.model_validate(item))
        except ValidationError as exc:
            raise ValueError(f"invalid interaction record at index {index}: {exc}") from exc
    return records


def records_to_payload(records: Iterable[InteractionRecord]) -> list[dict[str, Any]]:
    return [
        record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records
    ]
