from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from interaction_heatmap.io.schema import InteractionRecord, parse_records, records_to_payload


def _click_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "2026-02-01-desktop-click",
        "date": "2026-02-01",
        "type": "click",
        "device": "desktop",
        "page": "/example-page",
        "totalVisitors": 120,
        "totalInteractions": 640,
        "points": [{"x": 10, "y": 20, "value": 5}],
    }
    payload.update(overrides)
    return payload


def test_parse_records_accepts_dashboard_json_shape() -> None:
    records = parse_records(
        [
            _click_payload(),
            {
                "date": "2026-02-01",
                "type": "scroll",
                "device": "mobile",
                "page": "/example-page",
                "totalVisitors": 10,
                "totalInteractions": 20,
                "scrollData": [{"depth": 0, "percentage": 100}, {"depth": 10, "percentage": 90}],
            },
            {
                "date": "2026-02-01",
                "type": "engagement",
                "device": "tablet",
                "page": "/example-page",
                "totalVisitors": 10,
                "totalInteractions": 20,
                "engagementZones": [
                    {
                        "id": "cta",
                        "name": "Call to Action",
                        "selector": ".cta",
                        "timeSpent": 12,
                        "interactions": 30,
                    }
                ],
            },
        ]
    )

    click, scroll, engagement = records
    assert click.date == date(2026, 2, 1)
    assert click.total_visitors == 120
    assert click.payload[0].value == 5
    assert [item.depth for item in scroll.scroll_depth or []] == [0, 10]
    assert engagement.engagement_zones is not None
    assert engagement.engagement_zones[0].time_spent_seconds == 12


def test_records_to_payload_uses_camel_case_keys() -> None:
    record = parse_records([_click_payload()])[0]
    payload = records_to_payload([record])[0]

    assert payload["totalVisitors"] == 120
    assert payload["totalInteractions"] == 640
    assert "scrollDepth" not in payload
    assert parse_records([payload])[0] == record


def test_record_payload_must_match_type() -> None:
    with pytest.raises(ValidationError, match="points"):
        InteractionRecord.model_validate(
            _click_payload(points=None, scrollDepth=[{"depth": 0, "percentage": 100}])
        )
    with pytest.raises(ValidationError, match="only"):
        InteractionRecord.model_validate(
            _click_payload(scrollDepth=[{"depth": 0, "percentage": 100}])
        )


def test_record_rejects_out_of_range_values() -> None:
    with pytest.raises(ValidationError):
        InteractionRecord.model_validate(_click_payload(points=[{"x": 101, "y": 0, "value": 1}]))
    with pytest.raises(ValidationError):
        InteractionRecord.model_validate(_click_payload(totalVisitors=-1))
    with pytest.raises(ValidationError, match="0,10"):
        InteractionRecord.model_validate(
            _click_payload(
                type="scroll", points=None, scrollDepth=[{"depth": 15, "percentage": 50}]
            )
        )


def test_record_rejects_unordered_depths_and_duplicate_zone_ids() -> None:
    with pytest.raises(ValidationError, match="increasing"):
        InteractionRecord.model_validate(
            _click_payload(
                type="scroll",
                points=None,
                scrollDepth=[{"depth": 20, "percentage": 50}, {"depth": 10, "percentage": 60}],
            )
        )
    zone = {"id": "hero", "name": "Hero", "timeSpent": 1, "interactions": 1}
    with pytest.raises(ValidationError, match="unique"):
        InteractionRecord.model_validate(
            _click_payload(type="engagement", points=None, engagementZones=[zone, zone])
        )


def test_parse_records_reports_offending_index() -> None:
    with pytest.raises(ValueError, match="index 1"):
        parse_records([_click_payload(), _click_payload(device="watch")])
    with pytest.raises(ValueError, match="JSON array"):
        parse_records({"records": []})
