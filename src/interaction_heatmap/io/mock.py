from __future__ import annotations

from datetime import date, timedelta

import numpy as np

from interaction_heatmap.io.schema import (
    DEPTH_BUCKETS,
    ClickPoint,
    EngagementZone,
    InteractionRecord,
    ScrollDepth,
)

DEVICES = ("desktop", "tablet", "mobile")
TYPES = ("click", "scroll", "engagement")
POINTS_PER_RECORD = 200

# (id, selector, name, time_spent_base, time_spent_span, interactions_base, interactions_span)
MOCK_ZONES = (
    ("header", "header", "Header", 5, 30, 10, 100),
    ("hero", ".hero-section", "Hero Section", 20, 60, 50, 200),
    ("features", ".features-section", "Features", 15, 45, 30, 150),
    ("pricing", ".pricing-section", "Pricing", 10, 50, 20, 120),
    ("testimonials", ".testimonials-section", "Testimonials", 5, 40, 10, 80),
    ("cta", ".cta-section", "Call to Action", 5, 25, 5, 70),
    ("footer", "footer", "Footer", 2, 15, 5, 50),
)


def _mock_points(rng: np.random.Generator) -> list[ClickPoint]:
    coords = rng.random((POINTS_PER_RECORD, 3)) * 100.0
    return [ClickPoint(x=float(x), y=float(y), value=float(v)) for x, y, v in coords]


def _mock_scroll(rng: np.random.Generator) -> list[ScrollDepth]:
    cumulative = 100.0
    rows: list[ScrollDepth] = []
    for depth in DEPTH_BUCKETS:
        cumulative *= 0.85 + rng.random() * 0.15
        rows.append(ScrollDepth(depth=depth, percentage=cumulative))
    return rows


def _mock_zones(rng: np.random.Generator) -> list[EngagementZone]:
    zones: list[EngagementZone] = []
    for zone_id, selector, name, t_base, t_span, i_base, i_span in MOCK_ZONES:
        zones.append(
            EngagementZone(
                id=zone_id,
                selector=selector,
                name=name,
                time_spent_seconds=float(rng.integers(t_base, t_base + t_span)),
                interactions=float(rng.integers(i_base, i_base + i_span)),
            )
        )
    return zones


def generate_mock_records(
    days: int = 30,
    seed: int | None = 42,
    today: date | None = None,
    page: str = "/example-page",
) -> list[InteractionRecord]:
    """Demo dataset: one record per day, device and interaction type."""
    rng = np.random.default_rng(seed)
    anchor = today or date.today()
    records: list[InteractionRecord] = []
    for offset in range(days):
        day = anchor - timedelta(days=offset)
        for device in DEVICES:
            for interaction_type in TYPES:
                payload: dict[str, object] = {}
                if interaction_type == "click":
                    payload["points"] = _mock_points(rng)
                elif interaction_type == "scroll":
                    payload["scroll_depth"] = _mock_scroll(rng)
                else:
                    payload["engagement_zones"] = _mock_zones(rng)
                records.append(
                    InteractionRecord(
                        id=f"{day.isoformat()}-{device}-{interaction_type}",
                        date=day,
                        type=interaction_type,
                        device=device,
                        page=page,
                        total_visitors=int(rng.integers(100, 1100)),
                        total_interactions=int(rng.integers(500, 5500)),
                        **payload,
                    )
                )
    return records
