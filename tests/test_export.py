from __future__ import annotations

from datetime import date

import numpy as np
import pytest

from interaction_heatmap.features.aggregates import AggregateResult
from interaction_heatmap.io.export import (
    data_export_name,
    export_csv,
    export_frame,
    image_export_name,
    png_data_url,
    read_export_csv,
)
from interaction_heatmap.io.schema import ClickPoint, EngagementZone, ScrollDepth
from interaction_heatmap.viz.surface import Surface


def test_export_csv_uses_dashboard_column_names() -> None:
    aggregate = AggregateResult(
        points=[ClickPoint(x=10, y=20, value=3), ClickPoint(x=30, y=40, value=5)],
        scroll_depth=[ScrollDepth(depth=0, percentage=100), ScrollDepth(depth=10, percentage=80)],
        engagement_zones=[
            EngagementZone(id="hero", name="Hero Section", time_spent_seconds=12, interactions=4)
        ],
    )

    click_text = export_csv(aggregate, "click")
    scroll_text = export_csv(aggregate, "scroll")
    engagement_text = export_csv(aggregate, "engagement")

    assert click_text.splitlines()[0] == "x,y,value"
    assert len(click_text.splitlines()) == 3
    assert scroll_text.splitlines()[0] == "depth,percentage"
    assert engagement_text.splitlines()[0] == "id,name,timeSpent,interactions"

    parsed = read_export_csv(engagement_text)
    assert parsed.loc[0, "name"] == "Hero Section"
    assert parsed.loc[0, "timeSpent"] == pytest.approx(12)


def test_click_csv_export_reparses_to_the_same_numbers() -> None:
    rng = np.random.default_rng(17)
    coords = rng.random((50, 3)) * [100.0, 100.0, 1000.0]
    aggregate = AggregateResult(
        points=[ClickPoint(x=x, y=y, value=value) for x, y, value in coords]
    )

    parsed = read_export_csv(export_csv(aggregate, "click"))

    assert list(parsed.columns) == ["x", "y", "value"]
    assert parsed["x"].tolist() == pytest.approx(coords[:, 0].tolist(), rel=1e-12)
    assert parsed["y"].tolist() == pytest.approx(coords[:, 1].tolist(), rel=1e-12)
    assert parsed["value"].tolist() == pytest.approx(coords[:, 2].tolist(), rel=1e-12)


def test_export_frame_for_empty_aggregate_has_only_headers() -> None:
    frame = export_frame(AggregateResult(), "scroll")

    assert frame.empty
    assert list(frame.columns) == ["depth", "percentage"]

    with pytest.raises(ValueError, match="Unsupported interaction type"):
        export_frame(AggregateResult(), "hover")


def test_export_names_carry_type_device_and_date() -> None:
    day = date(2026, 2, 3)

    assert image_export_name("click", "desktop", day) == "heatmap-click-desktop-2026-02-03.png"
    assert data_export_name("scroll", "mobile", day) == "heatmap-data-scroll-mobile-2026-02-03.csv"


def test_png_data_url_encodes_surface_image() -> None:
    surface = Surface(20, 10)
    surface.fill_rect(0, 0, 20, 10, (255, 0, 0), 0.5)

    url = png_data_url(surface)

    assert url.startswith("data:image/png;base64,iVBORw0KGgo")
