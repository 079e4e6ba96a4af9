from __future__ import annotations

import logging
import math

from interaction_heatmap.config import RenderConfig, ZoneConfig
from interaction_heatmap.features.aggregates import AggregateResult
from interaction_heatmap.features.normalization import normalize_points
from interaction_heatmap.io.schema import EngagementZone, ScrollDepth
from interaction_heatmap.viz.common import intensity_color
from interaction_heatmap.viz.surface import Surface, SurfaceLabel

LOGGER = logging.getLogger(__name__)

SCROLL_FADE = ((0, 0, 0), 0.1)
ZONE_FILL_ALPHA = 0.1
ZONE_BORDER_ALPHA = 0.5


def surface_size_for_device(device: str, config: RenderConfig) -> tuple[int, int]:
    aspect_width, aspect_height = config.aspect_ratios[device]  # type: ignore[index]
    height = int(config.surface_height)
    return max(1, round(height * aspect_width / aspect_height)), height


def click_radius(value: float, min_radius: float = 20.0) -> float:
    return max(float(min_radius), value / 10.0 + 10.0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def render_clicks(
    surface: Surface,
    aggregate: AggregateResult,
    threshold: float,
    min_radius: float = 20.0,
) -> int:
    points = normalize_points(aggregate.points, threshold=threshold)
    for point in points:
        color, alpha = intensity_color(point.value)
        surface.fill_radial_gradient(
            cx=point.x / 100.0 * surface.width,
            cy=point.y / 100.0 * surface.height,
            radius=click_radius(point.value, min_radius),
            color=color,
            alpha=alpha,
        )
    return len(points)


def render_scroll(surface: Surface, scroll_depth: list[ScrollDepth]) -> int:
    # The 0% bucket has no band.
    bands = [item for item in scroll_depth if item.depth != 0]
    if not bands:
        return 0
    segment_height = surface.height / len(bands)
    for index, item in enumerate(bands, start=1):
        bottom = index * segment_height
        surface.fill_linear_gradient_rect(
            x=0.0,
            y=bottom - segment_height,
            width=surface.width * (item.percentage / 100.0),
            height=segment_height,
            start=intensity_color(item.percentage),
            end=SCROLL_FADE,
            gradient_width=surface.width,
        )
        surface.add_label(
            SurfaceLabel(x=10.0, y=bottom - 5.0, text=f"{_round_half_up(item.percentage)}%")
        )
    return len(bands)


def zone_opacity(time_spent_seconds: float, expected_max_seconds: float) -> float:
    return min(max(time_spent_seconds / expected_max_seconds, 0.0), 1.0)


def _zone_bounds(zone: ZoneConfig, surface_height: int) -> tuple[float, float]:
    if zone.anchor == "bottom":
        bottom = surface_height - zone.offset
        return bottom - zone.height, bottom
    return zone.offset, zone.offset + zone.height


def render_engagement(
    surface: Surface,
    engagement_zones: list[EngagementZone],
    zones: list[ZoneConfig],
) -> int:
    by_id = {zone.id: zone for zone in engagement_zones}
    drawn = 0
    for layout in zones:
        measured = by_id.get(layout.id)
        if measured is None:
            continue
        opacity = zone_opacity(measured.time_spent_seconds, layout.expected_max_seconds)
        if opacity <= 0.0:
            continue
        top, bottom = _zone_bounds(layout, surface.height)
        top, bottom = max(0.0, top), min(float(surface.height), bottom)
        if bottom <= top:
            continue
        surface.fill_rect(
            0.0, top, surface.width, bottom - top, layout.color, ZONE_FILL_ALPHA * opacity
        )
        surface.stroke_rect(
            0.0, top, surface.width, bottom - top, layout.color, ZONE_BORDER_ALPHA * opacity
        )
        surface.add_label(
            SurfaceLabel(
                x=surface.width / 2.0,
                y=(top + bottom) / 2.0,
                text=f"{measured.name}: {measured.time_spent_seconds:.1f}s avg. time",
                color=layout.color,
                alpha=opacity,
                align="center",
            )
        )
        drawn += 1
    return drawn


def render_heatmap(
    surface: Surface,
    aggregate: AggregateResult,
    interaction_type: str,
    threshold: float,
    config: RenderConfig,
    *,
    show_overlay: bool = True,
) -> None:
    """Clear ``surface`` and draw ``aggregate`` with the encoding for ``interaction_type``."""
    surface.clear()
    if not show_overlay:
        return
    if interaction_type == "click":
        drawn = render_clicks(surface, aggregate, threshold, min_radius=config.min_click_radius)
    elif interaction_type == "scroll":
        drawn = render_scroll(surface, aggregate.scroll_depth)
    elif interaction_type == "engagement":
        drawn = render_engagement(surface, aggregate.engagement_zones, config.zones)
    else:
        raise ValueError(f"Unsupported interaction type: {interaction_type}")
    LOGGER.debug(
        "Rendered %d %s marks on %dx%d surface",
        drawn,
        interaction_type,
        surface.width,
        surface.height,
    )
