from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from interaction_heatmap.features.aggregates import AggregateResult, zone_band

LIMITED_DATA_MESSAGE = {
    "click": "Users are clicking across the page, but with limited data to analyze patterns.",
    "scroll": "Limited scroll data is available for this period; no depth pattern can be drawn.",
    "engagement": "Limited engagement data is available for this period; no zone stands out.",
}
LIMITED_DATA_TIP = (
    "Widen the date range or check the device and page filters to collect more data."
)

CLICK_HOTSPOT_PEAK = 70.0
SCROLL_STRONG_MIDPOINT = 70.0
SCROLL_VISIBLE_BOTTOM = 30.0
SCROLL_TIP_MIDPOINT = 60.0
CTA_GOOD_INTERACTIONS = 50.0


@dataclass(frozen=True)
class Narrative:
    primary: str
    secondary: list[str] = field(default_factory=list)
    limited_data: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary,
            "secondary": list(self.secondary),
            "limited_data": self.limited_data,
        }


def _limited(interaction_type: str) -> Narrative:
    return Narrative(
        primary=LIMITED_DATA_MESSAGE[interaction_type],
        secondary=[LIMITED_DATA_TIP],
        limited_data=True,
    )


def _narrate_clicks(aggregate: AggregateResult) -> Narrative:
    peak = max(point.value for point in aggregate.points)
    if peak > CLICK_HOTSPOT_PEAK:
        where = (
            "top-right corner of the page, suggesting strong interest in your "
            "call-to-action buttons."
        )
    else:
        where = "center of the page, indicating engagement with your main content."
    return Narrative(
        primary=f"Users are most frequently clicking in the {where}",
        secondary=[
            "Consider A/B testing different button placements to optimize conversion rates."
        ],
    )


def _percentage_at(aggregate: AggregateResult, depth: int) -> float:
    for item in aggregate.scroll_depth:
        if item.depth == depth:
            return item.percentage
    return 0.0


def _narrate_scroll(aggregate: AggregateResult) -> Narrative:
    midpoint = _percentage_at(aggregate, 50)
    bottom = _percentage_at(aggregate, 90)
    if midpoint > SCROLL_STRONG_MIDPOINT:
        primary = (
            "Strong scroll engagement with over 70% of users reaching the middle of your page."
        )
    else:
        primary = (
            "Limited scroll depth with less than 70% of users reaching the middle of your page."
        )
    if bottom > SCROLL_VISIBLE_BOTTOM:
        primary += " Impressive bottom-of-page visibility with over 30% reaching the end."
    else:
        primary += (
            " Consider optimizing content as few users are reaching the bottom of the page."
        )
    if midpoint < SCROLL_TIP_MIDPOINT:
        tip = "Try adding engaging elements above the fold to encourage deeper scrolling."
    else:
        tip = "Your content structure is working well to maintain user interest."
    return Narrative(primary=primary, secondary=[tip])


def _narrate_engagement(aggregate: AggregateResult) -> Narrative:
    zones = aggregate.engagement_zones
    top_zone = zones[0]
    for zone in zones[1:]:
        if zone.time_spent_seconds > top_zone.time_spent_seconds:
            top_zone = zone
    primary = (
        f"Users spend the most time ({top_zone.time_spent_seconds:.1f} seconds on average) "
        f"in the {top_zone.name} section."
    )
    cta = next((zone for zone in zones if zone.id == "cta"), None)
    if cta is not None and cta.interactions > CTA_GOOD_INTERACTIONS:
        primary += " Your call-to-action area is receiving good engagement."
    else:
        primary += " Your call-to-action area could use optimization to increase engagement."

    secondary = [
        "Focus on improving sections with low engagement to create a more balanced "
        "user experience."
    ]
    for zone in zones:
        if zone_band(zone.time_spent_seconds) == "needs_improvement":
            secondary.append(
                f"{zone.name} needs improvement: {zone.time_spent_seconds:.1f}s average time."
            )
    return Narrative(primary=primary, secondary=secondary)


def narrate(aggregate: AggregateResult, interaction_type: str) -> Narrative:
    """Template a short summary of ``aggregate`` from fixed threshold bands."""
    if interaction_type == "click":
        return _narrate_clicks(aggregate) if aggregate.points else _limited("click")
    if interaction_type == "scroll":
        return _narrate_scroll(aggregate) if aggregate.scroll_depth else _limited("scroll")
    if interaction_type == "engagement":
        if not aggregate.engagement_zones:
            return _limited("engagement")
        return _narrate_engagement(aggregate)
    raise ValueError(f"Unsupported interaction type: {interaction_type}")
