from __future__ import annotations

from typing import Sequence

import numpy as np

from interaction_heatmap.io.schema import ClickPoint

INTENSITY_MAX = 100.0


def normalize_points(points: Sequence[ClickPoint], threshold: float = 0.0) -> list[ClickPoint]:
    """Rescale click values onto 0-100 against the current maximum and drop weak points.

    Points whose rescaled value is strictly below ``threshold`` are removed; input order
    is preserved for the rest.
    """
    if not points:
        return []
    values = np.asarray([point.value for point in points], dtype=float)
    max_value = float(values.max())
    if max_value <= 0.0:
        # Every point is zero: nothing carries intensity.
        scaled = np.zeros_like(values)
    else:
        scaled = np.clip(values / max_value * INTENSITY_MAX, 0.0, INTENSITY_MAX)
    keep = scaled >= float(threshold)
    return [
        ClickPoint(x=point.x, y=point.y, value=float(value))
        for point, value, kept in zip(points, scaled, keep)
        if kept
    ]
