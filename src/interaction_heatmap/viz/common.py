from __future__ import annotations

import io
from pathlib import Path

import matplotlib.pyplot as plt

RGB = tuple[int, int, int]

LOW_INTENSITY_RGB: RGB = (0, 0, 255)
MEDIUM_INTENSITY_RGB: RGB = (255, 255, 0)
HIGH_INTENSITY_RGB: RGB = (255, 0, 0)


def intensity_color(value: float) -> tuple[RGB, float]:
    """Banded colour for a 0-100 intensity, with alpha proportional to the value."""
    alpha = min(max(float(value) / 100.0, 0.0), 1.0)
    if value < 33:
        return LOW_INTENSITY_RGB, alpha
    if value < 66:
        return MEDIUM_INTENSITY_RGB, alpha
    return HIGH_INTENSITY_RGB, alpha


def save_figure(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(path, transparent=True)
    plt.close()
    return path


def figure_png_bytes() -> bytes:
    buffer = io.BytesIO()
    plt.savefig(buffer, format="png", transparent=True)
    plt.close()
    return buffer.getvalue()
