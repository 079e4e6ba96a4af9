from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from interaction_heatmap.viz.common import RGB, figure_png_bytes, save_figure

DPI = 100
LABEL_FONT_PX = 12


@dataclass(frozen=True)
class SurfaceLabel:
    x: float
    y: float
    text: str
    color: RGB = (255, 255, 255)
    alpha: float = 0.9
    align: str = "left"


class Surface:
    """RGBA pixel buffer with canvas-style source-over compositing.

    Pixels are stored premultiplied as floats in [0, 1]; text labels are kept alongside
    and only rasterized when the surface is exported.
    """

    def __init__(self, width: int, height: int) -> None:
        self.resize(width, height)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def resize(self, width: int, height: int) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"surface dimensions must be positive; got {width}x{height}")
        self.pixels = np.zeros((int(height), int(width), 4), dtype=float)
        self.labels: list[SurfaceLabel] = []

    def clear(self) -> None:
        self.pixels.fill(0.0)
        self.labels = []

    def _window(self, x0: float, y0: float, x1: float, y1: float) -> tuple[slice, slice] | None:
        left = max(0, int(np.floor(x0)))
        top = max(0, int(np.floor(y0)))
        right = min(self.width, int(np.ceil(x1)))
        bottom = min(self.height, int(np.ceil(y1)))
        if left >= right or top >= bottom:
            return None
        return slice(top, bottom), slice(left, right)

    def composite(
        self,
        rows: slice,
        cols: slice,
        premultiplied_rgb: np.ndarray,
        alpha: np.ndarray,
    ) -> None:
        target = self.pixels[rows, cols]
        alpha = np.clip(np.asarray(alpha, dtype=float), 0.0, 1.0)
        remaining = (1.0 - alpha)[..., None]
        target[..., :3] = premultiplied_rgb + target[..., :3] * remaining
        target[..., 3] = alpha + target[..., 3] * remaining[..., 0]

    def fill_radial_gradient(
        self, cx: float, cy: float, radius: float, color: RGB, alpha: float
    ) -> None:
        """Fill a disc fading linearly from ``color``/``alpha`` at the centre to transparent."""
        window = self._window(cx - radius, cy - radius, cx + radius, cy + radius)
        if window is None or radius <= 0:
            return
        rows, cols = window
        ys = np.arange(rows.start, rows.stop, dtype=float) + 0.5
        xs = np.arange(cols.start, cols.stop, dtype=float) + 0.5
        distance = np.hypot(xs[None, :] - cx, ys[:, None] - cy)
        mask = np.clip(1.0 - distance / radius, 0.0, 1.0) * float(alpha)
        rgb = np.asarray(color, dtype=float) / 255.0
        self.composite(rows, cols, mask[..., None] * rgb, mask)

    def fill_linear_gradient_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        start: tuple[RGB, float],
        end: tuple[RGB, float],
        gradient_width: float | None = None,
    ) -> None:
        """Fill a rectangle with a left-to-right gradient starting at ``x``.

        The gradient spans ``gradient_width`` pixels (the rectangle width by default), so a
        rectangle narrower than the span only shows the leading part of it.
        """
        window = self._window(x, y, x + width, y + height)
        if window is None:
            return
        rows, cols = window
        span = float(gradient_width or width) or 1.0
        xs = np.arange(cols.start, cols.stop, dtype=float) + 0.5
        t = np.clip((xs - x) / span, 0.0, 1.0)[None, :]
        (start_rgb, start_alpha), (end_rgb, end_alpha) = start, end
        start_premul = np.asarray(start_rgb, dtype=float) / 255.0 * start_alpha
        end_premul = np.asarray(end_rgb, dtype=float) / 255.0 * end_alpha
        n_rows = rows.stop - rows.start
        rgb = (1.0 - t)[..., None] * start_premul + t[..., None] * end_premul
        alpha = (1.0 - t) * start_alpha + t * end_alpha
        self.composite(
            rows,
            cols,
            np.repeat(rgb, n_rows, axis=0),
            np.repeat(alpha, n_rows, axis=0),
        )

    def fill_rect(
        self, x: float, y: float, width: float, height: float, color: RGB, alpha: float
    ) -> None:
        self.fill_linear_gradient_rect(x, y, width, height, (color, alpha), (color, alpha))

    def stroke_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: RGB,
        alpha: float,
        line_width: float = 2.0,
    ) -> None:
        self.fill_rect(x, y, width, line_width, color, alpha)
        self.fill_rect(x, y + height - line_width, width, line_width, color, alpha)
        self.fill_rect(x, y + line_width, line_width, height - 2 * line_width, color, alpha)
        self.fill_rect(
            x + width - line_width,
            y + line_width,
            line_width,
            height - 2 * line_width,
            color,
            alpha,
        )

    def add_label(self, label: SurfaceLabel) -> None:
        self.labels.append(label)

    def to_rgba(self) -> np.ndarray:
        """Straight-alpha copy of the buffer."""
        rgba = self.pixels.copy()
        alpha = rgba[..., 3]
        covered = alpha > 0
        rgba[covered, :3] = rgba[covered, :3] / alpha[covered, None]
        return np.clip(rgba, 0.0, 1.0)

    def _draw_figure(self) -> None:
        fig = plt.figure(figsize=(self.width / DPI, self.height / DPI), dpi=DPI)
        ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        ax.imshow(self.to_rgba(), interpolation="nearest", extent=(0, self.width, self.height, 0))
        ax.set_xlim(0, self.width)
        ax.set_ylim(self.height, 0)
        ax.set_axis_off()
        for label in self.labels:
            ax.text(
                label.x,
                label.y,
                label.text,
                color=tuple(channel / 255.0 for channel in label.color),
                alpha=label.alpha,
                fontsize=LABEL_FONT_PX * 72 / DPI,
                ha=label.align,
                va="baseline",
            )

    def to_png_bytes(self) -> bytes:
        self._draw_figure()
        return figure_png_bytes()

    def save_png(self, path: Path) -> Path:
        self._draw_figure()
        return save_figure(path)
