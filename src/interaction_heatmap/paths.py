from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from interaction_heatmap.io.export import (
    data_export_name,
    image_export_name,
    summary_export_name,
)


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    tables: Path
    figures: Path
    summary: Path


@dataclass(frozen=True)
class RunArtifactPaths:
    figure: Path
    table: Path
    summary: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        tables=out_dir / "tables",
        figures=out_dir / "figures",
        summary=out_dir / "summary",
    )
    for path in (paths.root, paths.tables, paths.figures, paths.summary):
        path.mkdir(parents=True, exist_ok=True)
    return paths


def run_artifact_paths(
    paths: OutputPaths,
    interaction_type: str,
    device: str,
    *,
    day: date | None = None,
    figures_format: str = "png",
    tables_format: str = "csv",
) -> RunArtifactPaths:
    """Dated export file names for one rendered view, using the configured formats."""
    figure = paths.figures / image_export_name(interaction_type, device, day)
    table = paths.tables / data_export_name(interaction_type, device, day)
    return RunArtifactPaths(
        figure=figure.with_suffix(f".{figures_format}"),
        table=table.with_suffix(f".{tables_format}"),
        summary=paths.summary / summary_export_name(interaction_type, device, day),
    )
