from __future__ import annotations

from datetime import date
from pathlib import Path

import typer

from interaction_heatmap.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from interaction_heatmap.features.aggregates import format_count, format_rate, interaction_rate
from interaction_heatmap.features.filters import FilterCriteria, criteria_from_config
from interaction_heatmap.io.mock import generate_mock_records
from interaction_heatmap.io.write import write_records
from interaction_heatmap.logging import configure_logging
from interaction_heatmap.pipeline.run_all import HeatmapPanel, HeatmapRun, write_run_outputs

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    if not config_path.exists():
        typer.echo(f"Config file not found: {config_path}; using built-in defaults.", err=True)
        return AppConfig()
    return load_config(config_path)


def _build_criteria(
    cfg: AppConfig,
    heatmap_type: str | None,
    device: str | None,
    page: str | None,
    date_from: str | None,
    date_to: str | None,
    threshold: float | None,
) -> FilterCriteria:
    try:
        return criteria_from_config(
            cfg.dashboard,
            cfg.filters,
            type=heatmap_type,
            device=device,
            page=page,
            date_from=date.fromisoformat(date_from) if date_from else None,
            date_to=date.fromisoformat(date_to) if date_to else None,
            intensity_threshold=threshold,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _run_panel(
    cfg: AppConfig,
    records: Path | None,
    criteria: FilterCriteria,
) -> HeatmapRun:
    panel = HeatmapPanel(config=cfg, records_path=records)
    if not panel.load():
        typer.echo(f"Error loading heatmap: {panel.error}", err=True)
        raise typer.Exit(code=1)
    return panel.run(criteria)


def _echo_run(run: HeatmapRun, show_controls: bool) -> None:
    criteria = run.criteria
    if show_controls:
        typer.echo(
            f"Filters: type={criteria.type} device={criteria.device} page={criteria.page} "
            f"dates={criteria.date_from}..{criteria.date_to} "
            f"threshold={criteria.intensity_threshold:g}"
        )
    typer.echo(f"- records_matched: {len(run.records)}")
    typer.echo(f"- total_visitors: {format_count(run.aggregate.total_visitors)}")
    typer.echo(f"- total_interactions: {format_count(run.aggregate.total_interactions)}")
    typer.echo(f"- interaction_rate: {format_rate(interaction_rate(run.aggregate))}")
    typer.echo(f"Insight: {run.narrative.primary}")
    for line in run.narrative.secondary:
        typer.echo(f"  {line}")


@app.command()
def render(
    records: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="JSON array of interaction records. Falls back to config input.mode.",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=True),
    heatmap_type: str | None = typer.Option(
        None, "--type", help="click, scroll or engagement. Defaults to dashboard.default_type."
    ),
    device: str | None = typer.Option(None, help="desktop, tablet or mobile."),
    page: str | None = typer.Option(None),
    date_from: str | None = typer.Option(None, help="ISO date (exclusive unless configured)."),
    date_to: str | None = typer.Option(None, help="ISO date (exclusive unless configured)."),
    threshold: float | None = typer.Option(None, min=0.0, max=100.0),
) -> None:
    """Render a heatmap image, export its data and write a summary into out/."""
    configure_logging()
    cfg = _load_app_config(config)
    criteria = _build_criteria(cfg, heatmap_type, device, page, date_from, date_to, threshold)
    run = _run_panel(cfg, records, criteria)
    outputs = write_run_outputs(run, out, cfg)
    _echo_run(run, cfg.dashboard.show_controls)
    for name, path in outputs.items():
        typer.echo(f"- {name}: {path}")


@app.command()
def insights(
    records: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=True),
    heatmap_type: str | None = typer.Option(None, "--type"),
    device: str | None = typer.Option(None, help="desktop, tablet or mobile."),
    page: str | None = typer.Option(None),
    date_from: str | None = typer.Option(None),
    date_to: str | None = typer.Option(None),
) -> None:
    """Print summary statistics and generated insights without writing files."""
    configure_logging("WARNING")
    cfg = _load_app_config(config)
    criteria = _build_criteria(cfg, heatmap_type, device, page, date_from, date_to, None)
    run = _run_panel(cfg, records, criteria)
    _echo_run(run, cfg.dashboard.show_controls)


@app.command("mock-data")
def mock_data(
    out: Path = typer.Option(Path("records.json"), resolve_path=True),
    days: int = typer.Option(30, min=1),
    seed: int = typer.Option(42, min=0),
    page: str = typer.Option("/example-page"),
) -> None:
    """Write a generated demo dataset of interaction records as JSON."""
    configure_logging()
    generated = generate_mock_records(days=days, seed=seed, page=page)
    write_records(generated, out)
    typer.echo(f"Wrote {len(generated)} records to: {out}")


if __name__ == "__main__":
    app()
