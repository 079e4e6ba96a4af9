from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

InteractionType = Literal["click", "scroll", "engagement"]
DeviceType = Literal["desktop", "tablet", "mobile"]

API_ENDPOINT_ENV_VAR = "INTERACTION_HEATMAP_API_ENDPOINT"


class DashboardConfig(BaseModel):
    page_url: str = "/example-page"
    default_type: InteractionType = "click"
    default_device: DeviceType = "desktop"
    default_date_range_days: int = Field(default=7, ge=1)
    show_controls: bool = True
    show_overlay: bool = True


class InputConfig(BaseModel):
    mode: Literal["json", "api", "mock"] = "mock"
    records_path: str | None = None
    api_endpoint: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    mock_days: int = Field(default=30, ge=1)
    mock_seed: int = Field(default=42, ge=0)


class FiltersConfig(BaseModel):
    inclusive_dates: bool = False
    intensity_threshold: float = Field(default=0.0, ge=0.0, le=100.0)


class AggregationConfig(BaseModel):
    merge_tolerance: float = Field(default=1.0, gt=0.0)
    average_mode: Literal["running_pair", "mean"] = "running_pair"


class ZoneConfig(BaseModel):
    id: str
    anchor: Literal["top", "bottom"] = "top"
    offset: int = Field(default=0, ge=0)
    height: int = Field(ge=1)
    color: tuple[int, int, int]
    expected_max_seconds: float = Field(gt=0.0)


def _default_zones() -> list[ZoneConfig]:
    return [
        ZoneConfig(
            id="header", offset=0, height=64, color=(59, 130, 246), expected_max_seconds=30
        ),
        ZoneConfig(id="hero", offset=64, height=320, color=(239, 68, 68), expected_max_seconds=60),
        ZoneConfig(
            id="features", offset=384, height=256, color=(34, 197, 94), expected_max_seconds=45
        ),
        ZoneConfig(
            id="cta",
            anchor="bottom",
            offset=80,
            height=160,
            color=(168, 85, 247),
            expected_max_seconds=25,
        ),
        ZoneConfig(
            id="footer",
            anchor="bottom",
            offset=0,
            height=80,
            color=(234, 179, 8),
            expected_max_seconds=15,
        ),
    ]


class RenderConfig(BaseModel):
    surface_height: int = Field(default=600, ge=10)
    aspect_ratios: dict[DeviceType, tuple[int, int]] = Field(
        default_factory=lambda: {"desktop": (16, 9), "tablet": (3, 4), "mobile": (9, 16)}
    )
    min_click_radius: float = Field(default=20.0, gt=0.0)
    zones: list[ZoneConfig] = Field(default_factory=_default_zones)

    @model_validator(mode="after")
    def _unique_zone_ids(self) -> "RenderConfig":
        ids = [zone.id for zone in self.zones]
        if len(ids) != len(set(ids)):
            raise ValueError("render.zones ids must be unique")
        return self


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.input.records_path = _resolve_optional_path(config.input.records_path, base_dir)
    config.input.api_endpoint = config.input.api_endpoint or os.getenv(API_ENDPOINT_ENV_VAR)
    return config
