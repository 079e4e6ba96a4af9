from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from interaction_heatmap.config import AppConfig, load_config


def test_default_config_file_matches_model_defaults() -> None:
    cfg_path = Path(__file__).resolve().parents[1] / "configs/default.yaml"
    cfg = load_config(cfg_path)

    assert cfg.dashboard.page_url == "/example-page"
    assert cfg.dashboard.default_type == "click"
    assert cfg.dashboard.default_device == "desktop"
    assert cfg.dashboard.default_date_range_days == 7
    assert cfg.filters.inclusive_dates is False
    assert cfg.aggregation.average_mode == "running_pair"
    assert [zone.id for zone in cfg.render.zones] == [
        zone.id for zone in AppConfig().render.zones
    ]
    assert {zone.id: zone.expected_max_seconds for zone in cfg.render.zones} == {
        "header": 30,
        "hero": 60,
        "features": 45,
        "cta": 25,
        "footer": 15,
    }


def test_load_config_resolves_relative_records_path(tmp_path: Path) -> None:
    (tmp_path / "records.json").write_text("[]", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"input": {"mode": "json", "records_path": "records.json"}}),
        encoding="utf-8",
    )

    cfg = load_config(config_path)

    assert Path(cfg.input.records_path or "").is_absolute()
    assert Path(cfg.input.records_path or "").name == "records.json"


def test_load_config_uses_env_api_endpoint(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({"input": {"mode": "api"}}), encoding="utf-8")
    monkeypatch.setenv("INTERACTION_HEATMAP_API_ENDPOINT", "https://example.test/heatmaps")

    cfg = load_config(config_path)

    assert cfg.input.api_endpoint == "https://example.test/heatmaps"


def test_load_config_overrides_zone_layout(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "render": {
                    "surface_height": 400,
                    "zones": [
                        {
                            "id": "hero",
                            "offset": 0,
                            "height": 200,
                            "color": [10, 20, 30],
                            "expected_max_seconds": 90,
                        }
                    ],
                }
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(config_path)

    assert cfg.render.surface_height == 400
    assert len(cfg.render.zones) == 1
    assert cfg.render.zones[0].color == (10, 20, 30)
    assert cfg.render.zones[0].anchor == "top"
    assert cfg.render.zones[0].expected_max_seconds == 90


def test_config_rejects_unknown_sections_and_duplicate_zones() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"columns": {}})

    zone = {"id": "hero", "height": 10, "color": [1, 2, 3], "expected_max_seconds": 5}
    with pytest.raises(ValidationError, match="unique"):
        AppConfig.model_validate({"render": {"zones": [zone, zone]}})


def test_config_rejects_out_of_range_threshold() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"filters": {"intensity_threshold": 120}})
