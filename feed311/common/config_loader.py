"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from feed311.common.errors import ConfigError
from feed311.common.fs import read_yaml
from feed311.common.http import RetryConfig, TimeoutConfig
from feed311.common.schema import validate_feed_config

CONFIG_FILENAME = "feed.yml"


@dataclass(frozen=True)
class MapSettings:
    center_lat: float = 42.3601
    center_lon: float = -71.0589
    zoom: float = 12
    focus_zoom: float = 16
    focus_duration_ms: int = 1000


@dataclass(frozen=True)
class ConfigBundle:
    feed: dict
    max_results: int
    timeout: TimeoutConfig
    retry: RetryConfig
    map_settings: MapSettings
    output: dict


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = validate_feed_config(
        _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )

    http_cfg = cfg["http"]
    map_cfg = cfg["map"]
    return ConfigBundle(
        feed=dict(cfg["feed"]),
        max_results=int(cfg["pipeline"]["max_results"]),
        timeout=TimeoutConfig(connect=float(http_cfg["connect_timeout"]), read=float(http_cfg["read_timeout"])),
        retry=RetryConfig(max_attempts=int(http_cfg["max_attempts"])),
        map_settings=MapSettings(
            center_lat=float(map_cfg["center_lat"]),
            center_lon=float(map_cfg["center_lon"]),
            zoom=float(map_cfg["zoom"]),
            focus_zoom=float(map_cfg["focus_zoom"]),
            focus_duration_ms=int(map_cfg["focus_duration_ms"]),
        ),
        output=dict(cfg["output"]),
    )
