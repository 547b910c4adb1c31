"""Coordinate parsing and map-placement guards."""

from __future__ import annotations

import math
from typing import Any

from feed311.common.errors import CoordinateParseError
from feed311.common.models import IncidentRecord


def _safe_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _valid_lat_lon(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def parse_coordinate_pair(latitude: str | None, longitude: str | None) -> tuple[float, float]:
    lat = _safe_float(latitude)
    lon = _safe_float(longitude)
    if not _valid_lat_lon(lat, lon):
        raise CoordinateParseError(f"Unplaceable coordinates: lat={latitude!r} lon={longitude!r}")
    return lat, lon


def resolve_coordinates(record: IncidentRecord) -> tuple[float, float] | None:
    try:
        return parse_coordinate_pair(record.latitude, record.longitude)
    except CoordinateParseError:
        return None


def has_coordinates(record: IncidentRecord) -> bool:
    return resolve_coordinates(record) is not None
