"""Minimal strict schemas for YAML config and incident rows."""

from __future__ import annotations

from typing import Mapping

from feed311.common.errors import ConfigError, ValidationError
from feed311.common.models import FieldSpec, IncidentRecord

INCIDENT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("case_enquiry_id", required=True),
    FieldSpec("open_dt", required=False),
    FieldSpec("sla_target_dt", required=False),
    FieldSpec("closed_dt", required=False),
    FieldSpec("on_time", required=True),
    FieldSpec("case_status", required=True),
    FieldSpec("closure_reason", required=False),
    FieldSpec("case_title", required=True),
    FieldSpec("subject", required=True),
    FieldSpec("reason", required=True),
    FieldSpec("type", required=True),
    FieldSpec("queue", required=True),
    FieldSpec("department", required=True),
    FieldSpec("submitted_photo", required=False),
    FieldSpec("closed_photo", required=False),
    FieldSpec("location", required=True),
    FieldSpec("fire_district", required=False),
    FieldSpec("pwd_district", required=False),
    FieldSpec("city_council_district", required=False),
    FieldSpec("police_district", required=False),
    FieldSpec("neighborhood", required=False),
    FieldSpec("neighborhood_services_district", required=False),
    FieldSpec("ward", required=False),
    FieldSpec("precinct", required=False),
    FieldSpec("location_street_name", required=False),
    FieldSpec("location_zipcode", required=False),
    FieldSpec("latitude", required=True),
    FieldSpec("longitude", required=True),
    FieldSpec("geom_4326", required=True),
    FieldSpec("source", required=True),
)

INCIDENT_COLUMNS = [spec.name for spec in INCIDENT_FIELDS]


def validate_incident_fields(fields: Mapping[str, str | None], *, row_number: int) -> IncidentRecord:
    """Build an IncidentRecord from a header->value mapping or raise ValidationError.

    Required fields must be non-null strings; an empty string still counts as
    present. Columns not declared in INCIDENT_FIELDS are ignored.
    """
    values: dict[str, str | None] = {}
    for spec in INCIDENT_FIELDS:
        value = fields.get(spec.name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(
                f"Row {row_number}: field {spec.name} must be a string",
                row_number=row_number,
                field=spec.name,
            )
        if value is None and spec.required:
            raise ValidationError(
                f"Row {row_number}: missing required field {spec.name}",
                row_number=row_number,
                field=spec.name,
            )
        values[spec.name] = value
    return IncidentRecord(seq_id=row_number, **values)


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_feed_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"feed", "pipeline", "http", "map", "output"}
    _assert_required_keys(cfg, top_required, "feed config")
    _assert_no_unknown_keys(cfg, top_required, "feed config", allow_unknown)

    feed = cfg["feed"]
    _assert_required_keys(feed, {"encoding"}, "feed")
    _assert_no_unknown_keys(feed, {"url", "path", "encoding"}, "feed", allow_unknown)
    if not feed.get("url") and not feed.get("path"):
        raise ConfigError("feed requires one of: url, path")

    _assert_required_keys(cfg["pipeline"], {"max_results"}, "pipeline")
    max_results = cfg["pipeline"]["max_results"]
    if not isinstance(max_results, int) or isinstance(max_results, bool) or max_results < 1:
        raise ConfigError("pipeline.max_results must be a positive integer")

    _assert_required_keys(cfg["http"], {"connect_timeout", "read_timeout", "max_attempts"}, "http")
    _assert_required_keys(
        cfg["map"],
        {"center_lat", "center_lon", "zoom", "focus_zoom", "focus_duration_ms"},
        "map",
    )
    _assert_required_keys(cfg["output"], {"snapshot_filename", "report_filename"}, "output")

    return cfg
