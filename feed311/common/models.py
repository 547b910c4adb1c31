"""Data models used across the pipeline and session layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required: bool


@dataclass(frozen=True)
class IncidentRecord:
    seq_id: int
    case_enquiry_id: str
    open_dt: str | None
    sla_target_dt: str | None
    closed_dt: str | None
    on_time: str
    case_status: str
    closure_reason: str | None
    case_title: str
    subject: str
    reason: str
    type: str
    queue: str
    department: str
    submitted_photo: str | None
    closed_photo: str | None
    location: str
    fire_district: str | None
    pwd_district: str | None
    city_council_district: str | None
    police_district: str | None
    neighborhood: str | None
    neighborhood_services_district: str | None
    ward: str | None
    precinct: str | None
    location_street_name: str | None
    location_zipcode: str | None
    latitude: str
    longitude: str
    geom_4326: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def record_key(record: IncidentRecord) -> str:
    """Stable identity for a record: the case id, or the sequence id when blank."""
    if record.case_enquiry_id:
        return record.case_enquiry_id
    return f"#{record.seq_id}"
