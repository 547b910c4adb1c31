"""Render-ready rows for the list, the map and the detail overlay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from feed311.common.models import IncidentRecord, record_key
from feed311.common.time_utils import format_date_label
from feed311.pipeline.coordinates import resolve_coordinates
from feed311.session.selection import SelectionState

SELECTED_MARKER_COLOR = "#dc2626"
PARKING_MARKER_COLOR = "#f59e0b"
ENFORCEMENT_MARKER_COLOR = "#ef4444"
DEFAULT_MARKER_COLOR = "#84cc16"
SELECTED_MARKER_SIZE = 24
DEFAULT_MARKER_SIZE = 16

STATUS_TONES = {
    "open": "danger",
    "closed": "success",
    "in_progress": "warning",
}


@dataclass(frozen=True)
class ListItem:
    key: str
    title: str
    status: str
    status_tone: str
    location: str
    opened_label: str
    department: str
    has_photos: bool
    is_selected: bool


@dataclass(frozen=True)
class MapMarker:
    key: str
    latitude: float
    longitude: float
    color: str
    size: int
    label: str
    is_selected: bool


@dataclass(frozen=True)
class DetailView:
    key: str
    title: str
    case_id: str
    status: str
    status_tone: str
    location: str
    neighborhood: str | None
    opened_label: str
    closed_label: str | None
    department: str
    type: str
    source: str
    subject: str
    reason: str
    closure_reason: str | None
    submitted_photo_url: str | None
    closed_photo_url: str | None
    can_focus_map: bool


def status_tone(status: str) -> str:
    return STATUS_TONES.get(status.lower(), "neutral")


def marker_color(request_type: str, *, is_selected: bool = False) -> str:
    if is_selected:
        return SELECTED_MARKER_COLOR
    lowered = request_type.lower()
    if "parking" in lowered:
        return PARKING_MARKER_COLOR
    if "enforcement" in lowered:
        return ENFORCEMENT_MARKER_COLOR
    return DEFAULT_MARKER_COLOR


def photo_url(value: str | None) -> str | None:
    # Photo links in the feed end with a "#..." fragment.
    if not value:
        return None
    return value.split("#")[0] or None


def _is_selected(record: IncidentRecord, selection: SelectionState | None) -> bool:
    if selection is None or selection.selected is None:
        return False
    return record_key(selection.selected) == record_key(record)


def list_items(records: Iterable[IncidentRecord], selection: SelectionState | None = None) -> list[ListItem]:
    return [
        ListItem(
            key=record_key(record),
            title=record.case_title.lower(),
            status=record.case_status,
            status_tone=status_tone(record.case_status),
            location=record.location,
            opened_label=format_date_label(record.open_dt),
            department=record.department,
            has_photos=bool(record.submitted_photo or record.closed_photo),
            is_selected=_is_selected(record, selection),
        )
        for record in records
    ]


def map_markers(records: Iterable[IncidentRecord], selection: SelectionState | None = None) -> list[MapMarker]:
    """Markers for records that can be placed; the rest stay list-only."""
    markers: list[MapMarker] = []
    for record in records:
        coordinates = resolve_coordinates(record)
        if coordinates is None:
            continue
        selected = _is_selected(record, selection)
        markers.append(
            MapMarker(
                key=record_key(record),
                latitude=coordinates[0],
                longitude=coordinates[1],
                color=marker_color(record.type, is_selected=selected),
                size=SELECTED_MARKER_SIZE if selected else DEFAULT_MARKER_SIZE,
                label=record.case_title,
                is_selected=selected,
            )
        )
    return markers


def detail_view(selection: SelectionState) -> DetailView | None:
    """The overlay content, or None while the overlay is closed."""
    record = selection.selected
    if record is None or not selection.overlay_open:
        return None
    return DetailView(
        key=record_key(record),
        title=record.case_title,
        case_id=record.case_enquiry_id,
        status=record.case_status,
        status_tone=status_tone(record.case_status),
        location=record.location,
        neighborhood=record.neighborhood,
        opened_label=format_date_label(record.open_dt, with_time=True),
        closed_label=format_date_label(record.closed_dt, with_time=True) if record.closed_dt else None,
        department=record.department,
        type=record.type,
        source=record.source,
        subject=record.subject,
        reason=record.reason,
        closure_reason=record.closure_reason or None,
        submitted_photo_url=photo_url(record.submitted_photo),
        closed_photo_url=photo_url(record.closed_photo),
        can_focus_map=resolve_coordinates(record) is not None,
    )
