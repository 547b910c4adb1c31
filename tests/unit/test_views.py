from feed311.common.schema import INCIDENT_FIELDS, validate_incident_fields
from feed311.session.selection import SelectionState
from feed311.session.views import (
    DEFAULT_MARKER_COLOR,
    PARKING_MARKER_COLOR,
    SELECTED_MARKER_COLOR,
    detail_view,
    list_items,
    map_markers,
    marker_color,
    photo_url,
    status_tone,
)


def _record(case_id: str, **overrides):
    fields = {spec.name: ("x" if spec.required else None) for spec in INCIDENT_FIELDS}
    fields.update(
        case_enquiry_id=case_id,
        case_title="Pothole Repair",
        case_status="Open",
        type="Request for Pothole Repair",
        latitude="42.35",
        longitude="-71.06",
        open_dt="2024-03-01 09:15:00",
    )
    fields.update(overrides)
    return validate_incident_fields(fields, row_number=1)


def test_list_items_include_unplaceable_records_and_mark_selection():
    placed = _record("A")
    unplaced = _record("B", latitude="n/a")

    items = list_items([placed, unplaced], SelectionState(selected=unplaced))

    assert [item.key for item in items] == ["A", "B"]
    assert [item.is_selected for item in items] == [False, True]
    assert items[0].title == "pothole repair"
    assert items[0].opened_label == "2024-03-01"


def test_list_item_labels_missing_open_date():
    item = list_items([_record("A", open_dt=None)])[0]
    assert item.opened_label == "N/A"
    assert item.has_photos is False


def test_map_markers_skip_unplaceable_records():
    markers = map_markers([_record("A"), _record("B", latitude="n/a")])
    assert [marker.key for marker in markers] == ["A"]
    assert (markers[0].latitude, markers[0].longitude) == (42.35, -71.06)


def test_selected_marker_is_highlighted():
    record = _record("A")
    marker = map_markers([record], SelectionState(selected=record))[0]
    assert marker.color == SELECTED_MARKER_COLOR
    assert marker.size == 24


def test_marker_color_by_type():
    assert marker_color("Parking Enforcement") == PARKING_MARKER_COLOR
    assert marker_color("Street Light Outages") == DEFAULT_MARKER_COLOR


def test_status_tone_is_open_ended():
    assert status_tone("Open") == "danger"
    assert status_tone("Closed") == "success"
    assert status_tone("Escalated") == "neutral"


def test_photo_url_strips_fragment():
    assert photo_url("https://example.org/a.jpg#token") == "https://example.org/a.jpg"
    assert photo_url(None) is None


def test_detail_view_only_while_overlay_open():
    record = _record("A", closure_reason="Case Resolved", submitted_photo="https://example.org/p.jpg#x")

    assert detail_view(SelectionState(selected=record)) is None

    view = detail_view(SelectionState(selected=record, overlay_open=True))
    assert view.case_id == "A"
    assert view.closure_reason == "Case Resolved"
    assert view.submitted_photo_url == "https://example.org/p.jpg"
    assert view.closed_label is None
    assert view.can_focus_map is True
