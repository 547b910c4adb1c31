import logging
from datetime import datetime, timedelta

import pytest

from feed311.common.errors import DecodeError
from feed311.common.schema import INCIDENT_COLUMNS
from feed311.pipeline.normalise import NormalisedFeed, run_normalise

BASE_ROW = {
    "case_enquiry_id": "101000000001",
    "open_dt": "2024-03-01 09:15:00",
    "on_time": "ONTIME",
    "case_status": "Open",
    "case_title": "Pothole Repair",
    "subject": "Public Works Department",
    "reason": "Highway Maintenance",
    "type": "Request for Pothole Repair",
    "queue": "PWDx_District 1C",
    "department": "PWDx",
    "location": "123 Main St, Apt 4",
    "latitude": "42.3584",
    "longitude": "-71.0598",
    "geom_4326": "0101000020E6100000",
    "source": "Citizens Connect App",
}


def _quote(value: str) -> str:
    return f'"{value}"' if "," in value else value


def _line(**overrides) -> str:
    row = dict(BASE_ROW)
    row.update(overrides)
    return ",".join(_quote(row.get(column) or "") for column in INCIDENT_COLUMNS)


def _feed(*lines: str) -> str:
    return "\n".join([",".join(INCIDENT_COLUMNS), *lines]) + "\n"


def test_quoted_location_with_comma_decodes_as_one_value():
    feed = run_normalise(_feed(_line()))
    assert feed.rows_out == 1
    assert feed.records[0].location == "123 Main St, Apt 4"
    assert feed.records[0].latitude == "42.3584"


def test_empty_cells_become_none():
    feed = run_normalise(_feed(_line(closed_dt="", neighborhood="")))
    assert feed.records[0].closed_dt is None
    assert feed.records[0].neighborhood is None


def test_rows_with_wrong_field_count_are_dropped():
    feed = run_normalise(_feed(_line(case_enquiry_id="1"), "2,2024-01-01,Open", _line(case_enquiry_id="3")))
    assert [record.case_enquiry_id for record in feed.records] == ["1", "3"]
    assert feed.dropped == {"FIELD_COUNT_MISMATCH": 1}
    assert feed.rows_in == 3


def test_rows_missing_required_field_are_dropped_and_sampled():
    feed = run_normalise(_feed(_line(case_enquiry_id="1", case_title=""), _line(case_enquiry_id="2")))
    assert [record.case_enquiry_id for record in feed.records] == ["2"]
    assert feed.dropped == {"ROW_INVALID": 1}
    assert feed.invalid_samples[0]["row_number"] == 1
    assert feed.invalid_samples[0]["field"] == "case_title"


def test_missing_required_column_yields_empty_result():
    header = ",".join(column for column in INCIDENT_COLUMNS if column != "latitude")
    row = ",".join(_quote(BASE_ROW.get(column) or "") for column in INCIDENT_COLUMNS if column != "latitude")
    feed = run_normalise(f"{header}\n{row}\n")
    assert feed.records == ()
    assert feed.dropped == {"ROW_INVALID": 1}


def test_sequence_id_is_position_among_data_rows():
    feed = run_normalise(_feed(_line(case_enquiry_id="a", open_dt="2024-01-01"), "bad", _line(case_enquiry_id="c", open_dt="2024-01-02")))
    assert [(record.case_enquiry_id, record.seq_id) for record in feed.records] == [("c", 3), ("a", 1)]


def test_sorted_descending_with_missing_and_unparsable_last():
    feed = run_normalise(
        _feed(
            _line(case_enquiry_id="none-1", open_dt=""),
            _line(case_enquiry_id="old", open_dt="2023-12-31 23:59:59"),
            _line(case_enquiry_id="garbled", open_dt="not a date"),
            _line(case_enquiry_id="new", open_dt="2024-03-01T10:00:00"),
            _line(case_enquiry_id="none-2", open_dt=""),
        )
    )
    assert [record.case_enquiry_id for record in feed.records] == ["new", "old", "none-1", "garbled", "none-2"]


def test_truncates_to_latest_hundred():
    start = datetime(2024, 1, 1, 0, 0, 0)
    lines = [
        _line(case_enquiry_id=f"case-{idx:03d}", open_dt=(start + timedelta(hours=idx)).strftime("%Y-%m-%d %H:%M:%S"))
        for idx in range(150)
    ]
    feed = run_normalise(_feed(*lines))

    assert feed.rows_out == 100
    assert feed.rows_valid == 150
    ids = [record.case_enquiry_id for record in feed.records]
    assert ids == [f"case-{idx:03d}" for idx in range(149, 49, -1)]


def test_max_results_is_configurable():
    lines = [_line(case_enquiry_id=str(idx)) for idx in range(5)]
    assert run_normalise(_feed(*lines), max_results=2).rows_out == 2


def test_result_size_is_min_of_cap_and_valid_rows():
    lines = [_line(case_enquiry_id=str(idx)) for idx in range(7)] + ["short,row"]
    assert run_normalise(_feed(*lines)).rows_out == 7


def test_normalise_is_idempotent_for_identical_input():
    text = _feed(
        _line(case_enquiry_id="1", open_dt=""),
        _line(case_enquiry_id="2", open_dt="2024-01-02"),
        _line(case_enquiry_id="3", open_dt="2024-01-02"),
    )
    assert run_normalise(text) == run_normalise(text)


def test_empty_feed_raises_decode_error():
    with pytest.raises(DecodeError):
        run_normalise("")


def test_dropped_rows_are_logged(caplog):
    logger = logging.getLogger("feed311.test-normalise")
    with caplog.at_level(logging.WARNING, logger="feed311.test-normalise"):
        run_normalise(_feed("x,y", _line(case_title="")), logger=logger)

    events = [getattr(record, "event", None) for record in caplog.records]
    assert events == ["ROW_DROPPED", "ROW_DROPPED"]
    assert caplog.records[1].field == "case_title"


def test_payload_round_trip_keeps_order_and_counts():
    feed = run_normalise(_feed(_line(case_enquiry_id="1", open_dt="2024-01-01"), _line(case_enquiry_id="2", open_dt="2024-01-02"), "bad"))
    restored = NormalisedFeed.from_payload(feed.to_payload())
    assert restored.records == feed.records
    assert restored.dropped == feed.dropped
