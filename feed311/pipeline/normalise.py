"""Decode, validate, order and bound the incident feed."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from feed311.common.constants import (
    DROP_FIELD_COUNT_MISMATCH,
    DROP_ROW_INVALID,
    INVALID_SAMPLE_LIMIT,
    MAX_RESULTS,
)
from feed311.common.errors import ValidationError
from feed311.common.logging import log_event
from feed311.common.models import IncidentRecord
from feed311.common.schema import validate_incident_fields
from feed311.common.time_utils import parse_instant
from feed311.pipeline.csv_decode import decode_csv


@dataclass(frozen=True)
class NormalisedFeed:
    records: tuple[IncidentRecord, ...]
    rows_in: int
    rows_valid: int
    dropped: dict[str, int] = field(default_factory=dict)
    invalid_samples: list[dict] = field(default_factory=list)

    @property
    def rows_out(self) -> int:
        return len(self.records)

    @property
    def dropped_total(self) -> int:
        return sum(self.dropped.values())

    def to_payload(self) -> dict:
        return {
            "rows_in": self.rows_in,
            "rows_valid": self.rows_valid,
            "rows_out": self.rows_out,
            "dropped": dict(sorted(self.dropped.items())),
            "invalid_samples": self.invalid_samples,
            "records": [record.to_dict() for record in self.records],
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "NormalisedFeed":
        return cls(
            records=tuple(IncidentRecord(**row) for row in payload.get("records", [])),
            rows_in=int(payload.get("rows_in", 0)),
            rows_valid=int(payload.get("rows_valid", 0)),
            dropped=dict(payload.get("dropped", {})),
            invalid_samples=list(payload.get("invalid_samples", [])),
        )


def _open_sort_key(record: IncidentRecord) -> tuple[bool, float]:
    opened = parse_instant(record.open_dt)
    if opened is None:
        return (True, 0.0)
    return (False, -opened.timestamp())


def sort_most_recent_first(records: list[IncidentRecord]) -> list[IncidentRecord]:
    """Order by open timestamp, newest first.

    Records whose open timestamp is missing or unparsable go after every dated
    record and keep their relative order.
    """
    return sorted(records, key=_open_sort_key)


def run_normalise(
    text: str | None,
    *,
    max_results: int = MAX_RESULTS,
    logger: logging.Logger | None = None,
) -> NormalisedFeed:
    decoded = decode_csv(text)
    header = decoded.header

    dropped: dict[str, int] = defaultdict(int)
    invalid_samples: list[dict] = []
    valid: list[IncidentRecord] = []

    for row in decoded.rows:
        if len(row.values) != len(header):
            dropped[DROP_FIELD_COUNT_MISMATCH] += 1
            if logger is not None:
                log_event(
                    logger,
                    f"dropped row {row.line_number}: expected {len(header)} fields, got {len(row.values)}",
                    level=logging.WARNING,
                    stage="normalise",
                    event="ROW_DROPPED",
                    status="warn",
                    error_code=DROP_FIELD_COUNT_MISMATCH,
                    row_number=row.line_number,
                )
            continue

        fields = {name: (value if value != "" else None) for name, value in zip(header, row.values)}
        try:
            record = validate_incident_fields(fields, row_number=row.line_number)
        except ValidationError as exc:
            dropped[DROP_ROW_INVALID] += 1
            if len(invalid_samples) < INVALID_SAMPLE_LIMIT:
                invalid_samples.append({"row_number": exc.row_number, "field": exc.field, "message": str(exc)})
            if logger is not None:
                log_event(
                    logger,
                    str(exc),
                    level=logging.WARNING,
                    stage="normalise",
                    event="ROW_DROPPED",
                    status="warn",
                    error_code=exc.error_code,
                    row_number=exc.row_number,
                    field=exc.field,
                )
            continue
        valid.append(record)

    bounded = sort_most_recent_first(valid)[:max_results]
    return NormalisedFeed(
        records=tuple(bounded),
        rows_in=len(decoded.rows),
        rows_valid=len(valid),
        dropped=dict(dropped),
        invalid_samples=invalid_samples,
    )
