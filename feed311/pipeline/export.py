"""Result-set CSV snapshot export."""

from __future__ import annotations

from pathlib import Path

from feed311.common.fs import write_csv
from feed311.common.models import IncidentRecord
from feed311.common.schema import INCIDENT_COLUMNS

SNAPSHOT_HEADERS = ["seq_id", *INCIDENT_COLUMNS]


def _serialize_row(record: IncidentRecord) -> dict:
    row = record.to_dict()
    out = {}
    for key in SNAPSHOT_HEADERS:
        value = row.get(key)
        out[key] = "" if value is None else value
    return out


def write_snapshot_csv(output_config: dict, data_dir: Path, records: tuple[IncidentRecord, ...]) -> Path:
    out_path = data_dir / "out" / output_config["snapshot_filename"]
    # Result-set order is preserved; it is already most-recent-first.
    write_csv(out_path, SNAPSHOT_HEADERS, [_serialize_row(record) for record in records])
    return out_path
