"""Feed quality report."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from feed311.common.fs import write_json
from feed311.pipeline.coordinates import has_coordinates
from feed311.pipeline.normalise import NormalisedFeed


def _status_counts(feed: NormalisedFeed) -> dict[str, int]:
    counts = Counter(record.case_status for record in feed.records)
    return dict(sorted(counts.items()))


def build_feed_report(feed: NormalisedFeed, *, run_id: str) -> dict:
    with_coordinates = sum(1 for record in feed.records if has_coordinates(record))
    undated = sum(1 for record in feed.records if not record.open_dt)

    warnings: list[str] = []
    if feed.dropped_total > 0:
        warnings.append("ROWS_DROPPED")
    if with_coordinates < feed.rows_out:
        warnings.append("UNPLACEABLE_COORDINATES_PRESENT")

    return {
        "run_id": run_id,
        "counts": {
            "rows_in": feed.rows_in,
            "rows_valid": feed.rows_valid,
            "rows_out": feed.rows_out,
            "dropped": dict(sorted(feed.dropped.items())),
            "with_coordinates": with_coordinates,
            "without_coordinates": feed.rows_out - with_coordinates,
            "without_open_dt": undated,
        },
        "statuses": _status_counts(feed),
        "newest_open_dt": feed.records[0].open_dt if feed.records else None,
        "warnings": warnings,
        "diagnostics": {
            "invalid_samples": feed.invalid_samples,
        },
    }


def write_feed_report(output_config: dict, data_dir: Path, feed: NormalisedFeed, *, run_id: str) -> Path:
    report_path = data_dir / "out" / "reports" / output_config["report_filename"]
    write_json(report_path, build_feed_report(feed, run_id=run_id))
    return report_path
