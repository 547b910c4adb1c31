import csv
import json
from pathlib import Path

import pytest

from feed311.cli import parse_args, run_command
from feed311.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL

FIXTURE = "tests/fixtures/sample_feed.csv"


@pytest.mark.integration
def test_cli_all_generates_expected_artifacts(tmp_path: Path):
    data_dir = tmp_path / "data"
    args = parse_args(
        [
            "all",
            "--config-dir",
            "config",
            "--data-dir",
            str(data_dir),
            "--feed-path",
            FIXTURE,
            "--run-id",
            "run-test",
        ]
    )

    exit_code = run_command(args)

    # The fixture carries one short row and one row without a title.
    assert exit_code == EXIT_PARTIAL
    assert (data_dir / "raw" / "feed.csv").exists()
    assert (data_dir / "intermediate" / "normalised.json").exists()
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()

    with (data_dir / "out" / "incidents_latest.csv").open("r", encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [row["case_enquiry_id"] for row in rows] == [
        "101000000002",
        "101000000001",
        "101000000006",
        "101000000005",
    ]
    assert rows[1]["location"] == "123 Main St, Apt 4"

    report = json.loads((data_dir / "out" / "reports" / "feed_report.json").read_text(encoding="utf-8"))
    assert report["counts"]["rows_in"] == 6
    assert report["counts"]["rows_out"] == 4
    assert report["counts"]["dropped"] == {"FIELD_COUNT_MISMATCH": 1, "ROW_INVALID": 1}
    assert report["counts"]["without_coordinates"] == 1
    assert "ROWS_DROPPED" in report["warnings"]


@pytest.mark.integration
def test_cli_strict_fails_on_dropped_rows(tmp_path: Path):
    args = parse_args(["all", "--data-dir", str(tmp_path), "--feed-path", FIXTURE, "--strict"])
    assert run_command(args) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_missing_feed_is_hard_failure(tmp_path: Path):
    args = parse_args(["fetch", "--data-dir", str(tmp_path), "--feed-path", str(tmp_path / "missing.csv")])
    assert run_command(args) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_list_marks_selected_incident(tmp_path: Path, capsys):
    args = parse_args(
        ["list", "--data-dir", str(tmp_path), "--feed-path", FIXTURE, "--select", "101000000001", "--limit", "2"]
    )

    assert run_command(args) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "4 recent incidents"
    assert len(out) == 3
    assert out[2].startswith("* 101000000001")
    assert out[1].startswith("  101000000002")
