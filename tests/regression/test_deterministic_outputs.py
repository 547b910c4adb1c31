from pathlib import Path

import pytest

from feed311.cli import parse_args, run_command
from feed311.common.constants import EXIT_PARTIAL


def _run_once(data_dir: Path, run_id: str) -> None:
    args = parse_args(
        [
            "all",
            "--config-dir",
            "config",
            "--data-dir",
            str(data_dir),
            "--feed-path",
            "tests/fixtures/sample_feed.csv",
            "--run-id",
            run_id,
        ]
    )
    assert run_command(args) == EXIT_PARTIAL


@pytest.mark.regression
def test_snapshot_outputs_are_byte_stable_for_same_inputs(tmp_path: Path):
    first = tmp_path / "first"
    second = tmp_path / "second"

    _run_once(first, "run-a")
    _run_once(second, "run-b")

    first_bytes = (first / "out" / "incidents_latest.csv").read_bytes()
    second_bytes = (second / "out" / "incidents_latest.csv").read_bytes()
    assert first_bytes == second_bytes
    assert (first / "intermediate" / "normalised.json").read_bytes() == (
        second / "intermediate" / "normalised.json"
    ).read_bytes()
