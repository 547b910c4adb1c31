"""CLI entrypoint for the 311 incident feed pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from feed311.common.config_loader import ConfigBundle, load_config
from feed311.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, STAGES
from feed311.common.errors import PipelineError, TransportError
from feed311.common.fs import read_json, write_json, write_text
from feed311.common.http import HttpClient
from feed311.common.ids import generate_run_id
from feed311.common.logging import build_logger, log_event
from feed311.common.models import record_key
from feed311.pipeline.export import write_snapshot_csv
from feed311.pipeline.normalise import NormalisedFeed, run_normalise
from feed311.pipeline.reports import write_feed_report
from feed311.session.feed_cache import STATUS_READY, FeedCache
from feed311.session.map_surface import LoggingMapSurface
from feed311.session.selection import SelectionCoordinator
from feed311.session.transport import build_transport
from feed311.session.views import list_items

RAW_FEED_PATH = Path("raw") / "feed.csv"
INTERMEDIATE_PATH = Path("intermediate") / "normalised.json"


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all", "list"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--feed-path", default=None)
    parser.add_argument("--feed-url", default=None)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--select", default=None, help="case id to select when listing")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def resolve_feed_config(args: argparse.Namespace, bundle: ConfigBundle) -> dict:
    feed = dict(bundle.feed)
    if args.feed_path:
        feed["path"] = args.feed_path
        feed.pop("url", None)
    elif args.feed_url:
        feed["url"] = args.feed_url
        feed.pop("path", None)
    return feed


def execute_stage(
    stage: str,
    bundle: ConfigBundle,
    feed_config: dict,
    data_dir: Path,
    run_id: str,
    logger: logging.Logger,
) -> NormalisedFeed | None:
    if stage == "fetch":
        with HttpClient(timeout=bundle.timeout, retry=bundle.retry) as client:
            transport = build_transport(feed_config, client)
            text = transport.fetch_text()
        write_text(data_dir / RAW_FEED_PATH, text)
        return None
    if stage == "normalise":
        raw_path = data_dir / RAW_FEED_PATH
        if not raw_path.exists():
            raise TransportError(f"Missing raw feed: {raw_path}")
        feed = run_normalise(
            raw_path.read_text(encoding="utf-8"),
            max_results=bundle.max_results,
            logger=logger,
        )
        write_json(data_dir / INTERMEDIATE_PATH, feed.to_payload())
        return feed
    if stage == "export":
        feed = NormalisedFeed.from_payload(read_json(data_dir / INTERMEDIATE_PATH))
        write_snapshot_csv(bundle.output, data_dir, feed.records)
        write_feed_report(bundle.output, data_dir, feed, run_id=run_id)
        return feed
    raise ValueError(f"Unknown stage: {stage}")


def run_stages(args: argparse.Namespace, bundle: ConfigBundle, logger: logging.Logger, run_id: str) -> int:
    data_dir = Path(args.data_dir)
    feed_config = resolve_feed_config(args, bundle)
    stages = STAGES if args.command == "all" else (args.command,)

    had_partial_failure = False

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        try:
            feed = execute_stage(stage, bundle, feed_config, data_dir, run_id, logger)
        except PipelineError as exc:
            log_event(
                logger,
                f"stage failed: {exc}",
                level=logging.ERROR,
                run_id=run_id,
                stage=stage,
                event="STAGE_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            return EXIT_HARD_FAIL

        if stage == "normalise" and feed is not None and feed.dropped_total > 0:
            had_partial_failure = True
            if args.strict:
                return EXIT_HARD_FAIL
        log_event(
            logger,
            "stage end",
            run_id=run_id,
            stage=stage,
            event="STAGE_END",
            status="ok",
            rows_in=feed.rows_in if feed is not None else None,
            rows_out=feed.rows_out if feed is not None else None,
        )

    if had_partial_failure:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def run_list(args: argparse.Namespace, bundle: ConfigBundle, logger: logging.Logger) -> int:
    feed_config = resolve_feed_config(args, bundle)
    client = HttpClient(timeout=bundle.timeout, retry=bundle.retry)
    cache = FeedCache(build_transport(feed_config, client), max_results=bundle.max_results, logger=logger)
    try:
        state = cache.load()
    finally:
        client.close()

    if state.status != STATUS_READY:
        print(f"Error loading data: {state.error_message}", file=sys.stderr)
        return EXIT_HARD_FAIL

    coordinator = SelectionCoordinator(LoggingMapSurface(bundle.map_settings, logger))
    if args.select:
        match = next((record for record in state.records if record_key(record) == args.select), None)
        if match is None:
            print(f"No incident with case id {args.select}", file=sys.stderr)
        else:
            coordinator.activate(match)

    records = state.records[: args.limit] if args.limit else state.records
    print(f"{len(state.records)} recent incidents")
    for item in list_items(records, coordinator.state):
        marker = "*" if item.is_selected else " "
        print(f"{marker} {item.key}  {item.opened_label}  {item.status:<8} {item.title}  | {item.location}")
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    bundle = load_config(config_dir, overlay_config_dir=overlay_config_dir)

    if args.command == "list":
        return run_list(args, bundle, logger)
    return run_stages(args, bundle, logger, run_id)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
