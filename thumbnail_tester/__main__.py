"""
CLI entry point for the thumbnail tester.

Parses arguments, validates config, wires components and runs one command
against the on-disk stores.
"""

import argparse
import json
import mimetypes
import os
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from prettytable import PrettyTable

from .blobs.data_url import encode_data_url
from .blobs.directory_blobs import DirectoryBlobStore
from .config import LOG_LEVELS, AppConfig
from .config_store import ConfigStore
from .dispatcher import Dispatcher
from .exceptions import ConfigurationError, ThumbnailTesterError
from .logging_config import get_logger, setup_logging
from .matchups import plan_matchups
from .results_store import ResultsStore
from .storage.jsonl_storage import JSONLTabularStore


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Thumbnail Tester - grid and head-to-head thumbnail tests"
    )

    _ = parser.add_argument(
        "--data-dir",
        default=os.environ.get("THUMBNAIL_TESTER_DATA_DIR", "thumbnail_data"),
        help="Directory holding tables and images (default: $THUMBNAIL_TESTER_DATA_DIR or ./thumbnail_data)"
    )
    _ = parser.add_argument(
        "--blob-base-url",
        default=os.environ.get("THUMBNAIL_TESTER_BLOB_BASE_URL"),
        help="Public URL serving <data-dir>/images (default: file:// URLs)"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default="INFO",
        help="Set logging level (default: INFO)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    request = commands.add_parser("request", help="Dispatch a JSON request body")
    _ = request.add_argument("file", nargs="?", help="JSON file (default: stdin)")

    create = commands.add_parser("create", help="Create a test from local image files")
    _ = create.add_argument("test_id")
    _ = create.add_argument("images", nargs="+", help="Thumbnail image files")
    _ = create.add_argument("--name", help="Display name (default: test id)")
    _ = create.add_argument(
        "--title",
        action="append",
        default=[],
        help="Video title per image, in order (default: file name)"
    )
    _ = create.add_argument(
        "--head-to-head",
        action="store_true",
        help="Create a head-to-head test instead of a grid test"
    )
    _ = create.add_argument(
        "--matchups",
        type=int,
        help="Matchups per thumbnail presented to respondents (head-to-head only)"
    )

    _ = commands.add_parser("list", help="List tests, newest first")

    show = commands.add_parser("show", help="Show a test configuration")
    _ = show.add_argument("test_id")

    leaderboard = commands.add_parser("leaderboard", help="Show aggregated results of a test")
    _ = leaderboard.add_argument("test_id")

    delete = commands.add_parser("delete", help="Delete a test, its results and its images")
    _ = delete.add_argument("test_id")

    _ = commands.add_parser("resync", help="Rebuild every head-to-head leaderboard")

    plan = commands.add_parser("plan", help="Plan head-to-head matchups for a test")
    _ = plan.add_argument("test_id")
    _ = plan.add_argument("--seed", type=int, help="Seed for a reproducible plan")

    return parser.parse_args(argv)


def wire_components(config: AppConfig) -> Dispatcher:
    """Wire dependency injection components."""
    logger = get_logger("wire_components")

    logger.info(f"Creating stores under {config.data_dir}")
    tables = JSONLTabularStore(config.tables_dir)
    blobs = DirectoryBlobStore(config.images_dir, base_url=config.blob_base_url)

    return Dispatcher(
        config_store=ConfigStore(tables),
        results_store=ResultsStore(tables),
        blob_store=blobs,
    )


def build_create_payload(args: Namespace) -> dict[str, Any]:
    """Turn local image files into a create-test request body."""
    videos = list[dict[str, str]]()
    for index, image in enumerate(args.images):
        path = Path(image)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        title = args.title[index] if index < len(args.title) else path.stem
        videos.append({"title": title, "thumbnail": encode_data_url(mime_type, path.read_bytes())})

    payload: dict[str, Any] = {
        "action": "createHeadToHeadTest" if args.head_to_head else "createTest",
        "testId": args.test_id,
        "videos": videos,
    }
    if args.name:
        payload["testName"] = args.name
    if args.matchups is not None:
        payload["matchupsPerThumbnail"] = args.matchups
    return payload


def print_json(response: dict[str, Any]) -> None:
    print(json.dumps(response, indent=2, ensure_ascii=False))


def print_tests(response: dict[str, Any]) -> None:
    table = PrettyTable()
    table.field_names = ["Created", "Test ID", "Name", "Type", "Videos", "Matchups"]
    table.align["Videos"] = "r"
    table.align["Matchups"] = "r"
    for test in response["tests"]:
        table.add_row([
            test["createdAt"],
            test["testId"],
            test["testName"],
            test["testType"],
            test["videoCount"],
            test["matchupsPerThumbnail"] or "",
        ])
    print(table)


def print_leaderboard(response: dict[str, Any]) -> None:
    table = PrettyTable()
    if "entries" in response:
        table.field_names = ["Rank", "Thumbnail", "Wins", "Losses", "Total", "Win%"]
        for column in ("Rank", "Wins", "Losses", "Total", "Win%"):
            table.align[column] = "r"
        for rank, entry in enumerate(response["entries"], 1):
            table.add_row([
                rank,
                entry["thumbnailUrl"],
                entry["wins"],
                entry["losses"],
                entry["total"],
                f"{entry['winRate']:.1f}%",
            ])
    else:
        table.field_names = ["Video", "Responses", "Avg Score", "Labels"]
        table.align["Responses"] = "r"
        table.align["Avg Score"] = "r"
        for summary in response["ratings"]:
            labels = ", ".join(f"{label or '-'}: {count}" for label, count in summary["labelCounts"].items())
            table.add_row([
                summary["videoTitle"],
                summary["responses"],
                f"{summary['averageScore']:.2f}",
                labels,
            ])
    print(table)


def run_command(args: Namespace, dispatcher: Dispatcher) -> dict[str, Any]:
    """Run one CLI command and return the response it produced."""
    if args.command == "request":
        if args.file:
            with open(args.file, "r", encoding="utf-8") as f:
                payload = json.load(f)
        else:
            payload = json.load(sys.stdin)
        response = dispatcher.handle(payload)
        print_json(response)
        return response

    if args.command == "create":
        response = dispatcher.handle(build_create_payload(args))
        print_json(response)
        return response

    if args.command == "list":
        response = dispatcher.handle_query({"action": "listTests"})
        if response["status"] == "success":
            print_tests(response)
        return response

    if args.command == "show":
        response = dispatcher.handle_query({"test": args.test_id})
        print_json(response)
        return response

    if args.command == "leaderboard":
        response = dispatcher.handle_query({"action": "getLeaderboard", "test": args.test_id})
        if response["status"] == "success":
            print_leaderboard(response)
        return response

    if args.command == "delete":
        response = dispatcher.handle({"action": "deleteTest", "testId": args.test_id})
        print_json(response)
        return response

    if args.command == "resync":
        reports = dispatcher.resync_all()
        table = PrettyTable()
        table.field_names = ["Test ID", "Table", "Entries", "Error"]
        table.align["Entries"] = "r"
        for report in reports:
            table.add_row([report.test_id, report.table_name, report.entries, report.error or ""])
        print(table)
        failed = [report.test_id for report in reports if report.error]
        if failed:
            return {"status": "error", "message": f"Resync failed for: {', '.join(failed)}"}
        return {"status": "success", "tests": len(reports)}

    if args.command == "plan":
        test = dispatcher.get_test(args.test_id)
        matchups = plan_matchups(
            [video.thumbnail_url for video in test.videos],
            test.matchups_per_thumbnail,
            seed=args.seed,
        )
        table = PrettyTable()
        table.field_names = ["Matchup", "Thumbnail A", "Thumbnail B"]
        table.align["Matchup"] = "r"
        for number, (thumbnail_a, thumbnail_b) in enumerate(matchups, 1):
            table.add_row([number, thumbnail_a, thumbnail_b])
        print(table)
        return {"status": "success", "matchups": len(matchups)}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = parse_args(argv)
    try:
        config = AppConfig(
            data_dir=Path(args.data_dir),
            blob_base_url=args.blob_base_url,
            log_level=args.log_level,
            debug=args.debug,
        )
        config.data_dir.mkdir(parents=True, exist_ok=True)
        setup_logging(level=config.log_level, debug=config.debug, log_dir=config.data_dir)
        logger = get_logger("main")
        logger.info(f"Running command: {args.command}")

        dispatcher = wire_components(config)
        response = run_command(args, dispatcher)

    except (ConfigurationError, ThumbnailTesterError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(1)

    if response.get("status") != "success":
        sys.exit(1)


if __name__ == "__main__":
    main()
