# =============================================================================
# Container Backup Runner
# =============================================================================
# Command-line entry point: loads settings from the environment (or .env),
# opens the source and backup containers and runs a backup or cleaning job.
# =============================================================================

import argparse
import asyncio
import importlib
import json
import logging
import sys
from typing import Any, Callable, Optional, Sequence

from pydantic import ValidationError

from docbackup.engine import ContainerBackupJob
from docbackup.errors import BackupError
from docbackup.logs import attach_run_log_file, configure_logging, detach_handler
from docbackup.models import BackupSettings, QuerySpec, RunMode
from docbackup.mongo_store import MongoContainer

logger = logging.getLogger("docbackup.runner")


def load_callable(reference: str) -> Callable[..., Any]:
    """
    Import a callable from a "package.module:function" reference.

    Raises:
        ValueError: If the reference is malformed or does not name a callable
        ImportError: If the module cannot be imported
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Expected 'module:function', got {reference!r}")

    module = importlib.import_module(module_name)
    func = getattr(module, attribute, None)
    if not callable(func):
        raise ValueError(f"{reference!r} is not a callable")
    return func


def parse_parameter(raw: str) -> tuple[str, Any]:
    """
    Parse a "@name=value" query parameter.

    Values are decoded as JSON when possible (numbers, booleans, null,
    objects) and kept as plain strings otherwise.
    """
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected '@name=value', got {raw!r}")
    if not name.startswith("@"):
        name = f"@{name}"
    try:
        return name, json.loads(value)
    except json.JSONDecodeError:
        return name, value


def parse_filter(raw: str) -> dict:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Filter is not valid JSON: {e}")
    if not isinstance(value, dict):
        raise argparse.ArgumentTypeError("Filter must be a JSON object")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Back up (and optionally clean) a document container")
    parser.add_argument("command", choices=["backup", "clean"], help="Workflow to run")
    parser.add_argument("--job-name", default="ContainerBackup", help="Name tagging every derived document")
    parser.add_argument("--filter", type=parse_filter, default={}, help="Source filter as a JSON object")
    parser.add_argument(
        "--param",
        type=parse_parameter,
        action="append",
        default=[],
        help="Filter parameter as @name=value (repeatable)",
    )
    parser.add_argument("--page-size", type=int, default=100, help="Documents fetched per page")
    parser.add_argument(
        "--run-mode",
        default=RunMode.SINGLE.value,
        help="'single' handles one document at a time, 'multi' a whole page at a time",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Perform writes. Without this flag the run is a dry run",
    )
    parser.add_argument("--cleaner", help="Cleaner as module:function (required for clean)")
    parser.add_argument("--tester", help="Tester as module:function (optional for clean)")
    return parser


async def run_job(args: argparse.Namespace, settings: BackupSettings) -> None:
    """Open both containers and run the requested workflow."""
    container_options = {
        "partition_key_field": settings.partition_key_field,
        "id_field": settings.id_field,
        "request_charge": settings.request_charge,
        "server_selection_timeout_ms": settings.server_selection_timeout_ms,
    }
    source = MongoContainer.from_settings(settings.source, **container_options)
    destination = MongoContainer.from_settings(settings.destination, **container_options)

    job = ContainerBackupJob(
        args.job_name,
        source,
        destination,
        partition_key_field=settings.partition_key_field,
        id_field=settings.id_field,
    )
    options = {
        "query": QuerySpec(filter=args.filter, parameters=dict(args.param)),
        "page_size": args.page_size,
        "dry_run": not args.execute,
        "run_mode": args.run_mode,
    }

    if args.command == "clean":
        cleaner = load_callable(args.cleaner)
        tester = load_callable(args.tester) if args.tester else None
        await job.clean(options, cleaner, tester)
    else:
        await job.run(options)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "clean" and not args.cleaner:
        parser.error("clean requires --cleaner")
    if args.tester and args.command != "clean":
        parser.error("--tester is only valid with clean")

    configure_logging()

    try:
        settings = BackupSettings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    handler = attach_run_log_file(args.job_name, settings.log_dir)
    try:
        logger.info(f"Starting {args.command} job")
        asyncio.run(run_job(args, settings))
    except (BackupError, ImportError, ValueError) as e:
        print(f"{args.command} job failed: {e}", file=sys.stderr)
        return 1
    finally:
        detach_handler(handler)

    return 0


if __name__ == "__main__":
    sys.exit(main())
