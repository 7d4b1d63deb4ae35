"""CLI interface for sysstat_pcp."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from . import __version__
from .config import SysstatPcpConfig, load_config
from .errors import SysstatPcpError
from .marshal.reader import ReadOutcome
from .metrics.registry import MetricRegistry, default_registry

logger = logging.getLogger(__name__)


def _export_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.count is not None:
        overrides.setdefault("collector", {})["count"] = args.count
    if args.interval is not None:
        overrides.setdefault("collector", {})["interval_seconds"] = args.interval
    if args.output:
        overrides.setdefault("archive", {})["path"] = args.output
    return overrides


def _registry(cfg: SysstatPcpConfig) -> MetricRegistry:
    try:
        return default_registry(cfg.archive.ltor())
    except ValueError as exc:
        raise SysstatPcpError(str(exc)) from exc


def _open_sessions(cfg: SysstatPcpConfig, activity_names: list[str]) -> tuple[list, dict]:
    """One export session per archive writer, all sharing the same activities."""
    from .archive.local import LocalArchiveWriter
    from .sample.activity import build_activities
    from .session import ExportSession

    activities = build_activities(
        activity_names,
        cpus=cfg.collector.cpus,
        items=cfg.collector.item_filters(),
    )
    ltor = cfg.archive.ltor()
    sessions = []

    if cfg.archive.enabled:
        registry = default_registry(ltor)
        writer = LocalArchiveWriter(cfg.archive, registry.ltor)
        sessions.append(ExportSession(registry, activities, writer, cfg.display))

    if cfg.mode == "online":
        from .archive.otel import OtelArchiveWriter
        registry = default_registry(ltor)
        sessions.append(
            ExportSession(registry, activities, OtelArchiveWriter(cfg.otel), cfg.display)
        )
    return sessions, activities


def _cmd_export(args: argparse.Namespace) -> None:
    """Sample the system and write an archive."""
    cfg = load_config(args.config, _export_overrides(args))

    from .collector.manager import CollectorManager

    try:
        sessions, activities = _open_sessions(cfg, cfg.collector.activities)
    except ValueError as exc:
        raise SysstatPcpError(str(exc)) from exc
    if not sessions:
        print("Nothing to export: the archive is disabled and mode is not 'online'.")
        return

    manager = CollectorManager(cfg.collector, activities)
    for session in sessions:
        manager.add_sink(session.write_sample)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    manager.start()
    print(
        f"sysstat_pcp exporting {len(activities)} activities "
        f"(mode={cfg.mode}, interval={cfg.collector.interval_seconds}s)"
    )
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop and manager.running:
            time.sleep(0.5)
    finally:
        manager.stop()
        for session in sessions:
            session.close()
    print(f"\nExport stopped after {manager.samples} samples.")


def _cmd_import(args: argparse.Namespace) -> None:
    """Replay an archive and summarize what was read."""
    cfg = load_config(args.config)

    from .archive.loader import find_archives, load_archive
    from .session import ImportSession

    path = Path(args.archive)
    paths = find_archives(path) if path.is_dir() else [path]
    if not paths:
        print(f"No archives found in {path}")
        return

    registry = _registry(cfg)
    for archive_path in paths:
        archive = load_archive(archive_path)
        session = ImportSession(registry, archive)
        rows: list[tuple[int, float, Counter[ReadOutcome]]] = []
        for number, (record, _curr, outcomes) in enumerate(session.replay(), start=1):
            rows.append((number, record.timestamp, outcomes))

        print(
            f"Loaded {archive_path}: {len(archive.metrics)} metrics, "
            f"{len(archive.instances)} instances, {len(rows)} records"
        )
        if session.mismatches:
            print(f"  {session.mismatches} descriptor mismatches (see log)")
        if not args.no_table:
            print_import_summary(session, rows)


def print_import_summary(session: Any, rows: list[tuple[int, float, Counter[ReadOutcome]]]) -> None:
    """Pretty-print per-record outcomes and the activities filled."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Archive records", show_lines=False)
    table.add_column("Record", justify="right", style="cyan", width=8)
    table.add_column("Timestamp (UTC)", style="magenta", width=26)
    table.add_column("Stored", justify="right", width=8)
    table.add_column("Derived", justify="right", width=8)
    table.add_column("Empty", justify="right", width=8)
    for number, timestamp, outcomes in rows:
        table.add_row(
            str(number),
            datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat(timespec="seconds"),
            str(outcomes[ReadOutcome.STORED]),
            str(outcomes[ReadOutcome.DERIVED]),
            str(outcomes[ReadOutcome.EMPTY]),
        )

    activities = Table(title="Activities", show_lines=False)
    activities.add_column("Activity", style="green", width=14)
    activities.add_column("Entities", justify="right", width=10)
    activities.add_column("Allocated", justify="right", width=10)
    last = (len(rows) - 1) % 2 if rows else 0
    for activity in session.activities.values():
        activities.add_row(activity.name, str(max(activity.nr[last], 0)), str(activity.nr_allocated))

    console = Console()
    console.print(table)
    console.print(activities)


def print_metrics(registry: MetricRegistry, group: str | None = None) -> None:
    """Pretty-print registered metrics, optionally for one group only."""
    from rich.console import Console
    from rich.table import Table

    from .metrics.identity import format_id, format_indom

    groups = [registry.group(group)] if group else registry.groups
    table = Table(title="Registered metrics", show_lines=False)
    table.add_column("Group", style="magenta", width=14)
    table.add_column("Metric", style="green", width=40)
    table.add_column("PMID", justify="right", style="cyan", width=10)
    table.add_column("Type", width=7)
    table.add_column("Semantics", width=9)
    table.add_column("Indom", width=14)
    table.add_column("Units", width=14)
    for metric_group in groups:
        for desc in metric_group.descs:
            table.add_row(
                metric_group.name,
                desc.name,
                format_id(desc.pmid),
                desc.value_type.name,
                desc.semantics.name,
                format_indom(desc.indom),
                desc.units.label(),
            )
    console = Console()
    console.print(table)
    console.print(f"  {sum(g.count for g in groups)} metrics in {len(groups)} groups")


def _cmd_metrics(args: argparse.Namespace) -> None:
    cfg = load_config(args.config)
    print_metrics(_registry(cfg), args.group)


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"sysstat_pcp {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the sysstat-pcp CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        prog="sysstat-pcp",
        description="Write system activity samples as PCP-style metric archives",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to sysstat_pcp.yaml")
    sub = parser.add_subparsers(dest="command")

    # export
    export_p = sub.add_parser("export", help="Sample system activity into an archive")
    export_p.add_argument("--count", type=int, default=None, help="Number of samples (0 = forever)")
    export_p.add_argument("--interval", type=float, default=None, help="Seconds between samples")
    export_p.add_argument("--output", "-o", default=None, help="Archive file path")
    export_p.set_defaults(func=_cmd_export)

    # import
    import_p = sub.add_parser("import", help="Replay an archive into activity buffers")
    import_p.add_argument("archive", help="Archive file or directory of daily archives")
    import_p.add_argument("--no-table", action="store_true", help="Skip rich table output")
    import_p.set_defaults(func=_cmd_import)

    # metrics
    metrics_p = sub.add_parser("metrics", help="List the registered metrics")
    metrics_p.add_argument("--group", default=None, help="Only show this metric group")
    metrics_p.set_defaults(func=_cmd_metrics)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except SysstatPcpError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
