"""Archive loader – reads JSONL metric archives back into value sets."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import ArchiveError
from ..metrics.descriptors import MetricDesc
from ..metrics.identity import Semantics, Units, ValueType
from .base import ValueSet

logger = logging.getLogger(__name__)


@dataclass
class ArchiveRecord:
    """One archive record: a timestamp and its value sets, in archive order."""

    timestamp: float
    value_sets: list[ValueSet] = field(default_factory=list)


@dataclass
class LoadedArchive:
    """Everything read from one archive file."""

    path: Path
    label: dict[str, Any] = field(default_factory=dict)
    metrics: dict[int, MetricDesc] = field(default_factory=dict)
    instances: list[tuple[int, str, int]] = field(default_factory=list)
    records: list[ArchiveRecord] = field(default_factory=list)


def _metric_from_line(obj: dict[str, Any]) -> MetricDesc:
    try:
        return MetricDesc(
            name=obj["name"],
            pmid=int(obj["pmid"]),
            value_type=ValueType[obj["value_type"]],
            semantics=Semantics[obj["semantics"]],
            units=Units.from_fields(obj["units"], bool(obj.get("ltor", True))),
            indom=int(obj["indom"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ArchiveError(f"malformed metric definition: {obj!r}") from exc


def _record_from_line(obj: dict[str, Any]) -> ArchiveRecord:
    try:
        record = ArchiveRecord(timestamp=float(obj["timestamp"]))
        for entry in obj["values"]:
            record.value_sets.append(ValueSet(
                pmid=int(entry["pmid"]),
                values=[(int(inst), value) for inst, value in entry["instances"]],
            ))
    except (KeyError, TypeError, ValueError) as exc:
        raise ArchiveError(f"malformed result record: {obj!r}") from exc
    return record


def load_archive(path: str | Path) -> LoadedArchive:
    """Parse a JSONL archive written by :class:`LocalArchiveWriter`.

    Lines that are not valid JSON are skipped; structurally invalid
    definitions or records raise :class:`ArchiveError`.
    """
    path = Path(path)
    archive = LoadedArchive(path=path)
    if not path.exists():
        logger.warning("Archive file not found: %s", path)
        return archive

    seen_instances: set[tuple[int, str, int]] = set()
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(obj, dict):
                continue
            kind = obj.get("kind")
            if kind == "label":
                if not archive.label:
                    archive.label = obj
            elif kind == "metric":
                desc = _metric_from_line(obj)
                archive.metrics[desc.pmid] = desc
            elif kind == "instance":
                try:
                    entry = (int(obj["indom"]), str(obj["name"]), int(obj["inst"]))
                except (KeyError, TypeError, ValueError) as exc:
                    raise ArchiveError(f"malformed instance definition: {obj!r}") from exc
                if entry not in seen_instances:
                    seen_instances.add(entry)
                    archive.instances.append(entry)
            elif kind == "result":
                archive.records.append(_record_from_line(obj))

    logger.info(
        "Loaded archive %s: %d metrics, %d instances, %d records",
        path, len(archive.metrics), len(archive.instances), len(archive.records),
    )
    return archive


def _archive_order(path: Path) -> tuple[str, int]:
    """Sort key for ``pcp-<YYYY-MM-DD>[-N].jsonl``: date, then session number."""
    parts = path.stem[len("pcp-"):].split("-")
    seq = parts[3] if len(parts) > 3 else "1"
    return "-".join(parts[:3]), int(seq) if seq.isdigit() else 0


def find_archives(directory: str | Path) -> list[Path]:
    """Archive files in *directory*, oldest first."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Archive directory does not exist: %s", directory)
        return []
    return sorted(directory.glob("pcp-*.jsonl"), key=_archive_order)
