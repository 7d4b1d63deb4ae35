"""Local archive writer – stores metric archives as JSONL files."""

from __future__ import annotations

import json
import logging
import socket
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import ArchiveConfig
from ..metrics.descriptors import MetricDesc
from .base import BaseArchiveWriter, ValueSet

logger = logging.getLogger(__name__)

ARCHIVE_MAGIC = "sysstat-pcp-archive"
ARCHIVE_VERSION = 1


def metric_line(desc: MetricDesc, units: tuple[int, ...], ltor: bool) -> dict[str, Any]:
    return {
        "kind": "metric",
        "name": desc.name,
        "pmid": desc.pmid,
        "value_type": desc.value_type.name,
        "semantics": desc.semantics.name,
        "indom": desc.indom,
        "units": list(units),
        "ltor": ltor,
    }


class LocalArchiveWriter(BaseArchiveWriter):
    """Writes archive records to JSONL files on disk.

    Without a fixed ``path`` one file per day is created inside the
    configured *output_dir*, with a ``-N`` suffix when another session already
    wrote that day's file; a fixed ``path`` is overwritten. Every file starts
    with a label line followed by all metric and instance definitions known
    at that point, so each file can be read on its own.
    """

    def __init__(self, config: ArchiveConfig, ltor: bool) -> None:
        super().__init__()
        self._config = config
        self._ltor = ltor
        self._hostname = config.hostname or socket.gethostname()
        self._fixed_path = Path(config.path) if config.path else None
        self._output_dir = Path(config.output_dir)
        if self._fixed_path is not None:
            self._fixed_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        self._fh = None
        self._current_date: str | None = None
        self.paths: list[Path] = []
        logger.info("LocalArchiveWriter initialized → %s", self._fixed_path or self._output_dir)

    def _daily_path(self, today: str) -> Path:
        """First unused ``pcp-<date>[-N].jsonl`` name for this session."""
        filepath = self._output_dir / f"pcp-{today}.jsonl"
        seq = 1
        while filepath.exists():
            seq += 1
            filepath = self._output_dir / f"pcp-{today}-{seq}.jsonl"
        return filepath

    def _ensure_file(self) -> None:
        today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        if self._fh is not None and (self._fixed_path is not None or self._current_date == today):
            return
        if self._fh is not None:
            self._fh.close()
        if self._fixed_path is not None:
            filepath = self._fixed_path
            if filepath.exists():
                logger.warning("Overwriting existing archive %s", filepath)
        else:
            filepath = self._daily_path(today)
        # each file holds exactly one session
        self._fh = open(filepath, "w", encoding="utf-8")  # noqa: SIM115
        self._current_date = today
        self.paths.append(filepath)
        self._emit({
            "kind": "label",
            "magic": ARCHIVE_MAGIC,
            "version": ARCHIVE_VERSION,
            "hostname": self._hostname,
            "created": time.time(),
        })
        for name, desc in self._metrics.items():
            self._emit(metric_line(desc, self._units[name], self._ltor))
        for indom, members in self._instances.items():
            for inst_name, inst in members.items():
                self._emit({"kind": "instance", "indom": indom, "inst": inst, "name": inst_name})
        logger.info("Archive file opened: %s", filepath)

    def _emit(self, obj: dict[str, Any]) -> None:
        assert self._fh is not None
        self._fh.write(json.dumps(obj) + "\n")

    def _on_metric(self, desc: MetricDesc, units: tuple[int, ...]) -> None:
        if self._fh is not None:
            self._emit(metric_line(desc, units, self._ltor))

    def _on_instance(self, indom: int, name: str, inst: int) -> None:
        if self._fh is not None:
            self._emit({"kind": "instance", "indom": indom, "inst": inst, "name": name})

    def _write_record(self, timestamp: float, value_sets: list[ValueSet]) -> None:
        self._ensure_file()
        self._emit({
            "kind": "result",
            "timestamp": timestamp,
            "values": [
                {
                    "pmid": vs.pmid,
                    "name": self._by_pmid[vs.pmid].name,
                    "instances": [[inst, value] for inst, value in vs.values],
                }
                for vs in value_sets
            ],
        })
        assert self._fh is not None
        self._fh.flush()

    def shutdown(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        logger.info("LocalArchiveWriter shut down")
