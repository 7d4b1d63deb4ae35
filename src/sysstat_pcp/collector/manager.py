"""Collector manager that orchestrates sample collection."""

from __future__ import annotations

import logging
import platform
import threading
import time
from typing import Callable

import psutil

from ..config import CollectorConfig
from ..sample.activity import Activity, ActivityId
from ..sample.records import FileHeader, RecordHeader
from .base import BaseCollector
from .cpu import CpuCollector, CpuFreqCollector, InterruptCollector
from .disk import DiskCollector, FilesystemCollector, IoCollector
from .memory import MemoryCollector, SwapCollector
from .network import NetDevCollector, NetEdevCollector
from .sensors import BatteryCollector, FanCollector, TempCollector
from .system import PcswCollector, QueueCollector

logger = logging.getLogger(__name__)

COLLECTORS: dict[ActivityId, type[BaseCollector]] = {
    cls.activity_id: cls
    for cls in (
        CpuCollector,
        PcswCollector,
        InterruptCollector,
        SwapCollector,
        IoCollector,
        MemoryCollector,
        QueueCollector,
        DiskCollector,
        NetDevCollector,
        NetEdevCollector,
        CpuFreqCollector,
        FanCollector,
        TempCollector,
        FilesystemCollector,
        BatteryCollector,
    )
}

Sink = Callable[[int, FileHeader, RecordHeader], None]


def host_file_header() -> FileHeader:
    uname = platform.uname()
    return FileHeader(
        cpu_nr=psutil.cpu_count() or 1,
        sysname=uname.system,
        release=uname.release,
        nodename=uname.node,
        machine=uname.machine,
    )


def current_record_header() -> RecordHeader:
    return RecordHeader(uptime_cs=int(round((time.time() - psutil.boot_time()) * 100)))


class CollectorManager:
    """Runs the collectors of the selected activities on an interval.

    Each cycle fills buffer slot ``curr`` of every activity, then hands
    ``(curr, file header, record header)`` to the registered sinks and flips
    the slot. With ``config.count`` set, the loop ends after that many
    samples.
    """

    def __init__(self, config: CollectorConfig, activities: dict[ActivityId, Activity]) -> None:
        self._config = config
        self._collectors: list[tuple[BaseCollector, Activity]] = []
        self._sinks: list[Sink] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._curr = 0
        self.samples = 0
        self.file_header = host_file_header()

        for act_id, activity in activities.items():
            cls = COLLECTORS.get(act_id)
            if cls is None:
                logger.warning("No collector for activity %s; it will stay empty", activity.name)
                continue
            self._collectors.append((cls(), activity))

    @property
    def collector_names(self) -> list[str]:
        return [collector.name for collector, _ in self._collectors]

    def add_sink(self, sink: Sink) -> None:
        """Register a callback to receive every finished sample."""
        self._sinks.append(sink)

    def collect_once(self) -> tuple[int, RecordHeader]:
        """Run all collectors once. Returns the filled slot and its record header."""
        curr = self._curr
        header = current_record_header()
        for collector, activity in self._collectors:
            try:
                collector.collect(activity, curr)
            except Exception:
                logger.exception("Collector %s failed", collector.name)
        self._curr ^= 1
        self.samples += 1
        return curr, header

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            curr, header = self.collect_once()
            for sink in self._sinks:
                try:
                    sink(curr, self.file_header, header)
                except Exception:
                    logger.exception("Sink failed")
            if self._config.count and self.samples >= self._config.count:
                break
            self._stop_event.wait(self._config.interval_seconds)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start collecting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info("CollectorManager started (interval=%.1fs)", self._config.interval_seconds)

    def stop(self) -> None:
        """Stop background collection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("CollectorManager stopped after %d samples", self.samples)
