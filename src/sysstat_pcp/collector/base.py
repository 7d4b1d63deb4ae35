"""Base interface for activity collectors."""

from __future__ import annotations

import abc
from pathlib import Path

from ..sample.activity import ACTIVITY_SPECS, Activity, ActivityId

PROC = Path("/proc")


def read_proc_lines(name: str) -> list[str]:
    """Lines of ``/proc/<name>``, or an empty list where procfs is unavailable."""
    try:
        return (PROC / name).read_text(encoding="utf-8").splitlines()
    except OSError:
        return []


def proc_fields(name: str) -> dict[str, list[str]]:
    """``key -> remaining fields`` for key/value style procfs files (``stat``, ``meminfo``)."""
    result: dict[str, list[str]] = {}
    for line in read_proc_lines(name):
        parts = line.replace(":", " ").split()
        if parts:
            result[parts[0]] = parts[1:]
    return result


class BaseCollector(abc.ABC):
    """Fills the buffers of one activity with a fresh sample."""

    activity_id: ActivityId

    @property
    def name(self) -> str:
        """Collector name, the activity name it feeds."""
        return ACTIVITY_SPECS[self.activity_id].name

    @abc.abstractmethod
    def collect(self, activity: Activity, curr: int) -> None:
        """Store a new sample of *activity* into slot *curr*."""
