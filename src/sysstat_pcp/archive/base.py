"""Base interface for metric archive writers."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any

from ..errors import ArchiveError
from ..metrics.descriptors import MetricDesc
from ..metrics.identity import PM_IN_NULL


@dataclass
class ValueSet:
    """All values of one metric within one archive record."""

    pmid: int
    values: list[tuple[int, Any]] = field(default_factory=list)

    @property
    def numval(self) -> int:
        return len(self.values)


class BaseArchiveWriter(abc.ABC):
    """Accepts metric/instance definitions and values, one record at a time.

    Subclasses persist what :meth:`write` hands to :meth:`_write_record`.
    Values are resolved against the definitions seen so far, so a value for
    an unknown metric or instance fails immediately.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, MetricDesc] = {}
        self._by_pmid: dict[int, MetricDesc] = {}
        self._units: dict[str, tuple[int, ...]] = {}
        self._instances: dict[int, dict[str, int]] = {}
        self._pending: list[tuple[MetricDesc, int, str]] = []

    # -- definitions -------------------------------------------------------

    def add_metric(self, desc: MetricDesc, units: tuple[int, ...]) -> None:
        known = self._metrics.get(desc.name)
        if known is not None:
            if known != desc:
                raise ArchiveError(f"metric {desc.name} redefined with a different descriptor")
            return
        self._metrics[desc.name] = desc
        self._by_pmid[desc.pmid] = desc
        self._units[desc.name] = units
        self._on_metric(desc, units)

    def add_instance(self, indom: int, name: str, inst: int) -> None:
        members = self._instances.setdefault(indom, {})
        if members.get(name) == inst:
            return
        members[name] = inst
        self._on_instance(indom, name, inst)

    def _on_metric(self, desc: MetricDesc, units: tuple[int, ...]) -> None:
        """Hook called once per new metric definition."""

    def _on_instance(self, indom: int, name: str, inst: int) -> None:
        """Hook called once per new instance."""

    def instance_name(self, indom: int, inst: int) -> str | None:
        for name, known in self._instances.get(indom, {}).items():
            if known == inst:
                return name
        return None

    # -- values ------------------------------------------------------------

    def put_value(self, name: str, instance: str | None, value: str) -> None:
        """Queue *value* (already rendered as text) for the next record."""
        desc = self._metrics.get(name)
        if desc is None:
            raise ArchiveError(f"value for undefined metric {name}")
        if desc.has_instances:
            if instance is None:
                raise ArchiveError(f"metric {name} needs an instance")
            inst = self._instances.get(desc.indom, {}).get(instance)
            if inst is None:
                raise ArchiveError(f"metric {name}: undefined instance {instance!r}")
        else:
            if instance is not None:
                raise ArchiveError(f"metric {name} has no instances (got {instance!r})")
            inst = PM_IN_NULL
        self._pending.append((desc, inst, value))

    def write(self, timestamp: float) -> int:
        """Flush queued values as one record. Returns the number of values written."""
        if not self._pending:
            return 0
        sets: dict[int, ValueSet] = {}
        for desc, inst, value in self._pending:
            vs = sets.get(desc.pmid)
            if vs is None:
                vs = sets[desc.pmid] = ValueSet(desc.pmid)
            vs.values.append((inst, value))
        count = len(self._pending)
        self._pending.clear()
        self._write_record(timestamp, list(sets.values()))
        return count

    @abc.abstractmethod
    def _write_record(self, timestamp: float, value_sets: list[ValueSet]) -> None:
        """Persist one record."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""
