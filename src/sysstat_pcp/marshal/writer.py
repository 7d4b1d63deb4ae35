"""Write marshaller – renders sample buffers as archive values."""

from __future__ import annotations

import logging
from typing import Any

from ..instances import cpu_instance_name, interrupt_instance_name
from ..metrics import descriptors as d
from ..metrics.descriptors import MetricDesc
from ..metrics.identity import ValueType
from ..sample.activity import Activity, ActivityId
from ..sample.records import FileHeader, RecordHeader, StatsCpu
from . import fields as f
from .define import IRQ_SUM, ORDINAL_NAMED, MetricDefiner, memory_specs

logger = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF
_U64_MASK = 0xFFFFFFFFFFFFFFFF


def format_value(desc: MetricDesc, value: Any) -> str:
    """Render *value* as the text the archive stores for *desc*.

    Integers wrap to the descriptor's unsigned width, floating point values
    get six decimals and strings are passed through.
    """
    if desc.value_type == ValueType.U32:
        return "%d" % (int(value) & _U32_MASK)
    if desc.value_type == ValueType.U64:
        return "%d" % (int(value) & _U64_MASK)
    if desc.value_type in (ValueType.FLOAT, ValueType.DOUBLE):
        return "%f" % float(value)
    return str(value)


def cpu_interval(prev: StatsCpu, cur: StatsCpu) -> int:
    """Ticks elapsed on one CPU between two samples, never negative."""
    return max(0, cur.total() - prev.total())


def aggregate_interval(activity: Activity, curr: int, offline: set[int]) -> int:
    """Ticks elapsed on the whole machine, never zero.

    With more than one CPU this is the sum of the per-CPU intervals of the
    online CPUs; on a uniprocessor it is the aggregate record's own interval.
    """
    prev = curr ^ 1
    if activity.nr_ini > 1:
        deltot = sum(
            cpu_interval(activity.record(prev, i), activity.record(curr, i))
            for i in range(1, activity.nr[curr]) if i not in offline
        )
    else:
        deltot = cpu_interval(activity.record(prev, 0), activity.record(curr, 0))
    return deltot or 1


class WriteMarshaller:
    """Emits ``(metric, instance, text)`` triples for every active activity.

    Instances first seen after the session was defined (hot-plugged disks,
    new interrupt lines) are appended to their domain through the definer.
    """

    def __init__(self, definer: MetricDefiner) -> None:
        self.definer = definer
        self.registry = definer.registry
        self.archive = definer.archive
        self.display = definer.display
        # machine-wide ticks of the last CPU record written, the rate denominator
        self.cpu_ticks = 1
        self._handlers = {
            ActivityId.CPU: self._write_cpu,
            ActivityId.NET_SOFT: self._write_softnet,
            ActivityId.PWR_CPU: self._write_pwr_cpu,
            ActivityId.IRQ: self._write_irq,
            ActivityId.MEMORY: self._write_memory,
        }

    def _put(self, name: str, instance: str | None, value: Any) -> None:
        desc = self.registry.lookup_by_name(name)
        self.archive.put_value(name, instance, format_value(desc, value))

    # -- headers -----------------------------------------------------------

    def write_file_header(self, header: FileHeader) -> None:
        for spec in f.FILE_HEADER_FIELDS:
            self._put(spec.metric, None, spec.to_wire(getattr(header, spec.attr)))

    def write_record_header(self, header: RecordHeader) -> None:
        for spec in f.RECORD_HEADER_FIELDS:
            self._put(spec.metric, None, spec.to_wire(getattr(header, spec.attr)))

    # -- activities --------------------------------------------------------

    def write_activity(self, activity: Activity, curr: int) -> None:
        handler = self._handlers.get(activity.id)
        if handler is not None:
            handler(activity, curr)
        elif activity.id in f.ENTITY_FIELDS:
            self._write_entities(activity, curr)
        elif activity.id in f.SCALAR_FIELDS:
            if activity.nr[curr] > 0:
                self._write_specs(f.SCALAR_FIELDS[activity.id], activity.record(curr, 0), None)
        else:
            logger.debug("No writer for activity %s", activity.name)

    def _write_specs(self, specs: tuple[f.FieldSpec, ...], rec: Any, instance: str | None) -> None:
        for spec in specs:
            if isinstance(spec, f.Field):
                self._put(spec.metric, instance, spec.to_wire(getattr(rec, spec.attr)))
            elif isinstance(spec, f.Derived):
                self._put(spec.metric, instance, spec.compute(rec))
            else:
                for name, _, attr in spec.keys:
                    self._put(spec.metric, name, spec.to_wire(getattr(rec, attr)))

    def _write_memory(self, activity: Activity, curr: int) -> None:
        if activity.nr[curr] > 0:
            self._write_specs(memory_specs(self.display), activity.record(curr, 0), None)

    def _write_entities(self, activity: Activity, curr: int) -> None:
        naming = f.ENTITY_NAMING[activity.id]
        specs = f.ENTITY_FIELDS[activity.id]
        indom = activity.group.descs[0].indom
        for i, rec in enumerate(activity.records(curr)):
            name = naming.name_of(rec, i)
            if not activity.wants(name):
                continue
            if activity.id in ORDINAL_NAMED:
                self.definer.declare(indom, name, i)
            else:
                self.definer.ensure(indom, name)
            self._write_specs(specs, rec, name)

    # -- per-CPU activities ------------------------------------------------

    def _offline_cpus(self, activity: Activity, curr: int, is_zero: Any) -> set[int]:
        return {
            i for i in range(1, activity.nr[curr])
            if is_zero(activity.record(curr, i))
        }

    def _write_cpu(self, activity: Activity, curr: int) -> None:
        prev = curr ^ 1
        activity.nr_ini = max(activity.nr_ini, activity.nr[curr])

        offline: set[int] = set()
        if activity.nr_ini > 1:
            offline = self._offline_cpus(activity, curr, StatsCpu.is_zero)
        self.cpu_ticks = aggregate_interval(activity, curr, offline)
        logger.debug("cpu interval %d ticks, offline %s", self.cpu_ticks, sorted(offline))

        for i in range(activity.nr[curr]):
            if not activity.is_selected(i) or i in offline:
                continue
            cur = activity.record(curr, i)
            if i == 0:
                for leaf in d.CPU_FIELDS:
                    self._put(f"kernel.all.cpu.{leaf}", None, f.CPU_WIRE[leaf](cur))
                continue

            name = cpu_instance_name(i)
            self.definer.declare(d.INDOM_CPU, name, i - 1)
            if cpu_interval(activity.record(prev, i), cur) == 0:
                for leaf in d.CPU_FIELDS:
                    self._put(f"kernel.percpu.cpu.{leaf}", name, f.TICKLESS_VALUES[leaf])
                continue
            for leaf in d.CPU_FIELDS:
                self._put(f"kernel.percpu.cpu.{leaf}", name, f.CPU_WIRE[leaf](cur))

    def _write_softnet(self, activity: Activity, curr: int) -> None:
        activity.nr_ini = max(activity.nr_ini, activity.nr[curr])
        offline = self._offline_cpus(
            activity, curr, lambda rec: not any(getattr(rec, a) for _, _, a in f.SOFTNET_FIELDS)
        )
        for i in range(activity.nr[curr]):
            if not activity.is_selected(i) or i in offline:
                continue
            rec = activity.record(curr, i)
            if i == 0:
                for metric, _, attr in f.SOFTNET_FIELDS:
                    self._put(metric, None, getattr(rec, attr))
                continue
            name = cpu_instance_name(i)
            self.definer.declare(d.INDOM_CPU, name, i - 1)
            for _, metric, attr in f.SOFTNET_FIELDS:
                self._put(metric, name, getattr(rec, attr))

    def _write_pwr_cpu(self, activity: Activity, curr: int) -> None:
        for i in range(1, activity.nr[curr]):
            if not activity.is_selected(i):
                continue
            name = cpu_instance_name(i)
            self.definer.declare(d.INDOM_CPU, name, i - 1)
            self._put(f.CPUFREQ_METRIC, name, f.from_hundredths(activity.record(curr, i).cpufreq))

    def _write_irq(self, activity: Activity, curr: int) -> None:
        nr2 = activity.nr2
        buf = activity.buffers[curr]
        # a CPU row without a single interrupt is offline
        offline = {
            c for c in range(1, activity.nr[curr])
            if not any(buf[c * nr2 + i].irq_nr for i in range(max(nr2, 0)))
        }
        for i in range(max(nr2, 0)):
            label = buf[i].irq_name
            if not label or not activity.wants(label):
                continue
            for c in range(activity.nr[curr]):
                if not activity.is_selected(c) or c in offline:
                    continue
                count = buf[c * nr2 + i].irq_nr
                if c == 0:
                    if i == 0 and label == IRQ_SUM:
                        self._put("kernel.all.intr", None, count)
                    else:
                        self.definer.ensure(d.INDOM_INTERRUPTS, label)
                        self._put("kernel.all.interrupts.total", label, count)
                else:
                    name = interrupt_instance_name(label, c)
                    self.definer.ensure(d.INDOM_PERCPU_INTERRUPTS, name)
                    self._put("kernel.percpu.interrupts", name, count)
