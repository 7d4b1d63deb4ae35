"""Metric and instance definition: registers what an archive will contain."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..archive.base import BaseArchiveWriter
from ..config import DisplayConfig
from ..instances import InstanceDomainManager, cpu_instance_name, interrupt_instance_name
from ..metrics import descriptors as d
from ..metrics.descriptors import MetricDesc, MetricGroup
from ..metrics.registry import MetricRegistry
from ..sample.activity import Activity, ActivityId
from . import fields as f

logger = logging.getLogger(__name__)

CPU_METRIC_COUNT = len(d.CPU_FIELDS)
SOFTNET_METRIC_COUNT = len(d.SOFTNET_FIELDS)
IRQ_SUM = "sum"

# Activities whose instance names derive from the buffer position.
ORDINAL_NAMED = frozenset({
    ActivityId.PWR_FAN,
    ActivityId.PWR_TEMP,
    ActivityId.PWR_IN,
    ActivityId.PWR_USB,
})


def memory_specs(display: DisplayConfig) -> tuple[f.FieldSpec, ...]:
    """Memory fields enabled by the display options."""
    specs: tuple[f.FieldSpec, ...] = ()
    if display.memory:
        specs += f.MEMORY_RAM_FIELDS
        if display.memory_all:
            specs += f.MEMORY_ALL_FIELDS
    if display.swap:
        specs += f.MEMORY_SWAP_FIELDS
    return specs


def irq_labels(activity: Activity, curr: int) -> list[str]:
    """Interrupt labels to define: the item list, or the labels sampled on row 0."""
    if activity.item_list:
        labels = list(activity.item_list)
    else:
        columns = max(activity.nr2, 0)
        labels = [rec.irq_name for rec in activity.buffers[curr][:columns] if rec.irq_name]
    return [label for label in labels if activity.wants(label)]


class MetricDefiner:
    """Adds metrics and instances to an archive, once per session.

    Every group's :class:`SubsystemState` records which of its metrics were
    already handed to the archive, so repeated calls are harmless.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        instances: InstanceDomainManager,
        archive: BaseArchiveWriter,
        display: DisplayConfig | None = None,
    ) -> None:
        self.registry = registry
        self.instances = instances
        self.archive = archive
        self.display = display or DisplayConfig()

    # -- primitives --------------------------------------------------------

    def add_metric(self, group: MetricGroup | str, index: int) -> MetricDesc:
        """Add metric *index* of *group* to the archive if not done yet."""
        desc = self.registry.desc_at(group, index)
        state = self.registry.state_for(group)
        if index not in state.defined:
            self.archive.add_metric(desc, self.registry.units_of(desc))
            state.defined.add(index)
            logger.debug("Defined metric %s", desc.name)
        return desc

    def add_metric_named(self, group: MetricGroup, name: str) -> MetricDesc:
        return self.add_metric(group, group.index_of(name))

    def add_instance(self, group: MetricGroup | str, index: int, name: str, inst: int) -> bool:
        """Declare instance *name*/*inst* in the domain of metric *index* of *group*."""
        desc = self.registry.desc_at(group, index)
        return self.declare(desc.indom, name, inst)

    def declare(self, indom: int, name: str, inst: int) -> bool:
        created = self.instances.declare_instance(indom, name, inst)
        if created:
            self.archive.add_instance(indom, name, inst)
        return created

    def ensure(self, indom: int, name: str) -> int:
        """Index of *name* in *indom*, appending (and archiving) it when new."""
        inst, created = self.instances.ensure_instance(indom, name)
        if created:
            self.archive.add_instance(indom, name, inst)
            logger.debug("New instance %r (%d) in domain %#x", name, inst, indom)
        return inst

    def add_group(self, group: MetricGroup, names: Iterable[str] | None = None) -> None:
        if names is None:
            for index in range(group.count):
                self.add_metric(group, index)
        else:
            for name in names:
                self.add_metric_named(group, name)

    # -- headers -----------------------------------------------------------

    def define_headers(self) -> None:
        self.add_group(d.FILE_HEADER)
        self.add_group(d.RECORD_HEADER)

    # -- activities --------------------------------------------------------

    def define_all(self, activities: Iterable[Activity], curr: int) -> None:
        self.define_headers()
        for activity in activities:
            self.define_activity(activity, curr)

    def define_activity(self, activity: Activity, curr: int) -> None:
        act_id = activity.id
        if act_id in (ActivityId.CPU, ActivityId.NET_SOFT, ActivityId.PWR_CPU):
            self._define_cpu_style(activity, curr)
        elif act_id == ActivityId.IRQ:
            self._define_irq(activity, curr)
        elif act_id == ActivityId.MEMORY:
            self.add_group(activity.group, f.field_metrics(memory_specs(self.display)))
        elif act_id in f.ENTITY_FIELDS:
            self._define_entities(activity, curr)
        elif act_id in f.SCALAR_FIELDS:
            for spec in f.SCALAR_FIELDS[act_id]:
                if isinstance(spec, f.Keyed):
                    desc = self.registry.lookup_by_name(spec.metric)
                    for name, inst in f.keyed_instances(spec):
                        self.declare(desc.indom, name, inst)
            self.add_group(activity.group)
        else:
            self.add_group(activity.group)

    def _define_cpu_style(self, activity: Activity, curr: int) -> None:
        group = activity.group
        if activity.id == ActivityId.CPU:
            aggregate, per_cpu = range(CPU_METRIC_COUNT), range(CPU_METRIC_COUNT, group.count)
        elif activity.id == ActivityId.NET_SOFT:
            aggregate = range(SOFTNET_METRIC_COUNT)
            per_cpu = range(SOFTNET_METRIC_COUNT, group.count)
        else:
            aggregate, per_cpu = range(0), range(group.count)

        for ordinal in range(max(activity.nr_ini, activity.nr[curr])):
            if not activity.is_selected(ordinal):
                continue
            if ordinal == 0:
                for index in aggregate:
                    self.add_metric(group, index)
                continue
            self.declare(d.INDOM_CPU, cpu_instance_name(ordinal), ordinal - 1)
            for index in per_cpu:
                self.add_metric(group, index)

    def _define_irq(self, activity: Activity, curr: int) -> None:
        group = activity.group
        labels = irq_labels(activity, curr)
        if activity.is_selected(0):
            inst = 0
            for label in labels:
                if label == IRQ_SUM:
                    self.add_metric(group, 0)
                else:
                    self.add_metric(group, 1)
                    self.add_instance(group, 1, label, inst)
                    inst += 1

        for ordinal in range(1, max(activity.nr_ini, activity.nr[curr])):
            if not activity.is_selected(ordinal):
                continue
            self.add_metric(group, 2)
            base = (ordinal - 1) * len(labels)
            for k, label in enumerate(labels):
                self.add_instance(group, 2, interrupt_instance_name(label, ordinal), base + k)

    def _define_entities(self, activity: Activity, curr: int) -> None:
        naming = f.ENTITY_NAMING[activity.id]
        group = activity.group
        indom = group.descs[0].indom
        ordinal_named = activity.id in ORDINAL_NAMED
        if activity.item_list and not ordinal_named:
            for name in activity.item_list:
                if activity.wants(name):
                    self.ensure(indom, name)
            self.add_group(group)
            return
        for i, rec in enumerate(activity.records(curr)):
            name = naming.name_of(rec, i)
            if not activity.wants(name):
                continue
            if ordinal_named:
                self.declare(indom, name, i)
            else:
                self.ensure(indom, name)
        self.add_group(group)
