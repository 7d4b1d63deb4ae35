"""Read dispatcher – routes archive value sets back into sample buffers."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..archive.base import ValueSet
from ..errors import DecodeError, RegistryError, UnknownActivityError, UnknownMetricError
from ..instances import InstanceDomainManager, split_interrupt_instance
from ..metrics import descriptors as d
from ..metrics.descriptors import MetricDesc
from ..metrics.identity import ValueType, format_id
from ..metrics.registry import MetricRegistry
from ..sample.activity import ACTIVITY_SPECS, Activity, ActivityId
from ..sample.records import FileHeader, RecordHeader
from . import fields as f
from .define import IRQ_SUM

logger = logging.getLogger(__name__)

_U32_MAX = 0xFFFFFFFF
_U64_MAX = 0xFFFFFFFFFFFFFFFF

FILE_HEADER_OWNER = "file_header"
RECORD_HEADER_OWNER = "record_header"

# Which activity (or header) every metric group feeds on the read path.
GROUP_OWNERS: dict[str, ActivityId | str] = {
    d.FILE_HEADER.name: FILE_HEADER_OWNER,
    d.RECORD_HEADER.name: RECORD_HEADER_OWNER,
} | {spec.group.name: spec.id for spec in ACTIVITY_SPECS.values()}


class ReadOutcome(enum.Enum):
    """What :meth:`ReadDispatcher.dispatch` did with a value set."""

    STORED = "stored"
    DERIVED = "derived"
    EMPTY = "empty"


# ---------------------------------------------------------------------------
# Typed extraction
# ---------------------------------------------------------------------------


def _raw_value(value_set: ValueSet, index: int) -> tuple[int, Any]:
    if index < 0 or index >= value_set.numval:
        raise DecodeError(
            f"{format_id(value_set.pmid)}: no value at index {index} "
            f"({value_set.numval} values)"
        )
    return value_set.values[index]


def _expect(desc: MetricDesc, value_type: ValueType) -> None:
    if desc.value_type != value_type:
        raise DecodeError(
            f"{desc.name} is {desc.value_type.name}, cannot be read as {value_type.name}"
        )


def _as_int(desc: MetricDesc, raw: Any, limit: int) -> int:
    if isinstance(raw, bool):
        raise DecodeError(f"{desc.name}: boolean value {raw!r}")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise DecodeError(f"{desc.name}: non-integral value {raw!r}")
        value = int(raw)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise DecodeError(f"{desc.name}: cannot parse {raw!r} as an integer") from None
    if value < 0 or value > limit:
        raise DecodeError(f"{desc.name}: value {value} out of range")
    return value


def _as_float(desc: MetricDesc, raw: Any) -> float:
    if isinstance(raw, bool):
        raise DecodeError(f"{desc.name}: boolean value {raw!r}")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise DecodeError(f"{desc.name}: cannot parse {raw!r} as a number") from None


def read_u32(value_set: ValueSet, index: int, desc: MetricDesc) -> int:
    _expect(desc, ValueType.U32)
    return _as_int(desc, _raw_value(value_set, index)[1], _U32_MAX)


def read_u64(value_set: ValueSet, index: int, desc: MetricDesc) -> int:
    _expect(desc, ValueType.U64)
    return _as_int(desc, _raw_value(value_set, index)[1], _U64_MAX)


def read_float(value_set: ValueSet, index: int, desc: MetricDesc) -> float:
    _expect(desc, ValueType.FLOAT)
    return _as_float(desc, _raw_value(value_set, index)[1])


def read_double(value_set: ValueSet, index: int, desc: MetricDesc) -> float:
    _expect(desc, ValueType.DOUBLE)
    return _as_float(desc, _raw_value(value_set, index)[1])


def read_str(value_set: ValueSet, index: int, desc: MetricDesc) -> str:
    _expect(desc, ValueType.STRING)
    raw = _raw_value(value_set, index)[1]
    if not isinstance(raw, str):
        raise DecodeError(f"{desc.name}: expected a string, got {raw!r}")
    return raw


_READERS: dict[ValueType, Callable[[ValueSet, int, MetricDesc], Any]] = {
    ValueType.U32: read_u32,
    ValueType.U64: read_u64,
    ValueType.FLOAT: read_float,
    ValueType.DOUBLE: read_double,
    ValueType.STRING: read_str,
}


def read_value(value_set: ValueSet, index: int, desc: MetricDesc) -> Any:
    """Value *index* of *value_set*, decoded according to *desc*'s type."""
    return _READERS[desc.value_type](value_set, index, desc)


def _convert(desc: MetricDesc, convert: Callable[[Any], Any], value: Any) -> Any:
    try:
        return convert(value)
    except ValueError as exc:
        raise DecodeError(f"{desc.name}: {exc}") from None


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Route:
    desc: MetricDesc
    owner: ActivityId | str


def _spec_index(specs: tuple[f.FieldSpec, ...]) -> dict[str, f.FieldSpec]:
    return {spec.metric: spec for spec in specs}


class ReadDispatcher:
    """Decodes value sets and stores them in the owning activity's buffers.

    The identity -> route map is built once from the registry; every
    registered group must have an owner in :data:`GROUP_OWNERS`. Call
    :meth:`begin_record` before the value sets of each archive record so
    that entity counts are recomputed per record.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        activities: dict[ActivityId, Activity],
        instances: InstanceDomainManager,
        file_header: FileHeader | None = None,
        record_header: RecordHeader | None = None,
    ) -> None:
        self.registry = registry
        self.activities = activities
        self.instances = instances
        self.file_header = file_header or FileHeader()
        self.record_header = record_header or RecordHeader()
        self.routes: dict[int, Route] = {}
        for group in registry.groups:
            owner = GROUP_OWNERS.get(group.name)
            if owner is None:
                raise RegistryError(f"metric group {group.name} has no read handler")
            for desc in group.descs:
                self.routes[desc.pmid] = Route(desc, owner)

        self._scalar_specs = {
            act_id: _spec_index(specs) for act_id, specs in f.SCALAR_FIELDS.items()
        }
        self._scalar_specs[ActivityId.MEMORY] = _spec_index(f.MEMORY_FIELDS)
        self._entity_specs = {
            act_id: _spec_index(specs) for act_id, specs in f.ENTITY_FIELDS.items()
        }
        self._header_specs = _spec_index(f.FILE_HEADER_FIELDS + f.RECORD_HEADER_FIELDS)
        self._softnet = {
            metric: attr
            for agg, per_cpu, attr in f.SOFTNET_FIELDS
            for metric in (agg, per_cpu)
        }
        self._irq_labels: list[str] | None = None
        self._irq_rows = 1
        self._touched: set[ActivityId] = set()

        self._handlers: dict[ActivityId, Callable[[Route, ValueSet, Activity, int], ReadOutcome]] = {
            ActivityId.CPU: self._read_cpu,
            ActivityId.NET_SOFT: self._read_softnet,
            ActivityId.PWR_CPU: self._read_pwr_cpu,
            ActivityId.IRQ: self._read_irq,
        }
        logger.debug("Read dispatcher routes %d metrics", len(self.routes))

    def begin_record(self) -> None:
        """Start a new archive record."""
        self._touched.clear()

    def _reallocate(self, activity: Activity, curr: int, count: int) -> None:
        if activity.id in self._touched:
            count = max(count, activity.nr[curr])
        self._touched.add(activity.id)
        activity.reallocate(curr, count)

    # -- entry point -------------------------------------------------------

    def dispatch(self, value_set: ValueSet, curr: int) -> ReadOutcome:
        route = self.routes.get(value_set.pmid)
        if route is None:
            raise UnknownMetricError(f"no metric with identity {format_id(value_set.pmid)}")
        if value_set.numval == 0:
            return ReadOutcome.EMPTY

        if route.owner == FILE_HEADER_OWNER:
            return self._read_header(route, value_set, self.file_header)
        if route.owner == RECORD_HEADER_OWNER:
            return self._read_header(route, value_set, self.record_header)

        activity = self.activities.get(route.owner)
        if activity is None:
            raise UnknownActivityError(
                f"{route.desc.name} belongs to activity {route.owner.name.lower()}, "
                "which is not active"
            )
        handler = self._handlers.get(activity.id)
        if handler is not None:
            return handler(route, value_set, activity, curr)
        if activity.id in self._entity_specs:
            return self._read_entities(route, value_set, activity, curr)
        return self._read_scalar(route, value_set, activity, curr)

    # -- headers and single-record activities ------------------------------

    def _read_header(self, route: Route, value_set: ValueSet, header: Any) -> ReadOutcome:
        spec = self._header_specs[route.desc.name]
        value = read_value(value_set, 0, route.desc)
        setattr(header, spec.attr, _convert(route.desc, spec.from_wire, value))
        return ReadOutcome.STORED

    def _read_scalar(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        spec = self._scalar_specs[activity.id][route.desc.name]
        if isinstance(spec, f.Derived):
            return ReadOutcome.DERIVED
        self._reallocate(activity, curr, 1)
        rec = activity.record(curr, 0)
        if isinstance(spec, f.Field):
            value = read_value(value_set, 0, route.desc)
            setattr(rec, spec.attr, _convert(route.desc, spec.from_wire, value))
            return ReadOutcome.STORED
        for index, (inst, _) in enumerate(value_set.values):
            attr = spec.attr_for(inst)
            if attr is None:
                raise DecodeError(f"{route.desc.name}: unknown instance {inst}")
            value = read_value(value_set, index, route.desc)
            setattr(rec, attr, _convert(route.desc, spec.from_wire, value))
        return ReadOutcome.STORED

    # -- per-entity activities ---------------------------------------------

    def _read_entities(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        spec = self._entity_specs[activity.id][route.desc.name]
        if isinstance(spec, f.Derived):
            return ReadOutcome.DERIVED
        if not isinstance(spec, f.Field):
            raise DecodeError(f"{route.desc.name}: no per-entity field mapping")
        naming = f.ENTITY_NAMING[activity.id]
        indom = route.desc.indom
        count = max(value_set.numval, max(inst for inst, _ in value_set.values) + 1)
        self._reallocate(activity, curr, count)
        for index, (inst, _) in enumerate(value_set.values):
            if inst < 0:
                raise DecodeError(f"{route.desc.name}: negative instance {inst}")
            try:
                name = self.instances.name_of(indom, inst)
            except KeyError as exc:
                raise DecodeError(f"{route.desc.name}: {exc.args[0]}") from None
            rec = activity.record(curr, inst)
            try:
                naming.restore(rec, name)
            except ValueError as exc:
                raise DecodeError(f"{route.desc.name}: {exc}") from None
            value = read_value(value_set, index, route.desc)
            setattr(rec, spec.attr, _convert(route.desc, spec.from_wire, value))
        return ReadOutcome.STORED

    # -- per-CPU activities ------------------------------------------------

    def _cpu_slots(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> list[tuple[int, int]]:
        """``(value index, buffer slot)`` pairs; the aggregate lives in slot 0."""
        if not route.desc.has_instances:
            slots = [(0, 0)]
        else:
            slots = []
            for index, (inst, _) in enumerate(value_set.values):
                if inst < 0:
                    raise DecodeError(f"{route.desc.name}: negative CPU instance {inst}")
                slots.append((index, inst + 1))
        self._reallocate(activity, curr, max(slot for _, slot in slots) + 1)
        return slots

    def _read_cpu(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        leaf = route.desc.name.split(".cpu.", 1)[1]
        if leaf == "intr":
            return ReadOutcome.DERIVED
        for index, slot in self._cpu_slots(route, value_set, activity, curr):
            rec = activity.record(curr, slot)
            value = read_value(value_set, index, route.desc)
            if leaf in f.CPU_PLAIN_ATTRS:
                setattr(rec, f.CPU_PLAIN_ATTRS[leaf], value)
            elif leaf == "user":
                rec.cpu_user = value + rec.cpu_guest
            elif leaf == "nice":
                rec.cpu_nice = value + rec.cpu_guest_nice
            elif leaf == "guest":
                rec.cpu_user += value - rec.cpu_guest
                rec.cpu_guest = value
            elif leaf == "guest_nice":
                rec.cpu_nice += value - rec.cpu_guest_nice
                rec.cpu_guest_nice = value
        return ReadOutcome.STORED

    def _read_softnet(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        attr = self._softnet[route.desc.name]
        for index, slot in self._cpu_slots(route, value_set, activity, curr):
            setattr(activity.record(curr, slot), attr, read_value(value_set, index, route.desc))
        return ReadOutcome.STORED

    def _read_pwr_cpu(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        for index, slot in self._cpu_slots(route, value_set, activity, curr):
            clock = read_value(value_set, index, route.desc)
            activity.record(curr, slot).cpufreq = f.to_hundredths(clock)
        return ReadOutcome.STORED

    # -- interrupts --------------------------------------------------------

    def irq_layout(self) -> list[str]:
        """Interrupt line labels in buffer column order, computed once per session.

        ``"sum"`` comes first, then the totals domain in instance order, then
        labels that only appear in the per-CPU domain.
        """
        if self._irq_labels is None:
            labels = [IRQ_SUM]
            for _, name in self.instances.instances(d.INDOM_INTERRUPTS):
                if name not in labels:
                    labels.append(name)
            rows = 1
            for _, name in self.instances.instances(d.INDOM_PERCPU_INTERRUPTS):
                label, ordinal = _split_irq(name)
                if label not in labels:
                    labels.append(label)
                rows = max(rows, ordinal + 1)
            self._irq_labels = labels
            self._irq_rows = rows
            logger.debug("Interrupt layout: %d lines x %d rows", len(labels), rows)
        return self._irq_labels

    def _read_irq(
        self, route: Route, value_set: ValueSet, activity: Activity, curr: int
    ) -> ReadOutcome:
        labels = self.irq_layout()
        nr2 = len(labels)
        if activity.id not in self._touched or activity.nr2 != nr2:
            activity.resize_matrix(curr, self._irq_rows, nr2)
            self._touched.add(activity.id)
        buf = activity.buffers[curr]

        if not route.desc.has_instances:
            rec = buf[0]
            rec.irq_name = IRQ_SUM
            rec.irq_nr = read_value(value_set, 0, route.desc)
            return ReadOutcome.STORED

        for index, (inst, _) in enumerate(value_set.values):
            try:
                name = self.instances.name_of(route.desc.indom, inst)
            except KeyError as exc:
                raise DecodeError(f"{route.desc.name}: {exc.args[0]}") from None
            if route.desc.indom == d.INDOM_INTERRUPTS:
                label, row = name, 0
            else:
                label, row = _split_irq(name)
            if label not in labels or row >= self._irq_rows:
                raise DecodeError(f"{route.desc.name}: instance {name!r} outside the session layout")
            column = labels.index(label)
            buf[column].irq_name = label
            rec = buf[row * nr2 + column]
            rec.irq_name = label
            rec.irq_nr = read_value(value_set, index, route.desc)
        return ReadOutcome.STORED


def _split_irq(name: str) -> tuple[str, int]:
    try:
        return split_interrupt_instance(name)
    except ValueError as exc:
        raise DecodeError(str(exc)) from None
