"""Tests for the metric descriptor tables and the registry."""

import pytest

from sysstat_pcp.errors import (
    DuplicateMetricError,
    MetricIndexError,
    RegistryError,
    UnknownMetricError,
)
from sysstat_pcp.metrics import descriptors as d
from sysstat_pcp.metrics.descriptors import ALL_GROUPS, MetricDesc, MetricGroup
from sysstat_pcp.metrics.identity import PM_INDOM_NULL, Semantics, ValueType, format_id, pmi_id
from sysstat_pcp.metrics.registry import MetricRegistry, build_registry, default_registry


def test_default_registry_holds_every_group():
    registry = default_registry()
    assert len(registry.groups) == len(ALL_GROUPS)
    assert len(registry) == sum(group.count for group in ALL_GROUPS)


def test_identities_and_names_are_unique():
    """No two published metrics share an identity or a name."""
    descs = [desc for group in ALL_GROUPS for desc in group.descs]
    assert len({desc.pmid for desc in descs}) == len(descs)
    assert len({desc.name for desc in descs}) == len(descs)


def test_cpu_identities():
    registry = default_registry()
    assert format_id(registry.lookup_by_name("kernel.all.cpu.user").pmid) == "60.0.20"
    assert format_id(registry.lookup_by_name("kernel.all.cpu.intr").pmid) == "60.0.34"
    assert format_id(registry.lookup_by_name("kernel.percpu.cpu.intr").pmid) == "60.0.31"
    assert "kernel.all.cpu.steal" in registry
    assert registry.lookup_by_name("kernel.percpu.cpu.user").indom == d.INDOM_CPU


def test_interrupt_metrics():
    registry = default_registry()
    percpu = registry.lookup_by_name("kernel.percpu.interrupts")
    assert format_id(percpu.pmid) == "60.4.1"
    assert percpu.value_type == ValueType.U32
    assert percpu.indom == d.INDOM_PERCPU_INTERRUPTS
    assert registry.owner_of(percpu.pmid) == "irq"


def test_lookup_by_identity():
    registry = default_registry()
    desc = registry.lookup_by_identity(pmi_id(60, 0, 13))
    assert desc.name == "kernel.all.pswitch"
    assert desc.semantics == Semantics.COUNTER


def test_lookup_unknown_metric():
    registry = default_registry()
    with pytest.raises(UnknownMetricError):
        registry.lookup_by_name("no.such.metric")
    with pytest.raises(UnknownMetricError):
        registry.lookup_by_identity(pmi_id(99, 99, 99))
    with pytest.raises(LookupError):
        registry.group("nope")


def test_desc_at_bounds():
    """Indexes outside a group raise MetricIndexError, which is also an IndexError."""
    registry = default_registry()
    assert registry.name_at("pcsw", 1) == "kernel.all.sysfork"
    with pytest.raises(MetricIndexError):
        registry.desc_at("pcsw", 2)
    with pytest.raises(IndexError):
        registry.desc_at(d.PCSW, -1)


def test_duplicate_group_rejected():
    registry = build_registry([d.PCSW])
    with pytest.raises(DuplicateMetricError):
        registry.register_group(d.PCSW)


def test_duplicate_identity_rejected():
    registry = build_registry([d.PCSW])
    clash = MetricGroup("clash", (
        MetricDesc("other.name", d.PCSW.descs[0].pmid, ValueType.U64, Semantics.COUNTER),
    ))
    with pytest.raises(DuplicateMetricError):
        registry.register_group(clash)
    assert "other.name" not in registry


def test_duplicate_name_within_group_rejected():
    registry = MetricRegistry()
    group = MetricGroup("twice", (
        MetricDesc("a.b", pmi_id(60, 200, 1), ValueType.U32, Semantics.INSTANT),
        MetricDesc("a.b", pmi_id(60, 200, 2), ValueType.U32, Semantics.INSTANT),
    ))
    with pytest.raises(DuplicateMetricError):
        registry.register_group(group)


def test_empty_group_rejected():
    with pytest.raises(RegistryError):
        MetricRegistry().register_group(MetricGroup("empty", ()))


def test_units_follow_registry_order():
    desc = d.MEMORY.descs[1]
    assert build_registry([d.MEMORY], ltor=True).units_of(desc) == desc.units.fields(True)
    assert build_registry([d.MEMORY], ltor=False).units_of(desc) == desc.units.fields(False)


def test_subsystem_state_reset():
    registry = default_registry()
    state = registry.state_for("cpu")
    state.defined.update({0, 1})
    state.instances_ready = True
    registry.reset_state()
    assert registry.state_for(d.CPU).defined == set()
    assert registry.state_for("cpu").instances_ready is False


def test_singular_metrics_have_no_indom():
    registry = default_registry()
    assert registry.lookup_by_name("kernel.all.intr").indom == PM_INDOM_NULL
    assert not registry.lookup_by_name("hinv.ncpu").has_instances
    assert registry.lookup_by_name("kernel.all.load").has_instances
