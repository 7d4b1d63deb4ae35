"""Metric identities, descriptor tables and the registry."""

from .descriptors import ALL_GROUPS, MetricDesc, MetricGroup
from .identity import PM_IN_NULL, PM_INDOM_NULL, Semantics, Units, ValueType, pmi_id, pmi_indom
from .registry import MetricRegistry, SubsystemState, build_registry, default_registry

__all__ = [
    "ALL_GROUPS",
    "MetricDesc",
    "MetricGroup",
    "MetricRegistry",
    "PM_INDOM_NULL",
    "PM_IN_NULL",
    "Semantics",
    "SubsystemState",
    "Units",
    "ValueType",
    "build_registry",
    "default_registry",
    "pmi_id",
    "pmi_indom",
]
