"""Metric registry: the single source of truth for metric identities."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..errors import DuplicateMetricError, MetricIndexError, RegistryError, UnknownMetricError
from .descriptors import ALL_GROUPS, MetricDesc, MetricGroup
from .identity import BITFIELDS_LTOR, format_id

logger = logging.getLogger(__name__)


@dataclass
class SubsystemState:
    """Per-group bookkeeping for a single archive session.

    Tracks which metrics were already added to the archive and whether the
    group's instance domains were populated.
    """

    defined: set[int] = field(default_factory=set)
    instances_ready: bool = False

    def reset(self) -> None:
        self.defined.clear()
        self.instances_ready = False


class MetricRegistry:
    """Holds every registered :class:`MetricGroup` and resolves metrics.

    The units bit-field order is fixed when the registry is created and
    applies to every descriptor it renders.
    """

    def __init__(self, ltor: bool = BITFIELDS_LTOR) -> None:
        self.ltor = ltor
        self._groups: dict[str, MetricGroup] = {}
        self._by_pmid: dict[int, MetricDesc] = {}
        self._by_name: dict[str, MetricDesc] = {}
        self._owner: dict[int, str] = {}
        self._state: dict[str, SubsystemState] = {}

    # -- registration ------------------------------------------------------

    def register_group(self, group: MetricGroup) -> None:
        """Add *group*, rejecting any identity or name already known."""
        if not group.name:
            raise RegistryError("metric group needs a name")
        if group.name in self._groups:
            raise DuplicateMetricError(f"metric group {group.name} already registered")
        if group.count == 0:
            raise RegistryError(f"metric group {group.name} is empty")

        seen_ids: set[int] = set()
        seen_names: set[str] = set()
        for desc in group.descs:
            if desc.pmid in self._by_pmid or desc.pmid in seen_ids:
                raise DuplicateMetricError(
                    f"{desc.name}: identity {format_id(desc.pmid)} already registered"
                )
            if desc.name in self._by_name or desc.name in seen_names:
                raise DuplicateMetricError(f"metric name {desc.name} already registered")
            seen_ids.add(desc.pmid)
            seen_names.add(desc.name)

        self._groups[group.name] = group
        self._state[group.name] = SubsystemState()
        for desc in group.descs:
            self._by_pmid[desc.pmid] = desc
            self._by_name[desc.name] = desc
            self._owner[desc.pmid] = group.name
        logger.debug("Registered metric group %s (%d metrics)", group.name, group.count)

    # -- lookups -----------------------------------------------------------

    def lookup_by_identity(self, pmid: int) -> MetricDesc:
        try:
            return self._by_pmid[pmid]
        except KeyError:
            raise UnknownMetricError(f"no metric with identity {format_id(pmid)}") from None

    def lookup_by_name(self, name: str) -> MetricDesc:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownMetricError(f"no metric named {name}") from None

    def owner_of(self, pmid: int) -> str:
        """Name of the group that owns *pmid*."""
        self.lookup_by_identity(pmid)
        return self._owner[pmid]

    def group(self, name: str) -> MetricGroup:
        try:
            return self._groups[name]
        except KeyError:
            raise UnknownMetricError(f"no metric group named {name}") from None

    def desc_at(self, group: MetricGroup | str, index: int) -> MetricDesc:
        """Descriptor at *index* of *group*; raises :class:`MetricIndexError` out of range."""
        grp = self.group(group) if isinstance(group, str) else group
        if index < 0 or index >= grp.count:
            raise MetricIndexError(
                f"metric index {index} out of range for group {grp.name} ({grp.count} metrics)"
            )
        return grp.descs[index]

    def name_at(self, group: MetricGroup | str, index: int) -> str:
        return self.desc_at(group, index).name

    def units_of(self, desc: MetricDesc) -> tuple[int, ...]:
        return desc.units.fields(self.ltor)

    def state_for(self, group: MetricGroup | str) -> SubsystemState:
        name = group if isinstance(group, str) else group.name
        try:
            return self._state[name]
        except KeyError:
            raise UnknownMetricError(f"no metric group named {name}") from None

    def reset_state(self) -> None:
        """Forget per-session bookkeeping, e.g. before writing a new archive."""
        for state in self._state.values():
            state.reset()

    # -- container protocol ------------------------------------------------

    @property
    def groups(self) -> list[MetricGroup]:
        return list(self._groups.values())

    def __len__(self) -> int:
        return len(self._by_pmid)

    def __iter__(self) -> Iterator[MetricDesc]:
        for group in self._groups.values():
            yield from group.descs

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def build_registry(
    groups: Iterable[MetricGroup] = ALL_GROUPS,
    ltor: bool | None = None,
) -> MetricRegistry:
    """Create a registry populated with *groups* (every published group by default)."""
    registry = MetricRegistry(BITFIELDS_LTOR if ltor is None else ltor)
    for group in groups:
        registry.register_group(group)
    return registry


def default_registry(ltor: bool | None = None) -> MetricRegistry:
    """Registry holding every published metric group."""
    return build_registry(ALL_GROUPS, ltor)
