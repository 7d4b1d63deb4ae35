"""Instance domains: stable (index, name) pairs for per-entity metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import InstanceConflictError, RegistryError
from .metrics.identity import PM_INDOM_NULL, format_indom

logger = logging.getLogger(__name__)

# Fixed instance sets: (external name, internal index)
LOAD_AVG_INSTANCES: tuple[tuple[str, int], ...] = (
    ("1 minute", 1),
    ("5 minute", 5),
    ("15 minute", 15),
)
PSI_INSTANCES: tuple[tuple[str, int], ...] = (
    ("10 second", 10),
    ("1 minute", 60),
    ("5 minute", 300),
)
NFS_REQUEST_INSTANCES: tuple[tuple[str, int], ...] = (
    ("getattr", 4),
    ("read", 6),
    ("write", 8),
    ("access", 18),
)

INTERRUPT_SEPARATOR = "::"


def cpu_instance_name(ordinal: int) -> str:
    """Name of the CPU at buffer *ordinal*; ordinal 0 is the aggregate and has none."""
    if ordinal < 1:
        raise ValueError(f"CPU ordinal {ordinal} has no instance (0 is the aggregate)")
    return f"cpu{ordinal - 1}"


def parse_cpu_instance(name: str) -> int:
    """Inverse of :func:`cpu_instance_name`."""
    if not name.startswith("cpu") or not name[3:].isdigit():
        raise ValueError(f"not a CPU instance name: {name!r}")
    return int(name[3:]) + 1


def interrupt_instance_name(label: str, ordinal: int) -> str:
    """Per-CPU interrupt instance, e.g. ``timer::cpu0`` for *ordinal* 1."""
    return f"{label}{INTERRUPT_SEPARATOR}{cpu_instance_name(ordinal)}"


def split_interrupt_instance(name: str) -> tuple[str, int]:
    """Return ``(label, cpu ordinal)`` of a per-CPU interrupt instance name."""
    label, sep, cpu = name.rpartition(INTERRUPT_SEPARATOR)
    if not sep or not label:
        raise ValueError(f"not a per-CPU interrupt instance name: {name!r}")
    return label, parse_cpu_instance(cpu)


def serial_instance_name(line: int) -> str:
    return f"serial{line}"


def fan_instance_name(index: int) -> str:
    return f"fan{index + 1}"


def temp_instance_name(index: int) -> str:
    return f"temp{index + 1}"


def in_instance_name(index: int) -> str:
    return f"in{index}"


def usb_instance_name(index: int) -> str:
    return f"usb{index}"


def battery_instance_name(bat_id: int) -> str:
    return f"BAT{bat_id}"


def trailing_number(name: str) -> int:
    """Numeric suffix of names such as ``serial3`` or ``BAT0``."""
    digits = ""
    for ch in reversed(name):
        if not ch.isdigit():
            break
        digits = ch + digits
    if not digits:
        raise ValueError(f"instance name {name!r} has no numeric suffix")
    return int(digits)


@dataclass
class InstanceDomain:
    """One instance domain and its declared members."""

    indom: int
    by_inst: dict[int, str] = field(default_factory=dict)
    by_name: dict[str, int] = field(default_factory=dict)

    def next_free(self) -> int:
        return max(self.by_inst, default=-1) + 1


class InstanceDomainManager:
    """Creates and resolves instances for every instance domain of a session.

    Declaring the same ``(name, index)`` pair twice is a no-op; a second
    name for an index, or a second index for a name, is rejected.
    """

    def __init__(self) -> None:
        self._domains: dict[int, InstanceDomain] = {}

    def _domain(self, indom: int) -> InstanceDomain:
        if indom == PM_INDOM_NULL:
            raise RegistryError("cannot declare instances in PM_INDOM_NULL")
        domain = self._domains.get(indom)
        if domain is None:
            domain = self._domains[indom] = InstanceDomain(indom)
        return domain

    def declare_instance(self, indom: int, name: str, inst: int) -> bool:
        """Declare *name* at index *inst*. Returns True for a new declaration."""
        domain = self._domain(indom)
        known_name = domain.by_inst.get(inst)
        known_inst = domain.by_name.get(name)
        if known_name == name and known_inst == inst:
            return False
        if known_name is not None or known_inst is not None:
            logger.warning(
                "Instance conflict in %s: %r/%d vs existing %r/%s",
                format_indom(indom), name, inst, known_name, known_inst,
            )
            raise InstanceConflictError(
                f"instance {name!r} ({inst}) conflicts with an existing instance "
                f"in domain {format_indom(indom)}"
            )
        domain.by_inst[inst] = name
        domain.by_name[name] = inst
        return True

    def ensure_instance(self, indom: int, name: str) -> tuple[int, bool]:
        """Index of *name*, appending it at the next free index when unknown.

        Returns ``(index, created)``.
        """
        domain = self._domain(indom)
        inst = domain.by_name.get(name)
        if inst is not None:
            return inst, False
        inst = domain.next_free()
        self.declare_instance(indom, name, inst)
        return inst, True

    def name_of(self, indom: int, inst: int) -> str:
        domain = self._domains.get(indom)
        if domain is None or inst not in domain.by_inst:
            raise KeyError(f"instance {inst} not declared in domain {format_indom(indom)}")
        return domain.by_inst[inst]

    def index_of(self, indom: int, name: str) -> int:
        domain = self._domains.get(indom)
        if domain is None or name not in domain.by_name:
            raise KeyError(f"instance {name!r} not declared in domain {format_indom(indom)}")
        return domain.by_name[name]

    def instances(self, indom: int) -> list[tuple[int, str]]:
        """Declared ``(index, name)`` pairs of *indom*, ordered by index."""
        domain = self._domains.get(indom)
        if domain is None:
            return []
        return sorted(domain.by_inst.items())

    def domains(self) -> list[int]:
        return sorted(self._domains)

    def __contains__(self, indom: object) -> bool:
        return indom in self._domains
