"""Metric identities, instance domain numbers, value types and units.

Identities and instance domain numbers are packed exactly as PCP packs
them so that archives produced here can be merged with ``pmlogger``
output.
"""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass

PM_INDOM_NULL = 0xFFFFFFFF
PM_IN_NULL = -1

# Performance metric namespaces
DOMAIN_LINUX = 60
DOMAIN_SENSORS = 34

# Scale constants
SPACE_BYTE = 0
SPACE_KBYTE = 1
SPACE_MBYTE = 2
TIME_NSEC = 0
TIME_USEC = 1
TIME_MSEC = 2
TIME_SEC = 3
COUNT_ONE = 0

# Bit-field order of the pmUnits initializer on this host
BITFIELDS_LTOR = sys.byteorder == "big"


class ValueType(enum.IntEnum):
    """Storage type of a metric value."""

    U32 = 1
    U64 = 3
    FLOAT = 4
    DOUBLE = 5
    STRING = 6

    @property
    def is_integer(self) -> bool:
        return self in (ValueType.U32, ValueType.U64)

    @property
    def is_numeric(self) -> bool:
        return self is not ValueType.STRING


class Semantics(enum.IntEnum):
    """How consecutive values of a metric relate to each other."""

    COUNTER = 1
    INSTANT = 3
    DISCRETE = 4


def pmi_id(domain: int, cluster: int, item: int) -> int:
    """Pack a metric identity from its domain, cluster and item numbers."""
    return ((domain & 0x1FF) << 22) | ((cluster & 0xFFF) << 10) | (item & 0x3FF)


def pmi_indom(domain: int, serial: int) -> int:
    """Pack an instance domain number from its domain and serial."""
    return ((domain & 0x1FF) << 22) | (serial & 0x3FFFFF)


def unpack_id(pmid: int) -> tuple[int, int, int]:
    """Return ``(domain, cluster, item)`` of a packed identity."""
    return (pmid >> 22) & 0x1FF, (pmid >> 10) & 0xFFF, pmid & 0x3FF


def unpack_indom(indom: int) -> tuple[int, int]:
    """Return ``(domain, serial)`` of a packed instance domain number."""
    return (indom >> 22) & 0x1FF, indom & 0x3FFFFF


def format_id(pmid: int) -> str:
    return "%d.%d.%d" % unpack_id(pmid)


def format_indom(indom: int) -> str:
    if indom == PM_INDOM_NULL:
        return "PM_INDOM_NULL"
    return "%d.%d" % unpack_indom(indom)


def _nibble(value: int) -> int:
    return value & 0xF


@dataclass(frozen=True)
class Units:
    """Dimension and scale of a metric value."""

    dim_space: int = 0
    dim_time: int = 0
    dim_count: int = 0
    scale_space: int = 0
    scale_time: int = 0
    scale_count: int = 0

    def fields(self, ltor: bool) -> tuple[int, ...]:
        """Return the seven initializer fields in the given bit-field order."""
        if ltor:
            return (
                self.dim_space, self.dim_time, self.dim_count,
                self.scale_space, self.scale_time, self.scale_count, 0,
            )
        return (
            0, self.scale_count, self.scale_time, self.scale_space,
            self.dim_count, self.dim_time, self.dim_space,
        )

    @classmethod
    def from_fields(cls, values: tuple[int, ...] | list[int], ltor: bool) -> Units:
        """Inverse of :meth:`fields`."""
        if len(values) != 7:
            raise ValueError(f"units need 7 fields, got {len(values)}")
        if ltor:
            return cls(*values[:6])
        return cls(*reversed(values[1:]))

    def word(self) -> int:
        """Pack the units into their 32-bit representation."""
        return (
            (_nibble(self.dim_space) << 28)
            | (_nibble(self.dim_time) << 24)
            | (_nibble(self.dim_count) << 20)
            | (_nibble(self.scale_space) << 16)
            | (_nibble(self.scale_time) << 12)
            | (_nibble(self.scale_count) << 8)
        )

    def label(self) -> str:
        """Short human readable rendering, e.g. ``Kbyte`` or ``count / sec``."""
        parts: list[str] = []
        if self.dim_space:
            parts.append(_power(("byte", "Kbyte", "Mbyte", "Gbyte")[self.scale_space], self.dim_space))
        if self.dim_count:
            parts.append(_power("count", self.dim_count))
        if self.dim_time > 0:
            parts.append(_power(("nsec", "usec", "msec", "sec")[self.scale_time], self.dim_time))
        elif self.dim_time < 0:
            parts.append("/ " + _power(("nsec", "usec", "msec", "sec")[self.scale_time], -self.dim_time))
        return " ".join(parts)


def _power(unit: str, dim: int) -> str:
    return unit if dim in (1, -1) else f"{unit}^{dim}"


def units(dim_space: int, dim_time: int, dim_count: int,
          scale_space: int, scale_time: int, scale_count: int) -> Units:
    """Shorthand mirroring the ``(dims, scales)`` argument order of PCP."""
    return Units(dim_space, dim_time, dim_count, scale_space, scale_time, scale_count)


NO_UNITS = Units()
COUNT = units(0, 0, 1, 0, 0, COUNT_ONE)
MSEC = units(0, 1, 0, 0, TIME_MSEC, 0)
USEC = units(0, 1, 0, 0, TIME_USEC, 0)
SEC = units(0, 1, 0, 0, TIME_SEC, 0)
BYTES = units(1, 0, 0, SPACE_BYTE, 0, 0)
KBYTES = units(1, 0, 0, SPACE_KBYTE, 0, 0)
MBYTES = units(1, 0, 0, SPACE_MBYTE, 0, 0)
PER_SEC = units(0, -1, 1, 0, TIME_SEC, COUNT_ONE)
PER_USEC = units(0, -1, 0, 0, TIME_USEC, 0)
