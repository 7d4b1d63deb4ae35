"""Activities and their double-buffered sample storage."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..metrics import descriptors as d
from ..metrics.descriptors import MetricGroup
from . import records as r

logger = logging.getLogger(__name__)


class ActivityId(enum.IntEnum):
    """sysstat activity identifiers, in archive write order."""

    CPU = 1
    PCSW = 2
    IRQ = 3
    SWAP = 4
    PAGE = 5
    IO = 6
    MEMORY = 7
    KTABLES = 8
    QUEUE = 9
    SERIAL = 10
    DISK = 11
    NET_DEV = 12
    NET_EDEV = 13
    NET_NFS = 14
    NET_NFSD = 15
    NET_SOCK = 16
    NET_IP = 17
    NET_EIP = 18
    NET_ICMP = 19
    NET_EICMP = 20
    NET_TCP = 21
    NET_ETCP = 22
    NET_UDP = 23
    NET_SOCK6 = 24
    NET_IP6 = 25
    NET_EIP6 = 26
    NET_ICMP6 = 27
    NET_EICMP6 = 28
    NET_UDP6 = 29
    PWR_CPU = 30
    PWR_FAN = 31
    PWR_TEMP = 32
    PWR_IN = 33
    HUGE = 34
    PWR_USB = 35
    FS = 36
    NET_FC = 37
    NET_SOFT = 38
    PSI_CPU = 39
    PSI_IO = 40
    PSI_MEM = 41
    PWR_BAT = 42


@dataclass(frozen=True)
class ActivitySpec:
    """Static description of an activity."""

    id: ActivityId
    name: str
    group: MetricGroup
    record_type: type
    per_cpu: bool = False


ACTIVITY_SPECS: dict[ActivityId, ActivitySpec] = {
    spec.id: spec
    for spec in (
        ActivitySpec(ActivityId.CPU, "cpu", d.CPU, r.StatsCpu, per_cpu=True),
        ActivitySpec(ActivityId.PCSW, "pcsw", d.PCSW, r.StatsPcsw),
        ActivitySpec(ActivityId.IRQ, "irq", d.IRQ, r.StatsIrq, per_cpu=True),
        ActivitySpec(ActivityId.SWAP, "swap", d.SWAP, r.StatsSwap),
        ActivitySpec(ActivityId.PAGE, "paging", d.PAGING, r.StatsPaging),
        ActivitySpec(ActivityId.IO, "io", d.IO, r.StatsIo),
        ActivitySpec(ActivityId.MEMORY, "memory", d.MEMORY, r.StatsMemory),
        ActivitySpec(ActivityId.KTABLES, "ktables", d.KTABLES, r.StatsKtables),
        ActivitySpec(ActivityId.QUEUE, "queue", d.KQUEUE, r.StatsQueue),
        ActivitySpec(ActivityId.SERIAL, "serial", d.SERIAL, r.StatsSerial),
        ActivitySpec(ActivityId.DISK, "disk", d.DISK, r.StatsDisk),
        ActivitySpec(ActivityId.NET_DEV, "net_dev", d.NET_DEV, r.StatsNetDev),
        ActivitySpec(ActivityId.NET_EDEV, "net_edev", d.NET_EDEV, r.StatsNetEdev),
        ActivitySpec(ActivityId.NET_NFS, "net_nfs", d.NFS_CLIENT, r.StatsNetNfs),
        ActivitySpec(ActivityId.NET_NFSD, "net_nfsd", d.NFS_SERVER, r.StatsNetNfsd),
        ActivitySpec(ActivityId.NET_SOCK, "net_sock", d.NET_SOCK, r.StatsNetSock),
        ActivitySpec(ActivityId.NET_IP, "net_ip", d.NET_IP, r.StatsNetIp),
        ActivitySpec(ActivityId.NET_EIP, "net_eip", d.NET_EIP, r.StatsNetEip),
        ActivitySpec(ActivityId.NET_ICMP, "net_icmp", d.NET_ICMP, r.StatsNetIcmp),
        ActivitySpec(ActivityId.NET_EICMP, "net_eicmp", d.NET_EICMP, r.StatsNetEicmp),
        ActivitySpec(ActivityId.NET_TCP, "net_tcp", d.NET_TCP, r.StatsNetTcp),
        ActivitySpec(ActivityId.NET_ETCP, "net_etcp", d.NET_ETCP, r.StatsNetEtcp),
        ActivitySpec(ActivityId.NET_UDP, "net_udp", d.NET_UDP, r.StatsNetUdp),
        ActivitySpec(ActivityId.NET_SOCK6, "net_sock6", d.NET_SOCK6, r.StatsNetSock6),
        ActivitySpec(ActivityId.NET_IP6, "net_ip6", d.NET_IP6, r.StatsNetIp6),
        ActivitySpec(ActivityId.NET_EIP6, "net_eip6", d.NET_EIP6, r.StatsNetEip6),
        ActivitySpec(ActivityId.NET_ICMP6, "net_icmp6", d.NET_ICMP6, r.StatsNetIcmp6),
        ActivitySpec(ActivityId.NET_EICMP6, "net_eicmp6", d.NET_EICMP6, r.StatsNetEicmp6),
        ActivitySpec(ActivityId.NET_UDP6, "net_udp6", d.NET_UDP6, r.StatsNetUdp6),
        ActivitySpec(ActivityId.PWR_CPU, "pwr_cpu", d.POWER_CPU, r.StatsPwrCpufreq, per_cpu=True),
        ActivitySpec(ActivityId.PWR_FAN, "pwr_fan", d.POWER_FAN, r.StatsPwrFan),
        ActivitySpec(ActivityId.PWR_TEMP, "pwr_temp", d.POWER_TEMP, r.StatsPwrTemp),
        ActivitySpec(ActivityId.PWR_IN, "pwr_in", d.POWER_IN, r.StatsPwrIn),
        ActivitySpec(ActivityId.HUGE, "huge", d.HUGE, r.StatsHuge),
        ActivitySpec(ActivityId.PWR_USB, "pwr_usb", d.POWER_USB, r.StatsPwrUsb),
        ActivitySpec(ActivityId.FS, "filesystem", d.FILESYS, r.StatsFilesystem),
        ActivitySpec(ActivityId.NET_FC, "net_fc", d.FCHOST, r.StatsFchost),
        ActivitySpec(ActivityId.NET_SOFT, "net_softnet", d.SOFTNET, r.StatsSoftnet, per_cpu=True),
        ActivitySpec(ActivityId.PSI_CPU, "psi_cpu", d.PSI_CPU, r.StatsPsiCpu),
        ActivitySpec(ActivityId.PSI_IO, "psi_io", d.PSI_IO, r.StatsPsiIo),
        ActivitySpec(ActivityId.PSI_MEM, "psi_mem", d.PSI_MEM, r.StatsPsiMem),
        ActivitySpec(ActivityId.PWR_BAT, "pwr_bat", d.POWER_BAT, r.StatsPwrBat),
    )
}

ACTIVITY_NAMES: dict[str, ActivityId] = {spec.name: spec.id for spec in ACTIVITY_SPECS.values()}


def parse_cpu_selection(values: Iterable[str | int] | None) -> set[int] | None:
    """Turn a CPU list such as ``["all", "0", "3"]`` into buffer ordinals.

    ``None``, an empty list or ``"ALL"`` selects everything (returns None).
    ``"all"`` (lower case) is the aggregate, ordinal 0; CPU *n* is ordinal n + 1.
    """
    if not values:
        return None
    selected: set[int] = set()
    for value in values:
        text = str(value).strip()
        if text == "ALL":
            return None
        if text.lower() == "all":
            selected.add(0)
        elif "-" in text:
            lo, hi = text.split("-", 1)
            selected.update(range(int(lo) + 1, int(hi) + 2))
        else:
            selected.add(int(text) + 1)
    return selected


class Activity:
    """Live state of one activity: two sample buffers plus selection.

    ``buffers[curr]`` holds the records of the current collection cycle and
    ``buffers[curr ^ 1]`` the previous one. Buffers only ever grow, so an
    index keeps pointing at the same entity across cycles.
    """

    def __init__(
        self,
        spec: ActivitySpec,
        *,
        bitmap: set[int] | None = None,
        item_list: Iterable[str] | None = None,
    ) -> None:
        self.spec = spec
        self.buffers: list[list[Any]] = [[], []]
        self.nr = [0, 0]
        self.nr_allocated = 0
        self.nr_ini = -1
        self.nr2 = -1
        self.bitmap = bitmap
        self.item_list: list[str] = list(item_list or [])

    @property
    def id(self) -> ActivityId:
        return self.spec.id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def group(self) -> MetricGroup:
        return self.spec.group

    def __repr__(self) -> str:
        return f"Activity({self.name}, nr={self.nr}, allocated={self.nr_allocated})"

    # -- allocation --------------------------------------------------------

    def _grow(self, slots: int) -> None:
        for buf in self.buffers:
            while len(buf) < slots:
                buf.append(self.spec.record_type())

    def reallocate(self, curr: int, count: int) -> None:
        """Record *count* entities for slot *curr*, growing storage if needed.

        Capacity never shrinks and existing records are kept in place.
        """
        self.nr[curr] = count
        if count > self.nr_allocated:
            if self.nr_ini < 0:
                self.nr_ini = self.nr2 = count
            self._grow(count)
            logger.debug("%s buffers grown to %d", self.name, count)
            self.nr_allocated = count

    def resize_matrix(self, curr: int, rows: int, columns: int) -> None:
        """Two dimensional layout (CPU rows x interrupt columns) used by ``irq``."""
        self.nr[curr] = rows
        self.nr2 = columns
        if rows > self.nr_allocated:
            self.nr_allocated = rows
        if self.nr_ini < 0:
            self.nr_ini = rows
        self._grow(self.nr_allocated * columns)

    # -- access ------------------------------------------------------------

    def record(self, curr: int, index: int) -> Any:
        return self.buffers[curr][index]

    def records(self, curr: int) -> list[Any]:
        return self.buffers[curr][: self.nr[curr]]

    def store(self, curr: int, items: list[Any]) -> None:
        """Place freshly collected *items* into slot *curr*."""
        self.reallocate(curr, len(items))
        self.buffers[curr][: len(items)] = items

    def store_matrix(self, curr: int, rows: list[list[r.StatsIrq]]) -> None:
        """Place an interrupt matrix (row 0 = all CPUs) into slot *curr*."""
        columns = max((len(row) for row in rows), default=0)
        self.resize_matrix(curr, len(rows), columns)
        buf = self.buffers[curr]
        for c, row in enumerate(rows):
            for i in range(columns):
                buf[c * columns + i] = row[i] if i < len(row) else r.StatsIrq()

    # -- selection ---------------------------------------------------------

    def is_selected(self, ordinal: int) -> bool:
        return self.bitmap is None or ordinal in self.bitmap

    def wants(self, name: str) -> bool:
        """Whether the entity *name* is in the item list (an empty list takes everything)."""
        return not self.item_list or name in self.item_list


def build_activities(
    names: Iterable[str | ActivityId] | None = None,
    *,
    cpus: Iterable[str | int] | None = None,
    items: dict[str, list[str]] | None = None,
) -> dict[ActivityId, Activity]:
    """Instantiate activities, keyed and ordered by :class:`ActivityId`.

    *names* defaults to every known activity. *items* maps activity names to
    their item lists (disk names, interfaces, filesystems, interrupt labels,
    batteries): the entities defined up front, in that order, and the only
    ones written.
    """
    if names is None:
        ids = list(ACTIVITY_SPECS)
    else:
        ids = []
        for name in names:
            if isinstance(name, ActivityId):
                ids.append(name)
            elif name in ACTIVITY_NAMES:
                ids.append(ACTIVITY_NAMES[name])
            else:
                raise ValueError(f"unknown activity: {name}")
    bitmap = parse_cpu_selection(cpus)
    items = items or {}
    result: dict[ActivityId, Activity] = {}
    for act_id in sorted(set(ids)):
        spec = ACTIVITY_SPECS[act_id]
        result[act_id] = Activity(
            spec,
            bitmap=bitmap if spec.per_cpu else None,
            item_list=items.get(spec.name),
        )
    return result
