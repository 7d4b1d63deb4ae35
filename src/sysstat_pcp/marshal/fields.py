"""Declarative record-field <-> metric mappings.

Each activity is described by a tuple of field specs which both the write
marshaller and the read dispatcher walk, so the two directions of every
conversion sit next to each other.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..instances import (
    LOAD_AVG_INSTANCES,
    PSI_INSTANCES,
    battery_instance_name,
    fan_instance_name,
    in_instance_name,
    serial_instance_name,
    temp_instance_name,
    trailing_number,
    usb_instance_name,
)
from ..metrics import descriptors as d
from ..sample.activity import ActivityId
from ..sample.records import snmp_attr

Convert = Callable[[Any], Any]

BAT_STATUS = ("Unknown", "Charging", "Discharging", "Not charging", "Full")


def _same(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class Field:
    """One record attribute stored under one metric."""

    metric: str
    attr: str
    to_wire: Convert = _same
    from_wire: Convert = _same


@dataclass(frozen=True)
class Derived:
    """Write-only metric computed from the whole record."""

    metric: str
    compute: Callable[[Any], Any]


@dataclass(frozen=True)
class Keyed:
    """Metric over a fixed instance set, one record attribute per instance.

    *keys* holds ``(instance name, internal index, attribute)`` triples.
    """

    metric: str
    keys: tuple[tuple[str, int, str], ...]
    to_wire: Convert = _same
    from_wire: Convert = _same

    def attr_for(self, inst: int) -> str | None:
        for _, key, attr in self.keys:
            if key == inst:
                return attr
        return None


FieldSpec = Field | Derived | Keyed

# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def from_hundredths(value: int) -> float:
    return value / 100.0


def to_hundredths(value: float) -> int:
    return int(round(value * 100.0))


def sectors_to_kb(value: int) -> int:
    return value // 2


def kb_to_sectors(value: int) -> int:
    return value * 2


def kb_to_bytes(value: int) -> int:
    return value * 1024


def bytes_to_kb(value: int) -> int:
    return value // 1024


def words_to_bytes(value: int) -> int:
    return value * 4


def bytes_to_words(value: int) -> int:
    return value // 4


def to_hex(value: int) -> str:
    return "%x" % value


def from_hex(value: str) -> int:
    return int(value, 16)


def bat_status_text(code: int) -> str:
    if code < 0 or code >= len(BAT_STATUS):
        code = 0
    return BAT_STATUS[code]


def bat_status_code(text: str) -> int:
    try:
        return BAT_STATUS.index(text)
    except ValueError:
        raise ValueError(f"unknown battery status {text!r}") from None


def range_percent(value: float, low: float, high: float) -> float:
    """Position of *value* between *low* and *high*, in percent; 0.0 for an empty range."""
    if high - low == 0:
        return 0.0
    return (value - low) / (high - low) * 100.0


def fs_full_percent(rec: Any) -> float:
    if rec.f_blocks == 0:
        return 0.0
    return (rec.f_blocks - rec.f_bfree) / rec.f_blocks * 100.0


def _keys(instances: tuple[tuple[str, int], ...], fmt: str) -> tuple[tuple[str, int, str], ...]:
    return tuple((name, inst, fmt.format(inst)) for name, inst in instances)


def _snmp(group: d.MetricGroup) -> tuple[Field, ...]:
    return tuple(Field(name, snmp_attr(name)) for name in group.names)


# ---------------------------------------------------------------------------
# Single-record activities
# ---------------------------------------------------------------------------

SCALAR_FIELDS: dict[ActivityId, tuple[FieldSpec, ...]] = {
    ActivityId.PCSW: (
        Field("kernel.all.pswitch", "context_switch"),
        Field("kernel.all.sysfork", "processes"),
    ),
    ActivityId.SWAP: (
        Field("swap.pagesin", "pswpin"),
        Field("swap.pagesout", "pswpout"),
    ),
    ActivityId.PAGE: (
        Field("mem.vmstat.pgpgin", "pgpgin"),
        Field("mem.vmstat.pgpgout", "pgpgout"),
        Field("mem.vmstat.pgfault", "pgfault"),
        Field("mem.vmstat.pgmajfault", "pgmajfault"),
        Field("mem.vmstat.pgfree", "pgfree"),
        Field("mem.vmstat.pgscan_kswapd_total", "pgscan_kswapd"),
        Field("mem.vmstat.pgscan_direct_total", "pgscan_direct"),
        Field("mem.vmstat.pgsteal_total", "pgsteal"),
        Field("mem.vmstat.pgpromote_success", "pgpromote"),
        Field("mem.vmstat.pgdemote_total", "pgdemote"),
    ),
    ActivityId.IO: (
        Field("disk.all.total", "dk_drive"),
        Field("disk.all.read", "dk_drive_rio"),
        Field("disk.all.write", "dk_drive_wio"),
        Field("disk.all.discard", "dk_drive_dio"),
        Field("disk.all.read_bytes", "dk_drive_rblk", sectors_to_kb, kb_to_sectors),
        Field("disk.all.write_bytes", "dk_drive_wblk", sectors_to_kb, kb_to_sectors),
        Field("disk.all.discard_bytes", "dk_drive_dblk", sectors_to_kb, kb_to_sectors),
    ),
    ActivityId.KTABLES: (
        Field("vfs.dentry.count", "dentry_stat"),
        Field("vfs.files.count", "file_used"),
        Field("vfs.inodes.count", "inode_used"),
        Field("kernel.all.nptys", "pty_nr"),
    ),
    ActivityId.QUEUE: (
        Field("kernel.all.runnable", "nr_running"),
        Field("kernel.all.nprocs", "nr_threads"),
        Field("kernel.all.blocked", "procs_blocked"),
        Keyed("kernel.all.load", _keys(LOAD_AVG_INSTANCES, "load_avg_{}"),
              from_hundredths, to_hundredths),
    ),
    ActivityId.NET_NFS: (
        Field("rpc.client.rpccnt", "nfs_rpccnt"),
        Field("rpc.client.rpcretrans", "nfs_rpcretrans"),
        Keyed("nfs.client.reqs", (
            ("getattr", 4, "nfs_getattcnt"),
            ("read", 6, "nfs_readcnt"),
            ("write", 8, "nfs_writecnt"),
            ("access", 18, "nfs_accesscnt"),
        )),
    ),
    ActivityId.NET_NFSD: (
        Field("rpc.server.rpccnt", "nfsd_rpccnt"),
        Field("rpc.server.rpcbadclnt", "nfsd_rpcbad"),
        Field("rpc.server.netcnt", "nfsd_netcnt"),
        Field("rpc.server.netudpcnt", "nfsd_netudpcnt"),
        Field("rpc.server.nettcpcnt", "nfsd_nettcpcnt"),
        Field("rpc.server.rchits", "nfsd_rchits"),
        Field("rpc.server.rcmisses", "nfsd_rcmisses"),
        Keyed("nfs.server.reqs", (
            ("getattr", 4, "nfsd_getattcnt"),
            ("read", 6, "nfsd_readcnt"),
            ("write", 8, "nfsd_writecnt"),
            ("access", 18, "nfsd_accesscnt"),
        )),
    ),
    ActivityId.NET_SOCK: (
        Field("network.sockstat.total", "sock_inuse"),
        Field("network.sockstat.tcp.inuse", "tcp_inuse"),
        Field("network.sockstat.udp.inuse", "udp_inuse"),
        Field("network.sockstat.raw.inuse", "raw_inuse"),
        Field("network.sockstat.frag.inuse", "frag_inuse"),
        Field("network.sockstat.tcp.tw", "tcp_tw"),
    ),
    ActivityId.NET_IP: _snmp(d.NET_IP),
    ActivityId.NET_EIP: _snmp(d.NET_EIP),
    ActivityId.NET_ICMP: _snmp(d.NET_ICMP),
    ActivityId.NET_EICMP: _snmp(d.NET_EICMP),
    ActivityId.NET_TCP: _snmp(d.NET_TCP),
    ActivityId.NET_ETCP: _snmp(d.NET_ETCP),
    ActivityId.NET_UDP: _snmp(d.NET_UDP),
    ActivityId.NET_SOCK6: _snmp(d.NET_SOCK6),
    ActivityId.NET_IP6: _snmp(d.NET_IP6),
    ActivityId.NET_EIP6: _snmp(d.NET_EIP6),
    ActivityId.NET_ICMP6: _snmp(d.NET_ICMP6),
    ActivityId.NET_EICMP6: _snmp(d.NET_EICMP6),
    ActivityId.NET_UDP6: _snmp(d.NET_UDP6),
    ActivityId.HUGE: (
        Field("mem.util.hugepagesTotalBytes", "tlhkb", kb_to_bytes, bytes_to_kb),
        Field("mem.util.hugepagesFreeBytes", "frhkb", kb_to_bytes, bytes_to_kb),
        Field("mem.util.hugepagesRsvdBytes", "rsvdhkb", kb_to_bytes, bytes_to_kb),
        Field("mem.util.hugepagesSurpBytes", "surphkb", kb_to_bytes, bytes_to_kb),
    ),
    ActivityId.PSI_CPU: (
        Field("kernel.all.pressure.cpu.some.total", "some_cpu_total"),
        Keyed("kernel.all.pressure.cpu.some.avg", _keys(PSI_INSTANCES, "some_acpu_{}"),
              from_hundredths, to_hundredths),
    ),
    ActivityId.PSI_IO: (
        Field("kernel.all.pressure.io.some.total", "some_io_total"),
        Keyed("kernel.all.pressure.io.some.avg", _keys(PSI_INSTANCES, "some_aio_{}"),
              from_hundredths, to_hundredths),
        Field("kernel.all.pressure.io.full.total", "full_io_total"),
        Keyed("kernel.all.pressure.io.full.avg", _keys(PSI_INSTANCES, "full_aio_{}"),
              from_hundredths, to_hundredths),
    ),
    ActivityId.PSI_MEM: (
        Field("kernel.all.pressure.mem.some.total", "some_mem_total"),
        Keyed("kernel.all.pressure.mem.some.avg", _keys(PSI_INSTANCES, "some_amem_{}"),
              from_hundredths, to_hundredths),
        Field("kernel.all.pressure.mem.full.total", "full_mem_total"),
        Keyed("kernel.all.pressure.mem.full.avg", _keys(PSI_INSTANCES, "full_amem_{}"),
              from_hundredths, to_hundredths),
    ),
}

# Memory is split by display option: RAM, RAM "all" extras, swap.
MEMORY_RAM_FIELDS: tuple[FieldSpec, ...] = (
    Derived("hinv.physmem", lambda rec: rec.tlmkb >> 10),
    Field("mem.physmem", "tlmkb"),
    Field("mem.util.free", "frmkb"),
    Field("mem.util.available", "availablekb"),
    Derived("mem.util.used", lambda rec: rec.tlmkb - rec.frmkb),
    Field("mem.util.bufmem", "bufkb"),
    Field("mem.util.cached", "camkb"),
    Field("mem.util.committed_AS", "comkb"),
    Field("mem.util.active", "activekb"),
    Field("mem.util.inactive", "inactkb"),
    Field("mem.util.dirty", "dirtykb"),
)
MEMORY_ALL_FIELDS: tuple[FieldSpec, ...] = (
    Field("mem.util.anonpages", "anonpgkb"),
    Field("mem.util.slab", "slabkb"),
    Field("mem.util.kernelStack", "kstackkb"),
    Field("mem.util.pageTables", "pgtblkb"),
    Field("mem.util.vmallocUsed", "vmusedkb"),
)
MEMORY_SWAP_FIELDS: tuple[FieldSpec, ...] = (
    Field("mem.util.swapFree", "frskb"),
    Field("mem.util.swapTotal", "tlskb"),
    Field("mem.util.swapCached", "caskb"),
)
MEMORY_FIELDS = MEMORY_RAM_FIELDS + MEMORY_ALL_FIELDS + MEMORY_SWAP_FIELDS

# ---------------------------------------------------------------------------
# Per-entity activities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntityNaming:
    """How a per-entity record maps to its instance name and back."""

    name_of: Callable[[Any, int], str]
    restore: Callable[[Any, str], None]


def _named(attr: str) -> EntityNaming:
    return EntityNaming(
        name_of=lambda rec, _i: getattr(rec, attr),
        restore=lambda rec, name: setattr(rec, attr, name),
    )


def _numbered(attr: str, namer: Callable[[int], str]) -> EntityNaming:
    return EntityNaming(
        name_of=lambda rec, _i: namer(getattr(rec, attr)),
        restore=lambda rec, name: setattr(rec, attr, trailing_number(name)),
    )


def _ordinal(namer: Callable[[int], str]) -> EntityNaming:
    return EntityNaming(name_of=lambda _rec, i: namer(i), restore=lambda _rec, _name: None)


ENTITY_NAMING: dict[ActivityId, EntityNaming] = {
    ActivityId.DISK: _named("name"),
    ActivityId.NET_DEV: _named("interface"),
    ActivityId.NET_EDEV: _named("interface"),
    ActivityId.SERIAL: _numbered("line", serial_instance_name),
    ActivityId.PWR_FAN: _ordinal(fan_instance_name),
    ActivityId.PWR_TEMP: _ordinal(temp_instance_name),
    ActivityId.PWR_IN: _ordinal(in_instance_name),
    ActivityId.PWR_USB: _ordinal(usb_instance_name),
    ActivityId.PWR_BAT: _numbered("bat_id", battery_instance_name),
    ActivityId.FS: _named("fs_name"),
    ActivityId.NET_FC: _named("fchost_name"),
}

ENTITY_FIELDS: dict[ActivityId, tuple[FieldSpec, ...]] = {
    ActivityId.DISK: (
        Field("disk.dev.read", "rd_ios"),
        Field("disk.dev.write", "wr_ios"),
        Field("disk.dev.total", "nr_ios"),
        Derived("disk.dev.total_bytes", lambda rec: (rec.rd_sect + rec.wr_sect) // 2),
        Field("disk.dev.read_bytes", "rd_sect", sectors_to_kb, kb_to_sectors),
        Field("disk.dev.write_bytes", "wr_sect", sectors_to_kb, kb_to_sectors),
        Field("disk.dev.discard_bytes", "dc_sect", sectors_to_kb, kb_to_sectors),
        Field("disk.dev.read_rawactive", "rd_ticks"),
        Field("disk.dev.write_rawactive", "wr_ticks"),
        Derived("disk.dev.total_rawactive", lambda rec: rec.rd_ticks + rec.wr_ticks),
        Field("disk.dev.discard_rawactive", "dc_ticks"),
        Field("disk.dev.avactive", "tot_ticks"),
        Field("disk.dev.aveq", "rq_ticks"),
    ),
    ActivityId.NET_DEV: (
        Field("network.interface.in.packets", "rx_packets"),
        Field("network.interface.out.packets", "tx_packets"),
        Field("network.interface.in.bytes", "rx_bytes"),
        Field("network.interface.out.bytes", "tx_bytes"),
        Field("network.interface.in.compressed", "rx_compressed"),
        Field("network.interface.out.compressed", "tx_compressed"),
        Field("network.interface.in.mcasts", "multicast"),
    ),
    ActivityId.NET_EDEV: (
        Field("network.interface.in.errors", "rx_errors"),
        Field("network.interface.out.errors", "tx_errors"),
        Field("network.interface.collisions", "collisions"),
        Field("network.interface.in.drops", "rx_dropped"),
        Field("network.interface.out.drops", "tx_dropped"),
        Field("network.interface.out.carrier", "tx_carrier_errors"),
        Field("network.interface.in.frame", "rx_frame_errors"),
        Field("network.interface.in.fifo", "rx_fifo_errors"),
        Field("network.interface.out.fifo", "tx_fifo_errors"),
    ),
    ActivityId.SERIAL: (
        Field("tty.serial.rx", "rx"),
        Field("tty.serial.tx", "tx"),
        Field("tty.serial.frame", "frame"),
        Field("tty.serial.parity", "parity"),
        Field("tty.serial.brk", "brk"),
        Field("tty.serial.overrun", "overrun"),
    ),
    ActivityId.PWR_FAN: (
        Field("power.fan.rpm", "rpm", int, float),
        Derived("power.fan.drpm", lambda rec: int(rec.rpm - rec.rpm_min)),
        Field("power.fan.device", "device"),
    ),
    ActivityId.PWR_TEMP: (
        Field("power.temp.celsius", "temp"),
        Derived("power.temp.percent",
                lambda rec: range_percent(rec.temp, rec.temp_min, rec.temp_max)),
        Field("power.temp.device", "device"),
    ),
    ActivityId.PWR_IN: (
        Field("power.in.voltage", "voltage"),
        Derived("power.in.percent",
                lambda rec: range_percent(rec.voltage, rec.voltage_min, rec.voltage_max)),
        Field("power.in.device", "device"),
    ),
    ActivityId.PWR_BAT: (
        Field("power.bat.capacity", "capacity"),
        Field("power.bat.status", "status", bat_status_text, bat_status_code),
    ),
    ActivityId.PWR_USB: (
        Field("power.usb.bus", "bus_nr"),
        Field("power.usb.vendorId", "vendor_id", to_hex, from_hex),
        Field("power.usb.productId", "product_id", to_hex, from_hex),
        Field("power.usb.maxpower", "bmaxpower", lambda v: v << 1, lambda v: v >> 1),
        Field("power.usb.manufacturer", "manufacturer"),
        Field("power.usb.productName", "product"),
    ),
    ActivityId.FS: (
        Field("filesys.capacity", "f_blocks", bytes_to_kb, kb_to_bytes),
        Field("filesys.free", "f_bfree", bytes_to_kb, kb_to_bytes),
        Derived("filesys.used", lambda rec: (rec.f_blocks - rec.f_bfree) // 1024),
        Derived("filesys.full", fs_full_percent),
        Field("filesys.maxfiles", "f_files"),
        Field("filesys.freefiles", "f_ffree"),
        Derived("filesys.usedfiles", lambda rec: rec.f_files - rec.f_ffree),
        Field("filesys.avail", "f_bavail", bytes_to_kb, kb_to_bytes),
    ),
    ActivityId.NET_FC: (
        Field("fchost.in.frames", "f_rxframes"),
        Field("fchost.out.frames", "f_txframes"),
        Field("fchost.in.bytes", "f_rxwords", words_to_bytes, bytes_to_words),
        Field("fchost.out.bytes", "f_txwords", words_to_bytes, bytes_to_words),
    ),
}

# ---------------------------------------------------------------------------
# Per-CPU activities
# ---------------------------------------------------------------------------

# Written value of each CPU metric leaf, in CPU_FIELDS order.
CPU_WIRE: dict[str, Callable[[Any], int]] = {
    "user": lambda c: c.cpu_user - c.cpu_guest,
    "sys": lambda c: c.cpu_sys,
    "nice": lambda c: c.cpu_nice - c.cpu_guest_nice,
    "idle": lambda c: c.cpu_idle,
    "wait.total": lambda c: c.cpu_iowait,
    "intr": lambda c: c.cpu_hardirq + c.cpu_softirq,
    "irq.soft": lambda c: c.cpu_softirq,
    "irq.hard": lambda c: c.cpu_hardirq,
    "steal": lambda c: c.cpu_steal,
    "guest": lambda c: c.cpu_guest,
    "guest_nice": lambda c: c.cpu_guest_nice,
}

# Leaves stored unchanged on the read path; the others need the guest split.
CPU_PLAIN_ATTRS: dict[str, str] = {
    "sys": "cpu_sys",
    "idle": "cpu_idle",
    "wait.total": "cpu_iowait",
    "irq.soft": "cpu_softirq",
    "irq.hard": "cpu_hardirq",
    "steal": "cpu_steal",
}

# Values written for a CPU that did not tick during the interval.
TICKLESS_VALUES: dict[str, int] = {leaf: 0 for leaf in CPU_WIRE} | {"idle": 100}

# Softnet: (aggregate metric, per-CPU metric, attribute)
SOFTNET_FIELDS: tuple[tuple[str, str, str], ...] = tuple(
    (f"network.softnet.{leaf}", f"network.softnet.percpu.{leaf}", attr)
    for leaf, attr in (
        ("processed", "processed"),
        ("dropped", "dropped"),
        ("time_squeeze", "time_squeeze"),
        ("received_rps", "received_rps"),
        ("flow_limit", "flow_limit"),
        ("backlog_length", "backlog_len"),
    )
)

CPUFREQ_METRIC = "hinv.cpu.clock"

FILE_HEADER_FIELDS: tuple[Field, ...] = (
    Field("hinv.ncpu", "cpu_nr"),
    Field("kernel.all.hz", "hz"),
    Field("kernel.uname.sysname", "sysname"),
    Field("kernel.uname.release", "release"),
    Field("kernel.uname.nodename", "nodename"),
    Field("kernel.uname.machine", "machine"),
)

RECORD_HEADER_FIELDS: tuple[Field, ...] = (
    Field("kernel.all.uptime", "uptime_cs", from_hundredths, to_hundredths),
)


def field_metrics(specs: tuple[FieldSpec, ...]) -> list[str]:
    return [spec.metric for spec in specs]


def keyed_instances(spec: Keyed) -> list[tuple[str, int]]:
    return [(name, inst) for name, inst, _ in spec.keys]