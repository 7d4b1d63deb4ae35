"""Metric descriptor tables, one :class:`MetricGroup` per sysstat activity.

Identities, types, semantics, units and instance domains follow the
published PCP Linux (domain 60) and sensors (domain 34) namespaces.
"""

from __future__ import annotations

from dataclasses import dataclass

from .identity import (
    BYTES,
    COUNT,
    DOMAIN_LINUX,
    DOMAIN_SENSORS,
    KBYTES,
    MBYTES,
    MSEC,
    NO_UNITS,
    PER_SEC,
    PER_USEC,
    PM_INDOM_NULL,
    SEC,
    USEC,
    Semantics,
    Units,
    ValueType,
    pmi_id,
    pmi_indom,
)

# Instance domains
INDOM_CPU = pmi_indom(DOMAIN_LINUX, 0)
INDOM_DISK = pmi_indom(DOMAIN_LINUX, 1)
INDOM_LOADAVG = pmi_indom(DOMAIN_LINUX, 2)
INDOM_NET_DEV = pmi_indom(DOMAIN_LINUX, 3)
INDOM_INTERRUPTS = pmi_indom(DOMAIN_LINUX, 4)
INDOM_FILESYS = pmi_indom(DOMAIN_LINUX, 5)
INDOM_NFS_REQUESTS = pmi_indom(DOMAIN_LINUX, 7)
INDOM_SERIAL = pmi_indom(DOMAIN_LINUX, 35)
INDOM_PSI = pmi_indom(DOMAIN_LINUX, 37)
INDOM_FCHOST = pmi_indom(DOMAIN_LINUX, 39)
INDOM_PERCPU_INTERRUPTS = pmi_indom(DOMAIN_LINUX, 40)
INDOM_FAN = pmi_indom(DOMAIN_SENSORS, 0)
INDOM_TEMP = pmi_indom(DOMAIN_SENSORS, 1)
INDOM_IN = pmi_indom(DOMAIN_SENSORS, 2)
INDOM_USB = pmi_indom(DOMAIN_SENSORS, 3)
INDOM_BAT = pmi_indom(DOMAIN_SENSORS, 4)


@dataclass(frozen=True)
class MetricDesc:
    """Descriptor of one archive metric."""

    name: str
    pmid: int
    value_type: ValueType
    semantics: Semantics
    units: Units = NO_UNITS
    indom: int = PM_INDOM_NULL

    @property
    def has_instances(self) -> bool:
        return self.indom != PM_INDOM_NULL


@dataclass(frozen=True)
class MetricGroup:
    """Ordered set of metrics owned by one activity (or archive header)."""

    name: str
    descs: tuple[MetricDesc, ...]

    @property
    def count(self) -> int:
        return len(self.descs)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.descs)

    @property
    def pmids(self) -> tuple[int, ...]:
        return tuple(d.pmid for d in self.descs)

    def index_of(self, name: str) -> int:
        for idx, desc in enumerate(self.descs):
            if desc.name == name:
                return idx
        raise KeyError(f"{name} is not part of metric group {self.name}")


def _m(
    name: str,
    cluster: int,
    item: int,
    value_type: ValueType,
    semantics: Semantics,
    unit: Units = NO_UNITS,
    indom: int = PM_INDOM_NULL,
    domain: int = DOMAIN_LINUX,
) -> MetricDesc:
    return MetricDesc(name, pmi_id(domain, cluster, item), value_type, semantics, unit, indom)


def _counters(prefix: str, cluster: int, items: list[tuple[str, int]]) -> tuple[MetricDesc, ...]:
    """U64 event counters sharing a prefix and a cluster."""
    return tuple(
        _m(f"{prefix}.{leaf}", cluster, item, ValueType.U64, Semantics.COUNTER, COUNT)
        for leaf, item in items
    )


U32, U64 = ValueType.U32, ValueType.U64
FLOAT, DOUBLE, STRING = ValueType.FLOAT, ValueType.DOUBLE, ValueType.STRING
COUNTER, INSTANT, DISCRETE = Semantics.COUNTER, Semantics.INSTANT, Semantics.DISCRETE

# ---------------------------------------------------------------------------
# Archive headers
# ---------------------------------------------------------------------------

FILE_HEADER = MetricGroup("file_header", (
    _m("hinv.ncpu", 0, 32, U32, DISCRETE),
    _m("kernel.all.hz", 0, 48, U32, DISCRETE, PER_SEC),
    _m("kernel.uname.release", 12, 0, STRING, DISCRETE),
    _m("kernel.uname.sysname", 12, 2, STRING, DISCRETE),
    _m("kernel.uname.machine", 12, 3, STRING, DISCRETE),
    _m("kernel.uname.nodename", 12, 4, STRING, DISCRETE),
))

RECORD_HEADER = MetricGroup("record_header", (
    _m("kernel.all.uptime", 26, 0, DOUBLE, INSTANT, SEC),
))

# ---------------------------------------------------------------------------
# CPU, softnet, CPU frequency
# ---------------------------------------------------------------------------

CPU_FIELDS = (
    "user", "sys", "nice", "idle", "wait.total", "intr",
    "irq.soft", "irq.hard", "steal", "guest", "guest_nice",
)
_ALLCPU_ITEMS = (20, 22, 21, 23, 35, 34, 53, 54, 55, 60, 81)
_PERCPU_ITEMS = (0, 2, 1, 3, 30, 31, 56, 57, 58, 61, 83)

CPU = MetricGroup("cpu", tuple(
    _m(f"kernel.all.cpu.{leaf}", 0, item, U64, COUNTER, MSEC)
    for leaf, item in zip(CPU_FIELDS, _ALLCPU_ITEMS)
) + tuple(
    _m(f"kernel.percpu.cpu.{leaf}", 0, item, U64, COUNTER, MSEC, INDOM_CPU)
    for leaf, item in zip(CPU_FIELDS, _PERCPU_ITEMS)
))

SOFTNET_FIELDS = (
    ("processed", 0, 6), ("dropped", 1, 7), ("time_squeeze", 2, 8),
    ("received_rps", 4, 10), ("flow_limit", 5, 11), ("backlog_length", 12, 13),
)

SOFTNET = MetricGroup("softnet", tuple(
    _m(f"network.softnet.{leaf}", 57, item, U64, COUNTER, COUNT)
    for leaf, item, _ in SOFTNET_FIELDS
) + tuple(
    _m(f"network.softnet.percpu.{leaf}", 57, item, U64, COUNTER, COUNT, INDOM_CPU)
    for leaf, _, item in SOFTNET_FIELDS
))

POWER_CPU = MetricGroup("power_cpu", (
    _m("hinv.cpu.clock", 18, 0, FLOAT, DISCRETE, PER_USEC, INDOM_CPU),
))

# ---------------------------------------------------------------------------
# Kernel activity
# ---------------------------------------------------------------------------

PCSW = MetricGroup("pcsw", (
    _m("kernel.all.pswitch", 0, 13, U64, COUNTER, COUNT),
    _m("kernel.all.sysfork", 0, 14, U64, COUNTER, COUNT),
))

IRQ = MetricGroup("irq", (
    _m("kernel.all.intr", 0, 12, U64, COUNTER, COUNT),
    _m("kernel.all.interrupts.total", 4, 0, U64, COUNTER, COUNT, INDOM_INTERRUPTS),
    _m("kernel.percpu.interrupts", 4, 1, U32, COUNTER, COUNT, INDOM_PERCPU_INTERRUPTS),
))

SWAP = MetricGroup("swap", (
    _m("swap.pagesin", 0, 8, U32, COUNTER, COUNT),
    _m("swap.pagesout", 0, 9, U64, COUNTER, COUNT),
))

PAGING = MetricGroup("paging", _counters("mem.vmstat", 28, [
    ("pgpgin", 6),
    ("pgpgout", 7),
    ("pgfault", 16),
    ("pgmajfault", 17),
    ("pgfree", 13),
    ("pgscan_direct_total", 176),
    ("pgscan_kswapd_total", 177),
    ("pgsteal_total", 178),
    ("pgdemote_total", 185),
    ("pgpromote_success", 187),
]))

IO = MetricGroup("io", _counters("disk.all", 0, [
    ("total", 29),
    ("read", 24),
    ("write", 25),
    ("discard", 96),
]) + tuple(
    _m(f"disk.all.{leaf}", 0, item, U64, COUNTER, KBYTES)
    for leaf, item in (("read_bytes", 41), ("write_bytes", 42), ("discard_bytes", 98))
))

MEMORY = MetricGroup("memory", (
    _m("hinv.physmem", 1, 9, U32, DISCRETE, MBYTES),
    _m("mem.physmem", 1, 0, U64, DISCRETE, KBYTES),
) + tuple(
    _m(f"mem.util.{leaf}", 1, item, U64, INSTANT, KBYTES)
    for leaf, item in (
        ("free", 2), ("available", 58), ("used", 1), ("bufmem", 4),
        ("cached", 5), ("committed_AS", 26), ("active", 14), ("inactive", 15),
        ("dirty", 22), ("anonpages", 30), ("slab", 25), ("kernelStack", 43),
        ("pageTables", 27), ("vmallocUsed", 51), ("swapFree", 21),
        ("swapTotal", 20), ("swapCached", 13),
    )
))

KTABLES = MetricGroup("ktables", (
    _m("vfs.dentry.count", 27, 5, U32, INSTANT),
    _m("vfs.files.count", 27, 0, U32, INSTANT),
    _m("vfs.inodes.count", 27, 3, U32, INSTANT),
    _m("kernel.all.nptys", 72, 3, U32, INSTANT),
))

KQUEUE = MetricGroup("kqueue", (
    _m("kernel.all.runnable", 2, 2, U32, INSTANT),
    _m("kernel.all.nprocs", 2, 3, U32, INSTANT, COUNT),
    _m("kernel.all.blocked", 0, 16, U64, INSTANT),
    _m("kernel.all.load", 2, 0, FLOAT, INSTANT, NO_UNITS, INDOM_LOADAVG),
))

# ---------------------------------------------------------------------------
# Block devices and network
# ---------------------------------------------------------------------------

DISK = MetricGroup("disk", tuple(
    _m(f"disk.dev.{leaf}", 0, item, U64, COUNTER, COUNT, INDOM_DISK)
    for leaf, item in (("read", 4), ("write", 5), ("total", 28))
) + tuple(
    _m(f"disk.dev.{leaf}", 0, item, U64, COUNTER, KBYTES, INDOM_DISK)
    for leaf, item in (
        ("total_bytes", 37), ("read_bytes", 38), ("write_bytes", 39), ("discard_bytes", 90),
    )
) + tuple(
    _m(f"disk.dev.{leaf}", 0, item, U32, COUNTER, MSEC, INDOM_DISK)
    for leaf, item in (
        ("read_rawactive", 72), ("write_rawactive", 73), ("total_rawactive", 79),
        ("discard_rawactive", 92), ("avactive", 46), ("aveq", 47),
    )
))

NET_DEV = MetricGroup("netdev", tuple(
    _m(f"network.interface.{leaf}", 3, item, U64, COUNTER, unit, INDOM_NET_DEV)
    for leaf, item, unit in (
        ("in.packets", 1, COUNT),
        ("out.packets", 9, COUNT),
        ("in.bytes", 0, BYTES),
        ("out.bytes", 8, BYTES),
        ("in.compressed", 6, COUNT),
        ("out.compressed", 15, COUNT),
        ("in.mcasts", 7, COUNT),
    )
))

NET_EDEV = MetricGroup("netedev", tuple(
    _m(f"network.interface.{leaf}", 3, item, U64, COUNTER, COUNT, INDOM_NET_DEV)
    for leaf, item in (
        ("in.errors", 2), ("out.errors", 10), ("collisions", 13),
        ("in.drops", 3), ("out.drops", 11), ("out.carrier", 14),
        ("in.frame", 5), ("in.fifo", 4), ("out.fifo", 12),
    )
))

SERIAL = MetricGroup("serial", tuple(
    _m(f"tty.serial.{leaf}", 74, item, U32, COUNTER, NO_UNITS, INDOM_SERIAL)
    for item, leaf in enumerate(("rx", "tx", "frame", "parity", "brk", "overrun"))
))

NFS_CLIENT = MetricGroup("nfsclient", (
    _m("rpc.client.rpccnt", 7, 20, U32, COUNTER, COUNT),
    _m("rpc.client.rpcretrans", 7, 21, U32, COUNTER, COUNT),
    _m("nfs.client.reqs", 7, 4, U32, COUNTER, COUNT, INDOM_NFS_REQUESTS),
))

NFS_SERVER = MetricGroup("nfsserver", _counters("rpc.server", 7, [
    ("rpccnt", 30),
    ("rpcbadclnt", 34),
    ("netcnt", 44),
    ("netudpcnt", 45),
    ("nettcpcnt", 46),
    ("rchits", 35),
    ("rcmisses", 36),
]) + (
    _m("nfs.server.reqs", 7, 12, U64, COUNTER, COUNT, INDOM_NFS_REQUESTS),
))

NET_SOCK = MetricGroup("socket", tuple(
    _m(f"network.sockstat.{leaf}", 11, item, U32, INSTANT, COUNT)
    for leaf, item in (
        ("total", 9), ("tcp.inuse", 0), ("udp.inuse", 3),
        ("raw.inuse", 6), ("frag.inuse", 15), ("tcp.tw", 11),
    )
))

NET_IP = MetricGroup("net_ip", _counters("network.ip", 14, [
    ("inreceives", 2),
    ("forwdatagrams", 5),
    ("indelivers", 8),
    ("outrequests", 9),
    ("reasmreqds", 13),
    ("reasmoks", 14),
    ("fragoks", 16),
    ("fragcreates", 18),
]))

NET_EIP = MetricGroup("net_eip", _counters("network.ip", 14, [
    ("inhdrerrors", 3),
    ("inaddrerrors", 4),
    ("inunknownprotos", 6),
    ("indiscards", 7),
    ("outdiscards", 10),
    ("outnoroutes", 11),
    ("reasmfails", 15),
    ("fragfails", 17),
]))

NET_ICMP = MetricGroup("net_icmp", _counters("network.icmp", 14, [
    ("inmsgs", 20),
    ("outmsgs", 33),
    ("inechos", 27),
    ("inechoreps", 28),
    ("outechos", 40),
    ("outechoreps", 41),
    ("intimestamps", 29),
    ("intimestampreps", 30),
    ("outtimestamps", 42),
    ("outtimestampreps", 43),
    ("inaddrmasks", 31),
    ("inaddrmaskreps", 32),
    ("outaddrmasks", 44),
    ("outaddrmaskreps", 45),
]))

NET_EICMP = MetricGroup("net_eicmp", _counters("network.icmp", 14, [
    ("inerrors", 21),
    ("outerrors", 34),
    ("indestunreachs", 22),
    ("outdestunreachs", 35),
    ("intimeexcds", 23),
    ("outtimeexcds", 36),
    ("inparmprobs", 24),
    ("outparmprobs", 37),
    ("insrcquenchs", 25),
    ("outsrcquenchs", 38),
    ("inredirects", 26),
    ("outredirects", 39),
]))

NET_TCP = MetricGroup("net_tcp", _counters("network.tcp", 14, [
    ("activeopens", 54),
    ("passiveopens", 55),
    ("insegs", 59),
    ("outsegs", 60),
]))

NET_ETCP = MetricGroup("net_etcp", _counters("network.tcp", 14, [
    ("attemptfails", 56),
    ("estabresets", 57),
    ("retranssegs", 61),
    ("inerrs", 62),
    ("outrsts", 63),
]))

NET_UDP = MetricGroup("net_udp", _counters("network.udp", 14, [
    ("indatagrams", 70),
    ("outdatagrams", 74),
    ("noports", 71),
    ("inerrors", 72),
]))

NET_SOCK6 = MetricGroup("net_sock6", tuple(
    _m(f"network.sockstat.{leaf}", 73, item, U32, INSTANT, COUNT)
    for leaf, item in (
        ("tcp6.inuse", 0), ("udp6.inuse", 1), ("raw6.inuse", 3), ("frag6.inuse", 4),
    )
))

NET_IP6 = MetricGroup("net_ip6", _counters("network.ip6", 58, [
    ("inreceives", 0),
    ("outforwdatagrams", 9),
    ("indelivers", 8),
    ("outrequests", 10),
    ("reasmreqds", 14),
    ("reasmoks", 15),
    ("inmcastpkts", 20),
    ("outmcastpkts", 21),
    ("fragoks", 17),
    ("fragcreates", 19),
]))

NET_EIP6 = MetricGroup("net_eip6", _counters("network.ip6", 58, [
    ("inhdrerrors", 1),
    ("inaddrerrors", 4),
    ("inunknownprotos", 5),
    ("intoobigerrors", 2),
    ("indiscards", 7),
    ("outdiscards", 11),
    ("innoroutes", 3),
    ("outnoroutes", 12),
    ("reasmfails", 16),
    ("fragfails", 18),
    ("intruncatedpkts", 6),
]))

NET_ICMP6 = MetricGroup("net_icmp6", _counters("network.icmp6", 58, [
    ("inmsgs", 32),
    ("outmsgs", 34),
    ("inechos", 41),
    ("inechoreplies", 42),
    ("outechoreplies", 57),
    ("ingroupmembqueries", 43),
    ("ingroupmembresponses", 44),
    ("outgroupmembresponses", 59),
    ("ingroupmembreductions", 45),
    ("outgroupmembreductions", 60),
    ("inroutersolicits", 46),
    ("outroutersolicits", 61),
    ("inrouteradvertisements", 47),
    ("inneighborsolicits", 48),
    ("outneighborsolicits", 63),
    ("inneighboradvertisements", 49),
    ("outneighboradvertisements", 64),
]))

NET_EICMP6 = MetricGroup("net_eicmp6", _counters("network.icmp6", 58, [
    ("inerrors", 33),
    ("indestunreachs", 37),
    ("outdestunreachs", 52),
    ("intimeexcds", 39),
    ("outtimeexcds", 54),
    ("inparmproblems", 40),
    ("outparmproblems", 55),
    ("inredirects", 50),
    ("outredirects", 65),
    ("inpkttoobigs", 38),
    ("outpkttoobigs", 53),
]))

NET_UDP6 = MetricGroup("net_udp6", _counters("network.udp6", 58, [
    ("indatagrams", 67),
    ("outdatagrams", 70),
    ("noports", 68),
    ("inerrors", 69),
]))

# ---------------------------------------------------------------------------
# Huge pages, power management, filesystems, FC hosts, pressure stall
# ---------------------------------------------------------------------------

HUGE = MetricGroup("huge", tuple(
    _m(f"mem.util.{leaf}", 1, item, U64, INSTANT, BYTES)
    for leaf, item in (
        ("hugepagesTotalBytes", 60), ("hugepagesFreeBytes", 61),
        ("hugepagesRsvdBytes", 62), ("hugepagesSurpBytes", 63),
    )
))

POWER_FAN = MetricGroup("power_fan", (
    _m("power.fan.rpm", 0, 0, U64, INSTANT, NO_UNITS, INDOM_FAN, DOMAIN_SENSORS),
    _m("power.fan.drpm", 0, 1, U64, INSTANT, NO_UNITS, INDOM_FAN, DOMAIN_SENSORS),
    _m("power.fan.device", 0, 2, STRING, DISCRETE, NO_UNITS, INDOM_FAN, DOMAIN_SENSORS),
))

POWER_TEMP = MetricGroup("power_temp", (
    _m("power.temp.celsius", 1, 0, FLOAT, INSTANT, NO_UNITS, INDOM_TEMP, DOMAIN_SENSORS),
    _m("power.temp.percent", 1, 1, FLOAT, INSTANT, NO_UNITS, INDOM_TEMP, DOMAIN_SENSORS),
    _m("power.temp.device", 1, 2, STRING, DISCRETE, NO_UNITS, INDOM_TEMP, DOMAIN_SENSORS),
))

POWER_IN = MetricGroup("power_in", (
    _m("power.in.voltage", 2, 0, FLOAT, INSTANT, NO_UNITS, INDOM_IN, DOMAIN_SENSORS),
    _m("power.in.percent", 2, 1, FLOAT, INSTANT, NO_UNITS, INDOM_IN, DOMAIN_SENSORS),
    _m("power.in.device", 2, 2, STRING, DISCRETE, NO_UNITS, INDOM_IN, DOMAIN_SENSORS),
))

POWER_BAT = MetricGroup("power_bat", (
    _m("power.bat.capacity", 4, 0, U32, INSTANT, NO_UNITS, INDOM_BAT, DOMAIN_SENSORS),
    _m("power.bat.status", 4, 1, STRING, INSTANT, NO_UNITS, INDOM_BAT, DOMAIN_SENSORS),
))

POWER_USB = MetricGroup("power_usb", (
    _m("power.usb.bus", 3, 0, U32, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
    _m("power.usb.vendorId", 3, 1, STRING, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
    _m("power.usb.productId", 3, 2, STRING, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
    _m("power.usb.maxpower", 3, 3, U32, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
    _m("power.usb.manufacturer", 3, 4, STRING, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
    _m("power.usb.productName", 3, 5, STRING, DISCRETE, NO_UNITS, INDOM_USB, DOMAIN_SENSORS),
))

FILESYS = MetricGroup("filesys", (
    _m("filesys.capacity", 5, 1, U64, INSTANT, KBYTES, INDOM_FILESYS),
    _m("filesys.free", 5, 3, U64, INSTANT, KBYTES, INDOM_FILESYS),
    _m("filesys.used", 5, 2, U64, INSTANT, KBYTES, INDOM_FILESYS),
    _m("filesys.full", 5, 8, DOUBLE, INSTANT, NO_UNITS, INDOM_FILESYS),
    _m("filesys.maxfiles", 5, 4, U64, INSTANT, COUNT, INDOM_FILESYS),
    _m("filesys.freefiles", 5, 6, U64, INSTANT, COUNT, INDOM_FILESYS),
    _m("filesys.usedfiles", 5, 5, U64, INSTANT, COUNT, INDOM_FILESYS),
    _m("filesys.avail", 5, 10, U64, INSTANT, KBYTES, INDOM_FILESYS),
))

FCHOST = MetricGroup("fchost", (
    _m("fchost.in.frames", 91, 0, U64, COUNTER, COUNT, INDOM_FCHOST),
    _m("fchost.out.frames", 91, 1, U64, COUNTER, COUNT, INDOM_FCHOST),
    _m("fchost.in.bytes", 91, 2, U64, COUNTER, BYTES, INDOM_FCHOST),
    _m("fchost.out.bytes", 91, 3, U64, COUNTER, BYTES, INDOM_FCHOST),
))

PSI_CPU = MetricGroup("psi_cpu", (
    _m("kernel.all.pressure.cpu.some.total", 83, 1, U64, COUNTER, USEC),
    _m("kernel.all.pressure.cpu.some.avg", 83, 0, FLOAT, INSTANT, NO_UNITS, INDOM_PSI),
))

PSI_IO = MetricGroup("psi_io", (
    _m("kernel.all.pressure.io.some.total", 85, 1, U64, COUNTER, USEC),
    _m("kernel.all.pressure.io.some.avg", 85, 0, FLOAT, INSTANT, NO_UNITS, INDOM_PSI),
    _m("kernel.all.pressure.io.full.total", 85, 3, U64, COUNTER, USEC),
    _m("kernel.all.pressure.io.full.avg", 85, 2, FLOAT, INSTANT, NO_UNITS, INDOM_PSI),
))

PSI_MEM = MetricGroup("psi_mem", (
    _m("kernel.all.pressure.mem.some.total", 84, 1, U64, COUNTER, USEC),
    _m("kernel.all.pressure.mem.some.avg", 84, 0, FLOAT, INSTANT, NO_UNITS, INDOM_PSI),
    _m("kernel.all.pressure.mem.full.total", 84, 3, U64, COUNTER, USEC),
    _m("kernel.all.pressure.mem.full.avg", 84, 2, FLOAT, INSTANT, NO_UNITS, INDOM_PSI),
))

ALL_GROUPS: tuple[MetricGroup, ...] = (
    FILE_HEADER,
    RECORD_HEADER,
    CPU,
    PCSW,
    IRQ,
    SWAP,
    PAGING,
    IO,
    MEMORY,
    KTABLES,
    KQUEUE,
    SERIAL,
    DISK,
    NET_DEV,
    NET_EDEV,
    NFS_CLIENT,
    NFS_SERVER,
    NET_SOCK,
    NET_IP,
    NET_EIP,
    NET_ICMP,
    NET_EICMP,
    NET_TCP,
    NET_ETCP,
    NET_UDP,
    NET_SOCK6,
    NET_IP6,
    NET_EIP6,
    NET_ICMP6,
    NET_EICMP6,
    NET_UDP6,
    POWER_CPU,
    POWER_FAN,
    POWER_TEMP,
    POWER_IN,
    HUGE,
    POWER_USB,
    FILESYS,
    FCHOST,
    SOFTNET,
    PSI_CPU,
    PSI_IO,
    PSI_MEM,
    POWER_BAT,
)
