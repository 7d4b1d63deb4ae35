"""Raw per-activity sample records.

Field names follow the sysstat ``stats_*`` structures. Counters are plain
ints; kernel ticks are expressed in milliseconds, memory sizes in
kilobytes, sector counts in 512-byte sectors.
"""

from __future__ import annotations

from dataclasses import dataclass, field, make_dataclass

from ..metrics import descriptors as d


@dataclass
class FileHeader:
    """Host description stored once per archive."""

    cpu_nr: int = 0
    hz: int = 100
    sysname: str = ""
    release: str = ""
    nodename: str = ""
    machine: str = ""


@dataclass
class RecordHeader:
    """Per-record header: system uptime in hundredths of a second."""

    uptime_cs: int = 0


@dataclass
class StatsCpu:
    cpu_user: int = 0
    cpu_nice: int = 0
    cpu_sys: int = 0
    cpu_idle: int = 0
    cpu_iowait: int = 0
    cpu_steal: int = 0
    cpu_hardirq: int = 0
    cpu_softirq: int = 0
    cpu_guest: int = 0
    cpu_guest_nice: int = 0

    def total(self) -> int:
        """Sum of all time buckets (guest time is already part of user/nice)."""
        return (
            self.cpu_user + self.cpu_nice + self.cpu_sys + self.cpu_iowait
            + self.cpu_idle + self.cpu_steal + self.cpu_hardirq + self.cpu_softirq
        )

    def is_zero(self) -> bool:
        return self.total() == 0 and self.cpu_guest == 0 and self.cpu_guest_nice == 0


@dataclass
class StatsSoftnet:
    processed: int = 0
    dropped: int = 0
    time_squeeze: int = 0
    received_rps: int = 0
    flow_limit: int = 0
    backlog_len: int = 0


@dataclass
class StatsPwrCpufreq:
    # hundredths of MHz
    cpufreq: int = 0


@dataclass
class StatsPcsw:
    context_switch: int = 0
    processes: int = 0


@dataclass
class StatsIrq:
    irq_name: str = ""
    irq_nr: int = 0


@dataclass
class StatsSwap:
    pswpin: int = 0
    pswpout: int = 0


@dataclass
class StatsPaging:
    pgpgin: int = 0
    pgpgout: int = 0
    pgfault: int = 0
    pgmajfault: int = 0
    pgfree: int = 0
    pgscan_kswapd: int = 0
    pgscan_direct: int = 0
    pgsteal: int = 0
    pgpromote: int = 0
    pgdemote: int = 0


@dataclass
class StatsIo:
    dk_drive: int = 0
    dk_drive_rio: int = 0
    dk_drive_wio: int = 0
    dk_drive_dio: int = 0
    dk_drive_rblk: int = 0
    dk_drive_wblk: int = 0
    dk_drive_dblk: int = 0


@dataclass
class StatsMemory:
    tlmkb: int = 0
    frmkb: int = 0
    availablekb: int = 0
    bufkb: int = 0
    camkb: int = 0
    comkb: int = 0
    activekb: int = 0
    inactkb: int = 0
    dirtykb: int = 0
    anonpgkb: int = 0
    slabkb: int = 0
    kstackkb: int = 0
    pgtblkb: int = 0
    vmusedkb: int = 0
    frskb: int = 0
    tlskb: int = 0
    caskb: int = 0


@dataclass
class StatsKtables:
    dentry_stat: int = 0
    file_used: int = 0
    inode_used: int = 0
    pty_nr: int = 0


@dataclass
class StatsQueue:
    nr_running: int = 0
    nr_threads: int = 0
    procs_blocked: int = 0
    # hundredths
    load_avg_1: int = 0
    load_avg_5: int = 0
    load_avg_15: int = 0


@dataclass
class StatsSerial:
    line: int = 0
    rx: int = 0
    tx: int = 0
    frame: int = 0
    parity: int = 0
    brk: int = 0
    overrun: int = 0


@dataclass
class StatsDisk:
    name: str = ""
    nr_ios: int = 0
    rd_ios: int = 0
    wr_ios: int = 0
    rd_sect: int = 0
    wr_sect: int = 0
    dc_sect: int = 0
    rd_ticks: int = 0
    wr_ticks: int = 0
    dc_ticks: int = 0
    tot_ticks: int = 0
    rq_ticks: int = 0


@dataclass
class StatsNetDev:
    interface: str = ""
    rx_packets: int = 0
    tx_packets: int = 0
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_compressed: int = 0
    tx_compressed: int = 0
    multicast: int = 0


@dataclass
class StatsNetEdev:
    interface: str = ""
    rx_errors: int = 0
    tx_errors: int = 0
    collisions: int = 0
    rx_dropped: int = 0
    tx_dropped: int = 0
    tx_carrier_errors: int = 0
    rx_frame_errors: int = 0
    rx_fifo_errors: int = 0
    tx_fifo_errors: int = 0


@dataclass
class StatsNetNfs:
    nfs_rpccnt: int = 0
    nfs_rpcretrans: int = 0
    nfs_readcnt: int = 0
    nfs_writecnt: int = 0
    nfs_accesscnt: int = 0
    nfs_getattcnt: int = 0


@dataclass
class StatsNetNfsd:
    nfsd_rpccnt: int = 0
    nfsd_rpcbad: int = 0
    nfsd_netcnt: int = 0
    nfsd_netudpcnt: int = 0
    nfsd_nettcpcnt: int = 0
    nfsd_rchits: int = 0
    nfsd_rcmisses: int = 0
    nfsd_readcnt: int = 0
    nfsd_writecnt: int = 0
    nfsd_accesscnt: int = 0
    nfsd_getattcnt: int = 0


@dataclass
class StatsNetSock:
    sock_inuse: int = 0
    tcp_inuse: int = 0
    udp_inuse: int = 0
    raw_inuse: int = 0
    frag_inuse: int = 0
    tcp_tw: int = 0


def snmp_attr(metric: str) -> str:
    """Record attribute for a SNMP-style metric: ``network.ip6.inreceives`` -> ``inreceives``."""
    parts = metric.split(".")
    return "_".join(parts[2:])


def _snmp_record(cls_name: str, group: d.MetricGroup) -> type:
    return make_dataclass(
        cls_name,
        [(snmp_attr(name), int, field(default=0)) for name in group.names],
    )


StatsNetIp = _snmp_record("StatsNetIp", d.NET_IP)
StatsNetEip = _snmp_record("StatsNetEip", d.NET_EIP)
StatsNetIcmp = _snmp_record("StatsNetIcmp", d.NET_ICMP)
StatsNetEicmp = _snmp_record("StatsNetEicmp", d.NET_EICMP)
StatsNetTcp = _snmp_record("StatsNetTcp", d.NET_TCP)
StatsNetEtcp = _snmp_record("StatsNetEtcp", d.NET_ETCP)
StatsNetUdp = _snmp_record("StatsNetUdp", d.NET_UDP)
StatsNetSock6 = _snmp_record("StatsNetSock6", d.NET_SOCK6)
StatsNetIp6 = _snmp_record("StatsNetIp6", d.NET_IP6)
StatsNetEip6 = _snmp_record("StatsNetEip6", d.NET_EIP6)
StatsNetIcmp6 = _snmp_record("StatsNetIcmp6", d.NET_ICMP6)
StatsNetEicmp6 = _snmp_record("StatsNetEicmp6", d.NET_EICMP6)
StatsNetUdp6 = _snmp_record("StatsNetUdp6", d.NET_UDP6)


@dataclass
class StatsHuge:
    tlhkb: int = 0
    frhkb: int = 0
    rsvdhkb: int = 0
    surphkb: int = 0


@dataclass
class StatsPwrFan:
    rpm: float = 0.0
    rpm_min: float = 0.0
    device: str = ""


@dataclass
class StatsPwrTemp:
    temp: float = 0.0
    temp_min: float = 0.0
    temp_max: float = 0.0
    device: str = ""


@dataclass
class StatsPwrIn:
    voltage: float = 0.0
    voltage_min: float = 0.0
    voltage_max: float = 0.0
    device: str = ""


@dataclass
class StatsPwrBat:
    bat_id: int = 0
    capacity: int = 0
    status: int = 0


@dataclass
class StatsPwrUsb:
    bus_nr: int = 0
    vendor_id: int = 0
    product_id: int = 0
    bmaxpower: int = 0
    manufacturer: str = ""
    product: str = ""


@dataclass
class StatsFilesystem:
    """Filesystem usage; block counts are in bytes, as sysstat stores them."""

    fs_name: str = ""
    mountp: str = ""
    f_blocks: int = 0
    f_bfree: int = 0
    f_bavail: int = 0
    f_files: int = 0
    f_ffree: int = 0


@dataclass
class StatsFchost:
    fchost_name: str = ""
    f_rxframes: int = 0
    f_txframes: int = 0
    f_rxwords: int = 0
    f_txwords: int = 0


@dataclass
class StatsPsiCpu:
    # averages in hundredths of a percent
    some_acpu_10: int = 0
    some_acpu_60: int = 0
    some_acpu_300: int = 0
    some_cpu_total: int = 0


@dataclass
class StatsPsiIo:
    some_aio_10: int = 0
    some_aio_60: int = 0
    some_aio_300: int = 0
    some_io_total: int = 0
    full_aio_10: int = 0
    full_aio_60: int = 0
    full_aio_300: int = 0
    full_io_total: int = 0


@dataclass
class StatsPsiMem:
    some_amem_10: int = 0
    some_amem_60: int = 0
    some_amem_300: int = 0
    some_mem_total: int = 0
    full_amem_10: int = 0
    full_amem_60: int = 0
    full_amem_300: int = 0
    full_mem_total: int = 0
