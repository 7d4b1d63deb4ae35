"""Tests for metric definition and the write marshaller."""

import pytest

from sysstat_pcp.archive.base import BaseArchiveWriter
from sysstat_pcp.config import DisplayConfig
from sysstat_pcp.errors import ArchiveError, MetricIndexError
from sysstat_pcp.instances import InstanceDomainManager
from sysstat_pcp.marshal import fields as f
from sysstat_pcp.marshal.define import MetricDefiner
from sysstat_pcp.marshal.writer import WriteMarshaller, aggregate_interval, cpu_interval, format_value
from sysstat_pcp.metrics import default_registry
from sysstat_pcp.metrics import descriptors as d
from sysstat_pcp.sample import ActivityId, build_activities
from sysstat_pcp.sample.records import (
    FileHeader,
    RecordHeader,
    StatsCpu,
    StatsDisk,
    StatsFchost,
    StatsHuge,
    StatsIo,
    StatsIrq,
    StatsMemory,
    StatsNetNfs,
    StatsPcsw,
    StatsPwrBat,
    StatsPwrCpufreq,
    StatsPwrFan,
    StatsPwrUsb,
    StatsQueue,
    StatsSerial,
)


class RecordingArchive(BaseArchiveWriter):
    """Keeps written records in memory."""

    def __init__(self):
        super().__init__()
        self.records = []
        self.instance_events = []
        self.closed = False

    def _on_instance(self, indom, name, inst):
        self.instance_events.append((indom, name, inst))

    def _write_record(self, timestamp, value_sets):
        self.records.append((timestamp, value_sets))

    def shutdown(self):
        self.closed = True

    def last(self):
        """``metric name -> {instance name (None for singular): text}`` of the last record."""
        _, value_sets = self.records[-1]
        result = {}
        for vs in value_sets:
            desc = self._by_pmid[vs.pmid]
            result[desc.name] = {
                (self.instance_name(desc.indom, inst) if desc.has_instances else None): value
                for inst, value in vs.values
            }
        return result


def _marshaller(display=None):
    archive = RecordingArchive()
    definer = MetricDefiner(default_registry(), InstanceDomainManager(), archive, display)
    return archive, definer, WriteMarshaller(definer)


def _write(activities, curr=0, display=None):
    archive, definer, writer = _marshaller(display)
    definer.define_all(activities.values(), curr)
    for activity in activities.values():
        writer.write_activity(activity, curr)
    archive.write(1.0)
    return archive


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------

def test_format_value_integers_wrap():
    registry = default_registry()
    u32 = registry.lookup_by_name("swap.pagesin")
    u64 = registry.lookup_by_name("swap.pagesout")
    assert format_value(u32, 7) == "7"
    assert format_value(u32, 2**32 + 5) == "5"
    assert format_value(u64, -1) == str(2**64 - 1)


def test_format_value_float_and_string():
    registry = default_registry()
    assert format_value(registry.lookup_by_name("kernel.all.load"), 1.25) == "1.250000"
    assert format_value(registry.lookup_by_name("kernel.uname.sysname"), "Linux") == "Linux"


def test_cpu_interval_never_negative():
    assert cpu_interval(StatsCpu(cpu_user=10), StatsCpu(cpu_user=25, cpu_idle=5)) == 20
    assert cpu_interval(StatsCpu(cpu_user=25), StatsCpu(cpu_user=10)) == 0


def _cpu_activity(prev, curr):
    cpu = build_activities(["cpu"])[ActivityId.CPU]
    cpu.store(0, prev)
    cpu.store(1, curr)
    return cpu


def test_aggregate_interval_sums_online_cpus():
    cpu = _cpu_activity(
        [StatsCpu(cpu_user=200, cpu_idle=200), StatsCpu(cpu_user=100, cpu_idle=100),
         StatsCpu(cpu_user=100, cpu_idle=100)],
        [StatsCpu(cpu_user=280, cpu_idle=280), StatsCpu(cpu_user=150, cpu_idle=150),
         StatsCpu(cpu_user=130, cpu_idle=130)],
    )
    assert aggregate_interval(cpu, 1, set()) == 160
    assert aggregate_interval(cpu, 1, {2}) == 100


def test_aggregate_interval_uniprocessor_and_zero():
    cpu = _cpu_activity([StatsCpu(cpu_user=10)], [StatsCpu(cpu_user=30, cpu_idle=5)])
    assert aggregate_interval(cpu, 1, set()) == 25
    idle = _cpu_activity([StatsCpu(cpu_user=10)], [StatsCpu(cpu_user=10)])
    assert aggregate_interval(idle, 1, set()) == 1


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

def test_define_headers_once():
    archive, definer, _ = _marshaller()
    definer.define_headers()
    definer.define_headers()
    assert set(archive._metrics) == set(d.FILE_HEADER.names) | set(d.RECORD_HEADER.names)


def test_add_metric_out_of_range():
    _, definer, _ = _marshaller()
    with pytest.raises(MetricIndexError):
        definer.add_metric(d.PCSW, 5)


def test_define_cpu_declares_instances():
    activities = build_activities(["cpu"])
    activities[ActivityId.CPU].store(0, [StatsCpu(), StatsCpu(), StatsCpu()])
    archive, definer, _ = _marshaller()
    definer.define_all(activities.values(), 0)
    assert definer.instances.instances(d.INDOM_CPU) == [(0, "cpu0"), (1, "cpu1")]
    assert "kernel.percpu.cpu.guest_nice" in archive._metrics
    assert "kernel.all.cpu.steal" in archive._metrics


def test_define_cpu_honours_selection():
    activities = build_activities(["cpu"], cpus=["1"])
    activities[ActivityId.CPU].store(0, [StatsCpu(), StatsCpu(), StatsCpu()])
    archive, definer, _ = _marshaller()
    definer.define_all(activities.values(), 0)
    assert definer.instances.instances(d.INDOM_CPU) == [(1, "cpu1")]
    assert "kernel.all.cpu.user" not in archive._metrics


def test_write_before_define_fails():
    activities = build_activities(["pcsw"])
    activities[ActivityId.PCSW].store(0, [StatsPcsw(context_switch=1000, processes=42)])
    _, _, writer = _marshaller()
    with pytest.raises(ArchiveError):
        writer.write_activity(activities[ActivityId.PCSW], 0)


# ---------------------------------------------------------------------------
# CPU
# ---------------------------------------------------------------------------

class TestCpuWriter:
    """Aggregate, per-CPU, tickless and offline CPU output."""

    def test_two_cpu_aggregate_matches_per_cpu_sum(self):
        """kernel.all.cpu.user = 120 equals the per-CPU values 50 + 70."""
        activities = build_activities(["cpu"])
        activities[ActivityId.CPU].store(0, [
            StatsCpu(cpu_user=120, cpu_idle=800),
            StatsCpu(cpu_user=50, cpu_idle=400),
            StatsCpu(cpu_user=70, cpu_idle=400),
        ])
        values = _write(activities).last()
        assert values["kernel.all.cpu.user"] == {None: "120"}
        per_cpu = values["kernel.percpu.cpu.user"]
        assert per_cpu == {"cpu0": "50", "cpu1": "70"}
        assert sum(int(v) for v in per_cpu.values()) == 120

    def test_guest_time_split(self):
        """user and nice are written without their guest share; intr is hard + soft."""
        activities = build_activities(["cpu"], cpus=["all"])
        activities[ActivityId.CPU].store(0, [StatsCpu(
            cpu_user=500, cpu_guest=100, cpu_nice=40, cpu_guest_nice=10,
            cpu_hardirq=3, cpu_softirq=2,
        )])
        values = _write(activities).last()
        assert values["kernel.all.cpu.user"] == {None: "400"}
        assert values["kernel.all.cpu.nice"] == {None: "30"}
        assert values["kernel.all.cpu.guest"] == {None: "100"}
        assert values["kernel.all.cpu.intr"] == {None: "5"}

    def test_tickless_cpu(self):
        """A CPU that did not tick reports idle 100 and zero elsewhere."""
        activities = build_activities(["cpu"])
        cpu = activities[ActivityId.CPU]
        busy = StatsCpu(cpu_user=300, cpu_idle=700)
        cpu.store(0, [busy, StatsCpu(cpu_user=100, cpu_idle=400), busy])
        cpu.store(1, [
            StatsCpu(cpu_user=350, cpu_idle=750),
            StatsCpu(cpu_user=150, cpu_idle=450),
            busy,
        ])
        archive, definer, writer = _marshaller()
        definer.define_all(activities.values(), 0)
        writer.write_activity(cpu, 1)
        archive.write(2.0)
        values = archive.last()
        assert values["kernel.percpu.cpu.idle"] == {"cpu0": "450", "cpu1": "100"}
        assert values["kernel.percpu.cpu.user"] == {"cpu0": "150", "cpu1": "0"}
        assert values["kernel.percpu.cpu.steal"]["cpu1"] == "0"
        # only cpu0 ticked: 100 ticks
        assert writer.cpu_ticks == 100

    def test_offline_cpu_skipped(self):
        activities = build_activities(["cpu"])
        activities[ActivityId.CPU].store(0, [
            StatsCpu(cpu_user=50, cpu_idle=50),
            StatsCpu(cpu_user=50, cpu_idle=50),
            StatsCpu(),
        ])
        values = _write(activities).last()
        assert values["kernel.percpu.cpu.user"] == {"cpu0": "50"}
        assert values["kernel.all.cpu.user"] == {None: "50"}


# ---------------------------------------------------------------------------
# Interrupts
# ---------------------------------------------------------------------------

def _irq_activities(**kwargs):
    activities = build_activities(["irq"], **kwargs)
    activities[ActivityId.IRQ].store_matrix(0, [
        [StatsIrq("sum", 300), StatsIrq("timer", 30)],
        [StatsIrq("sum", 100), StatsIrq("timer", 10)],
        [StatsIrq("sum", 200), StatsIrq("timer", 20)],
    ])
    return activities


def test_timer_interrupt_instances():
    """timer at "all" is a totals instance, at cpu1 it is "timer::cpu1"."""
    values = _write(_irq_activities()).last()
    assert values["kernel.all.intr"] == {None: "300"}
    assert values["kernel.all.interrupts.total"] == {"timer": "30"}
    assert values["kernel.percpu.interrupts"] == {
        "sum::cpu0": "100",
        "timer::cpu0": "10",
        "sum::cpu1": "200",
        "timer::cpu1": "20",
    }


def test_percpu_interrupt_instance_numbers():
    archive = _write(_irq_activities())
    percpu = sorted(
        (inst, name) for indom, name, inst in archive.instance_events
        if indom == d.INDOM_PERCPU_INTERRUPTS
    )
    assert percpu == [(0, "sum::cpu0"), (1, "timer::cpu0"), (2, "sum::cpu1"), (3, "timer::cpu1")]


def test_new_interrupt_line_is_appended():
    activities = _irq_activities()
    irq = activities[ActivityId.IRQ]
    archive, definer, writer = _marshaller()
    definer.define_all(activities.values(), 0)
    irq.store_matrix(1, [
        [StatsIrq("sum", 310), StatsIrq("timer", 31), StatsIrq("nmi", 1)],
        [StatsIrq("sum", 105), StatsIrq("timer", 11), StatsIrq("nmi", 1)],
        [StatsIrq("sum", 205), StatsIrq("timer", 20), StatsIrq("nmi", 0)],
    ])
    writer.write_activity(irq, 1)
    archive.write(2.0)
    values = archive.last()
    assert values["kernel.all.interrupts.total"] == {"timer": "31", "nmi": "1"}
    assert values["kernel.percpu.interrupts"]["nmi::cpu1"] == "0"
    assert definer.instances.index_of(d.INDOM_INTERRUPTS, "nmi") == 1


def test_interrupt_item_list():
    """Only listed lines are defined and written; "sum" is not listed here."""
    archive = _write(_irq_activities(items={"irq": ["timer"]}))
    values = archive.last()
    assert "kernel.all.intr" not in values
    assert "kernel.all.intr" not in archive._metrics
    assert values["kernel.all.interrupts.total"] == {"timer": "30"}
    assert values["kernel.percpu.interrupts"] == {"timer::cpu0": "10", "timer::cpu1": "20"}
    percpu = sorted(
        (inst, name) for indom, name, inst in archive.instance_events
        if indom == d.INDOM_PERCPU_INTERRUPTS
    )
    assert percpu == [(0, "timer::cpu0"), (1, "timer::cpu1")]


def test_offline_interrupt_row_skipped():
    activities = build_activities(["irq"])
    activities[ActivityId.IRQ].store_matrix(0, [
        [StatsIrq("sum", 200), StatsIrq("timer", 20)],
        [StatsIrq("sum", 0), StatsIrq("timer", 0)],
        [StatsIrq("sum", 200), StatsIrq("timer", 20)],
    ])
    values = _write(activities).last()
    assert values["kernel.all.intr"] == {None: "200"}
    assert values["kernel.percpu.interrupts"] == {"sum::cpu1": "200", "timer::cpu1": "20"}


# ---------------------------------------------------------------------------
# Memory, scalars and entities
# ---------------------------------------------------------------------------

def _memory_activities():
    activities = build_activities(["memory"])
    activities[ActivityId.MEMORY].store(0, [StatsMemory(
        tlmkb=2048 * 1024, frmkb=1024, availablekb=4096, slabkb=77, frskb=8, tlskb=16,
    )])
    return activities


def test_memory_default_display():
    values = _write(_memory_activities()).last()
    assert values["hinv.physmem"] == {None: "2048"}
    assert values["mem.util.used"] == {None: str(2048 * 1024 - 1024)}
    assert values["mem.util.swapTotal"] == {None: "16"}
    assert "mem.util.slab" not in values


def test_memory_all_without_swap():
    display = DisplayConfig(memory=True, memory_all=True, swap=False)
    archive = _write(_memory_activities(), display=display)
    values = archive.last()
    assert values["mem.util.slab"] == {None: "77"}
    assert "mem.util.swapFree" not in values
    assert "mem.util.swapFree" not in archive._metrics


def test_swap_only_display():
    display = DisplayConfig(memory=False, memory_all=True, swap=True)
    values = _write(_memory_activities(), display=display).last()
    assert set(values) == {"mem.util.swapFree", "mem.util.swapTotal", "mem.util.swapCached"}
    assert values["mem.util.swapFree"] == {None: "8"}


def test_scalar_unit_conversions():
    """Huge pages go out in bytes, I/O sectors in KB, NFS requests by operation."""
    activities = build_activities(["io", "huge", "net_nfs"])
    activities[ActivityId.IO].store(0, [StatsIo(dk_drive=3, dk_drive_rblk=4096, dk_drive_wblk=7)])
    activities[ActivityId.HUGE].store(0, [StatsHuge(tlhkb=2048, frhkb=1024)])
    activities[ActivityId.NET_NFS].store(0, [StatsNetNfs(
        nfs_rpccnt=9, nfs_readcnt=3, nfs_writecnt=2, nfs_accesscnt=1, nfs_getattcnt=4,
    )])
    values = _write(activities).last()
    assert values["disk.all.read_bytes"] == {None: "2048"}
    assert values["disk.all.write_bytes"] == {None: "3"}
    assert values["mem.util.hugepagesTotalBytes"] == {None: str(2048 * 1024)}
    assert values["mem.util.hugepagesFreeBytes"] == {None: str(1024 * 1024)}
    assert values["nfs.client.reqs"] == {"getattr": "4", "read": "3", "write": "2", "access": "1"}
    assert values["rpc.client.rpccnt"] == {None: "9"}


def test_cpu_frequency_in_mhz():
    activities = build_activities(["pwr_cpu"])
    activities[ActivityId.PWR_CPU].store(0, [
        StatsPwrCpufreq(0), StatsPwrCpufreq(240000), StatsPwrCpufreq(80050),
    ])
    values = _write(activities).last()
    assert values["hinv.cpu.clock"] == {"cpu0": "2400.000000", "cpu1": "800.500000"}


def test_load_average_instances():
    activities = build_activities(["queue"])
    activities[ActivityId.QUEUE].store(0, [StatsQueue(
        nr_running=2, nr_threads=300, load_avg_1=125, load_avg_5=50, load_avg_15=7,
    )])
    values = _write(activities).last()
    assert values["kernel.all.load"] == {
        "1 minute": "1.250000",
        "5 minute": "0.500000",
        "15 minute": "0.070000",
    }
    assert values["kernel.all.nprocs"] == {None: "300"}


def test_empty_scalar_activity_writes_nothing():
    activities = build_activities(["queue"])
    archive = _write(activities)
    assert archive.records == []


def test_hot_plugged_disk():
    activities = build_activities(["disk"])
    disk = activities[ActivityId.DISK]
    disk.store(0, [StatsDisk(name="sda", rd_sect=10)])
    archive, definer, writer = _marshaller()
    definer.define_all(activities.values(), 0)
    disk.store(1, [StatsDisk(name="sda", rd_sect=20), StatsDisk(name="sdb", rd_sect=8, rd_ios=3)])
    writer.write_activity(disk, 1)
    archive.write(2.0)
    values = archive.last()
    assert values["disk.dev.read_bytes"] == {"sda": "10", "sdb": "4"}
    assert values["disk.dev.read"]["sdb"] == "3"
    assert (d.INDOM_DISK, "sdb", 1) in archive.instance_events


def test_disk_item_filter():
    activities = build_activities(["disk"], items={"disk": ["sdb"]})
    activities[ActivityId.DISK].store(0, [StatsDisk(name="sda"), StatsDisk(name="sdb", nr_ios=9)])
    values = _write(activities).last()
    assert values["disk.dev.total"] == {"sdb": "9"}


def test_battery_item_list_defines_instances_up_front():
    """Listed batteries get their instances in list order; unlisted ones are dropped."""
    activities = build_activities(["pwr_bat"], items={"pwr_bat": ["BAT1", "BAT0"]})
    activities[ActivityId.PWR_BAT].store(0, [
        StatsPwrBat(bat_id=0, capacity=55, status=2),
        StatsPwrBat(bat_id=2, capacity=90, status=4),
    ])
    archive = _write(activities)
    assert [e for e in archive.instance_events if e[0] == d.INDOM_BAT] == [
        (d.INDOM_BAT, "BAT1", 0),
        (d.INDOM_BAT, "BAT0", 1),
    ]
    values = archive.last()
    assert values["power.bat.capacity"] == {"BAT0": "55"}
    assert values["power.bat.status"] == {"BAT0": "Discharging"}


def test_usb_fchost_and_serial_text():
    activities = build_activities(["serial", "pwr_usb", "net_fc"])
    activities[ActivityId.SERIAL].store(0, [StatsSerial(line=3, rx=12, overrun=1)])
    activities[ActivityId.PWR_USB].store(0, [StatsPwrUsb(
        bus_nr=2, vendor_id=0x046D, product_id=0xC52B, bmaxpower=49,
        manufacturer="Logitech", product="USB Receiver",
    )])
    activities[ActivityId.NET_FC].store(0, [StatsFchost(
        fchost_name="host1", f_rxframes=5, f_rxwords=1000, f_txwords=3,
    )])
    values = _write(activities).last()
    assert values["tty.serial.rx"] == {"serial3": "12"}
    assert values["tty.serial.overrun"] == {"serial3": "1"}
    assert values["power.usb.vendorId"] == {"usb0": "46d"}
    assert values["power.usb.productId"] == {"usb0": "c52b"}
    assert values["power.usb.maxpower"] == {"usb0": "98"}
    assert values["power.usb.productName"] == {"usb0": "USB Receiver"}
    assert values["fchost.in.bytes"] == {"host1": "4000"}
    assert values["fchost.out.bytes"] == {"host1": "12"}
    assert values["fchost.in.frames"] == {"host1": "5"}


def test_fan_derived_metrics():
    activities = build_activities(["pwr_fan"])
    activities[ActivityId.PWR_FAN].store(0, [
        StatsPwrFan(rpm=1200.0, rpm_min=200.0, device="nct6775:fan1"),
    ])
    values = _write(activities).last()
    assert values["power.fan.rpm"] == {"fan1": "1200"}
    assert values["power.fan.drpm"] == {"fan1": "1000"}
    assert values["power.fan.device"] == {"fan1": "nct6775:fan1"}


def test_percent_guard_and_battery_clamp():
    """An empty range gives 0 %; an out-of-range status code becomes Unknown."""
    assert f.range_percent(40.0, 40.0, 40.0) == 0.0
    assert f.range_percent(50.0, 0.0, 100.0) == 50.0
    assert f.bat_status_text(9) == "Unknown"
    assert f.bat_status_text(-1) == "Unknown"

    activities = build_activities(["pwr_bat"])
    activities[ActivityId.PWR_BAT].store(0, [StatsPwrBat(bat_id=1, capacity=80, status=7)])
    values = _write(activities).last()
    assert values["power.bat.status"] == {"BAT1": "Unknown"}
    assert values["power.bat.capacity"] == {"BAT1": "80"}


def test_headers():
    archive, definer, writer = _marshaller()
    definer.define_headers()
    writer.write_file_header(FileHeader(cpu_nr=4, sysname="Linux", nodename="h1"))
    writer.write_record_header(RecordHeader(uptime_cs=12345))
    archive.write(1.0)
    values = archive.last()
    assert values["hinv.ncpu"] == {None: "4"}
    assert values["kernel.uname.nodename"] == {None: "h1"}
    assert values["kernel.all.uptime"] == {None: "123.450000"}
