"""Tests for the activity collectors."""

import psutil

from sysstat_pcp.collector.base import BaseCollector
from sysstat_pcp.collector.cpu import CpuCollector, cpu_record, parse_interrupts
from sysstat_pcp.collector.manager import COLLECTORS, CollectorManager
from sysstat_pcp.collector.memory import MemoryCollector
from sysstat_pcp.collector.sensors import battery_status
from sysstat_pcp.collector.system import QueueCollector
from sysstat_pcp.config import CollectorConfig
from sysstat_pcp.marshal.fields import BAT_STATUS
from sysstat_pcp.sample.activity import ACTIVITY_SPECS, Activity, ActivityId, build_activities
from sysstat_pcp.sample.records import StatsIrq

INTERRUPTS = [
    "           CPU0       CPU1",
    "  0:         20         10   IO-APIC   2-edge      timer",
    "NMI:          1          2   Non-maskable interrupts",
    "ERR:          0",
]


def test_cpu_collector():
    collector = CpuCollector()
    assert collector.name == "cpu"
    activity = Activity(ACTIVITY_SPECS[ActivityId.CPU])
    collector.collect(activity, 0)
    assert activity.nr[0] == len(psutil.cpu_times(percpu=True)) + 1
    total = activity.record(0, 0)
    assert total.cpu_user >= 0
    assert total.total() > 0


def test_cpu_record_milliseconds():
    times = psutil.cpu_times()
    rec = cpu_record(times)
    assert rec.cpu_user == int(round(times.user * 1000))
    assert rec.cpu_idle == int(round(times.idle * 1000))


def test_memory_collector():
    collector = MemoryCollector()
    activity = Activity(ACTIVITY_SPECS[ActivityId.MEMORY])
    collector.collect(activity, 1)
    assert activity.nr[1] == 1
    rec = activity.record(1, 0)
    assert rec.tlmkb == psutil.virtual_memory().total // 1024
    assert 0 <= rec.frmkb <= rec.tlmkb


def test_queue_collector():
    activity = Activity(ACTIVITY_SPECS[ActivityId.QUEUE])
    QueueCollector().collect(activity, 0)
    rec = activity.record(0, 0)
    assert rec.nr_threads > 0
    assert rec.load_avg_1 >= 0


def test_collector_names_follow_activities():
    for act_id, cls in COLLECTORS.items():
        assert issubclass(cls, BaseCollector)
        assert cls().name == ACTIVITY_SPECS[act_id].name
    assert COLLECTORS[ActivityId.FS]().name == "filesystem"


# ---------------------------------------------------------------------------
# /proc/interrupts parsing
# ---------------------------------------------------------------------------

def test_parse_interrupts():
    rows = parse_interrupts(INTERRUPTS, 500)
    assert len(rows) == 3
    assert rows[0] == [
        StatsIrq("sum", 500),
        StatsIrq("0", 30),
        StatsIrq("NMI", 3),
        StatsIrq("ERR", 0),
    ]
    assert rows[1][0] == StatsIrq("sum", 21)
    assert rows[2][0] == StatsIrq("sum", 12)
    assert rows[2][1] == StatsIrq("0", 10)


def test_parse_interrupts_without_procfs():
    assert parse_interrupts([], 42) == [[StatsIrq("sum", 42)]]


def test_battery_status():
    assert BAT_STATUS[battery_status(50.0, None)] == "Unknown"
    assert BAT_STATUS[battery_status(50.0, True)] == "Charging"
    assert BAT_STATUS[battery_status(100.0, True)] == "Full"
    assert BAT_STATUS[battery_status(20.0, False)] == "Discharging"


# ---------------------------------------------------------------------------
# CollectorManager
# ---------------------------------------------------------------------------

def test_collector_manager():
    activities = build_activities(["pcsw", "queue", "paging"])
    manager = CollectorManager(CollectorConfig(interval_seconds=0.1), activities)
    assert manager.collector_names == ["pcsw", "queue"]
    assert manager.file_header.cpu_nr >= 1

    collected = []
    manager.add_sink(lambda curr, file_header, record_header: collected.append(curr))

    curr, header = manager.collect_once()
    assert curr == 0
    assert header.uptime_cs > 0
    assert activities[ActivityId.PCSW].record(0, 0).context_switch > 0

    curr, _ = manager.collect_once()
    assert curr == 1
    assert manager.samples == 2

    # sinks only called during _run, so manually trigger
    for sink in manager._sinks:
        sink(curr, manager.file_header, header)
    assert collected == [1]


def test_collector_manager_count():
    activities = build_activities(["queue"])
    manager = CollectorManager(CollectorConfig(interval_seconds=0.01, count=2), activities)
    seen = []
    manager.add_sink(lambda curr, file_header, record_header: seen.append(curr))
    manager.start()
    manager._thread.join(timeout=5)
    manager.stop()
    assert seen == [0, 1]
    assert not manager.running


def test_collector_manager_disabled():
    manager = CollectorManager(CollectorConfig(enabled=False), build_activities(["cpu"]))
    manager.start()
    assert manager._thread is None
