"""CPU, CPU frequency and interrupt collectors."""

from __future__ import annotations

from typing import Any

import psutil

from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsCpu, StatsIrq, StatsPwrCpufreq
from .base import BaseCollector, proc_fields, read_proc_lines


def _ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def cpu_record(times: Any) -> StatsCpu:
    """Convert a psutil ``scputimes`` tuple into a :class:`StatsCpu` (milliseconds)."""
    return StatsCpu(
        cpu_user=_ms(times.user),
        cpu_nice=_ms(getattr(times, "nice", 0.0)),
        cpu_sys=_ms(times.system),
        cpu_idle=_ms(times.idle),
        cpu_iowait=_ms(getattr(times, "iowait", 0.0)),
        cpu_steal=_ms(getattr(times, "steal", 0.0)),
        cpu_hardirq=_ms(getattr(times, "irq", 0.0)),
        cpu_softirq=_ms(getattr(times, "softirq", 0.0)),
        cpu_guest=_ms(getattr(times, "guest", 0.0)),
        cpu_guest_nice=_ms(getattr(times, "guest_nice", 0.0)),
    )


class CpuCollector(BaseCollector):
    """Aggregate plus per-CPU time buckets."""

    activity_id = ActivityId.CPU

    def collect(self, activity: Activity, curr: int) -> None:
        records = [cpu_record(psutil.cpu_times())]
        records.extend(cpu_record(t) for t in psutil.cpu_times(percpu=True))
        activity.store(curr, records)


class CpuFreqCollector(BaseCollector):
    """Current clock of every CPU, in hundredths of MHz."""

    activity_id = ActivityId.PWR_CPU

    def collect(self, activity: Activity, curr: int) -> None:
        overall = psutil.cpu_freq()
        per_cpu = psutil.cpu_freq(percpu=True) or []
        records = [StatsPwrCpufreq(int(round(overall.current * 100)) if overall else 0)]
        records.extend(StatsPwrCpufreq(int(round(freq.current * 100))) for freq in per_cpu)
        activity.store(curr, records)


def parse_interrupts(lines: list[str], total: int) -> list[list[StatsIrq]]:
    """Build the interrupt matrix from ``/proc/interrupts`` content.

    Row 0 holds the counts over all CPUs, row ``c`` those of CPU ``c - 1``.
    Column 0 is ``sum``: *total* for row 0, the per-CPU sum otherwise.
    """
    if not lines:
        return [[StatsIrq("sum", total)]]
    ncpu = len(lines[0].split())
    rows: list[list[StatsIrq]] = [[StatsIrq("sum", total)]]
    rows.extend([StatsIrq("sum", 0)] for _ in range(ncpu))
    for line in lines[1:]:
        label, sep, rest = line.partition(":")
        if not sep:
            continue
        label = label.strip()
        counts: list[int] = []
        for field in rest.split()[:ncpu]:
            if not field.isdigit():
                break
            counts.append(int(field))
        counts.extend([0] * (ncpu - len(counts)))
        rows[0].append(StatsIrq(label, sum(counts)))
        for cpu, count in enumerate(counts):
            rows[cpu + 1].append(StatsIrq(label, count))
            rows[cpu + 1][0].irq_nr += count
    return rows


class InterruptCollector(BaseCollector):
    """Interrupt counts per line and CPU from ``/proc/interrupts``.

    Without procfs only the ``sum`` line (from psutil) is available.
    """

    activity_id = ActivityId.IRQ

    def collect(self, activity: Activity, curr: int) -> None:
        stat = proc_fields("stat")
        if "intr" in stat:
            total = int(stat["intr"][0])
        else:
            total = psutil.cpu_stats().interrupts
        activity.store_matrix(curr, parse_interrupts(read_proc_lines("interrupts"), total))
