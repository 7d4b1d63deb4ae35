"""Task switching and run queue collectors."""

from __future__ import annotations

import psutil

from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsPcsw, StatsQueue
from .base import BaseCollector, proc_fields, read_proc_lines


class PcswCollector(BaseCollector):
    """Context switches and forks since boot."""

    activity_id = ActivityId.PCSW

    def collect(self, activity: Activity, curr: int) -> None:
        stat = proc_fields("stat")
        processes = int(stat["processes"][0]) if "processes" in stat else 0
        activity.store(curr, [StatsPcsw(
            context_switch=psutil.cpu_stats().ctx_switches,
            processes=processes,
        )])


class QueueCollector(BaseCollector):
    """Run queue, thread count and load averages (hundredths)."""

    activity_id = ActivityId.QUEUE

    def collect(self, activity: Activity, curr: int) -> None:
        load1, load5, load15 = psutil.getloadavg()
        rec = StatsQueue(
            load_avg_1=int(round(load1 * 100)),
            load_avg_5=int(round(load5 * 100)),
            load_avg_15=int(round(load15 * 100)),
        )
        loadavg = read_proc_lines("loadavg")
        if loadavg:
            running, _, threads = loadavg[0].split()[3].partition("/")
            rec.nr_running = int(running)
            rec.nr_threads = int(threads)
        else:
            rec.nr_threads = len(psutil.pids())
        stat = proc_fields("stat")
        if "procs_blocked" in stat:
            rec.procs_blocked = int(stat["procs_blocked"][0])
        activity.store(curr, [rec])
