"""Memory and swap collectors."""

from __future__ import annotations

import mmap

import psutil

from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsMemory, StatsSwap
from .base import BaseCollector, proc_fields

# /proc/meminfo keys for fields psutil does not report
_MEMINFO_FIELDS = {
    "comkb": "Committed_AS",
    "dirtykb": "Dirty",
    "anonpgkb": "AnonPages",
    "slabkb": "Slab",
    "kstackkb": "KernelStack",
    "pgtblkb": "PageTables",
    "vmusedkb": "VmallocUsed",
    "caskb": "SwapCached",
}


def _kb(value: int) -> int:
    return value // 1024


class MemoryCollector(BaseCollector):
    """RAM and swap utilization, in kilobytes."""

    activity_id = ActivityId.MEMORY

    def collect(self, activity: Activity, curr: int) -> None:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        rec = StatsMemory(
            tlmkb=_kb(mem.total),
            frmkb=_kb(mem.free),
            availablekb=_kb(mem.available),
            bufkb=_kb(getattr(mem, "buffers", 0)),
            camkb=_kb(getattr(mem, "cached", 0)),
            activekb=_kb(getattr(mem, "active", 0)),
            inactkb=_kb(getattr(mem, "inactive", 0)),
            frskb=_kb(swap.free),
            tlskb=_kb(swap.total),
        )
        meminfo = proc_fields("meminfo")
        for attr, key in _MEMINFO_FIELDS.items():
            if key in meminfo:
                setattr(rec, attr, int(meminfo[key][0]))
        activity.store(curr, [rec])


class SwapCollector(BaseCollector):
    """Pages swapped in and out since boot."""

    activity_id = ActivityId.SWAP

    def collect(self, activity: Activity, curr: int) -> None:
        swap = psutil.swap_memory()
        activity.store(curr, [StatsSwap(
            pswpin=swap.sin // mmap.PAGESIZE,
            pswpout=swap.sout // mmap.PAGESIZE,
        )])
