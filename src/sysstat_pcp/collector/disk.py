"""Block device and filesystem collectors."""

from __future__ import annotations

import logging
import os

import psutil

from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsDisk, StatsFilesystem, StatsIo
from .base import BaseCollector

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512


class DiskCollector(BaseCollector):
    """Per-device I/O counters (sectors and milliseconds)."""

    activity_id = ActivityId.DISK

    def collect(self, activity: Activity, curr: int) -> None:
        counters = psutil.disk_io_counters(perdisk=True) or {}
        records = []
        for name, io in sorted(counters.items()):
            records.append(StatsDisk(
                name=name,
                nr_ios=io.read_count + io.write_count,
                rd_ios=io.read_count,
                wr_ios=io.write_count,
                rd_sect=io.read_bytes // SECTOR_SIZE,
                wr_sect=io.write_bytes // SECTOR_SIZE,
                rd_ticks=io.read_time,
                wr_ticks=io.write_time,
                tot_ticks=getattr(io, "busy_time", 0),
            ))
        activity.store(curr, records)


class IoCollector(BaseCollector):
    """System-wide I/O totals."""

    activity_id = ActivityId.IO

    def collect(self, activity: Activity, curr: int) -> None:
        io = psutil.disk_io_counters(perdisk=False)
        if io is None:
            activity.store(curr, [StatsIo()])
            return
        activity.store(curr, [StatsIo(
            dk_drive=io.read_count + io.write_count,
            dk_drive_rio=io.read_count,
            dk_drive_wio=io.write_count,
            dk_drive_rblk=io.read_bytes // SECTOR_SIZE,
            dk_drive_wblk=io.write_bytes // SECTOR_SIZE,
        )])


def filesystem_record(device: str, mountpoint: str) -> StatsFilesystem:
    """Usage of the filesystem mounted at *mountpoint*; sizes in bytes."""
    rec = StatsFilesystem(fs_name=device, mountp=mountpoint)
    if hasattr(os, "statvfs"):
        st = os.statvfs(mountpoint)
        rec.f_blocks = st.f_blocks * st.f_frsize
        rec.f_bfree = st.f_bfree * st.f_frsize
        rec.f_bavail = st.f_bavail * st.f_frsize
        rec.f_files = st.f_files
        rec.f_ffree = st.f_ffree
    else:
        usage = psutil.disk_usage(mountpoint)
        rec.f_blocks = usage.total
        rec.f_bfree = rec.f_bavail = usage.free
    return rec


class FilesystemCollector(BaseCollector):
    """Capacity and inode usage of mounted filesystems."""

    activity_id = ActivityId.FS

    def collect(self, activity: Activity, curr: int) -> None:
        records: list[StatsFilesystem] = []
        seen: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if part.device in seen:
                continue
            try:
                rec = filesystem_record(part.device, part.mountpoint)
            except OSError as exc:
                logger.debug("Skipping %s: %s", part.mountpoint, exc)
                continue
            seen.add(part.device)
            records.append(rec)
        activity.store(curr, records)
