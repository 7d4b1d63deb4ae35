"""Network interface collectors."""

from __future__ import annotations

import psutil

from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsNetDev, StatsNetEdev
from .base import BaseCollector


class NetDevCollector(BaseCollector):
    """Packet and byte counters per interface."""

    activity_id = ActivityId.NET_DEV

    def collect(self, activity: Activity, curr: int) -> None:
        counters = psutil.net_io_counters(pernic=True)
        activity.store(curr, [
            StatsNetDev(
                interface=iface,
                rx_packets=nio.packets_recv,
                tx_packets=nio.packets_sent,
                rx_bytes=nio.bytes_recv,
                tx_bytes=nio.bytes_sent,
            )
            for iface, nio in sorted(counters.items())
        ])


class NetEdevCollector(BaseCollector):
    """Error and drop counters per interface."""

    activity_id = ActivityId.NET_EDEV

    def collect(self, activity: Activity, curr: int) -> None:
        counters = psutil.net_io_counters(pernic=True)
        activity.store(curr, [
            StatsNetEdev(
                interface=iface,
                rx_errors=nio.errin,
                tx_errors=nio.errout,
                rx_dropped=nio.dropin,
                tx_dropped=nio.dropout,
            )
            for iface, nio in sorted(counters.items())
        ])
