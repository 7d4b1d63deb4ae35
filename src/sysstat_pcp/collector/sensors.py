"""Fan, temperature and battery collectors (hardware sensors via psutil)."""

from __future__ import annotations

from typing import Any

import psutil

from ..marshal.fields import BAT_STATUS
from ..sample.activity import Activity, ActivityId
from ..sample.records import StatsPwrBat, StatsPwrFan, StatsPwrTemp
from .base import BaseCollector


def _sensor_readings(func_name: str) -> dict[str, list[Any]]:
    # sensors_* are not implemented on every platform
    func = getattr(psutil, func_name, None)
    if func is None:
        return {}
    return func() or {}


def _device(chip: str, label: str) -> str:
    return f"{chip}:{label}" if label else chip


class FanCollector(BaseCollector):
    activity_id = ActivityId.PWR_FAN

    def collect(self, activity: Activity, curr: int) -> None:
        activity.store(curr, [
            StatsPwrFan(rpm=float(fan.current), device=_device(chip, fan.label))
            for chip, fans in sorted(_sensor_readings("sensors_fans").items())
            for fan in fans
        ])


class TempCollector(BaseCollector):
    activity_id = ActivityId.PWR_TEMP

    def collect(self, activity: Activity, curr: int) -> None:
        activity.store(curr, [
            StatsPwrTemp(
                temp=float(temp.current),
                temp_max=float(temp.critical or temp.high or 0.0),
                device=_device(chip, temp.label),
            )
            for chip, temps in sorted(_sensor_readings("sensors_temperatures").items())
            for temp in temps
        ])


def battery_status(percent: float, plugged: bool | None) -> int:
    """Status code (index into ``BAT_STATUS``) for a psutil battery reading."""
    if plugged is None:
        return BAT_STATUS.index("Unknown")
    if plugged:
        return BAT_STATUS.index("Full" if percent >= 100 else "Charging")
    return BAT_STATUS.index("Discharging")


class BatteryCollector(BaseCollector):
    activity_id = ActivityId.PWR_BAT

    def collect(self, activity: Activity, curr: int) -> None:
        func = getattr(psutil, "sensors_battery", None)
        battery = func() if func is not None else None
        if battery is None:
            activity.store(curr, [])
            return
        activity.store(curr, [StatsPwrBat(
            bat_id=0,
            capacity=int(round(battery.percent)),
            status=battery_status(battery.percent, battery.power_plugged),
        )])
