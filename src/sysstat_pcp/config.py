"""Configuration loading and validation for sysstat_pcp."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_ACTIVITIES = [
    "cpu",
    "pcsw",
    "irq",
    "swap",
    "memory",
    "queue",
    "disk",
    "io",
    "net_dev",
    "net_edev",
    "filesystem",
    "pwr_cpu",
    "pwr_fan",
    "pwr_temp",
    "pwr_bat",
]


@dataclass
class ArchiveConfig:
    """Metric archive output settings."""

    enabled: bool = True
    output_dir: str = "./pcp_archive"
    path: str = ""
    bit_order: str = "auto"
    hostname: str = ""

    def ltor(self) -> bool | None:
        """Units bit-field order, or None to follow the host."""
        order = self.bit_order.lower()
        if order == "auto":
            return None
        if order == "ltor":
            return True
        if order == "rtol":
            return False
        raise ValueError(f"archive.bit_order must be auto, ltor or rtol, not {self.bit_order!r}")


@dataclass
class OtelExporterConfig:
    """OpenTelemetry exporter settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "sysstat-pcp"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class CollectorConfig:
    """Sampling settings."""

    enabled: bool = True
    interval_seconds: float = 1.0
    count: int = 0
    activities: list[str] = field(default_factory=lambda: list(DEFAULT_ACTIVITIES))
    cpus: list[str] = field(default_factory=lambda: ["ALL"])
    disks: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    filesystems: list[str] = field(default_factory=list)
    interrupts: list[str] = field(default_factory=list)
    batteries: list[str] = field(default_factory=list)

    def item_filters(self) -> dict[str, list[str]]:
        """Per-activity item lists; empty lists mean "everything sampled"."""
        filters = {
            "disk": self.disks,
            "net_dev": self.interfaces,
            "net_edev": self.interfaces,
            "filesystem": self.filesystems,
            "irq": self.interrupts,
            "pwr_bat": self.batteries,
        }
        return {name: items for name, items in filters.items() if items}


@dataclass
class DisplayConfig:
    """Which optional metric subsets are written."""

    memory: bool = True
    memory_all: bool = False
    swap: bool = True


@dataclass
class SysstatPcpConfig:
    """Top-level sysstat_pcp configuration."""

    mode: str = "local"
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


_COERCE = {
    "interval_seconds": float,
    "count": int,
    "memory_all": _as_bool,
    "swap": _as_bool,
    "cpus": _as_list,
    "activities": _as_list,
}


def _merge_dict(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *source* into *target*."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_dict(target[key], value)
        else:
            target[key] = value
    return target


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using SYSSTAT_PCP_ prefix."""
    env_map = {
        "SYSSTAT_PCP_MODE": ("mode",),
        "SYSSTAT_PCP_ARCHIVE_OUTPUT_DIR": ("archive", "output_dir"),
        "SYSSTAT_PCP_ARCHIVE_PATH": ("archive", "path"),
        "SYSSTAT_PCP_ARCHIVE_BIT_ORDER": ("archive", "bit_order"),
        "SYSSTAT_PCP_OTEL_ENDPOINT": ("otel", "endpoint"),
        "SYSSTAT_PCP_OTEL_SERVICE_NAME": ("otel", "service_name"),
        "SYSSTAT_PCP_COLLECTOR_INTERVAL": ("collector", "interval_seconds"),
        "SYSSTAT_PCP_COLLECTOR_COUNT": ("collector", "count"),
        "SYSSTAT_PCP_COLLECTOR_ACTIVITIES": ("collector", "activities"),
        "SYSSTAT_PCP_COLLECTOR_CPUS": ("collector", "cpus"),
        "SYSSTAT_PCP_DISPLAY_MEMORY_ALL": ("display", "memory_all"),
        "SYSSTAT_PCP_DISPLAY_SWAP": ("display", "swap"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            coerce = _COERCE.get(final_key)
            obj[final_key] = coerce(value) if coerce else value
    return data


def _section(cls: type, data: dict[str, Any]) -> Any:
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> SysstatPcpConfig:
    """Convert a raw dictionary to a :class:`SysstatPcpConfig`."""
    return SysstatPcpConfig(
        mode=data.get("mode", "local"),
        archive=_section(ArchiveConfig, data.get("archive", {})),
        otel=_section(OtelExporterConfig, data.get("otel", {})),
        collector=_section(CollectorConfig, data.get("collector", {})),
        display=_section(DisplayConfig, data.get("display", {})),
    )


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SysstatPcpConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``sysstat_pcp.yaml`` in the current directory if *path* is None.
    *overrides* (e.g. from command line flags) are merged last.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("sysstat_pcp.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    if overrides:
        _merge_dict(data, overrides)
    return _dict_to_config(data)
