"""Tests for the archive writers and the archive loader."""

import json
from dataclasses import replace
import tempfile
from pathlib import Path

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from sysstat_pcp.archive.loader import find_archives, load_archive
from sysstat_pcp.archive.local import ARCHIVE_MAGIC, LocalArchiveWriter
from sysstat_pcp.archive.otel import OtelArchiveWriter
from sysstat_pcp.config import ArchiveConfig, OtelExporterConfig
from sysstat_pcp.errors import ArchiveError
from sysstat_pcp.metrics import default_registry
from sysstat_pcp.metrics import descriptors as d
from sysstat_pcp.metrics.identity import PM_IN_NULL


def _define(writer, registry, *names):
    for name in names:
        desc = registry.lookup_by_name(name)
        writer.add_metric(desc, registry.units_of(desc))


# ---------------------------------------------------------------------------
# LocalArchiveWriter
# ---------------------------------------------------------------------------

class TestLocalArchiveWriter:
    """JSONL archive layout and value validation."""

    def test_writes_label_definitions_and_results(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sub" / "a.jsonl"
            writer = LocalArchiveWriter(ArchiveConfig(path=str(path), hostname="box"), registry.ltor)
            _define(writer, registry, "kernel.all.pswitch", "disk.dev.read")
            writer.add_instance(d.INDOM_DISK, "sda", 0)
            writer.put_value("kernel.all.pswitch", None, "12")
            writer.put_value("disk.dev.read", "sda", "3")
            assert writer.write(1000.5) == 2
            writer.shutdown()

            lines = [json.loads(line) for line in path.read_text().splitlines()]
            assert [line["kind"] for line in lines] == ["label", "metric", "metric", "instance", "result"]
            assert lines[0]["magic"] == ARCHIVE_MAGIC
            assert lines[0]["hostname"] == "box"
            result = lines[-1]
            assert result["timestamp"] == 1000.5
            assert result["values"][0]["name"] == "kernel.all.pswitch"
            assert result["values"][0]["instances"] == [[PM_IN_NULL, "12"]]
            assert result["values"][1]["instances"] == [[0, "3"]]
            assert writer.paths == [path]

    def test_definitions_after_open_are_appended(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a.jsonl"
            writer = LocalArchiveWriter(ArchiveConfig(path=str(path)), registry.ltor)
            _define(writer, registry, "disk.dev.read")
            writer.add_instance(d.INDOM_DISK, "sda", 0)
            writer.put_value("disk.dev.read", "sda", "1")
            writer.write(1.0)
            writer.add_instance(d.INDOM_DISK, "sdb", 1)
            writer.put_value("disk.dev.read", "sdb", "2")
            writer.write(2.0)
            writer.shutdown()

            archive = load_archive(path)
            assert archive.instances == [(d.INDOM_DISK, "sda", 0), (d.INDOM_DISK, "sdb", 1)]
            assert len(archive.records) == 2
            assert archive.records[1].value_sets[0].values == [(1, "2")]

    def test_daily_file_in_output_dir(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = LocalArchiveWriter(ArchiveConfig(output_dir=tmpdir), registry.ltor)
            _define(writer, registry, "kernel.all.pswitch")
            writer.put_value("kernel.all.pswitch", None, "1")
            writer.write(1.0)
            writer.shutdown()

            files = find_archives(tmpdir)
            assert len(files) == 1
            assert files[0].name.startswith("pcp-")
            assert files[0].suffix == ".jsonl"

    def test_second_session_gets_its_own_daily_file(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            for disk in ("sda", "sdb"):
                writer = LocalArchiveWriter(ArchiveConfig(output_dir=tmpdir), registry.ltor)
                _define(writer, registry, "disk.dev.read")
                writer.add_instance(d.INDOM_DISK, disk, 0)
                writer.put_value("disk.dev.read", disk, "1")
                writer.write(1.0)
                writer.shutdown()

            files = find_archives(tmpdir)
            assert len(files) == 2
            assert files[1].name == files[0].stem + "-2.jsonl"
            assert load_archive(files[0]).instances == [(d.INDOM_DISK, "sda", 0)]
            assert load_archive(files[1]).instances == [(d.INDOM_DISK, "sdb", 0)]

    def test_fixed_path_is_overwritten(self, caplog):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a.jsonl"
            path.write_text('{"kind": "label", "magic": "old"}\n')
            writer = LocalArchiveWriter(ArchiveConfig(path=str(path)), registry.ltor)
            _define(writer, registry, "kernel.all.pswitch")
            writer.put_value("kernel.all.pswitch", None, "5")
            with caplog.at_level("WARNING"):
                writer.write(1.0)
            writer.shutdown()

            archive = load_archive(path)
            assert archive.label["magic"] == ARCHIVE_MAGIC
            assert len(archive.records) == 1
            assert "Overwriting existing archive" in caplog.text

    def test_nothing_pending_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a.jsonl"
            writer = LocalArchiveWriter(ArchiveConfig(path=str(path)), True)
            assert writer.write(1.0) == 0
            writer.shutdown()
            assert not path.exists()

    def test_value_validation(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = LocalArchiveWriter(ArchiveConfig(path=str(Path(tmpdir) / "a.jsonl")), True)
            _define(writer, registry, "kernel.all.pswitch", "disk.dev.read")
            with pytest.raises(ArchiveError):
                writer.put_value("swap.pagesin", None, "1")
            with pytest.raises(ArchiveError):
                writer.put_value("disk.dev.read", None, "1")
            with pytest.raises(ArchiveError):
                writer.put_value("disk.dev.read", "sdz", "1")
            with pytest.raises(ArchiveError):
                writer.put_value("kernel.all.pswitch", "cpu0", "1")
            writer.shutdown()

    def test_redefinition_with_other_descriptor(self):
        registry = default_registry()
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = LocalArchiveWriter(ArchiveConfig(path=str(Path(tmpdir) / "a.jsonl")), True)
            desc = registry.lookup_by_name("kernel.all.pswitch")
            writer.add_metric(desc, registry.units_of(desc))
            writer.add_metric(desc, registry.units_of(desc))
            other = registry.lookup_by_name("kernel.all.sysfork")
            with pytest.raises(ArchiveError):
                writer.add_metric(replace(desc, pmid=other.pmid), registry.units_of(other))
            writer.shutdown()


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def test_load_missing_archive():
    archive = load_archive("/tmp/does-not-exist-sysstat-pcp.jsonl")
    assert archive.metrics == {}
    assert archive.records == []


def test_load_restores_descriptors():
    for ltor in (True, False):
        registry = default_registry(ltor)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a.jsonl"
            writer = LocalArchiveWriter(ArchiveConfig(path=str(path)), registry.ltor)
            _define(writer, registry, "mem.util.free", "kernel.all.load")
            writer.add_instance(d.INDOM_LOADAVG, "1 minute", 1)
            writer.put_value("kernel.all.load", "1 minute", "0.500000")
            writer.write(5.0)
            writer.shutdown()

            archive = load_archive(path)
        for desc in archive.metrics.values():
            assert desc == registry.lookup_by_identity(desc.pmid)


def test_load_skips_garbage_lines():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "a.jsonl"
        path.write_text('not json\n[1, 2]\n\n{"kind": "label", "magic": "x"}\n')
        archive = load_archive(path)
    assert archive.label == {"kind": "label", "magic": "x"}
    assert archive.records == []


def test_load_malformed_definitions():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "a.jsonl"
        path.write_text('{"kind": "metric", "name": "x", "pmid": 1, "value_type": "BOGUS"}\n')
        with pytest.raises(ArchiveError):
            load_archive(path)
        path.write_text('{"kind": "result", "timestamp": 1.0, "values": [{"pmid": 1}]}\n')
        with pytest.raises(ArchiveError):
            load_archive(path)


def test_find_archives_missing_directory():
    assert find_archives("/tmp/no-such-sysstat-pcp-dir") == []


def test_find_archives_orders_sessions_within_a_day():
    with tempfile.TemporaryDirectory() as tmpdir:
        for name in ("pcp-2024-05-02.jsonl", "pcp-2024-05-01-10.jsonl",
                     "pcp-2024-05-01-2.jsonl", "pcp-2024-05-01.jsonl"):
            (Path(tmpdir) / name).write_text("")
        names = [path.name for path in find_archives(tmpdir)]
    assert names == [
        "pcp-2024-05-01.jsonl",
        "pcp-2024-05-01-2.jsonl",
        "pcp-2024-05-01-10.jsonl",
        "pcp-2024-05-02.jsonl",
    ]


# ---------------------------------------------------------------------------
# OtelArchiveWriter
# ---------------------------------------------------------------------------

def test_otel_writer_sets_gauges():
    """Numeric values become gauges with the instance name as attribute."""
    registry = default_registry()
    reader = InMemoryMetricReader()
    writer = OtelArchiveWriter(OtelExporterConfig(service_name="test-svc"), reader=reader)
    _define(writer, registry, "kernel.all.load", "kernel.uname.sysname")
    writer.add_instance(d.INDOM_LOADAVG, "1 minute", 1)
    writer.put_value("kernel.all.load", "1 minute", "1.250000")
    writer.put_value("kernel.uname.sysname", None, "Linux")
    assert writer.write(1.0) == 2

    data = reader.get_metrics_data()
    metrics = {
        metric.name: metric
        for rm in data.resource_metrics
        for sm in rm.scope_metrics
        for metric in sm.metrics
    }
    assert "kernel.uname.sysname" not in metrics
    point = metrics["kernel.all.load"].data.data_points[0]
    assert point.value == 1.25
    assert dict(point.attributes) == {"instance": "1 minute"}
    assert data.resource_metrics[0].resource.attributes["service.name"] == "test-svc"
    writer.shutdown()
