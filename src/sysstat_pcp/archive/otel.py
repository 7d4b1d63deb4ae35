"""OpenTelemetry archive writer – pushes archive records as OTLP/HTTP gauges."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

from ..config import OtelExporterConfig
from ..metrics.descriptors import MetricDesc
from .base import BaseArchiveWriter, ValueSet

logger = logging.getLogger(__name__)


class OtelArchiveWriter(BaseArchiveWriter):
    """Mirrors archive records to an OpenTelemetry endpoint.

    Every numeric metric becomes a gauge of the same name; per-instance
    values carry the instance name in the ``instance`` attribute. String
    metrics have no gauge representation and are skipped. The SDK's
    ``PeriodicExportingMetricReader`` flushes observations to the configured
    OTLP/HTTP endpoint unless another *reader* is supplied.
    """

    def __init__(self, config: OtelExporterConfig, reader: MetricReader | None = None) -> None:
        super().__init__()
        self._config = config
        resource = Resource.create({SERVICE_NAME: config.service_name})

        if reader is None:
            exporter_kwargs: dict[str, Any] = {
                "endpoint": f"{config.endpoint.rstrip('/')}/v1/metrics",
            }
            if config.headers:
                exporter_kwargs["headers"] = config.headers
            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(**exporter_kwargs),
                export_interval_millis=config.export_interval_ms,
            )
        self._provider = MeterProvider(resource=resource, metric_readers=[reader])
        self._meter = self._provider.get_meter("sysstat_pcp.archive")
        self._gauges: dict[str, Any] = {}

        logger.info(
            "OtelArchiveWriter initialized → %s (service=%s)",
            config.endpoint,
            config.service_name,
        )

    def _get_gauge(self, desc: MetricDesc) -> Any:
        if desc.name not in self._gauges:
            self._gauges[desc.name] = self._meter.create_gauge(
                name=desc.name,
                unit=desc.units.label() or "1",
                description=f"{desc.semantics.name.lower()} {desc.value_type.name}",
            )
        return self._gauges[desc.name]

    def _write_record(self, timestamp: float, value_sets: list[ValueSet]) -> None:
        for vs in value_sets:
            desc = self._by_pmid[vs.pmid]
            if not desc.value_type.is_numeric:
                continue
            gauge = self._get_gauge(desc)
            for inst, value in vs.values:
                attributes: dict[str, str] = {}
                if desc.has_instances:
                    attributes["instance"] = self.instance_name(desc.indom, inst) or str(inst)
                gauge.set(float(value), attributes=attributes)

    def shutdown(self) -> None:
        self._provider.shutdown()
        logger.info("OtelArchiveWriter shut down")
