"""OpenTelemetry adapter for query metrics.

Why: Refusal rate, answered rate and strong-match counts per museum are the
     numbers that show whether the similarity floor is tuned sensibly.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from museum_guide.application.ports.telemetry_port import TelemetryPort

logger = logging.getLogger(__name__)


@dataclass
class OtelConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "museum-guide"
    otlp_endpoint: str | None = None  # e.g., "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False  # Debug: print metrics to console


class OpenTelemetryAdapter(TelemetryPort):
    """Counters via incr(), histograms via observe(); instruments created lazily.

    Metrics become no-ops when opentelemetry-sdk is not installed.
    """

    def __init__(self, cfg: OtelConfig) -> None:
        self._cfg = cfg
        self._meter: Any | None = None
        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}
        # Endpoint handlers run on several threadpool threads
        self._lock = threading.Lock()
        self._init_otel()

    def _init_otel(self) -> None:
        try:
            otel_sdk = import_module("opentelemetry.sdk.metrics")
            otel_export = import_module("opentelemetry.sdk.metrics.export")
            otel_metrics = import_module("opentelemetry.metrics")
            otel_resources = import_module("opentelemetry.sdk.resources")
        except ImportError as ex:
            logger.warning("opentelemetry-sdk unavailable, metrics disabled: %s", ex)
            return

        resource = otel_resources.Resource.create(
            {
                "service.name": self._cfg.service_name,
                "deployment.environment": self._cfg.environment,
            }
        )

        readers = []
        if self._cfg.otlp_endpoint:
            otel_otlp = import_module("opentelemetry.exporter.otlp.proto.grpc.metric_exporter")
            exporter = otel_otlp.OTLPMetricExporter(endpoint=self._cfg.otlp_endpoint)
            readers.append(otel_export.PeriodicExportingMetricReader(exporter))
        if self._cfg.enable_console:
            readers.append(
                otel_export.PeriodicExportingMetricReader(otel_export.ConsoleMetricExporter())
            )

        provider = otel_sdk.MeterProvider(resource=resource, metric_readers=readers)
        otel_metrics.set_meter_provider(provider)
        self._meter = otel_metrics.get_meter(__name__)

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """Increment a counter, e.g. incr("query.refusal", {"reason": "time_sensitive"})."""
        if self._meter is None:
            return
        with self._lock:
            counter = self._counters.get(name)
            if counter is None:
                counter = self._meter.create_counter(name=name, description=f"Counter for {name}")
                self._counters[name] = counter
        counter.add(1, attributes=tags or {})

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record a histogram value, e.g. observe("query.strong_matches", 3)."""
        if self._meter is None:
            return
        with self._lock:
            histogram = self._histograms.get(name)
            if histogram is None:
                histogram = self._meter.create_histogram(
                    name=name, description=f"Histogram for {name}"
                )
                self._histograms[name] = histogram
        histogram.record(value, attributes=tags or {})
