"""
Shared metrics configuration for the ZEDLY client gateway.
"""

import threading
from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest


class MetricsCollector:
    """Centralized metrics collector for client components."""

    def __init__(self, component_name: str, registry: Optional[CollectorRegistry] = None):
        self.component_name = component_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the component."""

        self._metrics["client_info"] = Info(
            "client_info",
            "Client component information",
            registry=self.registry
        )
        self._metrics["client_info"].info({
            "component": self.component_name,
            "version": "1.0.0"
        })

        # Gateway metrics
        self._metrics["gateway_calls_total"] = Counter(
            "gateway_calls_total",
            "Total calls through the authenticated gateway by terminal outcome",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["gateway_call_duration_seconds"] = Histogram(
            "gateway_call_duration_seconds",
            "Gateway call duration in seconds, renewal and retry included",
            ["outcome"],
            registry=self.registry
        )

        # Renewal metrics
        self._metrics["credential_renewals_total"] = Counter(
            "credential_renewals_total",
            "Total credential renewal network operations",
            ["status"],
            registry=self.registry
        )

        self._metrics["session_expirations_total"] = Counter(
            "session_expirations_total",
            "Total sessions ended by a failed renewal",
            registry=self.registry
        )

        # Session flow metrics
        self._metrics["session_events_total"] = Counter(
            "session_events_total",
            "Total session flow events",
            ["event"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, **labels) -> float:
        """Current value of a sample, 0.0 when it was never recorded."""
        value = self.registry.get_sample_value(name, labels or None)
        return value or 0.0

    def render(self) -> bytes:
        """Render the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name not in self._metrics:
            return
        with self._lock:
            if labels:
                self._metrics[metric_name].labels(**labels).inc()
            else:
                self._metrics[metric_name].inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).observe(value)


def get_metrics_collector(component_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a client component."""
    return MetricsCollector(component_name, registry)

