"""
Metrics collection for the Marty control plane.

Prometheus counters and histograms for watch workers and address resolution.
Each collector owns its registry unless one is passed in, so several
collectors can live in one process.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from ..logger import get_logger

logger = get_logger(__name__)


class ControlPlaneMetrics:
    """Metrics collector for watch workers and endpoint resolution."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        # Watch worker metrics
        self.watch_notifications_total = Counter(
            "watch_notifications_total",
            "Change notifications delivered by watch workers",
            registry=self.registry,
        )

        self.watch_terminations_total = Counter(
            "watch_terminations_total",
            "Watch workers that reached the dead state",
            ["outcome"],
            registry=self.registry,
        )

        self.watch_stop_failures_total = Counter(
            "watch_stop_failures_total",
            "Remote watch sessions that failed to stop",
            registry=self.registry,
        )

        # Address resolution metrics
        self.address_resolution_attempts_total = Counter(
            "address_resolution_attempts_total",
            "Instance lookups made while resolving addresses",
            registry=self.registry,
        )

        self.address_resolutions_total = Counter(
            "address_resolutions_total",
            "Address resolutions by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.address_resolution_duration_seconds = Histogram(
            "address_resolution_duration_seconds",
            "Address resolution duration in seconds",
            buckets=[0.01, 0.1, 1.0, 5.0, 15.0, 30.0, 60.0, 180.0],
            registry=self.registry,
        )

        logger.debug("Control plane metrics initialized")

    def record_notification(self) -> None:
        self.watch_notifications_total.inc()

    def record_termination(self, failed: bool) -> None:
        self.watch_terminations_total.labels(
            outcome="failed" if failed else "cancelled"
        ).inc()

    def record_stop_failure(self) -> None:
        self.watch_stop_failures_total.inc()

    def record_resolution_attempt(self) -> None:
        self.address_resolution_attempts_total.inc()

    def record_resolution(self, outcome: str, duration: float) -> None:
        """Record a finished resolution: ``found``, ``not_found`` or ``error``."""
        self.address_resolutions_total.labels(outcome=outcome).inc()
        self.address_resolution_duration_seconds.observe(duration)

    def get_sample(self, name: str, labels: Optional[dict[str, str]] = None) -> float:
        """Return the current value of a sample, 0.0 when it was never recorded."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Export metrics in Prometheus text format."""
        return generate_latest(self.registry)


__all__ = ["ControlPlaneMetrics"]
