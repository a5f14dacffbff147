"""Prometheus metrics for checklist sessions and state persistence."""

from prometheus_client import Counter, Histogram

# Session metrics
checklist_actions_total = Counter(
    "checklist_actions_total",
    "Total checklist session actions",
    ["action", "outcome"],
)

# Persistence metrics
checklist_saves_total = Counter(
    "checklist_saves_total",
    "Total checklist state saves",
    ["outcome"],
)

checklist_saves_superseded_total = Counter(
    "checklist_saves_superseded_total",
    "Pending checklist saves replaced by a newer snapshot before being written",
)

checklist_save_latency_ms = Histogram(
    "checklist_save_latency_ms",
    "Checklist state save latency in milliseconds",
    ["outcome"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 2500],
)


class SessionMetrics:
    """Interface for session metrics (no-op default)."""

    def inc_action(self, action: str, outcome: str) -> None:
        """Increment action counter."""
        pass

    def record_save(self, outcome: str, latency_ms: float) -> None:
        """Record a completed save attempt."""
        pass

    def inc_superseded(self) -> None:
        """Increment superseded-save counter."""
        pass


class PrometheusSessionMetrics(SessionMetrics):
    """Prometheus-based session metrics implementation."""

    def inc_action(self, action: str, outcome: str) -> None:
        """Increment action counter."""
        checklist_actions_total.labels(action=action, outcome=outcome).inc()

    def record_save(self, outcome: str, latency_ms: float) -> None:
        """Record save outcome and latency."""
        checklist_saves_total.labels(outcome=outcome).inc()
        checklist_save_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_superseded(self) -> None:
        """Increment superseded-save counter."""
        checklist_saves_superseded_total.inc()
