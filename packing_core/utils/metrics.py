"""Prometheus metrics for rule evaluation and replica merge."""

from prometheus_client import Counter, Histogram

# Engine metrics
compute_latency_ms = Histogram(
    "packing_compute_latency_ms",
    "Packing list computation latency in milliseconds",
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

packing_entries_total = Counter(
    "packing_entries_total",
    "Total packing list entries emitted",
)

diagnostics_total = Counter(
    "packing_diagnostics_total",
    "Total non-fatal diagnostics reported",
    ["kind"],
)

# Merge metrics
merges_total = Counter(
    "sync_merges_total",
    "Total entity merges by deciding rule",
    ["entity_type", "decided_by"],
)


class PrometheusPackingMetrics:
    """Prometheus-based metrics implementation."""

    def record_compute(self, latency_ms: float, entries: int) -> None:
        """Record one engine run."""
        compute_latency_ms.observe(latency_ms)
        packing_entries_total.inc(entries)

    def inc_diagnostic(self, kind: str) -> None:
        """Increment diagnostic counter."""
        diagnostics_total.labels(kind=kind).inc()

    def inc_merge(self, entity_type: str, decided_by: str) -> None:
        """Increment merge counter."""
        merges_total.labels(entity_type=entity_type, decided_by=decided_by).inc()
