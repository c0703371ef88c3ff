"""Prometheus metrics for monitoring generation sources, fallbacks and health scores"""

from prometheus_client import Counter, Histogram

# Generation metrics
generation_counter = Counter(
    "finwell_generation_total",
    "Artifacts served, by artifact and source",
    ["artifact", "source"],  # artifact: insights | smart_wins; source: remote | local | stored | cache
)

remote_failure_counter = Counter(
    "finwell_remote_generation_failures_total",
    "Remote generation attempts that fell back to local computation",
    ["artifact", "reason"],
)

remote_latency_histogram = Histogram(
    "finwell_remote_generation_latency_seconds",
    "Remote generator response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Persistence metrics
persistence_failure_counter = Counter(
    "finwell_persistence_failures_total",
    "Artifact writes kept in session memory only",
    ["artifact"],
)

# Aggregator metrics
snapshot_source_failures_counter = Counter(
    "finwell_snapshot_source_failures_total",
    "Snapshot collections that could not be fetched",
    ["collection"],
)

# Health score distribution
health_score_histogram = Histogram(
    "finwell_health_score",
    "Composite health scores served",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_generation(artifact: str, source: str) -> None:
    """Record which strategy (or cache) produced an artifact batch"""
    generation_counter.labels(artifact=artifact, source=source).inc()
