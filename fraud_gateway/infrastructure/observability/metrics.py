"""Prometheus metrics for monitoring recommendations, risk levels, detector health and enforcement"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "fraud_analysis_total",
    "Total transaction analyses completed",
    ["recommendation"],  # approve | review | investigate | block
)

risk_level_counter = Counter(
    "fraud_risk_level_total",
    "Analyses by resulting risk level",
    ["level"],
)

analysis_duration_histogram = Histogram(
    "fraud_analysis_duration_seconds",
    "End-to-end analysis latency",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

fallback_counter = Counter(
    "fraud_analysis_fallback_total",
    "Analyses answered with the safe default after an internal failure",
)

detector_failure_counter = Counter(
    "fraud_detector_failures_total",
    "Detectors that timed out or raised",
    ["detector", "reason"],  # reason: timeout | storage | error
)

# Enforcement metrics
block_counter = Counter(
    "fraud_blocks_total",
    "Block records written by real-time enforcement",
)

enforcement_failure_counter = Counter(
    "fraud_enforcement_failures_total",
    "Failed block writes or account flag updates",
)

# Collaborator metrics
ip_reputation_failure_counter = Counter(
    "ip_reputation_failures_total",
    "Failed IP reputation lookups",
)

persistence_failure_counter = Counter(
    "fraud_persistence_failures_total",
    "Failed writes of analysis results or profiles",
    ["store"],  # analysis | profile
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(recommendation: str, risk_level: str, duration_seconds: float) -> None:
    """Record outcome metrics for monitoring decision mix and latency"""
    analysis_counter.labels(recommendation=recommendation).inc()
    risk_level_counter.labels(level=risk_level).inc()
    analysis_duration_histogram.observe(duration_seconds)
