"""
Metrics definitions for hazardwatch.

This module defines Prometheus metrics for monitoring
the hazard polling and alerting pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
version_checks = Counter(
    "hazard_version_checks_total",
    "Number of version token checks",
    ["result"]  # changed | unchanged | error
)

hazard_fetches = Counter(
    "hazard_fetches_total",
    "Number of full hazard set fetches",
    ["result"]  # ok | error
)

fetch_retries = Counter(
    "hazard_fetch_retries_total",
    "Hazard source request retries",
    ["operation"]
)

fetch_failures = Counter(
    "hazard_fetch_failures_total",
    "Hazard source requests that exhausted their retry budget",
    ["operation"]
)

ticks_skipped = Counter(
    "poll_ticks_skipped_total",
    "Poll ticks skipped because a previous tick was still running"
)

alerts_emitted = Counter(
    "alerts_emitted_total",
    "Number of alerts emitted by the alert engine",
    ["type", "severity"]
)

alerts_dismissed = Counter(
    "alerts_dismissed_total",
    "Number of alerts dismissed by the consumer"
)

# 히스토그램 메트릭
tick_seconds = Histogram(
    "poll_tick_duration_seconds",
    "Time spent in one poll tick",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
)

evaluate_seconds = Histogram(
    "evaluate_duration_seconds",
    "Time spent evaluating proximity and alerts",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

# 게이지 메트릭
hazards_tracked = Gauge(
    "hazards_tracked",
    "Current number of hazards fed to the engines"
)

active_alerts = Gauge(
    "active_alerts",
    "Current number of undismissed alerts"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
