"""Prometheus metrics for monitoring projections, insights, risk alerts and webhook delivery"""

from typing import Iterable, Optional
from prometheus_client import Counter, Histogram

# Forecast metrics
forecast_counter = Counter(
    "forecast_total",
    "Total month-end projections computed",
    ["risk_level"],  # safe | caution | danger
)

insight_counter = Counter(
    "forecast_insights_total",
    "Insights generated by type",
    ["type"],
)

risk_transition_counter = Counter(
    "forecast_risk_events_total",
    "Risk events emitted",
    ["kind"],  # risk | recovered | risk_reduced
)

# State store metrics
state_store_failures_counter = Counter(
    "balance_state_store_failures_total",
    "Failed balance state reads/writes",
    ["operation"],  # get | set
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "risk_webhook_latency_seconds",
    "Risk event webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "risk_webhook_failures_total",
    "Failed risk event webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_forecast(risk_level: str, insight_types: Iterable[str], risk_event_kind: Optional[str]) -> None:
    """Record projection, insight and alert metrics for one forecast"""
    forecast_counter.labels(risk_level=risk_level).inc()
    for insight_type in insight_types:
        insight_counter.labels(type=insight_type).inc()
    if risk_event_kind is not None:
        risk_transition_counter.labels(kind=risk_event_kind).inc()
