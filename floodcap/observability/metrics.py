"""
Metrics definitions for floodcap.

This module defines Prometheus metrics for monitoring
the flood query layer and the CAP transformation.
"""

from prometheus_client import Counter, Histogram

# 카운터 메트릭
cap_features = Counter(
    "cap_features_total",
    "Number of features converted to CAP alerts, by outcome",
    ["result"]
)

db_queries = Counter(
    "db_queries_total",
    "Number of database queries, by outcome",
    ["result"]
)

state_changes = Counter(
    "state_changes_total",
    "Number of flooded state changes written",
    ["state"]
)

# 히스토그램 메트릭
cap_feed_seconds = Histogram(
    "cap_feed_duration_seconds",
    "Time spent building ATOM/CAP feeds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

db_query_seconds = Histogram(
    "db_query_duration_seconds",
    "Time spent executing database queries",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0]
)
