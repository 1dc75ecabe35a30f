"""
Metrics definitions for the escape mission engine.

This module defines Prometheus metrics for monitoring
location processing, mission lifecycle and event delivery.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
locations_received = Counter(
    "locations_received_total",
    "Number of location updates received"
)

points_reached = Counter(
    "points_reached_total",
    "Number of reached point of interest events"
)

zones_entered = Counter(
    "zones_entered_total",
    "Number of danger zone entry events"
)

zombie_hits = Counter(
    "zombie_hits_total",
    "Number of zombie hit events"
)

mission_transitions = Counter(
    "mission_transitions_total",
    "Mission state transitions",
    ["from_state", "to_state"]
)

events_published = Counter(
    "events_published_total",
    "Events delivered to the broker",
    ["type"]
)

publish_retries = Counter(
    "publish_retries_total",
    "MQTT publish retries",
    ["event_type"]
)

reconnects = Counter(
    "mqtt_reconnects_total",
    "MQTT client reconnects",
    ["client"]
)

sink_errors = Counter(
    "event_sink_errors_total",
    "Events that could not be handed to the sink"
)

# 히스토그램 메트릭
location_seconds = Histogram(
    "location_processing_seconds",
    "Time spent processing one location update",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5]
)

tick_seconds = Histogram(
    "zombie_tick_seconds",
    "Time spent advancing every session by one zombie tick",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5]
)

# 게이지 메트릭
active_sessions = Gauge(
    "active_sessions",
    "Number of sessions in the registry"
)

outbox_size = Gauge(
    "outbox_size",
    "Current number of items in outbox"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
