"""
Adapters for the escape mission engine.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteOutbox
from .mqtt_local.publisher_async import LocalMqttPublisher
from .memory.sink import InMemoryEventSink

__all__ = ["SQLiteOutbox", "LocalMqttPublisher", "InMemoryEventSink"]
