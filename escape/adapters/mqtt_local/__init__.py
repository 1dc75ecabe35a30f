"""
Local MQTT publishing adapter for the escape mission engine.

This module provides the implementation of EventSinkPort
for publishing session events to a local MQTT broker.
"""

from .publisher_async import LocalMqttPublisher

__all__ = ["LocalMqttPublisher"]
