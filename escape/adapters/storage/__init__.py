"""
Storage adapters for the escape mission engine.

This module contains the SQLite-based outbox used for durable
event delivery.
"""

from .sqlite_outbox import SQLiteOutbox, OutboxItem

__all__ = ["SQLiteOutbox", "OutboxItem"]
