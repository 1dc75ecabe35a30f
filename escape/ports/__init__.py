"""
Port interfaces for the escape mission engine.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .events import EventSinkPort

__all__ = ["EventSinkPort"]
