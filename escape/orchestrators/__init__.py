"""
Orchestrators for the escape mission engine.

This module contains the orchestrator that coordinates
sessions, the zombie tick loop and the event sink.
"""
from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
