"""
Escape mission engine.

Proximity, geofencing and mission lifecycle engine for the
evacuation training game.
"""

__version__ = "0.1.0"
