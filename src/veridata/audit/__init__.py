# src/veridata/audit/__init__.py

"""
Audit layer for VeriData.
Append-only event stream consumed by external observers.
"""

from .events import EventLog, EventType, RegistryEvent

__all__ = [
    "EventLog",
    "EventType",
    "RegistryEvent",
]
