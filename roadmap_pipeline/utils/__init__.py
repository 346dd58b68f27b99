"""
Roadmap Pipeline Utils Module

Injectable id and clock sources used across the application.
"""

from .ids import IdGenerator, UuidGenerator, SequentialIdGenerator
from .clock import Clock, SystemClock, ManualClock

__all__ = [
    "IdGenerator",
    "UuidGenerator",
    "SequentialIdGenerator",
    "Clock",
    "SystemClock",
    "ManualClock",
]
