"""Operator output and structured event logging."""

from .console import ConsoleReporter, color_enabled
from .events import ConversionEvent, JsonlEventLogger, utc_timestamp

__all__ = [
    "ConsoleReporter",
    "ConversionEvent",
    "JsonlEventLogger",
    "color_enabled",
    "utc_timestamp",
]
