"""Downstream observers of stock events."""

from vending_monitor.notifications.observers import (
    DERIVED_EVENT_TYPES,
    EventRecorder,
    StockAlertLogger,
    subscribe_all,
    unsubscribe_all,
)

__all__ = [
    "DERIVED_EVENT_TYPES",
    "EventRecorder",
    "StockAlertLogger",
    "subscribe_all",
    "unsubscribe_all",
]
