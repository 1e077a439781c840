"""Enumerations used across the stock-monitoring network."""

from enum import Enum


class EventType(str, Enum):
    """Type tag carried by every event; the bus routes on it."""

    SALE = "sale"
    REFILL = "refill"
    LOW_STOCK_WARNING = "lowStockWarning"
    SOLD_OUT_WARNING = "soldOutWarning"
    STOCK_LEVEL_OK = "stockLevelOk"

    @property
    def is_derived(self) -> bool:
        """True for events synthesized by the stock tracker."""
        return self not in (EventType.SALE, EventType.REFILL)


class StockState(str, Enum):
    OK = "ok"
    LOW_STOCK = "low_stock"
    SOLD_OUT = "sold_out"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
