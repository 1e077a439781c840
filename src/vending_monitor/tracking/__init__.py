"""Stock tracking: the authoritative writer of machine stock state."""

from vending_monitor.tracking.stock_tracker import (
    RefillHandler,
    SaleHandler,
    StockStateTracker,
    StockThresholds,
)

__all__ = ["RefillHandler", "SaleHandler", "StockStateTracker", "StockThresholds"]
