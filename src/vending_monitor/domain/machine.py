"""Machine entity: the only mutable record in the domain layer."""

from __future__ import annotations

from dataclasses import dataclass

from vending_monitor.core.enums import StockState


@dataclass
class Machine:
    """Stock level and threshold flags of one vending machine.

    ``id`` never changes.  At most one of ``is_low_stock`` and
    ``is_sold_out`` is set; sold out supersedes low stock.

    A new machine starts unflagged whatever its stock level.  The flags
    record announced crossings, so a machine registered below a threshold
    gets its first warning on its first sale.
    """

    id: str
    stock_level: int = 10
    is_low_stock: bool = False
    is_sold_out: bool = False

    @property
    def state(self) -> StockState:
        if self.is_sold_out:
            return StockState.SOLD_OUT
        if self.is_low_stock:
            return StockState.LOW_STOCK
        return StockState.OK

    @property
    def is_flagged(self) -> bool:
        """True while a warning is outstanding for this machine."""
        return self.is_low_stock or self.is_sold_out
