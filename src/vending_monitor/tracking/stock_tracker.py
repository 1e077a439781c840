"""Stock-state tracker: the single writer of machine stock state.

Two subscribers share one ``StockStateTracker``:

*  ``SaleHandler`` (``sale``) lowers stock and announces the low-stock and
   sold-out crossings.
*  ``RefillHandler`` (``refill``) raises stock and announces the return to
   a healthy level.

Each crossing is announced at most once: a flag on the machine records
that the warning is outstanding, and only a crossing back over the
threshold clears it.  Flags are written before the derived event is
published so a cascade re-entering the tracker sees the new state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vending_monitor.core.config import ThresholdConfig
from vending_monitor.core.enums import EventType
from vending_monitor.domain.events import (
    STOCK_TRACKER_SOURCE,
    LowStockWarningEvent,
    MachineRefillEvent,
    MachineSaleEvent,
    SoldOutWarningEvent,
    StockEvent,
    StockLevelOkEvent,
)
from vending_monitor.domain.machine import Machine
from vending_monitor.infrastructure.event_bus import EventBus
from vending_monitor.infrastructure.repository import MachineRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockThresholds:
    """Stock boundaries.

    ``stock_level < low_stock`` is low stock; ``stock_level <= sold_out``
    is sold out.
    """

    low_stock: int = 3
    sold_out: int = 0

    def __post_init__(self) -> None:
        if self.sold_out < 0:
            raise ValueError(
                f"sold_out ({self.sold_out}) must not be negative; "
                "stock is floored at zero"
            )
        if self.low_stock <= self.sold_out:
            raise ValueError(
                f"low_stock ({self.low_stock}) must be above "
                f"sold_out ({self.sold_out})"
            )

    @classmethod
    def from_config(cls, cfg: ThresholdConfig) -> StockThresholds:
        return cls(low_stock=cfg.low_stock, sold_out=cfg.sold_out)


class StockStateTracker:
    """Applies sale and refill deltas and publishes threshold crossings.

    Parameters
    ----------
    bus
        Bus the handlers subscribe to and derived events go out on.
    repository
        Where machines are looked up and reported as updated.
    thresholds
        Low-stock and sold-out boundaries.
    """

    def __init__(
        self,
        bus: EventBus,
        repository: MachineRepository,
        thresholds: StockThresholds | None = None,
    ) -> None:
        self._bus = bus
        self._repository = repository
        self._thresholds = thresholds or StockThresholds()
        self.sale_handler = SaleHandler(self)
        self.refill_handler = RefillHandler(self)
        self._attached = False

    @property
    def thresholds(self) -> StockThresholds:
        return self._thresholds

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Subscribe both handlers; calling twice is a no-op."""
        if self._attached:
            return
        self._bus.subscribe(EventType.SALE, self.sale_handler)
        self._bus.subscribe(EventType.REFILL, self.refill_handler)
        self._attached = True

    def detach(self) -> None:
        self._bus.unsubscribe(EventType.SALE, self.sale_handler)
        self._bus.unsubscribe(EventType.REFILL, self.refill_handler)
        self._attached = False

    # -- State transitions -------------------------------------------------

    def apply_sale(self, event: MachineSaleEvent) -> None:
        machine = self._repository.find_by_id(event.machine_id)
        if machine is None:
            logger.debug("Sale for unknown machine %s ignored", event.machine_id)
            return

        remaining = machine.stock_level - event.sold_quantity
        if remaining < 0:
            logger.warning(
                "Machine %s sold %d with only %d in stock; %d unfilled",
                machine.id, event.sold_quantity, machine.stock_level, -remaining,
            )
            remaining = 0
        machine.stock_level = remaining
        self._repository.update_machine(machine)

        if (
            machine.stock_level < self._thresholds.low_stock
            and not machine.is_flagged
        ):
            machine.is_low_stock = True
            self._repository.update_machine(machine)
            self._announce(LowStockWarningEvent, machine, event)

        if (
            machine.stock_level <= self._thresholds.sold_out
            and not machine.is_sold_out
        ):
            machine.is_sold_out = True
            machine.is_low_stock = False
            self._repository.update_machine(machine)
            self._announce(SoldOutWarningEvent, machine, event)

    def apply_refill(self, event: MachineRefillEvent) -> None:
        machine = self._repository.find_by_id(event.machine_id)
        if machine is None:
            logger.debug("Refill for unknown machine %s ignored", event.machine_id)
            return

        machine.stock_level += event.refill_quantity
        self._repository.update_machine(machine)

        if machine.stock_level >= self._thresholds.low_stock:
            if machine.is_flagged:
                machine.is_low_stock = False
                machine.is_sold_out = False
                self._repository.update_machine(machine)
                self._announce(StockLevelOkEvent, machine, event)
        elif machine.is_sold_out and machine.stock_level > self._thresholds.sold_out:
            # Back in the low-stock band; that crossing was already announced.
            machine.is_sold_out = False
            machine.is_low_stock = True
            self._repository.update_machine(machine)

    def _announce(
        self,
        event_cls: type[StockEvent],
        machine: Machine,
        cause: StockEvent,
    ) -> None:
        logger.info(
            "Machine %s: %s (stock=%d)",
            machine.id, event_cls.event_type.value, machine.stock_level,
        )
        self._bus.publish(
            event_cls(
                machine_id=machine.id,
                causation_id=cause.event_id,
                source=STOCK_TRACKER_SOURCE,
            )
        )


class SaleHandler:
    """``sale`` subscriber; delegates to ``StockStateTracker.apply_sale``."""

    def __init__(self, tracker: StockStateTracker) -> None:
        self._tracker = tracker

    def handle(self, event: StockEvent) -> None:
        if isinstance(event, MachineSaleEvent):
            self._tracker.apply_sale(event)


class RefillHandler:
    """``refill`` subscriber; delegates to ``StockStateTracker.apply_refill``."""

    def __init__(self, tracker: StockStateTracker) -> None:
        self._tracker = tracker

    def handle(self, event: StockEvent) -> None:
        if isinstance(event, MachineRefillEvent):
            self._tracker.apply_refill(event)
