"""Pure-observer subscribers.

Observers report on events; they never touch machine state.  The stock
tracker is the only writer.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from vending_monitor.core.enums import EventType
from vending_monitor.domain.events import (
    LowStockWarningEvent,
    MachineRefillEvent,
    MachineSaleEvent,
    SoldOutWarningEvent,
    StockEvent,
    StockLevelOkEvent,
)
from vending_monitor.infrastructure.event_bus import EventBus, Subscriber
from vending_monitor.observability.logger import get_logger

DERIVED_EVENT_TYPES: tuple[EventType, ...] = (
    EventType.LOW_STOCK_WARNING,
    EventType.SOLD_OUT_WARNING,
    EventType.STOCK_LEVEL_OK,
)


def subscribe_all(
    bus: EventBus,
    subscriber: Subscriber,
    event_types: Iterable[EventType | str] = tuple(EventType),
) -> None:
    """Register *subscriber* for each of *event_types*."""
    for event_type in event_types:
        bus.subscribe(event_type, subscriber)


def unsubscribe_all(
    bus: EventBus,
    subscriber: Subscriber,
    event_types: Iterable[EventType | str] = tuple(EventType),
) -> None:
    for event_type in event_types:
        bus.unsubscribe(event_type, subscriber)


class StockAlertLogger:
    """Logs one structured line per event."""

    def __init__(self, name: str = "vending_monitor.alerts") -> None:
        self._log = get_logger(name)

    def handle(self, event: StockEvent) -> None:
        match event:
            case MachineSaleEvent(machine_id=mid, sold_quantity=qty):
                self._log.debug("sale", machine_id=mid, quantity=qty)
            case MachineRefillEvent(machine_id=mid, refill_quantity=qty):
                self._log.debug("refill", machine_id=mid, quantity=qty)
            case LowStockWarningEvent(machine_id=mid):
                self._log.warning("low stock", machine_id=mid)
            case SoldOutWarningEvent(machine_id=mid):
                self._log.error("sold out", machine_id=mid)
            case StockLevelOkEvent(machine_id=mid):
                self._log.info("stock level ok", machine_id=mid)
            case _:
                raise TypeError(f"Unhandled event type {type(event).__name__}")


class EventRecorder:
    """Keeps every event it receives, in arrival order."""

    def __init__(self) -> None:
        self.events: list[StockEvent] = []

    def handle(self, event: StockEvent) -> None:
        self.events.append(event)

    def count(self, event_type: EventType | str | None = None) -> int:
        if event_type is None:
            return len(self.events)
        return sum(1 for e in self.events if e.type == event_type)

    def counts(self) -> dict[str, int]:
        """``{tag: count}`` over everything received."""
        return dict(Counter(e.type.value for e in self.events))

    def events_for(self, machine_id: str) -> list[StockEvent]:
        return [e for e in self.events if e.machine_id == machine_id]

    def clear(self) -> None:
        self.events.clear()
