"""Canonical stock events for the vending-machine network.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``, keyword-only) and
    its ``type`` is fixed by its class.
2.  The event family is **closed**: ``EVENT_CLASSES`` maps every
    ``EventType`` to exactly one class.
3.  Derived events have exactly **one writer** (see ``WRITE_OWNERSHIP``).
4.  ``event_id``, ``timestamp``, ``causation_id`` and ``source`` are
    metadata and take no part in equality: two events with the same type,
    machine and payload compare equal.
5.  Quantities are positive integers, checked at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from vending_monitor.core.enums import EventType
from vending_monitor.core.errors import InvalidQuantityError
from vending_monitor.core.ids import new_id as _uuid
from vending_monitor.core.ids import utc_now as _now

#: Source name of the stock tracker, the only writer of derived events.
STOCK_TRACKER_SOURCE = "stock_tracker"


def _check_quantity(field_name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidQuantityError(field_name, value)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class StockEvent:
    """Immutable base for every event targeting a machine.

    Shared fields
    ~~~~~~~~~~~~~
    machine_id      Target machine.
    event_id        Unique identity (UUID4).
    timestamp       UTC creation time.
    causation_id    The ``event_id`` that directly caused this event.
    source          Writer that produced this event.
    """

    event_type: ClassVar[EventType]

    machine_id: str
    event_id: str = field(default_factory=_uuid, compare=False)
    timestamp: datetime = field(default_factory=_now, compare=False)
    causation_id: str = field(default="", compare=False)
    source: str = field(default="", compare=False)

    @property
    def type(self) -> EventType:
        return self.event_type


# =========================================================================
# Producer events  (writers: sales terminals, refill crews)
# =========================================================================

@dataclass(frozen=True, kw_only=True)
class MachineSaleEvent(StockEvent):
    """Items were sold from a machine."""

    event_type: ClassVar[EventType] = EventType.SALE

    sold_quantity: int

    def __post_init__(self) -> None:
        _check_quantity("sold_quantity", self.sold_quantity)


@dataclass(frozen=True, kw_only=True)
class MachineRefillEvent(StockEvent):
    """A machine was restocked."""

    event_type: ClassVar[EventType] = EventType.REFILL

    refill_quantity: int

    def __post_init__(self) -> None:
        _check_quantity("refill_quantity", self.refill_quantity)


# =========================================================================
# Derived events  (writer: stock_tracker)
# =========================================================================

@dataclass(frozen=True, kw_only=True)
class LowStockWarningEvent(StockEvent):
    """Stock dropped below the low-stock threshold."""

    event_type: ClassVar[EventType] = EventType.LOW_STOCK_WARNING


@dataclass(frozen=True, kw_only=True)
class SoldOutWarningEvent(StockEvent):
    """Stock reached the sold-out threshold."""

    event_type: ClassVar[EventType] = EventType.SOLD_OUT_WARNING


@dataclass(frozen=True, kw_only=True)
class StockLevelOkEvent(StockEvent):
    """A flagged machine was refilled back to a healthy level."""

    event_type: ClassVar[EventType] = EventType.STOCK_LEVEL_OK


# =========================================================================
# Registries
# =========================================================================

#: Every event type and the class that carries it.
EVENT_CLASSES: dict[EventType, type[StockEvent]] = {
    EventType.SALE: MachineSaleEvent,
    EventType.REFILL: MachineRefillEvent,
    EventType.LOW_STOCK_WARNING: LowStockWarningEvent,
    EventType.SOLD_OUT_WARNING: SoldOutWarningEvent,
    EventType.STOCK_LEVEL_OK: StockLevelOkEvent,
}

#: Maps each derived event type to the *only* ``source`` value that is
#: allowed to produce it.  Checked by the bus when ownership is enforced.
WRITE_OWNERSHIP: dict[type[StockEvent], str] = {
    LowStockWarningEvent: STOCK_TRACKER_SOURCE,
    SoldOutWarningEvent: STOCK_TRACKER_SOURCE,
    StockLevelOkEvent: STOCK_TRACKER_SOURCE,
}

#: All event types in a deterministic order.
ALL_STOCK_EVENTS: tuple[type[StockEvent], ...] = tuple(EVENT_CLASSES.values())


def event_from_type(
    event_type: EventType | str,
    machine_id: str,
    quantity: int | None = None,
    **metadata: str,
) -> StockEvent:
    """Build an event from its type tag.

    ``quantity`` is required for ``sale`` and ``refill`` and rejected for
    derived events.
    """
    tag = EventType(event_type)
    cls = EVENT_CLASSES[tag]
    if tag is EventType.SALE:
        return cls(machine_id=machine_id, sold_quantity=quantity, **metadata)
    if tag is EventType.REFILL:
        return cls(machine_id=machine_id, refill_quantity=quantity, **metadata)
    if quantity is not None:
        raise ValueError(f"{tag.value} events carry no quantity")
    return cls(machine_id=machine_id, **metadata)
