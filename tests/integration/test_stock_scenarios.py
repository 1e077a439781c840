"""End-to-end stock scenarios through the bus and tracker.

Mirrors the two reference walkthroughs: machine 001 dipping into low stock
and recovering, and machine 004 running through low stock, sold out and
back, then going quiet for an unsubscribed listener.
"""

from __future__ import annotations

from vending_monitor.domain.events import (
    LowStockWarningEvent,
    MachineRefillEvent,
    MachineSaleEvent,
    SoldOutWarningEvent,
    StockLevelOkEvent,
)


def test_machine_001_low_stock_then_recovery(bus, repository, tracker, subscriber_factory):
    low = subscriber_factory()
    ok = subscriber_factory()
    bus.subscribe("lowStockWarning", low)
    bus.subscribe("stockLevelOk", ok)

    bus.publish(MachineSaleEvent(machine_id="001", sold_quantity=9))
    assert repository.find_by_id("001").stock_level == 1
    assert low.calls == [LowStockWarningEvent(machine_id="001")]

    bus.publish(MachineRefillEvent(machine_id="001", refill_quantity=5))
    assert repository.find_by_id("001").stock_level == 6
    assert ok.calls == [StockLevelOkEvent(machine_id="001")]
    assert low.call_count == 1


def test_machine_004_full_cycle_and_unsubscribe(
    bus, repository, tracker, subscriber_factory
):
    warnings = subscriber_factory()
    ok = subscriber_factory()
    bus.subscribe("lowStockWarning", warnings)
    bus.subscribe("soldOutWarning", warnings)
    bus.subscribe("stockLevelOk", ok)

    def cycle() -> None:
        bus.publish(MachineSaleEvent(machine_id="004", sold_quantity=2))
        bus.publish(MachineSaleEvent(machine_id="004", sold_quantity=1))
        bus.publish(MachineRefillEvent(machine_id="004", refill_quantity=3))

    cycle()
    assert warnings.calls == [
        LowStockWarningEvent(machine_id="004"),
        SoldOutWarningEvent(machine_id="004"),
    ]
    assert ok.calls == [StockLevelOkEvent(machine_id="004")]
    assert repository.find_by_id("004").stock_level == 3

    bus.unsubscribe("lowStockWarning", warnings)
    bus.unsubscribe("soldOutWarning", warnings)
    before = warnings.call_count

    cycle()
    assert warnings.call_count == before
    assert ok.call_count == 2


def test_interleaved_machines_are_independent(bus, repository, tracker, derived):
    bus.publish(MachineSaleEvent(machine_id="001", sold_quantity=8))
    bus.publish(MachineSaleEvent(machine_id="002", sold_quantity=8))
    bus.publish(MachineRefillEvent(machine_id="001", refill_quantity=5))
    bus.publish(MachineSaleEvent(machine_id="002", sold_quantity=2))

    assert [(e.type.value, e.machine_id) for e in derived.events] == [
        ("lowStockWarning", "001"),
        ("lowStockWarning", "002"),
        ("stockLevelOk", "001"),
        ("soldOutWarning", "002"),
    ]


def test_history_records_cascade_in_dispatch_order(bus, tracker):
    sale = MachineSaleEvent(machine_id="004", sold_quantity=3)
    bus.publish(sale)
    assert [e.type.value for e in bus.get_history()] == [
        "sale",
        "lowStockWarning",
        "soldOutWarning",
    ]
