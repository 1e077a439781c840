"""Shared fixtures for the vending-monitor test suite."""

from __future__ import annotations

import logging

import pytest

from vending_monitor.core.enums import EventType
from vending_monitor.domain.machine import Machine
from vending_monitor.infrastructure.event_bus import EventBus
from vending_monitor.infrastructure.repository import InMemoryMachineRepository
from vending_monitor.notifications.observers import EventRecorder
from vending_monitor.tracking.stock_tracker import StockStateTracker


class RecordingSubscriber:
    """Stand-in for a mock ``handle``: remembers every call."""

    def __init__(self) -> None:
        self.calls: list = []

    def handle(self, event) -> None:
        self.calls.append(event)

    @property
    def call_count(self) -> int:
        return len(self.calls)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo ``setup_logging()`` calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------

@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def strict_bus() -> EventBus:
    return EventBus(enforce_ownership=True)


@pytest.fixture
def subscriber_factory():
    """Factory for fresh ``RecordingSubscriber`` instances."""
    return RecordingSubscriber


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------

@pytest.fixture
def repository() -> InMemoryMachineRepository:
    """Machines 001-003 at stock 10 and 004 at stock 3."""
    return InMemoryMachineRepository(
        [
            Machine("001"),
            Machine("002"),
            Machine("003"),
            Machine("004", stock_level=3),
        ]
    )


@pytest.fixture
def tracker(bus: EventBus, repository: InMemoryMachineRepository) -> StockStateTracker:
    t = StockStateTracker(bus, repository)
    t.attach()
    return t


@pytest.fixture
def derived(bus: EventBus) -> EventRecorder:
    """Recorder subscribed to the three derived event types."""
    recorder = EventRecorder()
    for event_type in (
        EventType.LOW_STOCK_WARNING,
        EventType.SOLD_OUT_WARNING,
        EventType.STOCK_LEVEL_OK,
    ):
        bus.subscribe(event_type, recorder)
    return recorder
