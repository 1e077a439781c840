"""Application bootstrap.

Wires the repository, event bus, stock tracker and observers together and
drives them with generated traffic.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any

from .core.config import Settings, load_settings
from .core.enums import StockState
from .infrastructure.event_bus import EventBus
from .infrastructure.repository import InMemoryMachineRepository
from .notifications.observers import (
    DERIVED_EVENT_TYPES,
    EventRecorder,
    StockAlertLogger,
    subscribe_all,
)
from .observability.logger import new_run_id, setup_logging
from .simulation.generator import EventGenerator
from .tracking.stock_tracker import StockStateTracker, StockThresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineSnapshot:
    id: str
    stock_level: int
    state: StockState


@dataclass
class SimulationReport:
    """Outcome of one ``run()``."""

    run_id: str
    events_published: int
    machines: list[MachineSnapshot] = field(default_factory=list)
    derived_counts: dict[str, int] = field(default_factory=dict)
    error_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class Network:
    """The wired object graph, exposed for embedding and tests."""

    bus: EventBus
    repository: InMemoryMachineRepository
    tracker: StockStateTracker
    recorder: EventRecorder


def build_network(settings: Settings) -> Network:
    """Create and connect every component described by *settings*."""
    bus = EventBus(
        enforce_ownership=settings.bus.enforce_ownership,
        history_limit=settings.bus.history_limit,
    )
    repository = InMemoryMachineRepository.from_config(settings.machines)
    tracker = StockStateTracker(
        bus,
        repository,
        StockThresholds.from_config(settings.thresholds),
    )
    tracker.attach()

    recorder = EventRecorder()
    subscribe_all(bus, recorder, DERIVED_EVENT_TYPES)
    subscribe_all(bus, StockAlertLogger())

    return Network(bus=bus, repository=repository, tracker=tracker, recorder=recorder)


def run(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
    *,
    configure_logging: bool = True,
) -> SimulationReport:
    """Main entry point. Load config, validate, wire modules, run."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)

    # 2. Validate
    settings.validate_thresholds()

    # 3. Set up logging
    if configure_logging:
        setup_logging(
            settings.observability.log_level,
            settings.observability.log_format,
        )
    run_id = new_run_id()

    sim = settings.simulation
    logger.info(
        "Starting simulation: %d machines, %d events, seed=%s",
        len(settings.machines), sim.events, sim.seed,
    )

    # 4. Wire components
    network = build_network(settings)

    # 5. Drive traffic
    generator = EventGenerator(
        [m.id for m in settings.machines],
        random.Random(sim.seed),
        sale_quantities=sim.sale_quantities,
        refill_quantities=sim.refill_quantities,
        sale_probability=sim.sale_probability,
    )
    published = 0
    for event in generator.stream(sim.events):
        network.bus.publish(event)
        published += 1

    report = SimulationReport(
        run_id=run_id,
        events_published=published,
        machines=[
            MachineSnapshot(id=m.id, stock_level=m.stock_level, state=m.state)
            for m in network.repository.all()
        ],
        derived_counts=network.recorder.counts(),
        error_counts=network.bus.get_error_counts(),
    )
    logger.info("Simulation complete: %s", report.derived_counts)
    return report
