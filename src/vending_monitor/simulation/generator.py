"""Random event generator.

Produces ``sale`` and ``refill`` events against a fixed set of machines.
Seed the ``random.Random`` instance for reproducible runs.
"""

from __future__ import annotations

import random
from collections.abc import Iterator, Sequence

from vending_monitor.domain.events import (
    MachineRefillEvent,
    MachineSaleEvent,
    StockEvent,
)

GENERATOR_SOURCE = "simulation"


class EventGenerator:
    """Traffic source for demonstrations; not part of the core contract."""

    def __init__(
        self,
        machine_ids: Sequence[str],
        rng: random.Random | None = None,
        *,
        sale_quantities: Sequence[int] = (1, 2),
        refill_quantities: Sequence[int] = (3, 5),
        sale_probability: float = 0.5,
    ) -> None:
        if not machine_ids:
            raise ValueError("EventGenerator needs at least one machine id")
        self._machine_ids = tuple(machine_ids)
        self._rng = rng or random.Random()
        self._sale_quantities = tuple(sale_quantities)
        self._refill_quantities = tuple(refill_quantities)
        self._sale_probability = sale_probability

    def random_machine(self) -> str:
        return self._rng.choice(self._machine_ids)

    def next_event(self) -> StockEvent:
        """A sale with probability ``sale_probability``, otherwise a refill."""
        if self._rng.random() < self._sale_probability:
            return MachineSaleEvent(
                machine_id=self.random_machine(),
                sold_quantity=self._rng.choice(self._sale_quantities),
                source=GENERATOR_SOURCE,
            )
        return MachineRefillEvent(
            machine_id=self.random_machine(),
            refill_quantity=self._rng.choice(self._refill_quantities),
            source=GENERATOR_SOURCE,
        )

    def stream(self, n: int) -> Iterator[StockEvent]:
        for _ in range(n):
            yield self.next_event()
