"""Machine repository: in-process storage collaborator.

Design invariants
-----------------
1.  ``find_by_id()`` never raises; an unknown id returns ``None``.
2.  Machines are stored by reference.  The stock tracker mutates the
    returned instance in place and calls ``update_machine()`` afterwards.
3.  Nothing outlives the process.

This module provides:

*  ``MachineRepository``: the protocol.
*  ``InMemoryMachineRepository``: dict-backed implementation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from vending_monitor.core.config import MachineConfig
from vending_monitor.core.errors import DuplicateMachineError
from vending_monitor.domain.machine import Machine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class MachineRepository(Protocol):
    """Lookup and storage of machines by id."""

    def find_by_id(self, machine_id: str) -> Machine | None:
        """Return the machine, or ``None`` if unknown."""
        ...

    def add_machine(self, machine: Machine) -> None:
        """Register a new machine."""
        ...

    def update_machine(self, machine: Machine) -> None:
        """Record that *machine* was changed."""
        ...

    def all(self) -> list[Machine]:
        """Every machine in registration order."""
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryMachineRepository:
    """Dict-backed repository, ordered by registration."""

    def __init__(self, machines: Iterable[Machine] = ()) -> None:
        self._machines: dict[str, Machine] = {}
        self._updates: int = 0
        for machine in machines:
            self.add_machine(machine)

    @classmethod
    def from_config(
        cls,
        machines: Iterable[MachineConfig],
    ) -> InMemoryMachineRepository:
        """Build a repository from ``Settings.machines``."""
        return cls(
            Machine(id=cfg.id, stock_level=cfg.initial_stock)
            for cfg in machines
        )

    def find_by_id(self, machine_id: str) -> Machine | None:
        return self._machines.get(machine_id)

    def add_machine(self, machine: Machine) -> None:
        """Register *machine*.

        Raises
        ------
        DuplicateMachineError
            If a machine with the same id is already registered.
        """
        if machine.id in self._machines:
            raise DuplicateMachineError(
                f"Machine {machine.id!r} is already registered"
            )
        self._machines[machine.id] = machine

    def update_machine(self, machine: Machine) -> None:
        """Store *machine* under its id; unknown ids are ignored."""
        if machine.id not in self._machines:
            logger.debug("Ignoring update for unknown machine %s", machine.id)
            return
        self._machines[machine.id] = machine
        self._updates += 1

    def all(self) -> list[Machine]:
        return list(self._machines.values())

    def __len__(self) -> int:
        return len(self._machines)

    def __contains__(self, machine_id: object) -> bool:
        return machine_id in self._machines

    @property
    def update_count(self) -> int:
        """Number of accepted ``update_machine()`` calls."""
        return self._updates
