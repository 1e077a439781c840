"""Event bus abstraction and in-memory implementation.

Design goals
------------
1.  **Tag-routed dispatching**: subscribers register for an
    ``EventType``.  When an event is published the bus routes it to every
    subscriber registered under ``event.type``, in registration order.
2.  **Synchronous cascades**: ``publish()`` returns only after every
    handler has run, including any events those handlers published in
    turn (depth-first, same call stack).
3.  **Copy-on-publish**: each ``publish()`` iterates a snapshot of the
    registry taken when it starts.  Subscribing or unsubscribing from
    inside a handler affects later publishes only.
4.  **Forgiving**: publishing with no listeners and unsubscribing an
    unknown subscriber are silent no-ops.
5.  **Write-ownership enforcement**: if ``enforce_ownership=True``,
    ``publish()`` verifies that ``event.source`` matches the value in
    ``WRITE_OWNERSHIP`` for that event class.  Violations raise
    ``WriteOwnershipError``.

This module provides:

*  ``Subscriber``: the handler contract.
*  ``EventBus``: deterministic in-process implementation.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Protocol, runtime_checkable

from vending_monitor.core.enums import EventType
from vending_monitor.core.errors import WriteOwnershipError
from vending_monitor.domain.events import WRITE_OWNERSHIP, StockEvent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class Subscriber(Protocol):
    """Anything with a ``handle(event)`` method."""

    def handle(self, event: StockEvent) -> None:
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class EventBus:
    """Deterministic, in-process, synchronous event bus.

    Parameters
    ----------
    enforce_ownership
        When ``True``, ``publish()`` rejects derived events whose
        ``source`` doesn't match ``WRITE_OWNERSHIP[type(event)]``.
    history_limit
        Maximum number of published events kept for ``get_history()``,
        and of dead letters kept for ``dead_letters``.  ``None`` keeps
        everything.
    """

    def __init__(
        self,
        *,
        enforce_ownership: bool = False,
        history_limit: int | None = None,
    ) -> None:
        self._subscribers: dict[EventType, list[Subscriber]] = {}
        self._history: deque[StockEvent] = deque(maxlen=history_limit)
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: deque[tuple[StockEvent, str]] = deque(
            maxlen=history_limit
        )
        self._messages_processed: int = 0
        self._depth: int = 0
        self._enforce_ownership = enforce_ownership

    # -- Core API ----------------------------------------------------------

    def subscribe(
        self,
        event_type: EventType | str,
        subscriber: Subscriber,
    ) -> None:
        """Append *subscriber* to the registry for *event_type*.

        Registering the same subscriber twice makes it run twice per
        publish.

        Raises
        ------
        ValueError
            If *event_type* is not a known event tag.
        """
        key = EventType(event_type)
        self._subscribers.setdefault(key, []).append(subscriber)

    def unsubscribe(
        self,
        event_type: EventType | str,
        subscriber: Subscriber,
    ) -> None:
        """Remove every registration of *subscriber* (by identity)."""
        subscribers = self._subscribers.get(event_type)
        if not subscribers:
            return
        self._subscribers[event_type] = [
            s for s in subscribers if s is not subscriber
        ]

    def publish(self, event: StockEvent) -> None:
        """Dispatch *event* to its subscribers and wait for the cascade.

        A subscriber that raises is logged and recorded as a dead letter;
        the remaining subscribers still run.

        Raises
        ------
        WriteOwnershipError
            If ownership enforcement is on and ``event.source`` is wrong.
        """
        event_cls = type(event)

        # --- ownership gate ------------------------------------------------
        if self._enforce_ownership and event_cls in WRITE_OWNERSHIP:
            expected = WRITE_OWNERSHIP[event_cls]
            if event.source != expected:
                raise WriteOwnershipError(
                    f"{event_cls.__name__} must be published by "
                    f"source={expected!r}, got source={event.source!r}"
                )

        self._history.append(event)

        subscribers = tuple(self._subscribers.get(event.type, ()))
        if not subscribers:
            return

        self._depth += 1
        try:
            for subscriber in subscribers:
                try:
                    subscriber.handle(event)
                    self._messages_processed += 1
                except Exception as exc:
                    key = event.type.value
                    self._error_counts[key] += 1
                    self._dead_letters.append((event, str(exc)))
                    logger.exception(
                        "Handler error on %s for machine %s: %s",
                        key, event.machine_id, exc,
                    )
        finally:
            self._depth -= 1

    # -- Introspection -----------------------------------------------------

    def subscribers(self, event_type: EventType | str) -> list[Subscriber]:
        """Current registrations for *event_type*, in order."""
        return list(self._subscribers.get(event_type, ()))

    def subscriber_count(self, event_type: EventType | str) -> int:
        return len(self._subscribers.get(event_type, ()))

    @property
    def dispatch_depth(self) -> int:
        """How many ``publish()`` calls are currently on the stack."""
        return self._depth

    # -- Observability -----------------------------------------------------

    def get_history(
        self,
        event_type: EventType | str | None = None,
    ) -> list[StockEvent]:
        """Return published events, optionally filtered by tag."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def clear_history(self) -> None:
        """Clear the event history (testing helper)."""
        self._history.clear()

    def get_error_counts(self) -> dict[str, int]:
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[tuple[StockEvent, str]]:
        return list(self._dead_letters)

    def clear_dead_letters(self) -> list[tuple[StockEvent, str]]:
        """Drain and return dead letters."""
        drained = list(self._dead_letters)
        self._dead_letters.clear()
        return drained

    @property
    def messages_processed(self) -> int:
        return self._messages_processed
