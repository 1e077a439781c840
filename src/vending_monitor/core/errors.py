"""Custom exception hierarchy for the stock-monitoring network.

Missing-entity cases (unknown machine, unknown subscriber, no listeners)
are not errors and never raise.
"""


class VendingError(Exception):
    """Base exception for all stock-monitoring errors."""


# --- Configuration ---
class ConfigError(VendingError):
    """Invalid or missing configuration."""


# --- Events ---
class EventError(VendingError):
    """Malformed event."""


class InvalidQuantityError(EventError, ValueError):
    """Sold or refilled quantity is not a positive integer."""

    def __init__(self, field_name: str, value: object):
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{field_name} must be a positive integer, got {value!r}"
        )


# --- Bus ---
class BusError(VendingError):
    """Event bus misuse."""


class WriteOwnershipError(BusError):
    """Raised when a derived event is published by a source that does not own it."""


# --- Repository ---
class RepositoryError(VendingError):
    """Machine repository error."""


class DuplicateMachineError(RepositoryError):
    """A machine with the same id is already registered."""
