"""Exception hierarchy for the simulation core."""

from __future__ import annotations
from typing import Optional


class SimulationError(Exception):
    """Base class for every error raised by the simulation core."""


class InvalidInputError(SimulationError, ValueError):
    """Malformed snapshot or argument. A programming error, never retried."""


class InvalidChoiceError(InvalidInputError):
    """An event choice id that the event does not define."""

    def __init__(self, choice_id: str, event_id: str):
        self.choice_id = choice_id
        self.event_id = event_id
        super().__init__(f"Invalid choice ID: {choice_id} (event {event_id})")


class ChoiceRequirementsError(SimulationError):
    """A valid event choice whose requirements the province does not meet."""

    def __init__(self, choice_id: str, event_id: str):
        self.choice_id = choice_id
        self.event_id = event_id
        super().__init__(f"Requirements not met for choice {choice_id} (event {event_id})")


class UnknownCatalogEntryError(InvalidInputError):
    """A building, technology, event or enemy key missing from the catalog."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind}: {key}")


class StoreError(SimulationError):
    """A read or write against the persistent store failed."""


class EntityNotFoundError(StoreError):
    """The store has no record with the requested id."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class ConcurrencyConflictError(StoreError):
    """A conditional insert lost the race for a province's event or raid slot."""


class AlreadyResolvedError(StoreError):
    """The event instance or raid has already been resolved."""


class InsufficientResourcesError(SimulationError):
    """A cost or deduction exceeds the available stock."""

    def __init__(self, missing: dict[str, int], message: Optional[str] = None):
        self.missing = dict(missing)
        if message is None:
            parts = [f"{resource}: short {amount}" for resource, amount in sorted(self.missing.items())]
            message = "Insufficient resources: " + ", ".join(parts)
        super().__init__(message)
