"""Store interface and the in-memory implementation."""

from .base import SimulationStore
from .memory import AUTO_EXPIRED, InMemoryStore

__all__ = ["SimulationStore", "InMemoryStore", "AUTO_EXPIRED"]
