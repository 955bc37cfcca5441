from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
from pydantic import ValidationError
from models.tracking_state import TrackingState

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when tracking state cannot be persisted."""


class StoreInterface(ABC):
    """
    Abstract base class defining the interface for tracking state persistence in ShowTracker.

    Methods:
        load(): Load the mapping of show name to TrackingState. Never fails: missing or
            corrupt data yields an empty mapping, corrupt records are skipped.
        save(states): Replace the persisted mapping. A failure raises StoreError and leaves
            the previous snapshot intact.
        remove(show_name): Remove one show from the persisted mapping.
    """

    @abstractmethod
    def load(self) -> Dict[str, TrackingState]:
        """Load all tracking states keyed by show name."""
        pass

    @abstractmethod
    def save(self, states: Dict[str, TrackingState]) -> None:
        """Persist all tracking states, replacing the previous snapshot."""
        pass

    def remove(self, show_name: str) -> bool:
        """
        Remove a show from the store.

        Returns:
            bool: True if the show was present.
        """
        states = self.load()
        if show_name not in states:
            return False
        del states[show_name]
        self.save(states)
        return True

    @staticmethod
    def _state_from_record(show_name: str, record: Any) -> Optional[TrackingState]:
        try:
            state = TrackingState.from_record(record)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Skipping corrupt record for '{show_name}': {e}")
            return None
        if state.show_name != show_name:
            logger.warning(f"Skipping record stored under '{show_name}' for show '{state.show_name}'")
            return None
        return state
