import os
import json
import logging
import tempfile
from typing import Dict
from models.tracking_state import TrackingState
from services.store_implementations.store_interface import StoreInterface, StoreError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

class JSONStore(StoreInterface):
    """
    JSON file implementation of the StoreInterface.

    The file holds ``{"version": 1, "shows": {show_name: record}}``. Saves go to a
    temporary file in the same directory which then replaces the target, so an
    interrupted save leaves the previous snapshot in place.

    Attributes:
        path (str): Path to the JSON file.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.expanduser(path)

    def __str__(self):
        return f"JSONStore(path={self.path})"

    def load(self) -> Dict[str, TrackingState]:
        if not os.path.exists(self.path):
            logger.info(f"No store at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Unable to load store {self.path}: {e}")
            return {}

        shows = data.get("shows") if isinstance(data, dict) else None
        if not isinstance(shows, dict):
            logger.error(f"Unable to load store {self.path}: unexpected layout")
            return {}

        states = {}
        for show_name, record in shows.items():
            state = self._state_from_record(show_name, record)
            if state is not None:
                states[show_name] = state
        logger.debug(f"Loaded {len(states)} tracked shows from {self.path}")
        return states

    def save(self, states: Dict[str, TrackingState]) -> None:
        payload = {
            "version": FORMAT_VERSION,
            "shows": {name: state.to_record() for name, state in states.items()},
        }
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix=".showtracker-", suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = tmp.name
                json.dump(payload, tmp, indent=2, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreError(f"Unable to save store {self.path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.info(f"Saved {len(states)} tracked shows to {self.path}")
