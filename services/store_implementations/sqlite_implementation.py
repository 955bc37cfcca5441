import os
import json
import sqlite3
import datetime
import logging
from typing import Dict
from contextlib import contextmanager
from models.tracking_state import TrackingState
from services.store_implementations.store_interface import StoreInterface, StoreError

logger = logging.getLogger(__name__)

class SQLiteStore(StoreInterface):
    """
    SQLite implementation of the StoreInterface.

    Each show is one row holding its JSON record. A save replaces every row inside a
    single transaction, so a failed save rolls back to the previous snapshot.

    Attributes:
        db_file (str): Path to the SQLite database file.
    """

    def __init__(self, db_file: str) -> None:
        self.db_file = os.path.expanduser(db_file)

    @contextmanager
    def _connection(self):
        """Context manager to get a connection to the database."""
        conn = sqlite3.connect(self.db_file, timeout=10.0)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def __str__(self):
        return f"SQLiteStore(db_file={self.db_file})"

    def initialize(self) -> None:
        """Create the schema if needed."""
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tracking_state (
                    show_name TEXT PRIMARY KEY,
                    record TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def load(self) -> Dict[str, TrackingState]:
        if not os.path.exists(self.db_file):
            logger.info(f"No store at {self.db_file}, starting empty")
            return {}

        try:
            with self._connection() as conn:
                rows = conn.execute(
                    "SELECT show_name, record FROM tracking_state ORDER BY rowid"
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Unable to load store {self.db_file}: {e}")
            return {}

        states = {}
        for show_name, record in rows:
            try:
                data = json.loads(record)
            except ValueError as e:
                logger.warning(f"Skipping corrupt record for '{show_name}': {e}")
                continue
            state = self._state_from_record(show_name, data)
            if state is not None:
                states[show_name] = state
        logger.debug(f"Loaded {len(states)} tracked shows from {self.db_file}")
        return states

    def save(self, states: Dict[str, TrackingState]) -> None:
        updated_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
        rows = [
            (name, json.dumps(state.to_record(), ensure_ascii=False), updated_at)
            for name, state in states.items()
        ]
        try:
            directory = os.path.dirname(os.path.abspath(self.db_file))
            os.makedirs(directory, exist_ok=True)
            self.initialize()
            with self._connection() as conn:
                conn.execute("DELETE FROM tracking_state")
                conn.executemany(
                    "INSERT INTO tracking_state (show_name, record, updated_at) VALUES (?, ?, ?)",
                    rows,
                )
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"Unable to save store {self.db_file}: {e}") from e
        logger.info(f"Saved {len(states)} tracked shows to {self.db_file}")
