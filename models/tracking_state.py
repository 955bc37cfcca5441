"""
TrackingState model for ShowTracker, the per-show record persisted between runs.
"""
import datetime
import logging
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, field_validator
from models.occurrence import Occurrence

logger = logging.getLogger(__name__)

class TrackingState(BaseModel):
    """
    Represents what is known about one tracked show.

    Attributes:
        show_name (str): Stable show identifier (the configured name).
        display_name (Optional[str]): Alternate name used only for rendering.
        external_id (Optional[str]): Cached identifier of the show in the data source.
        upcoming (Optional[Occurrence]): Next known occurrence, if any.
        history (List[Occurrence]): Lapsed occurrences in append order.
        last_check (Optional[datetime.datetime]): Last refresh attempt that counts for scheduling.

    Methods:
        rendered_name: Display name, falling back to the show name.
        lapse_upcoming(): Move the upcoming occurrence into history.
        to_record(): Serialize for persistence.
        from_record(): Construct from a persisted record.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )

    show_name: str = Field(..., min_length=1, frozen=True, description="Configured show name")
    display_name: Optional[str] = Field(None, description="Alternate name for rendering")
    external_id: Optional[str] = Field(None, description="Data source identifier for the show")
    upcoming: Optional[Occurrence] = Field(None, description="Next known occurrence")
    history: List[Occurrence] = Field(default_factory=list, description="Lapsed occurrences")
    last_check: Optional[datetime.datetime] = Field(None, description="Timestamp of the last check")

    @field_validator("last_check")
    @classmethod
    def _check_last_check(cls, value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        if value is not None and value.tzinfo is None:
            raise ValueError("last_check must be timezone-aware")
        return value

    @property
    def rendered_name(self) -> str:
        return self.display_name or self.show_name

    def lapse_upcoming(self) -> Optional[Occurrence]:
        """
        Append the current upcoming occurrence to history and clear it.

        Returns:
            Optional[Occurrence]: The occurrence that was moved, or None if there was none.
        """
        lapsed = self.upcoming
        if lapsed is not None:
            self.history = self.history + [lapsed]
            self.upcoming = None
        return lapsed

    def to_record(self) -> Dict[str, Any]:
        """
        Serialize the state as a JSON-compatible dict.

        Returns:
            dict: Persistable representation.
        """
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TrackingState":
        """
        Construct a TrackingState from a persisted record.

        Args:
            record (dict): Record previously produced by to_record().

        Returns:
            TrackingState: Instantiated state.
        """
        return cls.model_validate(record)
