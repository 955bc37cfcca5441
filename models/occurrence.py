"""
Occurrence model for ShowTracker, representing a single broadcast of a show.
"""
import datetime
import logging
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

logger = logging.getLogger(__name__)

class Occurrence(BaseModel):
    """
    Represents one broadcast event as reported by an episode data source.

    Occurrences are immutable once created.

    Attributes:
        air_date (datetime.datetime): Timezone-aware air date and time.
        title (str): Episode title.
        season (Optional[int]): Season number.
        episode (Optional[int]): Episode number within the season.

    Methods:
        has_ordinal(): Whether season/episode numbers are known.
        is_future(now): Whether the occurrence is strictly after ``now``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='forbid'
    )

    air_date: datetime.datetime = Field(..., description="Air date and time")
    title: str = Field(..., min_length=1, description="Episode title")
    season: Optional[int] = Field(None, ge=0, description="Season number")
    episode: Optional[int] = Field(None, ge=0, description="Episode number")

    @model_validator(mode="after")
    def _check_ordinals(self) -> "Occurrence":
        if (self.season is None) != (self.episode is None):
            raise ValueError("season and episode must both be present or both be absent")
        if self.air_date.tzinfo is None:
            raise ValueError("air_date must be timezone-aware")
        return self

    def has_ordinal(self) -> bool:
        return self.season is not None

    def is_future(self, now: datetime.datetime) -> bool:
        return self.air_date > now

    def __str__(self) -> str:
        ordinal = f"S{self.season:02d}E{self.episode:02d} " if self.has_ordinal() else ""
        return f"{ordinal}'{self.title}' on {self.air_date.isoformat()}"
