from abc import ABC, abstractmethod
import datetime
import logging
from typing import Optional
from pydantic import ValidationError
from models.occurrence import Occurrence
from models.source_result import SourceResult, FailureKind

logger = logging.getLogger(__name__)

class EpisodeSourceInterface(ABC):
    """
    Abstract base class defining the interface for episode data sources in ShowTracker.

    Implementations never raise across this boundary: every failure is reported as a
    SourceResult carrying a FailureKind, so callers can treat all failures alike while
    still telling transport problems from malformed data in the logs.

    Methods:
        resolve_id(show_name): Look up the data source identifier for a show name.
        fetch_next(external_id): Retrieve the next known occurrence for a show.
    """

    name = "source"

    @abstractmethod
    def resolve_id(self, show_name: str) -> SourceResult:
        """
        Look up a show's identifier.

        Returns:
            SourceResult: value is the identifier as a string, or a LOOKUP_* failure.
        """
        pass

    @abstractmethod
    def fetch_next(self, external_id: str) -> SourceResult:
        """
        Retrieve the next occurrence for a show.

        Returns:
            SourceResult: value is an Occurrence, or a TRANSPORT/MALFORMED failure.
        """
        pass

    @staticmethod
    def build_occurrence(
        air_date: Optional[datetime.datetime],
        title: Optional[str],
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> SourceResult:
        """
        Validate raw fields into an Occurrence.

        Returns:
            SourceResult: the Occurrence, or a MALFORMED failure naming the bad field.
        """
        if air_date is None:
            return SourceResult.fail(FailureKind.MALFORMED, "missing air date")
        if not title or not title.strip():
            return SourceResult.fail(FailureKind.MALFORMED, "missing title")
        try:
            occurrence = Occurrence(air_date=air_date, title=title.strip(), season=season, episode=episode)
        except ValidationError as e:
            return SourceResult.fail(FailureKind.MALFORMED, f"invalid occurrence: {e.errors()[0]['msg']}")
        return SourceResult.ok(occurrence)

    def __str__(self):
        return f"{self.__class__.__name__}()"
