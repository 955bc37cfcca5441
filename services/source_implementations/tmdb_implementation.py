import datetime
import logging
import tmdbsimple as tmdb
import requests
from models.source_result import SourceResult, FailureKind
from services.source_implementations.source_interface import EpisodeSourceInterface

logger = logging.getLogger(__name__)

class TMDBEpisodeSource(EpisodeSourceInterface):
    """
    Episode data source backed by the TMDB API.

    Shows are resolved with a TV search (first result wins) and the next occurrence is
    read from the ``next_episode_to_air`` block of the show details.

    Attributes:
        api_key (str): TMDB API key.
        air_time (datetime.time): UTC time of day applied to TMDB's date-only air dates.
        timeout (float): Per-request timeout in seconds.
    """

    name = "tmdb"

    def __init__(self, api_key: str, air_time: datetime.time = datetime.time(0, 0), timeout: float = 10.0):
        self.api_key = api_key
        self.air_time = air_time
        self.timeout = timeout
        tmdb.API_KEY = self.api_key
        tmdb.REQUESTS_TIMEOUT = self.timeout

    def resolve_id(self, show_name: str) -> SourceResult:
        """ Search for a show by name and return the ID of the first match

        Args:
            show_name: The name of the show to search for

        Returns:
            SourceResult holding the TMDB ID as a string, or a lookup failure
        """
        logger.debug(f"Searching TMDB for '{show_name}'")
        try:
            response = tmdb.Search().tv(query=show_name)
        except requests.exceptions.RequestException as e:
            logger.debug(f"TMDB search for '{show_name}' failed: {e}")
            return SourceResult.fail(FailureKind.LOOKUP_TRANSPORT, f"search for '{show_name}' failed: {e}")

        results = (response or {}).get("results") or []
        if not results or results[0].get("id") is None:
            return SourceResult.fail(FailureKind.LOOKUP_NOT_FOUND, f"no TMDB show matches '{show_name}'")

        show_id = str(results[0]["id"])
        logger.debug(f"Resolved '{show_name}' to TMDB ID {show_id} ({results[0].get('name')})")
        return SourceResult.ok(show_id)

    def fetch_next(self, external_id: str) -> SourceResult:
        """ Get the next episode to air for a show

        Args:
            external_id: The TMDB ID of the show

        Returns:
            SourceResult holding an Occurrence, or a transport/malformed failure
        """
        try:
            show_id = int(external_id)
        except (TypeError, ValueError):
            return SourceResult.fail(FailureKind.MALFORMED, f"invalid TMDB ID {external_id!r}")

        try:
            info = tmdb.TV(id=show_id).info()
        except requests.exceptions.RequestException as e:
            return SourceResult.fail(FailureKind.TRANSPORT, f"details for TMDB ID {show_id} failed: {e}")

        next_episode = (info or {}).get("next_episode_to_air")
        if not next_episode:
            return SourceResult.fail(FailureKind.MALFORMED, f"no next episode announced for TMDB ID {show_id}")

        air_date = self._parse_air_date(next_episode.get("air_date"))
        if air_date is None:
            return SourceResult.fail(FailureKind.MALFORMED, f"unparseable air date {next_episode.get('air_date')!r}")

        season = next_episode.get("season_number")
        episode = next_episode.get("episode_number")
        if (season is None) != (episode is None) or not all(
            n is None or isinstance(n, int) for n in (season, episode)
        ):
            return SourceResult.fail(FailureKind.MALFORMED, f"unparseable season/episode {season!r}/{episode!r}")

        return self.build_occurrence(air_date, next_episode.get("name"), season, episode)

    def _parse_air_date(self, value):
        if not value:
            return None
        try:
            day = datetime.date.fromisoformat(value)
        except (TypeError, ValueError):
            return None
        return datetime.datetime.combine(day, self.air_time, tzinfo=datetime.timezone.utc)

    def __str__(self):
        return f"TMDBEpisodeSource(air_time={self.air_time.isoformat()})"
