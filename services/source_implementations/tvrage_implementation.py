import datetime
import logging
import re
import xml.etree.ElementTree as ET
from urllib.parse import quote_plus
import requests
from models.source_result import SourceResult, FailureKind
from services.source_implementations.source_interface import EpisodeSourceInterface

logger = logging.getLogger(__name__)

SEARCH_URL = "http://services.tvrage.com/feeds/search.php?show={name}"
EPISODE_URL = "http://services.tvrage.com/feeds/episodeinfo.php?sid={id}"

# Episode numbers look like "02x05"
NUMBER_PATTERN = re.compile(r"^\s*(\d+)x(\d+)\s*$")

class TVRageEpisodeSource(EpisodeSourceInterface):
    """
    Episode data source for TVRage-style XML feeds.

    The search feed returns ``<Results><show><showid>`` entries and the episode feed
    returns ``<show><nextepisode>`` with ``number``, ``title`` and an ``airtime`` in
    epoch seconds (``format="GMT+0 NODST"``). Both URLs are configurable so mirrors
    of the feed layout can be used.

    Attributes:
        search_url (str): Format string with a ``{name}`` placeholder.
        episode_url (str): Format string with an ``{id}`` placeholder.
        timeout (float): Per-request timeout in seconds.
    """

    name = "tvrage"

    def __init__(self, search_url: str = SEARCH_URL, episode_url: str = EPISODE_URL,
                 timeout: float = 10.0, session: requests.Session = None):
        self.search_url = search_url
        self.episode_url = episode_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_xml(self, url: str) -> ET.Element:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return ET.fromstring(response.content)

    def resolve_id(self, show_name: str) -> SourceResult:
        url = self.search_url.format(name=quote_plus(show_name))
        logger.debug(f"Searching feed for '{show_name}': {url}")
        try:
            root = self._get_xml(url)
        except requests.exceptions.RequestException as e:
            return SourceResult.fail(FailureKind.LOOKUP_TRANSPORT, f"search for '{show_name}' failed: {e}")
        except ET.ParseError as e:
            return SourceResult.fail(FailureKind.LOOKUP_TRANSPORT, f"search for '{show_name}' returned invalid XML: {e}")

        show_id = (root.findtext("show/showid") or "").strip()
        if not show_id.isdigit():
            return SourceResult.fail(FailureKind.LOOKUP_NOT_FOUND, f"no show matches '{show_name}'")
        return SourceResult.ok(show_id)

    def fetch_next(self, external_id: str) -> SourceResult:
        url = self.episode_url.format(id=external_id)
        logger.debug(f"Fetching next episode: {url}")
        try:
            root = self._get_xml(url)
        except requests.exceptions.RequestException as e:
            return SourceResult.fail(FailureKind.TRANSPORT, f"episode feed for {external_id} failed: {e}")
        except ET.ParseError as e:
            return SourceResult.fail(FailureKind.MALFORMED, f"episode feed for {external_id} is not XML: {e}")

        next_episode = root.find("nextepisode")
        if next_episode is None:
            return SourceResult.fail(FailureKind.MALFORMED, f"no next episode announced for {external_id}")

        airtime = next_episode.findtext("airtime[@format='GMT+0 NODST']")
        try:
            air_date = datetime.datetime.fromtimestamp(int(airtime.strip()), tz=datetime.timezone.utc)
        except (AttributeError, ValueError, OverflowError, OSError):
            return SourceResult.fail(FailureKind.MALFORMED, f"unparseable airtime {airtime!r}")

        season = episode = None
        number = next_episode.findtext("number")
        if number and number.strip():
            match = NUMBER_PATTERN.match(number)
            if not match:
                return SourceResult.fail(FailureKind.MALFORMED, f"unparseable episode number {number!r}")
            season, episode = int(match.group(1)), int(match.group(2))

        return self.build_occurrence(air_date, next_episode.findtext("title"), season, episode)

    def __str__(self):
        return f"TVRageEpisodeSource(search_url={self.search_url})"
