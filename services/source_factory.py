"""
This module provides a factory for creating episode data source instances based on configuration.
"""
import datetime
import logging
from typing import Dict, Any
from services.source_implementations.source_interface import EpisodeSourceInterface
from services.source_implementations.tmdb_implementation import TMDBEpisodeSource
from services.source_implementations.tvrage_implementation import TVRageEpisodeSource, SEARCH_URL, EPISODE_URL
from utils.showtracker_config import get_config_value

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _parse_air_time(value: str) -> datetime.time:
    try:
        return datetime.time.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid [tmdb] air_time '{value}', expected HH:MM") from e


def create_source_service(config: Dict[str, Any]) -> EpisodeSourceInterface:
    """
    Create and return the appropriate episode data source based on configuration.

    Args:
        config (Dict[str, Any]): Normalized configuration dictionary.

    Returns:
        EpisodeSourceInterface: An instance of the configured data source.

    Raises:
        ValueError: If the source type is not supported or required settings are missing.
    """
    source_type = get_config_value(config, "source", "type", fallback="tmdb").strip().lower()
    timeout = get_config_value(config, "tracker", "timeout", fallback=DEFAULT_TIMEOUT, value_type=float)
    if timeout <= 0:
        raise ValueError(f"Invalid [tracker] timeout {timeout}: must be positive")

    if source_type == "tmdb":
        api_key = get_config_value(config, "tmdb", "api_key")
        if not api_key:
            raise ValueError("Missing required TMDB configuration: api_key")
        air_time = _parse_air_time(get_config_value(config, "tmdb", "air_time", fallback="00:00"))
        return TMDBEpisodeSource(api_key, air_time=air_time, timeout=timeout)

    elif source_type == "tvrage":
        return TVRageEpisodeSource(
            search_url=get_config_value(config, "tvrage", "search_url", fallback=SEARCH_URL),
            episode_url=get_config_value(config, "tvrage", "episode_url", fallback=EPISODE_URL),
            timeout=timeout,
        )

    else:
        raise ValueError(f"Unsupported source type: {source_type}")
