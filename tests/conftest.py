import os
import sys
import datetime
import pytest
from click.testing import CliRunner

# Add project root to sys.path for local imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from models.occurrence import Occurrence
from models.tracking_state import TrackingState
from models.source_result import SourceResult, FailureKind
from services.source_implementations.source_interface import EpisodeSourceInterface
from services.store_implementations.json_implementation import JSONStore
from utils.clock import FixedClock
from utils.config.config_normalizer import ConfigNormalizer
from utils.show_options import ShowOptions
from cli.main import showtracker_cli

NOW = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)

# ────────────────────────────────────────────────
# TIME FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def now():
    """The fixed evaluation instant used across tests."""
    return NOW


@pytest.fixture
def clock(now):
    """A clock frozen at ``now``."""
    return FixedClock(now)


@pytest.fixture
def days():
    """Shorthand for building day-based offsets."""
    return lambda n: datetime.timedelta(days=n)


# ────────────────────────────────────────────────
# MODEL FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def make_occurrence(now):
    """Factory building an Occurrence airing ``offset_days`` from now."""
    def _make(offset_days=5, title="Pilot", season=1, episode=1):
        return Occurrence(
            air_date=now + datetime.timedelta(days=offset_days),
            title=title,
            season=season,
            episode=episode,
        )
    return _make


@pytest.fixture
def make_state():
    """Factory building a TrackingState."""
    def _make(show_name="Mock Show", **kwargs):
        return TrackingState(show_name=show_name, **kwargs)
    return _make


@pytest.fixture
def default_options():
    return ShowOptions()


# ────────────────────────────────────────────────
# SERVICE FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture(scope="function")
def mock_source(mocker, make_occurrence):
    """Mocked data source that resolves every show and returns a Pilot in five days."""
    mock = mocker.Mock(spec=EpisodeSourceInterface)
    mock.resolve_id.return_value = SourceResult.ok("123")
    mock.fetch_next.return_value = SourceResult.ok(make_occurrence(5))
    return mock


@pytest.fixture(scope="function")
def failing_source(mocker):
    """Mocked data source whose fetches fail with a transport error."""
    mock = mocker.Mock(spec=EpisodeSourceInterface)
    mock.resolve_id.return_value = SourceResult.ok("123")
    mock.fetch_next.return_value = SourceResult.fail(FailureKind.TRANSPORT, "connection refused")
    return mock


@pytest.fixture
def json_store(tmp_path):
    return JSONStore(str(tmp_path / "database.json"))


# ────────────────────────────────────────────────
# CONFIGURATION FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def raw_config(tmp_path):
    """Raw configuration sections as they would appear in an INI file."""
    return {
        "Tracker": {"days_until_next_check": "15", "days_preceding": "7"},
        "Output": {"template": "** <%U> %N S%SE%E %T"},
        "Store": {"type": "json", "path": str(tmp_path / "database.json")},
        "Source": {"type": "tmdb"},
        "TMDB": {"api_key": "dummy_api_key"},
        "show:Mock Show": {},
        "show:Other Show": {"display_name": "Other", "days_preceding": "3"},
    }


@pytest.fixture
def config(raw_config):
    """Normalized configuration."""
    return ConfigNormalizer().normalize_config(raw_config)


# ────────────────────────────────────────────────
# CLI FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def cli_runner():
    """Provide a Click test runner."""
    return CliRunner()


@pytest.fixture
def cli():
    """Provide a ShowTracker CLI instance."""
    return showtracker_cli


@pytest.fixture
def cli_obj(config, json_store, mock_source):
    """Context object as built by the CLI group."""
    return {
        "config": config,
        "store": json_store,
        "source": mock_source,
        "dry_run": False,
        "config_path": None,
    }
