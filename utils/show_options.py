"""
Per-show option resolution.

Every tunable is looked up with a fixed precedence: the ``[show:<name>]`` section,
then the global ``[tracker]`` section, then the built-in default. Values that are
present but invalid are skipped with a warning and the next level is used.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from utils.showtracker_config import get_config_section, has_config_section, show_section

logger = logging.getLogger(__name__)

DAYS_UNTIL_NEXT_CHECK = 15
DAYS_PRECEDING = 7
INCLUDE_HISTORY = True

TRACKER_SECTION = "tracker"


def _parse_bool(value: str) -> bool:
    lowered = str(value).strip().lower()
    if lowered in ('true', '1', 'yes', 'on', 'enabled'):
        return True
    if lowered in ('false', '0', 'no', 'off', 'disabled'):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_positive_int(value: str) -> int:
    number = int(str(value).strip())
    if number < 1:
        raise ValueError(f"must be a positive integer, got {number}")
    return number


def _parse_non_negative_int(value: str) -> int:
    number = int(str(value).strip())
    if number < 0:
        raise ValueError(f"must be a non-negative integer, got {number}")
    return number


def _parse_text(value: str) -> str:
    text = str(value).strip()
    if not text:
        raise ValueError("must not be empty")
    return text


@dataclass(frozen=True)
class OptionSpec:
    """How one option is parsed and what its built-in default is."""
    parser: Callable[[str], Any]
    default: Any
    per_show_only: bool = False


OPTIONS: Dict[str, OptionSpec] = {
    "days_until_next_check": OptionSpec(_parse_positive_int, DAYS_UNTIL_NEXT_CHECK),
    "days_preceding": OptionSpec(_parse_non_negative_int, DAYS_PRECEDING),
    "include_history": OptionSpec(_parse_bool, INCLUDE_HISTORY),
    "display_name": OptionSpec(_parse_text, None, per_show_only=True),
}


@dataclass(frozen=True)
class ShowOptions:
    """Resolved options for one show."""
    days_until_next_check: int = DAYS_UNTIL_NEXT_CHECK
    days_preceding: int = DAYS_PRECEDING
    include_history: bool = INCLUDE_HISTORY
    display_name: Optional[str] = None


def _section_or_empty(config: Dict[str, Dict[str, Any]], section: str) -> Dict[str, Any]:
    if not has_config_section(config, section):
        return {}
    return get_config_section(config, section)


def resolve_option(option: str, show_name: str, config: Optional[Dict[str, Dict[str, Any]]]) -> Any:
    """
    Resolve one option for a show.

    Args:
        option (str): Option name (see OPTIONS).
        show_name (str): Configured show name.
        config (dict): Normalized configuration, may be None.

    Returns:
        Any: The parsed value from the first level that holds a valid one.

    Raises:
        KeyError: If the option is unknown.
    """
    spec = OPTIONS[option]
    levels = [("show", show_section(show_name))]
    if not spec.per_show_only:
        levels.append(("global", TRACKER_SECTION))

    for label, section in levels:
        if not config:
            break
        raw = _section_or_empty(config, section).get(option)
        if raw is None:
            continue
        try:
            return spec.parser(raw)
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring invalid {label} value for {option} of '{show_name}' ({raw!r}): {e}")

    return spec.default


def resolve_show_options(show_name: str, config: Optional[Dict[str, Dict[str, Any]]]) -> ShowOptions:
    """
    Resolve every option for a show.

    Args:
        show_name (str): Configured show name.
        config (dict): Normalized configuration.

    Returns:
        ShowOptions: Fully resolved options.
    """
    return ShowOptions(**{option: resolve_option(option, show_name, config) for option in OPTIONS})
