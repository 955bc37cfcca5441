"""
Configuration utilities for loading, parsing, and writing ShowTracker config files.
"""
import configparser
import logging
import os
from pathlib import Path
from typing import Dict, Any, List, Union
from utils.config.config_normalizer import ConfigNormalizer, SHOW_SECTION_PREFIX

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.expanduser("~/.config/showtracker")
DEFAULT_CONFIG_PATH = os.path.join(CONFIG_DIR, "config.ini")
DEFAULT_STORE_PATH = os.path.join(CONFIG_DIR, "database.json")
DEFAULT_TEMPLATE = "** <%U> %N S%SE%E %T"

# Used when no configuration file exists at the default location
BUILTIN_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "tracker": {},
    "output": {"template": DEFAULT_TEMPLATE},
    "store": {"type": "json", "path": DEFAULT_STORE_PATH},
    "source": {"type": "tmdb"},
}


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be loaded."""


def load_configuration(path: str = None, normalize: bool = True) -> Union[configparser.ConfigParser, Dict[str, Dict[str, Any]]]:
    """
    Load the configuration file with optional normalization.

    An explicitly given path must exist and parse. When no path is given, the
    default location is tried and built-in defaults are used if it is missing.

    Args:
        path (str, optional): Path to the configuration file.
        normalize (bool): Whether to apply configuration normalization and environment overrides.

    Returns:
        Union[configparser.ConfigParser, Dict]: Loaded configuration parser or normalized dict.

    Raises:
        ConfigurationError: If an explicit path is missing or the file cannot be parsed.
    """
    explicit = path is not None
    path = os.path.expanduser(path) if explicit else DEFAULT_CONFIG_PATH
    normalizer = ConfigNormalizer()

    if not os.path.isfile(path):
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {path}")
        logger.warning(f"Unable to load \"{path}\", using built-in defaults with no shows")
        parser = configparser.ConfigParser(interpolation=None)
        parser.read_dict(BUILTIN_DEFAULTS)
        return normalizer.normalize_and_override(parser) if normalize else parser

    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
    except (configparser.Error, OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Unable to parse configuration file {path}: {e}") from e

    if normalize:
        logger.debug(f"Loading and normalizing configuration from: {path}")
        normalized_config = normalizer.normalize_and_override(parser)
        logger.info(f"Configuration loaded and normalized successfully from: {path}")
        return normalized_config
    logger.debug(f"Loading raw configuration from: {path}")
    return parser


def write_temp_config(config_dict: dict, tmp_path: str) -> Path:
    """
    Write a temporary config.ini file from a dictionary of config sections.

    Args:
        config_dict (dict): Dictionary of config sections and values.
        tmp_path (str): Path to temporary directory.

    Returns:
        Path: Path to the written config file.
    """
    config = configparser.ConfigParser(interpolation=None)
    for section, values in config_dict.items():
        config[section] = {key: str(value) for key, value in values.items()}

    config_path = Path(tmp_path) / "test_showtracker_config.ini"
    with open(config_path, "w", encoding="utf-8") as f:
        config.write(f)

    return config_path


def get_config_section(config: Dict[str, Dict[str, Any]], section_name: str) -> Dict[str, Any]:
    """
    Get configuration section with case-insensitive lookup.

    Args:
        config: Normalized configuration dict
        section_name: Configuration section name

    Returns:
        Dict[str, Any]: Copy of the configuration section data

    Raises:
        ValueError: If section is not found
    """
    if config is None:
        raise ValueError("Configuration object cannot be None")

    if not isinstance(section_name, str) or not section_name.strip():
        raise ValueError("Section name must be a non-empty string")

    canonical_name = ConfigNormalizer().canonical_section_name(section_name)
    if canonical_name in config:
        return dict(config[canonical_name])

    available_sections = sorted(config.keys())
    raise ValueError(
        f"Configuration section '{section_name}' not found. "
        f"Available sections: {available_sections}"
    )


def has_config_section(config: Dict[str, Dict[str, Any]], section_name: str) -> bool:
    try:
        get_config_section(config, section_name)
        return True
    except ValueError:
        return False


def get_config_value(
    config: Dict[str, Dict[str, Any]],
    section: str,
    key: str,
    fallback: Any = None,
    value_type: type = str
) -> Any:
    """
    Get a configuration value with case-insensitive lookup and type conversion.

    Args:
        config: Normalized configuration dict
        section: Configuration section name
        key: Configuration key name
        fallback: Default value if not found
        value_type: Type to convert the value to (str, int, float, bool)

    Returns:
        Configuration value converted to specified type or fallback

    Raises:
        ValueError: If value cannot be converted and no fallback is given
    """
    if config is None:
        return fallback

    if not isinstance(key, str) or not key.strip():
        raise ValueError("Key name must be a non-empty string")

    try:
        value = get_config_section(config, section).get(key.strip().lower(), fallback)
    except ValueError:
        return fallback

    if value is None or (isinstance(value, str) and not value.strip()):
        return fallback

    try:
        if value_type == bool and isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ('true', '1', 'yes', 'on', 'enabled'):
                return True
            if lowered in ('false', '0', 'no', 'off', 'disabled'):
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if value_type in (int, float, str):
            return value_type(value.strip() if isinstance(value, str) else value)
        return value_type(value)
    except (ValueError, TypeError) as e:
        if fallback is not None:
            logger.warning(
                f"Failed to convert config value [{section}].{key}='{value}' to {value_type.__name__}: {e}. "
                f"Using fallback: {fallback}"
            )
            return fallback
        raise ValueError(
            f"Failed to convert config value [{section}].{key}='{value}' to {value_type.__name__}: {e}"
        )


def get_show_names(config: Dict[str, Dict[str, Any]]) -> List[str]:
    """
    List the configured show names in configuration order.

    Args:
        config: Normalized configuration dict

    Returns:
        List[str]: Show names taken from ``[show:<name>]`` sections.
    """
    if not config:
        return []
    names = []
    for section in config:
        if section.startswith(SHOW_SECTION_PREFIX):
            name = section[len(SHOW_SECTION_PREFIX):]
            if name and name not in names:
                names.append(name)
    return names


def show_section(show_name: str) -> str:
    return f"{SHOW_SECTION_PREFIX}{show_name}"
