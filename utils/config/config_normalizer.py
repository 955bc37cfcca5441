"""
Configuration normalization utilities for handling case-insensitive configuration
and environment variable overrides.
"""

import os
import logging
from typing import Dict, Any, Union
from configparser import ConfigParser

logger = logging.getLogger(__name__)

SHOW_SECTION_PREFIX = "show:"


class ConfigNormalizer:
    """
    Normalizes configuration section names and handles case sensitivity issues.

    Provides case-insensitive configuration reading, section name normalization,
    duplicate section merging, and environment variable override functionality.
    Show sections (``[show:<name>]``) keep the show name exactly as written, since
    it is the key under which tracking state is stored.
    """

    # Environment variable mapping: env_var -> (section, key)
    ENV_VAR_MAPPING = {
        'SHOWTRACKER_TMDB_API_KEY': ('tmdb', 'api_key'),
        'SHOWTRACKER_SOURCE_TYPE': ('source', 'type'),
        'SHOWTRACKER_STORE_TYPE': ('store', 'type'),
        'SHOWTRACKER_STORE_PATH': ('store', 'path'),
        'SHOWTRACKER_OUTPUT_FILE': ('output', 'file'),
        'SHOWTRACKER_DAYS_UNTIL_NEXT_CHECK': ('tracker', 'days_until_next_check'),
        'SHOWTRACKER_DAYS_PRECEDING': ('tracker', 'days_preceding'),
    }

    # Section name aliases for case-insensitive handling
    SECTION_ALIASES = {
        'tracker': ['Tracker', 'TRACKER'],
        'output': ['Output', 'OUTPUT'],
        'store': ['Store', 'STORE'],
        'source': ['Source', 'SOURCE'],
        'tmdb': ['TMDB', 'Tmdb'],
        'tvrage': ['TVRage', 'TVRAGE', 'TvRage'],
    }

    def normalize_config(self, config: Union[ConfigParser, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Normalize configuration section names and merge duplicate sections.

        Args:
            config: Raw configuration from ConfigParser or dict

        Returns:
            dict: Normalized configuration with lowercase section names and keys
        """
        logger.debug("Starting configuration normalization")

        if isinstance(config, ConfigParser):
            raw_config = {section: dict(config[section]) for section in config.sections()}
        else:
            raw_config = config.copy()

        normalized = {}
        section_mapping = self._build_section_mapping()

        for section_name, section_data in raw_config.items():
            canonical_name = self.canonical_section_name(section_name, section_mapping)
            normalized_section_data = {key.lower(): value for key, value in section_data.items()}

            if canonical_name in normalized:
                logger.debug(f"Merging duplicate section: {section_name} -> {canonical_name}")
                if section_name == canonical_name:
                    # Canonical spelling takes precedence
                    normalized[canonical_name].update(normalized_section_data)
                else:
                    for key, value in normalized_section_data.items():
                        normalized[canonical_name].setdefault(key, value)
            else:
                normalized[canonical_name] = normalized_section_data
                logger.debug(f"Normalized section: {section_name} -> {canonical_name}")

        logger.info(f"Configuration normalization complete. Sections: {list(normalized.keys())}")
        return normalized

    def apply_env_overrides(self, config: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Apply environment variable overrides to configuration.

        Args:
            config: Normalized configuration dict

        Returns:
            dict: Configuration with environment variable overrides applied
        """
        logger.debug("Applying environment variable overrides")

        config_with_overrides = {section: data.copy() for section, data in config.items()}
        overrides_applied = 0

        for env_var, (section, key) in self.ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                config_with_overrides.setdefault(section, {})
                old_value = config_with_overrides[section].get(key, '<not set>')
                config_with_overrides[section][key] = env_value
                overrides_applied += 1

                logger.info(f"Environment override applied: {env_var} -> [{section}] {key}")
                logger.debug(f"Value changed: {old_value} -> {env_value}")

        if overrides_applied > 0:
            logger.info(f"Applied {overrides_applied} environment variable overrides")
        else:
            logger.debug("No environment variable overrides found")

        return config_with_overrides

    def normalize_and_override(self, config: Union[ConfigParser, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Complete normalization pipeline: normalize sections and apply environment overrides.

        Args:
            config: Raw configuration from ConfigParser or dict

        Returns:
            dict: Fully normalized and overridden configuration
        """
        normalized = self.normalize_config(config)
        return self.apply_env_overrides(normalized)

    def canonical_section_name(self, section_name: str, section_mapping: Dict[str, str] = None) -> str:
        """
        Map a section name to its canonical form.

        ``[Show: Doctor Who]`` becomes ``show:Doctor Who``; known sections become lowercase.
        """
        stripped = section_name.strip()
        if stripped.lower().startswith(SHOW_SECTION_PREFIX):
            return SHOW_SECTION_PREFIX + stripped[len(SHOW_SECTION_PREFIX):].strip()
        if section_mapping is None:
            section_mapping = self._build_section_mapping()
        return section_mapping.get(stripped.lower(), stripped.lower())

    def _build_section_mapping(self) -> Dict[str, str]:
        """
        Build a mapping from all possible section names to their canonical lowercase form.

        Returns:
            dict: Mapping of section_name.lower() -> canonical_name
        """
        mapping = {}
        for canonical, aliases in self.SECTION_ALIASES.items():
            mapping[canonical.lower()] = canonical
            for alias in aliases:
                mapping[alias.lower()] = canonical
        return mapping
