"""Configuration validation for ShowTracker."""

import datetime
import logging
import os
from typing import Dict, Any, Optional
from .validation_models import ValidationResult, ValidationError, ErrorCode
from .config_normalizer import SHOW_SECTION_PREFIX

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Validates tracker, output, store and data source configuration."""

    VALID_SOURCES = {'tmdb', 'tvrage'}
    VALID_STORES = {'json', 'sqlite'}

    # Service-specific required keys (when the source is selected)
    SOURCE_REQUIRED_KEYS = {
        'tmdb': ['api_key'],
        'tvrage': [],
    }

    SHOW_KEYS = {'display_name', 'days_until_next_check', 'days_preceding', 'include_history'}

    def validate(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        """
        Validate a normalized configuration.

        Args:
            config: Normalized configuration dict

        Returns:
            ValidationResult with errors, warnings, and suggestions
        """
        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        if not config:
            result.add_error(ValidationError(
                section='tracker', key=None, message="Configuration is empty",
                suggestion="Create a config file with [tracker] and [show:<name>] sections",
                error_code=ErrorCode.MISSING_SECTION,
            ))
            return result

        result.merge(self.validate_tracker(config))
        result.merge(self.validate_output(config))
        result.merge(self.validate_store(config))
        result.merge(self.validate_source(config))
        result.merge(self.validate_shows(config))
        logger.info(f"Configuration validation finished: {len(result.errors)} errors, {len(result.warnings)} warnings")
        return result

    def validate_tracker(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        # utils.show_options imports utils.config through showtracker_config
        from utils.show_options import OPTIONS, _parse_positive_int

        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        section = config.get('tracker', {})
        for key, spec in OPTIONS.items():
            if spec.per_show_only or key not in section:
                continue
            self._check_parse(result, 'tracker', key, section[key], spec.parser)

        if 'max_workers' in section:
            self._check_parse(result, 'tracker', 'max_workers', section['max_workers'], _parse_positive_int)
        if 'timeout' in section:
            self._check_parse(result, 'tracker', 'timeout', section['timeout'], _positive_float)
        return result

    def validate_output(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        section = config.get('output', {})
        template = section.get('template')
        if template is not None and '%' not in template:
            result.add_warning("[output].template has no placeholders; every entry will render identically")

        header_file = section.get('header_file')
        if header_file and not os.path.isfile(os.path.expanduser(header_file)):
            result.add_error(ValidationError(
                section='output', key='header_file',
                message=f"Header file not found: {header_file}",
                suggestion="Create the file or remove the header_file setting",
                error_code=ErrorCode.FILE_NOT_FOUND,
            ))
        return result

    def validate_store(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        section = config.get('store', {})
        store_type = str(section.get('type', 'json')).strip().lower()
        if store_type not in self.VALID_STORES:
            result.add_error(ValidationError(
                section='store', key='type',
                message=f"Invalid store type '{store_type}'",
                suggestion=f"Valid options are: {', '.join(sorted(self.VALID_STORES))}",
                error_code=ErrorCode.INVALID_STORE,
            ))
        if not section.get('path'):
            result.add_suggestion("Set [store].path to keep tracking state somewhere other than the default location")
        return result

    def validate_source(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        source_type = str(config.get('source', {}).get('type', 'tmdb')).strip().lower()
        if source_type not in self.VALID_SOURCES:
            result.add_error(ValidationError(
                section='source', key='type',
                message=f"Invalid source type '{source_type}'",
                suggestion=f"Valid options are: {', '.join(sorted(self.VALID_SOURCES))}",
                error_code=ErrorCode.INVALID_SOURCE,
            ))
            return result

        section = config.get(source_type, {})
        for key in self.SOURCE_REQUIRED_KEYS[source_type]:
            if not str(section.get(key, '')).strip():
                result.add_error(ValidationError(
                    section=source_type, key=key,
                    message=f"Required key '{key}' is missing from section '[{source_type}]'",
                    suggestion=f"Add: {key} = your_value_here (or set SHOWTRACKER_{source_type.upper()}_{key.upper()})",
                    error_code=ErrorCode.MISSING_KEY,
                ))

        if source_type == 'tmdb' and 'air_time' in section:
            self._check_parse(result, 'tmdb', 'air_time', section['air_time'], datetime.time.fromisoformat)
        if source_type == 'tvrage':
            for key, placeholder in (('search_url', '{name}'), ('episode_url', '{id}')):
                url = section.get(key)
                if url is not None and placeholder not in url:
                    result.add_error(ValidationError(
                        section='tvrage', key=key,
                        message=f"URL must contain the {placeholder} placeholder",
                        suggestion=None,
                        error_code=ErrorCode.INVALID_VALUE,
                    ))
        return result

    def validate_shows(self, config: Dict[str, Dict[str, Any]]) -> ValidationResult:
        from utils.show_options import OPTIONS

        result = ValidationResult(is_valid=True, errors=[], warnings=[], suggestions=[])
        show_sections = [s for s in config if s.startswith(SHOW_SECTION_PREFIX)]
        if not show_sections:
            result.add_warning("No shows configured; add a [show:<name>] section per show")

        for section_name in show_sections:
            if not section_name[len(SHOW_SECTION_PREFIX):]:
                result.add_error(ValidationError(
                    section=section_name, key=None, message="Show section has no show name",
                    suggestion="Use [show:Show Name]", error_code=ErrorCode.INVALID_VALUE,
                ))
                continue
            for key, value in config[section_name].items():
                if key not in self.SHOW_KEYS:
                    result.add_warning(f"[{section_name}].{key} is not a recognised show option")
                    continue
                self._check_parse(result, section_name, key, value, OPTIONS[key].parser)
        return result

    @staticmethod
    def _check_parse(result: ValidationResult, section: str, key: str, value: Any, parser) -> Optional[Any]:
        try:
            return parser(value)
        except (ValueError, TypeError) as e:
            result.add_error(ValidationError(
                section=section, key=key,
                message=f"Invalid value '{value}': {e}",
                suggestion=None,
                error_code=ErrorCode.INVALID_VALUE,
            ))
            return None


def _positive_float(value: Any) -> float:
    number = float(str(value).strip())
    if number <= 0:
        raise ValueError("must be positive")
    return number
