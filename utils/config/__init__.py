"""
Configuration utilities for ShowTracker.

This package provides configuration normalization and validation for the
tracker, output, store and data source settings.
"""

from .config_normalizer import ConfigNormalizer
from .config_validator import ConfigValidator
from .validation_models import ValidationResult, ValidationError, ErrorCode

__all__ = [
    'ConfigNormalizer',
    'ConfigValidator',
    'ValidationResult',
    'ValidationError',
    'ErrorCode'
]
