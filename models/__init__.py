"""
Models package for ShowTracker.

This package contains Pydantic-based models for broadcast occurrences and per-show
tracking state, plus the result types returned by episode data sources.
"""

from .occurrence import Occurrence
from .tracking_state import TrackingState
from .source_result import FailureKind, SourceFailure, SourceResult

__all__ = ["Occurrence", "TrackingState", "FailureKind", "SourceFailure", "SourceResult"]
