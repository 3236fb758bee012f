"""Utility modules for the YouTube Extraction Service."""
from .validators import URLValidator, TimeWindowValidator
from .response_helpers import ResponseHelper
from .logging import LoggerSetup, CorrelatedLogger, MetricsLogger

__all__ = [
    "URLValidator", "TimeWindowValidator", "ResponseHelper",
    "LoggerSetup", "CorrelatedLogger", "MetricsLogger"
]
