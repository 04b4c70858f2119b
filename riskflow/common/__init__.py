"""Shared utilities for RiskFlow."""

from .logger import configure_logging, get_logger
from .timeutil import utcnow

__all__ = ["configure_logging", "get_logger", "utcnow"]
