"""
NIGHTPLAN - Observation scheduling for automated astrophotography.

Core package: configuration, logging, exceptions and shared types used by
the scheduling service in ``services.scheduling``.
"""

__version__ = "0.1.0"
__author__ = "NIGHTPLAN Project"

from nightplan.exceptions import (
    NightplanError,
    ConfigurationError,
    SchedulingError,
    ObservabilityError,
    InvalidStatusTransitionError,
)
from nightplan.config import NightplanConfig, load_config
from nightplan.logging_config import configure_logging, setup_logging, get_logger

__all__ = [
    "__version__",
    # Exceptions
    "NightplanError",
    "ConfigurationError",
    "SchedulingError",
    "ObservabilityError",
    "InvalidStatusTransitionError",
    # Configuration
    "NightplanConfig",
    "load_config",
    # Logging
    "setup_logging",
    "configure_logging",
    "get_logger",
]
