"""
NIGHTPLAN Custom Exceptions

Provides the domain-specific exception hierarchy for the NIGHTPLAN
observation scheduler.

Scheduling infeasibility is never an exception: a sequence that cannot be
placed, or that references an unknown target, is reported as data in the
SchedulingResult (conflicts and warnings). Exceptions are reserved for
configuration problems, illegal tracker transitions, and hard failures of
the external observability oracle.

Exception Hierarchy:
    NightplanError (base)
    ├── ConfigurationError
    └── SchedulingError
        ├── ObservabilityError
        └── InvalidStatusTransitionError
"""

from typing import Any, Optional


class NightplanError(Exception):
    """Base exception for all NIGHTPLAN errors.

    All NIGHTPLAN-specific exceptions inherit from this class, allowing
    callers to catch all NIGHTPLAN errors with a single except clause.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(NightplanError):
    """Error in configuration file or settings.

    Raised when configuration validation fails, the requested file is
    missing, or its YAML cannot be parsed.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


# =============================================================================
# Scheduling Errors
# =============================================================================

class SchedulingError(NightplanError):
    """Base class for scheduler errors."""
    pass


class ObservabilityError(SchedulingError):
    """The observability oracle failed hard.

    Raised when the external oracle raises (network error, timeout, bad
    ephemeris). Aborts the scheduling run; the original exception is kept
    as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        when: Optional[str] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if target_id:
            details["target_id"] = target_id
        if when:
            details["when"] = when
        super().__init__(message, details)
        self.target_id = target_id
        self.when = when


class InvalidStatusTransitionError(SchedulingError):
    """Requested status change is not a legal lifecycle transition.

    Raised by the tracker, e.g. when asking a completed sequence to run
    again.
    """

    def __init__(
        self,
        message: str,
        sequence_id: Optional[str] = None,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if sequence_id:
            details["sequence_id"] = sequence_id
        if current_status:
            details["current_status"] = current_status
        if requested_status:
            details["requested_status"] = requested_status
        super().__init__(message, details)
        self.sequence_id = sequence_id
        self.current_status = current_status
        self.requested_status = requested_status
