# ============================================================================
# PerfMark - Error Classes
#
# Purpose: Custom exception hierarchy for the package
# Inputs: Error messages and context
# Outputs: Structured exceptions
# Dependencies: None
# Usage: raise UnknownMarkError("op-1")
#
# Changelog:
#   2026-03-02: Initial error classes
#   2026-03-09: Added AmbiguousResultError for duplicate terminal measurements
# ============================================================================

from typing import Optional


class PerfMarkError(Exception):
    """Base exception for all PerfMark errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """
        Initialize error.

        Args:
            message: Error message
            details: Optional detailed error information
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        """String representation."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class ConfigurationError(PerfMarkError):
    """Raised when configuration is invalid or missing."""

    pass


class UnknownMarkError(PerfMarkError):
    """Raised when a measurement references a mark that is not in the registry.

    The registry does not distinguish a mark that was never recorded from one
    that was cleared at a batch boundary; both surface as this error.
    """

    def __init__(self, start_id: str, details: Optional[str] = None):
        super().__init__(f"No mark recorded for id '{start_id}'", details=details)
        self.start_id = start_id


class AmbiguousResultError(PerfMarkError):
    """Raised when a second terminal measurement arrives within one batch."""

    def __init__(self, name: str, details: Optional[str] = None):
        super().__init__(f"Batch already has a result; rejected terminal measurement '{name}'", details=details)
        self.name = name


class SinkError(PerfMarkError):
    """Raised when a sink fails to report a result or measurement."""

    pass
