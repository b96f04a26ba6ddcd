"""
Exception types for the Adaptive Resonance core.

Only programmer errors are raised. Capacity exhaustion and map-field
mismatches are ordinary learning outcomes and are returned as result
values (see ``core/results.py``).
"""

from typing import Any, Dict, Optional


class ARTError(Exception):
    """Base exception for all adaptive resonance errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputValidationError(ARTError, ValueError):
    """Raised when an input vector is absent, non-finite or outside [0, 1]."""


class DimensionMismatchError(InputValidationError):
    """Raised when an input does not match the dimension of its space."""

    def __init__(self, expected: int, actual: int, space: str = "input"):
        super().__init__(
            f"Dimension mismatch in {space} space: expected {expected}, got {actual}",
            details={"expected": expected, "actual": actual, "space": space},
        )
        self.expected = expected
        self.actual = actual
        self.space = space


class SessionClosedError(ARTError, RuntimeError):
    """Raised when a closed model is used."""
