"""
Custom exceptions for readiness calculations.

Missing or insufficient data is never an error in this library: calculators
return neutral or "unavailable" results instead. The exceptions below are
reserved for contract violations by the caller. Each exception includes:
- A descriptive message
- An error code
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error reporting."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    SERIES_LENGTH_MISMATCH = "SERIES_LENGTH_MISMATCH"


class ReadinessError(Exception):
    """
    Base exception for all readiness calculation errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class ValidationError(ReadinessError):
    """Raised when a parameter is outside its allowed range."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


class ConfigurationError(ValidationError):
    """Raised when weights or time constants cannot be used."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field=field, details=details)
        self.code = ErrorCode.CONFIGURATION_ERROR


class SeriesLengthMismatchError(ReadinessError):
    """Raised when paired series passed to a correlation differ in length."""

    def __init__(self, x_length: int, y_length: int) -> None:
        super().__init__(
            message=f"Series lengths differ: {x_length} != {y_length}",
            code=ErrorCode.SERIES_LENGTH_MISMATCH,
            details={"x_length": x_length, "y_length": y_length},
        )
        self.x_length = x_length
        self.y_length = y_length
