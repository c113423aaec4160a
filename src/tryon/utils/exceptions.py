"""
Custom exceptions for tryon.

This module defines the exceptions raised by the input side of the pipeline
(request parsing, configuration, prompt templates). Outcomes of the upstream
generation call are not exceptions; see tryon.core.result.
"""


class TryonError(Exception):
    """Base exception for all tryon errors."""

    pass


class ValidationError(TryonError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "", details: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
            details: Additional human-readable detail (optional)
        """
        self.field = field
        self.details = details
        super().__init__(message)


class MalformedRequestError(ValidationError):
    """Raised when the request body cannot be parsed as a multipart form."""

    pass


class MissingInputError(ValidationError):
    """Raised when a required upload is absent or empty."""

    pass


class ConfigurationError(TryonError):
    """Raised when there is a configuration problem."""

    pass
