"""
Custom exceptions for stabimg.

This module defines all custom exceptions used throughout the generation
pipeline. Every exception raised on purpose by the library derives from
StabimgError so the handler can turn it into a failure result.
"""


class StabimgError(Exception):
    """Base exception for all stabimg errors."""

    pass


class ValidationError(StabimgError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class InvalidSeedError(ValidationError):
    """Raised when a seed is not an integer in [0, 4294967295]."""

    def __init__(self, message: str, value: object = None) -> None:
        self.value = value
        super().__init__(message, field="seed")


class ConfigurationError(StabimgError):
    """Raised when there is a configuration problem."""

    pass


class MissingCredentialError(ConfigurationError):
    """Raised when no API key is available."""

    pass


class MissingConfigurationError(ConfigurationError):
    """Raised when a required setting (e.g. the save directory) is absent."""

    def __init__(self, message: str, setting: str = "") -> None:
        self.setting = setting
        super().__init__(message)


class APIError(StabimgError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize API error.

        Args:
            message: Error message (provider message when available)
            status_code: HTTP status code
            response: Raw API response body (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class EmptyResultError(StabimgError):
    """Raised when a successful response carries no usable image."""

    def __init__(self, message: str, response: str = "") -> None:
        self.response = response
        super().__init__(message)


class NetworkError(StabimgError):
    """Raised when the transport could not complete the exchange."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(NetworkError):
    """Raised when the transport gives up waiting for the provider."""

    pass


class StorageError(StabimgError):
    """Raised when persisting an artifact or its metadata fails."""

    def __init__(self, message: str, path: str = "") -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            path: Path of the file or directory involved
        """
        self.path = path
        super().__init__(message)


class DirectoryUnavailableError(StorageError):
    """Raised when the target directory cannot be created or written to."""

    pass


class MetadataWriteError(StorageError):
    """Raised when the image was written but its sidecar could not be."""

    def __init__(self, message: str, path: str = "", image_path: str = "") -> None:
        self.image_path = image_path
        super().__init__(message, path=path)
