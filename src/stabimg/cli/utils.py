"""
Utility values for the CLI.

Exit code constants and the mapping from handler error types to exit codes.
"""

# Exit codes
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2

# Failure results carry errorType; input and setup problems exit with 2
VALIDATION_ERROR_TYPES = frozenset(
    {
        "ValidationError",
        "InvalidSeedError",
        "ConfigurationError",
        "MissingCredentialError",
        "MissingConfigurationError",
        "DirectoryUnavailableError",
    }
)


def exit_code_for_error_type(error_type: str) -> int:
    """Return the exit code for a failure result's errorType."""
    if error_type in VALIDATION_ERROR_TYPES:
        return EXIT_VALIDATION_OR_CONFIG
    return EXIT_API_OR_NETWORK


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "VALIDATION_ERROR_TYPES",
    "exit_code_for_error_type",
]
