"""
Standard exit codes for repometa commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

from .errors import (
    GitMetadataError,
    InvalidConfigurationError,
    MalformedIndirectionFileError,
    MalformedReferenceError,
    MissingWorkingDirectoryError,
    RepositoryNotFoundError,
    UnsupportedRepositoryFormatError,
)

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
REPOSITORY_NOT_FOUND = 64    # No repository contains the path
CONFIG_ERROR = 66            # Configuration file error (tool or repository)
PERMISSION_ERROR = 67        # Insufficient permissions
DATA_ERROR = 70              # Malformed metadata
UNSUPPORTED_FORMAT = 72      # Repository format version or extension not understood
BARE_REPOSITORY = 73         # Operation needs a working directory
INTERRUPTED = 130            # Terminated by Ctrl+C (SIGINT)

# Most specific class first
METADATA_ERROR_EXIT_CODES = [
    (RepositoryNotFoundError, REPOSITORY_NOT_FOUND),
    (InvalidConfigurationError, CONFIG_ERROR),
    (UnsupportedRepositoryFormatError, UNSUPPORTED_FORMAT),
    (MissingWorkingDirectoryError, BARE_REPOSITORY),
    (MalformedIndirectionFileError, DATA_ERROR),
    (MalformedReferenceError, DATA_ERROR),
    (GitMetadataError, DATA_ERROR),
]

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    for error_type, code in METADATA_ERROR_EXIT_CODES:
        if isinstance(exc, error_type):
            return code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoRepositoryFoundError(CommandError):
    """Raised when no repository contains the given path."""
    def __init__(self, path: Optional[str] = None):
        message = f"No repository found containing '{path}'" if path else "No repository found"
        super().__init__(message, REPOSITORY_NOT_FOUND)
        self.path = path
