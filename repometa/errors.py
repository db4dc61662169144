"""
Exception hierarchy for repometa.

Structural failures (location, configuration, format, references) raise
one of these and abort resolution of that repository. Per-entry problems
(a single submodule or remote) are reported as Diagnostic records instead.
"""


class GitMetadataError(Exception):
    """Base class for errors reading repository metadata."""


class RepositoryNotFoundError(GitMetadataError):
    """No repository contains the requested path."""

    def __init__(self, path: str):
        super().__init__(f"Unable to locate repository containing '{path}'")
        self.path = path


class MalformedIndirectionFileError(GitMetadataError):
    """A '.git' file does not have the 'gitdir: <path>' form."""

    def __init__(self, path: str, detail: str = "expected 'gitdir: <path>'"):
        super().__init__(f"Format of '{path}' is invalid: {detail}")
        self.path = path


class InvalidConfigurationError(GitMetadataError):
    """A configuration file violates the config grammar."""

    def __init__(self, message: str, path: str = None, line: int = None):
        location = ""
        if path:
            location = f" in '{path}'" + (f" at line {line}" if line else "")
        super().__init__(f"{message}{location}")
        self.path = path
        self.line = line


class UnsupportedRepositoryFormatError(GitMetadataError):
    """Repository format version or extension is not understood."""


class MalformedReferenceError(GitMetadataError):
    """Reference content is neither an object id nor a valid 'ref:' link."""


class ReferenceCycleError(MalformedReferenceError):
    """Symbolic references point at each other."""

    def __init__(self, reference: str):
        super().__init__(f"Recursion detected while resolving reference '{reference}'")
        self.reference = reference


class MissingWorkingDirectoryError(GitMetadataError):
    """Operation requires a working directory but the repository is bare."""

    def __init__(self, git_directory: str):
        super().__init__(f"Repository '{git_directory}' does not have a working directory")
        self.git_directory = git_directory
