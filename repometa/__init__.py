"""
repometa - git repository metadata resolution without the git binary.

repometa reads the on-disk metadata of a repository to answer the
questions a build needs for source mapping: where is the repository,
which commit is checked out, what is its remote URL, which submodules
does it contain, and which repository does a given file belong to.

Quick Start:
    import repometa

    service = repometa.SourceControlService()

    # Locate and open (cached) the repository containing a path
    repo = service.open("src/lib/file.c")

    # Commit HEAD points to (None for an empty repository)
    print(service.get_revision_id(repo))

    # Normalized remote URL plus warnings
    url, warnings = service.get_repository_url(repo)

    # Source roots of the repository and its submodules
    roots, warnings = service.get_source_roots(repo)

    # Innermost repository containing each file
    for path, root in service.classify_files(repo, ["libs/x/util.c"]):
        print(path, root)

Domain Objects:
    RepositoryLocation - metadata, common and working directories
    Submodule - accepted submodule with its commit
    SourceRoot - source directory with revision and URL
    Diagnostic - non-fatal problem with one submodule or remote

Infrastructure:
    try_find_repository - upward repository search
    GitRepository - opened repository snapshot
    DirectoryTree - repository path classifier
    normalize_url - remote URL normalization
"""

__version__ = "0.1.0"

# Domain objects
from .domain import (
    RepositoryLocation,
    Submodule,
    SourceRoot,
    Diagnostic,
    DiagnosticKind,
)

# Errors
from .errors import (
    GitMetadataError,
    RepositoryNotFoundError,
    MalformedIndirectionFileError,
    InvalidConfigurationError,
    UnsupportedRepositoryFormatError,
    MalformedReferenceError,
    ReferenceCycleError,
    MissingWorkingDirectoryError,
)

# Metadata readers
from .infra import (
    GitEnvironment,
    GitConfig,
    GitRepository,
    DirectoryTree,
    PathComparer,
    build_directory_tree,
    normalize_url,
    try_find_repository,
)

# Services
from .services import (
    RepositoryCache,
    SourceControlService,
)

# Configuration
from .config import load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "RepositoryLocation",
    "Submodule",
    "SourceRoot",
    "Diagnostic",
    "DiagnosticKind",
    # Errors
    "GitMetadataError",
    "RepositoryNotFoundError",
    "MalformedIndirectionFileError",
    "InvalidConfigurationError",
    "UnsupportedRepositoryFormatError",
    "MalformedReferenceError",
    "ReferenceCycleError",
    "MissingWorkingDirectoryError",
    # Metadata readers
    "GitEnvironment",
    "GitConfig",
    "GitRepository",
    "DirectoryTree",
    "PathComparer",
    "build_directory_tree",
    "normalize_url",
    "try_find_repository",
    # Services
    "RepositoryCache",
    "SourceControlService",
    # Configuration
    "load_config",
]
