"""
Repository open sequence for repometa.

GitRepository is an immutable snapshot of one repository's metadata:
its directories, merged configuration, HEAD commit and submodule index.
Opening validates the repository format; HEAD and submodules are read
lazily, at most once, on first use.

Example:
    location = try_find_repository(os.getcwd())
    repo = GitRepository.open(location)
    print(repo.get_head_commit_sha())
"""

import logging
import os
from typing import List, Optional, Tuple

from ..domain import Diagnostic, RepositoryLocation, Submodule
from ..errors import MissingWorkingDirectoryError, RepositoryNotFoundError, UnsupportedRepositoryFormatError
from .config_reader import ConfigReader, GitConfig, GitEnvironment, parse_int
from .lazy import Lazy
from .locator import try_find_repository
from .paths import full_path
from .references import ReferenceResolver
from .submodules import read_submodule_config, read_submodules

logger = logging.getLogger(__name__)

SUPPORTED_REPOSITORY_FORMAT_VERSION = 1

KNOWN_EXTENSIONS = frozenset(name.lower() for name in (
    'noop',
    'preciousObjects',
    'partialclone',
    'worktreeConfig',
))


def check_repository_format(config: GitConfig) -> None:
    """
    Verify that the repository format version and extensions are understood.

    See https://git-scm.com/docs/repository-version

    Raises:
        UnsupportedRepositoryFormatError: version >= 2, or version 1 with an
            unknown extension
    """
    version = parse_int(config.get_value('core', 'repositoryformatversion'))
    if version is None:
        version = 0

    if version > SUPPORTED_REPOSITORY_FORMAT_VERSION:
        raise UnsupportedRepositoryFormatError(f"Unsupported repository version {version}")

    if version == 1:
        for key in config.keys_in_section('extensions'):
            if key.name.lower() not in KNOWN_EXTENSIONS:
                raise UnsupportedRepositoryFormatError(f"Unsupported repository extension '{key.name}'")


class GitRepository:
    """
    An opened repository.

    Use GitRepository.open() or GitRepository.open_path() rather than the
    constructor, which performs no validation.
    """

    def __init__(
        self,
        environment: GitEnvironment,
        config: GitConfig,
        git_directory: str,
        common_directory: str,
        working_directory: Optional[str],
        head_commit_sha: Optional[str] = None
    ):
        self.environment = environment
        self.config = config
        self.git_directory = git_directory
        self.common_directory = common_directory
        self.working_directory = working_directory

        self._resolver = ReferenceResolver(git_directory, common_directory)
        if head_commit_sha is None:
            self._head_commit_sha: Lazy[Optional[str]] = Lazy(self._resolver.resolve_head_reference)
        else:
            self._head_commit_sha = Lazy.of(head_commit_sha)

        self._submodule_config: Lazy[Optional[GitConfig]] = Lazy(self._read_submodule_config)
        self._submodules: Lazy[Tuple[List[Submodule], List[Diagnostic]]] = Lazy(self._read_submodules)

    @classmethod
    def open(cls, location: RepositoryLocation, environment: Optional[GitEnvironment] = None) -> 'GitRepository':
        """
        Open a repository at a known location.

        Loads configuration, checks the repository format and applies the
        core.worktree override.

        Raises:
            InvalidConfigurationError: a configuration file is malformed
            UnsupportedRepositoryFormatError: the format is not understood
        """
        environment = environment or GitEnvironment.from_process_environment()

        reader = ConfigReader(location.git_directory, location.common_directory, environment)
        config = reader.load()

        check_repository_format(config)

        working_directory = location.working_directory
        worktree = config.get_value('core', 'worktree')
        if worktree:
            working_directory = full_path(location.git_directory, worktree)
            logger.debug(f"core.worktree overrides working directory: {working_directory}")

        return cls(environment, config, location.git_directory, location.common_directory, working_directory)

    @classmethod
    def open_path(cls, path: str, environment: Optional[GitEnvironment] = None) -> 'GitRepository':
        """
        Find and open the repository containing path.

        Raises:
            RepositoryNotFoundError: no repository contains path
        """
        location = try_find_repository(path)
        if location is None:
            raise RepositoryNotFoundError(path)
        return cls.open(location, environment)

    @property
    def location(self) -> RepositoryLocation:
        return RepositoryLocation(self.git_directory, self.common_directory, self.working_directory)

    @property
    def is_bare(self) -> bool:
        return self.working_directory is None

    def get_head_commit_sha(self) -> Optional[str]:
        """
        Commit HEAD points to, or None for an unborn branch.

        Raises:
            MalformedReferenceError: HEAD or a reference it names is malformed
        """
        return self._head_commit_sha.value

    def get_submodules(self) -> List[Submodule]:
        """Accepted submodules in manifest order."""
        return list(self._submodules.value[0])

    def get_submodule_diagnostics(self) -> List[Diagnostic]:
        """Problems with manifest entries excluded from get_submodules()."""
        return list(self._submodules.value[1])

    def read_submodule_config(self) -> Optional[GitConfig]:
        """Parsed .gitmodules, or None if the working directory has none."""
        return self._submodule_config.value

    def remote_names(self) -> List[str]:
        """Remotes that declare a url, in configuration order."""
        return [
            name for name in self.config.subsections('remote')
            if self.config.get_value('remote', 'url', subsection=name) is not None
        ]

    def get_remote_url(self, remote_name: str) -> Optional[str]:
        return self.config.get_value('remote', 'url', subsection=remote_name)

    def _require_working_directory(self) -> str:
        if self.working_directory is None:
            raise MissingWorkingDirectoryError(self.git_directory)
        return self.working_directory

    def _read_submodule_config(self) -> Optional[GitConfig]:
        working_directory = self._require_working_directory()
        reader = ConfigReader(self.git_directory, self.common_directory, self.environment)
        return read_submodule_config(working_directory, reader)

    def _read_submodules(self) -> Tuple[List[Submodule], List[Diagnostic]]:
        working_directory = self._require_working_directory()
        submodules, diagnostics = read_submodules(working_directory, self.read_submodule_config())
        logger.debug(
            f"Read {len(submodules)} submodules ({len(diagnostics)} rejected) from {working_directory}"
        )
        return submodules, diagnostics

    def __repr__(self) -> str:
        return f"GitRepository(git_directory={self.git_directory!r}, working_directory={self.working_directory!r})"
