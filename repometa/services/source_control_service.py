"""
Source control service for repometa.

High-level operations a build orchestrator needs from a repository:
location, remote URL, revision id, source roots, submodules and file
classification. Per-entry problems come back as Diagnostic records next
to the results; structural problems raise GitMetadataError.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..domain import Diagnostic, DiagnosticKind, RepositoryLocation, SourceRoot, Submodule
from ..errors import MissingWorkingDirectoryError, RepositoryNotFoundError
from ..infra import DirectoryTree, GitEnvironment, GitRepository, PathComparer, build_directory_tree
from ..infra import normalize_url, try_find_repository
from ..infra.paths import ensure_trailing_separator
from .repository_cache import RepositoryCache

logger = logging.getLogger(__name__)

SOURCE_CONTROL_NAME = 'git'
DEFAULT_REMOTE_NAME = 'origin'


class SourceControlService:
    """
    Service for resolving source control facts of local repositories.

    Example:
        service = SourceControlService()
        repo = service.open('/src/app/lib/file.c')
        roots, warnings = service.get_source_roots(repo)
        for root in roots:
            print(root.path, root.revision_id)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        cache: Optional[RepositoryCache] = None,
        environment: Optional[GitEnvironment] = None,
        comparer: Optional[PathComparer] = None
    ):
        """
        Initialize SourceControlService.

        Args:
            config: Tool configuration dict (see repometa.config)
            cache: Repository cache to share across calls (creates one if None)
            environment: Configuration file locations (derived from config if None)
            comparer: Path comparison rule (derived from config if None)
        """
        self.config = config or {}
        self.cache = cache if cache is not None else RepositoryCache()

        git_config = self.config.get('git', {})
        self.environment = environment or GitEnvironment.create(git_config.get('configuration_scope') or None)
        self.default_remote_name = git_config.get('remote_name') or None

        if comparer is None:
            case_sensitive = self.config.get('paths', {}).get('case_sensitive')
            comparer = PathComparer.for_platform() if case_sensitive is None else PathComparer(bool(case_sensitive))
        self.comparer = comparer

    def locate(self, path: str) -> Optional[RepositoryLocation]:
        """Location of the repository containing path, or None."""
        return try_find_repository(path)

    def open(self, path: str) -> GitRepository:
        """
        Find and open the repository containing path, using the cache.

        Raises:
            RepositoryNotFoundError: no repository contains path
        """
        location = self.locate(path)
        if location is None:
            raise RepositoryNotFoundError(path)
        return self.cache.get_or_open(location, self.environment)

    def get_repository_url(
        self,
        repository: GitRepository,
        remote_name: Optional[str] = None
    ) -> Tuple[Optional[str], List[Diagnostic]]:
        """
        Normalized URL of a remote.

        Uses remote_name if given, else the configured default, else
        'origin', else the first remote declared.

        Returns:
            (url or None, warnings)
        """
        remote_name = remote_name or self.default_remote_name
        remotes = repository.remote_names()

        if remote_name:
            remote = remote_name if remote_name in remotes else None
        elif DEFAULT_REMOTE_NAME in remotes:
            remote = DEFAULT_REMOTE_NAME
        else:
            remote = remotes[0] if remotes else None

        if remote is None:
            message = "Repository has no remote" if not remote_name else f"Repository has no remote '{remote_name}'"
            logger.warning(message)
            return None, [Diagnostic(DiagnosticKind.REPOSITORY_HAS_NO_REMOTE, message, remote_name)]

        raw_url = repository.get_remote_url(remote)
        root = repository.working_directory or repository.git_directory
        url = normalize_url(raw_url, root)
        if url is None:
            message = f"The URL of repository remote '{remote}' is invalid: '{raw_url}'"
            logger.warning(message)
            return None, [Diagnostic(DiagnosticKind.INVALID_REMOTE_URL, message, remote)]

        return url, []

    def get_revision_id(self, repository: GitRepository) -> Optional[str]:
        """Commit id HEAD points to, or None for a repository without commits."""
        return repository.get_head_commit_sha()

    def get_submodules(self, repository: GitRepository) -> List[Submodule]:
        return repository.get_submodules()

    def get_submodule_diagnostics(self, repository: GitRepository) -> List[Diagnostic]:
        return repository.get_submodule_diagnostics()

    def get_source_roots(self, repository: GitRepository) -> Tuple[List[SourceRoot], List[Diagnostic]]:
        """
        Source roots of a repository and its submodules.

        The top-level root is emitted only if HEAD resolves to a commit.
        A submodule root is emitted for every accepted submodule with a
        commit and a URL that normalizes.

        Returns:
            (roots, warnings)

        Raises:
            MissingWorkingDirectoryError: repository is bare
        """
        if repository.working_directory is None:
            raise MissingWorkingDirectoryError(repository.git_directory)

        roots: List[SourceRoot] = []
        warnings: List[Diagnostic] = []
        repository_root = ensure_trailing_separator(repository.working_directory)

        revision_id = self.get_revision_id(repository)
        if revision_id is not None:
            # missing or invalid remotes are reported by get_repository_url
            repository_url, _ = self.get_repository_url(repository)
            roots.append(SourceRoot(
                path=repository_root,
                repository_url=repository_url,
                revision_id=revision_id,
                source_control=SOURCE_CONTROL_NAME,
            ))
        else:
            message = "Repository doesn't have any commit, the source code won't be available via source link"
            logger.warning(message)
            warnings.append(Diagnostic(DiagnosticKind.REPOSITORY_HAS_NO_COMMIT, message))

        for submodule in repository.get_submodules():
            if submodule.head_commit_sha is None:
                message = (
                    f"Submodule '{submodule.name}' doesn't have any commit, "
                    f"the source code won't be available via source link"
                )
                logger.warning(message)
                warnings.append(Diagnostic(DiagnosticKind.SUBMODULE_WITHOUT_COMMIT, message, submodule.name))
                continue

            submodule_url = normalize_url(submodule.url, repository_root)
            if submodule_url is None:
                message = f"The URL of submodule '{submodule.name}' is invalid: '{submodule.url}'"
                logger.warning(message)
                warnings.append(Diagnostic(DiagnosticKind.INVALID_SUBMODULE_URL, message, submodule.name))
                continue

            roots.append(SourceRoot(
                path=ensure_trailing_separator(submodule.working_directory),
                repository_url=submodule_url,
                revision_id=submodule.head_commit_sha,
                source_control=SOURCE_CONTROL_NAME,
                containing_root=repository_root,
                nested_root=ensure_trailing_separator(submodule.path, '/'),
            ))

        return roots, warnings

    def get_directory_tree(self, repository: GitRepository, recursive: bool = False) -> DirectoryTree:
        return build_directory_tree(repository, self.comparer, recursive=recursive)

    def classify_files(
        self,
        repository: GitRepository,
        paths: Iterable[str],
        recursive: bool = False
    ) -> List[Tuple[str, Optional[str]]]:
        """
        Map each file to the working directory of its innermost repository.

        Args:
            repository: Top-level repository
            paths: File paths, absolute or relative to the current directory
            recursive: Also descend into submodules of submodules

        Returns:
            (full path, repository working directory or None) per path
        """
        tree = self.get_directory_tree(repository, recursive=recursive)
        results = []
        for path in paths:
            full = os.path.abspath(path)
            node = tree.get_containing_repository(full)
            results.append((full, node.path if node is not None else None))
        return results
