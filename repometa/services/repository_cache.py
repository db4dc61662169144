"""
Explicit cache of opened repositories.

Opening a repository reads every configuration file and validates the
format, so callers that query the same repository repeatedly within one
session can share a RepositoryCache. Nothing is cached globally: the
caller owns the cache and its lifetime, and discards it when the on-disk
metadata may have changed.
"""

import logging
import os
import threading
from typing import Dict, Optional

from ..domain import RepositoryLocation
from ..infra import GitEnvironment, GitRepository

logger = logging.getLogger(__name__)


def cache_key(git_directory: str) -> str:
    """Canonical form of a metadata directory path."""
    return os.path.normcase(os.path.realpath(git_directory))


class RepositoryCache:
    """
    Opened repositories keyed by canonical metadata-directory path.

    Example:
        cache = RepositoryCache()
        repo = cache.get_or_open(location)
        same = cache.get_or_open(location)  # no files are re-read
    """

    def __init__(self):
        self._repositories: Dict[str, GitRepository] = {}
        self._lock = threading.Lock()

    def get(self, git_directory: str) -> Optional[GitRepository]:
        with self._lock:
            return self._repositories.get(cache_key(git_directory))

    def get_or_open(
        self,
        location: RepositoryLocation,
        environment: Optional[GitEnvironment] = None
    ) -> GitRepository:
        """
        Return the cached repository for location, opening it on a miss.

        Errors from opening are not cached.
        """
        key = cache_key(location.git_directory)
        with self._lock:
            repository = self._repositories.get(key)
        if repository is not None:
            logger.debug(f"Repository cache hit: {location.git_directory}")
            return repository

        repository = GitRepository.open(location, environment)

        with self._lock:
            # another thread may have opened it meanwhile; keep the first
            return self._repositories.setdefault(key, repository)

    def clear(self) -> None:
        with self._lock:
            self._repositories.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._repositories)

    def __contains__(self, git_directory: str) -> bool:
        with self._lock:
            return cache_key(git_directory) in self._repositories
