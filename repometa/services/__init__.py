"""
Service layer for repometa.

Orchestrates the metadata readers for callers:
- RepositoryCache: caller-owned cache of opened repositories
- SourceControlService: locate, open, URL, revision, source roots,
  submodules, file classification

Services are the primary API for commands to use.
"""

from .repository_cache import RepositoryCache
from .source_control_service import SourceControlService

__all__ = [
    'RepositoryCache',
    'SourceControlService',
]
