"""
Repository domain objects for repometa.

These are immutable snapshots produced by the metadata readers:
- RepositoryLocation: where a repository's metadata and files live
- Submodule: an accepted nested repository entry with its commit
- SourceRoot: a directory annotated with source control facts for
  build metadata
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class RepositoryLocation:
    """
    Directory triple of a repository.

    All paths are normalized absolute paths with platform separators.

    Attributes:
        git_directory: Metadata directory (HEAD, per work-tree state)
        common_directory: Shared metadata directory (refs, config);
            equals git_directory unless a 'commondir' file redirects it
        working_directory: Checked-out tree, or None for bare repositories
            and lookups that started inside a metadata directory
    """

    git_directory: str
    common_directory: str
    working_directory: Optional[str] = None

    @property
    def is_bare(self) -> bool:
        return self.working_directory is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'git_directory': self.git_directory,
            'common_directory': self.common_directory,
            'working_directory': self.working_directory,
        }


@dataclass(frozen=True)
class Submodule:
    """
    A nested repository declared in the manifest that passed validation.

    Attributes:
        name: Submodule name (the manifest subsection)
        path: Path as written in the manifest, relative to the containing
            working directory with posix separators
        url: URL as written in the manifest (absolute, or relative to the
            containing repository's remote)
        working_directory: Normalized full path of the submodule checkout
        git_directory: Resolved metadata directory of the submodule
        common_directory: Resolved shared metadata directory of the submodule
        head_commit_sha: Commit checked out in the submodule, or None if
            its HEAD is unborn
    """

    name: str
    path: str
    url: str
    working_directory: str
    git_directory: str
    common_directory: str
    head_commit_sha: Optional[str] = None

    @property
    def location(self) -> RepositoryLocation:
        return RepositoryLocation(self.git_directory, self.common_directory, self.working_directory)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'path': self.path,
            'url': self.url,
            'working_directory': self.working_directory,
            'head_commit_sha': self.head_commit_sha,
        }


@dataclass(frozen=True)
class SourceRoot:
    """
    A source directory annotated for later source mapping.

    Top-level roots carry no containing_root; submodule roots name the
    top-level root they live in and their path relative to it.
    """

    path: str
    repository_url: Optional[str]
    revision_id: str
    source_control: str = "git"
    containing_root: Optional[str] = None
    nested_root: Optional[str] = None

    @property
    def is_nested(self) -> bool:
        return self.containing_root is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'path': self.path,
            'source_control': self.source_control,
            'repository_url': self.repository_url,
            'revision_id': self.revision_id,
            'containing_root': self.containing_root,
            'nested_root': self.nested_root,
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return f"{self.path} @ {self.revision_id[:7]}"
