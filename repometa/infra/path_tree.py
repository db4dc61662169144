"""
Repository path classifier for repometa.

A DirectoryTree is a trie of path segments built once per top-level
repository. Nodes for repository working directories carry a repository
cell; submodule repositories are opened lazily on first query.
get_containing_repository() finds the innermost repository enclosing a
file.

Example:
    tree = build_directory_tree(repo)
    node = tree.get_containing_repository('/src/app/libs/x/file.c')
    if node:
        print(node.path, node.repository.get_head_commit_sha())
"""

import bisect
import functools
import logging
import os
from typing import Any, Callable, List, Optional, Set

from ..errors import GitMetadataError, MissingWorkingDirectoryError
from .lazy import Lazy
from .paths import PathComparer, split_path
from .repository import GitRepository

logger = logging.getLogger(__name__)


class DirectoryNode:
    """
    One path segment in a DirectoryTree.

    Children are kept ordered by comparer key for binary search. A node
    that is a repository root holds a single-assignment repository cell.
    """

    def __init__(self, name: str):
        self.name = name
        self.path: Optional[str] = None
        self.children: List['DirectoryNode'] = []
        self._keys: List[str] = []
        self._repository: Optional[Lazy[Any]] = None

    @property
    def has_repository(self) -> bool:
        return self._repository is not None

    @property
    def is_repository_open(self) -> bool:
        return self._repository is not None and self._repository.is_assigned

    @property
    def repository(self) -> Optional[GitRepository]:
        """
        The repository rooted at this node, opened on first access.

        Raises:
            GitMetadataError: opening the repository failed (every access
                raises the same error)
        """
        if self._repository is None:
            return None
        return self._repository.value

    def find_child(self, name: str, comparer: PathComparer) -> Optional['DirectoryNode']:
        key = comparer.key(name)
        index = bisect.bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return self.children[index]
        return None

    def get_or_add_child(self, name: str, comparer: PathComparer) -> 'DirectoryNode':
        key = comparer.key(name)
        index = bisect.bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return self.children[index]
        child = DirectoryNode(name)
        self._keys.insert(index, key)
        self.children.insert(index, child)
        return child

    def __repr__(self) -> str:
        return f"DirectoryNode({self.name!r}, children={len(self.children)}, repository={self.path!r})"


class DirectoryTree:
    """Trie of repository working directories."""

    def __init__(self, comparer: Optional[PathComparer] = None):
        self.comparer = comparer or PathComparer.for_platform()
        self.root = DirectoryNode('')

    def add(
        self,
        path: str,
        repository: Any = None,
        open_repository: Optional[Callable[[], Any]] = None
    ) -> DirectoryNode:
        """
        Insert a repository working directory.

        Args:
            path: Full path of the working directory
            repository: An already opened repository
            open_repository: Factory used instead of repository to open it
                on first query

        Returns:
            The node for path
        """
        path = os.path.normpath(path)
        node = self.root
        for segment in split_path(path):
            node = node.get_or_add_child(segment, self.comparer)

        if repository is not None:
            node._repository = Lazy.of(repository)
        elif open_repository is not None:
            node._repository = Lazy(open_repository)
        node.path = path
        return node

    def get_containing_repository(self, path: str) -> Optional[DirectoryNode]:
        """
        Node of the innermost repository containing path, or None.

        The last segment of path is not matched: a path is never its own
        containing repository.
        """
        segments = split_path(os.path.normpath(path))
        containing = None
        node = self.root
        for segment in segments[:-1]:
            node = node.find_child(segment, self.comparer)
            if node is None:
                break
            if node.has_repository:
                containing = node
        return containing


def build_directory_tree(
    repository: GitRepository,
    comparer: Optional[PathComparer] = None,
    recursive: bool = False
) -> DirectoryTree:
    """
    Build the classifier for a top-level repository and its submodules.

    Args:
        repository: Opened top-level repository with a working directory
        comparer: Path comparison rule, defaults to the platform's
        recursive: Also open each submodule and add its own submodules

    Raises:
        MissingWorkingDirectoryError: repository is bare
    """
    if repository.working_directory is None:
        raise MissingWorkingDirectoryError(repository.git_directory)

    tree = DirectoryTree(comparer)
    tree.add(repository.working_directory, repository=repository)
    _add_submodules(tree, repository, recursive, {tree.comparer.key(repository.working_directory)})
    return tree


def _add_submodules(tree: DirectoryTree, repository: GitRepository, recursive: bool, visited: Set[str]) -> None:
    for submodule in repository.get_submodules():
        key = tree.comparer.key(submodule.working_directory)
        if key in visited:
            logger.warning(f"Submodule '{submodule.name}' points back at {submodule.working_directory}, skipping")
            continue
        visited.add(key)

        node = tree.add(
            submodule.working_directory,
            open_repository=functools.partial(GitRepository.open, submodule.location, repository.environment)
        )

        if not recursive:
            continue

        try:
            _add_submodules(tree, node.repository, recursive, visited)
        except GitMetadataError as e:
            logger.warning(f"Unable to read nested submodules of '{submodule.name}': {e}")
