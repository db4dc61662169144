"""
Infrastructure layer for repometa.

Readers for on-disk repository metadata:
- try_find_repository: upward repository search
- ConfigReader / GitConfig: configuration dialect and merged variables
- ReferenceResolver: HEAD and symbolic references, packed refs
- GitRepository: open sequence, format check, submodule index
- DirectoryTree: innermost repository of a path
- normalize_url: remote URL canonicalization

All readers are read-only and never invoke the git binary.
"""

from .config_reader import ConfigReader, GitConfig, GitEnvironment, VariableKey, parse_config_text
from .lazy import Lazy
from .locator import try_find_repository, try_get_repository_location
from .path_tree import DirectoryNode, DirectoryTree, build_directory_tree
from .paths import PathComparer
from .references import ReferenceResolver
from .repository import GitRepository, check_repository_format
from .submodules import enumerate_submodule_config
from .urls import normalize_url

__all__ = [
    'ConfigReader',
    'GitConfig',
    'GitEnvironment',
    'VariableKey',
    'parse_config_text',
    'Lazy',
    'try_find_repository',
    'try_get_repository_location',
    'DirectoryNode',
    'DirectoryTree',
    'build_directory_tree',
    'PathComparer',
    'ReferenceResolver',
    'GitRepository',
    'check_repository_format',
    'enumerate_submodule_config',
    'normalize_url',
]
