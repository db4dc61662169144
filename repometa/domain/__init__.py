"""
Domain layer for repometa.

Contains pure value objects with no I/O:
- RepositoryLocation: metadata, common and working directories
- Submodule: a validated nested repository with its commit
- SourceRoot: a directory annotated with source control facts
- Diagnostic: a non-fatal problem with a single entry

All objects are immutable and provide to_dict() for JSONL output.
"""

from .repository import RepositoryLocation, Submodule, SourceRoot
from .diagnostic import Diagnostic, DiagnosticKind

__all__ = [
    'RepositoryLocation',
    'Submodule',
    'SourceRoot',
    'Diagnostic',
    'DiagnosticKind',
]
