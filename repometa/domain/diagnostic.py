"""
Diagnostic domain object for repometa.

A Diagnostic records a non-fatal problem with a single entry (one
submodule, one remote). Processing continues past it; the record is
returned as data so that one bad entry never hides the rest.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


class DiagnosticKind(Enum):
    """What went wrong with the entry."""
    INVALID_SUBMODULE_PATH = "InvalidSubmodulePath"
    INVALID_SUBMODULE_URL = "InvalidSubmoduleUrl"
    SUBMODULE_GIT_DIR_UNAVAILABLE = "SubmoduleGitDirUnavailable"
    INVALID_SUBMODULE_HEAD = "InvalidSubmoduleHead"
    SUBMODULE_WITHOUT_COMMIT = "SubmoduleWithoutCommit"
    INVALID_REMOTE_URL = "InvalidRemoteUrl"
    REPOSITORY_HAS_NO_REMOTE = "RepositoryHasNoRemote"
    REPOSITORY_HAS_NO_COMMIT = "RepositoryHasNoCommit"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal problem tied to one named entry.

    Attributes:
        kind: Category of the problem
        message: Human-readable description
        subject: Name of the submodule or remote concerned, if any
    """

    kind: DiagnosticKind
    message: str
    subject: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'kind': self.kind.value,
            'message': self.message,
            'subject': self.subject,
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
