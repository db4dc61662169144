"""
Submodule manifest (.gitmodules) index for repometa.

Reads the manifest from a working directory, merges repeated blocks for the
same submodule, validates each entry and resolves the metadata directory and
checked-out commit of every usable submodule. Invalid entries become
Diagnostic records; they never stop the remaining entries from being read.

See https://git-scm.com/docs/gitmodules
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..domain import Diagnostic, DiagnosticKind, Submodule
from ..errors import GitMetadataError
from .config_reader import ConfigReader, GitConfig
from .locator import resolve_git_directory
from .paths import full_path
from .references import ReferenceResolver
from .urls import is_valid_uri_reference

logger = logging.getLogger(__name__)

GIT_MODULES_FILE_NAME = '.gitmodules'


@dataclass(frozen=True)
class SubmoduleConfigEntry:
    """A manifest entry before validation."""
    name: str
    path: Optional[str] = None
    url: Optional[str] = None


def enumerate_submodule_config(config: GitConfig) -> Iterator[SubmoduleConfigEntry]:
    """
    Merge 'submodule' sections by name, in first-seen order.

    A later block's assignment of a key overrides an earlier one; keys a
    later block leaves unset keep their earlier values. Other sections are
    ignored.
    """
    merged: Dict[str, Dict[str, str]] = {}
    for key, values in config.variables.items():
        if key.section != 'submodule':
            continue
        fields = merged.setdefault(key.subsection, {})
        if key.name in ('path', 'url'):
            fields[key.name] = values[-1]

    for name, fields in merged.items():
        yield SubmoduleConfigEntry(name=name, path=fields.get('path'), url=fields.get('url'))


def read_submodule_config(working_directory: str, reader: ConfigReader) -> Optional[GitConfig]:
    """Load the manifest from the working directory root, or None if absent."""
    path = os.path.join(working_directory, GIT_MODULES_FILE_NAME)
    if not os.path.isfile(path):
        return None
    return reader.load_from(path)


def read_submodules(
    working_directory: str,
    submodule_config: Optional[GitConfig]
) -> Tuple[List[Submodule], List[Diagnostic]]:
    """
    Validate manifest entries and resolve each accepted submodule.

    Args:
        working_directory: Working directory of the containing repository
        submodule_config: Parsed manifest, or None if there is none

    Returns:
        (submodules, diagnostics) in manifest order
    """
    submodules: List[Submodule] = []
    diagnostics: List[Diagnostic] = []

    if submodule_config is None:
        return submodules, diagnostics

    def report(kind: DiagnosticKind, name: str, message: str) -> None:
        logger.warning(f"Submodule '{name}': {message}")
        diagnostics.append(Diagnostic(kind=kind, message=message, subject=name))

    for entry in enumerate_submodule_config(submodule_config):
        if entry.path is None or not entry.path.strip():
            report(
                DiagnosticKind.INVALID_SUBMODULE_PATH, entry.name,
                f"The path of submodule '{entry.name}' is missing or invalid: '{entry.path or ''}'"
            )
            continue

        if entry.url is None or not entry.url.strip() or not is_valid_uri_reference(entry.url.strip()):
            report(
                DiagnosticKind.INVALID_SUBMODULE_URL, entry.name,
                f"The url of submodule '{entry.name}' is missing or invalid: '{entry.url or ''}'"
            )
            continue

        if '\0' in entry.path:
            report(
                DiagnosticKind.INVALID_SUBMODULE_PATH, entry.name,
                f"The path of submodule '{entry.name}' is missing or invalid: '{entry.path}'"
            )
            continue

        submodule_directory = full_path(working_directory, entry.path)

        try:
            resolved = resolve_git_directory(submodule_directory)
        except GitMetadataError as e:
            report(DiagnosticKind.SUBMODULE_GIT_DIR_UNAVAILABLE, entry.name, str(e))
            continue

        if resolved is None:
            report(
                DiagnosticKind.SUBMODULE_GIT_DIR_UNAVAILABLE, entry.name,
                f"Unable to locate the git directory of submodule '{entry.name}' at '{submodule_directory}'"
            )
            continue

        git_directory, common_directory = resolved

        try:
            head_commit_sha = ReferenceResolver(git_directory, common_directory).resolve_head_reference()
        except GitMetadataError as e:
            report(DiagnosticKind.INVALID_SUBMODULE_HEAD, entry.name, str(e))
            continue

        submodules.append(Submodule(
            name=entry.name,
            path=entry.path,
            url=entry.url.strip(),
            working_directory=submodule_directory,
            git_directory=git_directory,
            common_directory=common_directory,
            head_commit_sha=head_commit_sha,
        ))

    return submodules, diagnostics
