"""
Reference resolution for repometa.

Resolves HEAD and symbolic references ('ref: refs/heads/main') to commit
ids by reading loose reference files, falling back to the packed-refs
file. See https://git-scm.com/docs/gitrepository-layout
"""

import logging
import os
import re
import threading
from typing import Dict, Iterable, Optional, Set

from ..errors import MalformedReferenceError, ReferenceCycleError
from .paths import trim_end

logger = logging.getLogger(__name__)

HEAD_FILE_NAME = 'HEAD'
PACKED_REFS_FILE_NAME = 'packed-refs'
REFS_PREFIX = 'refs/'
SYMREF_PREFIX = 'ref: '

_OBJECT_ID = re.compile(r'[0-9a-fA-F]{40}')


def is_object_id(value: str) -> bool:
    """True for exactly 40 hexadecimal characters."""
    return _OBJECT_ID.fullmatch(value) is not None


def read_reference_file(path: str) -> str:
    """Read a reference file with trailing whitespace removed."""
    with open(path, 'r', encoding='utf-8', errors='surrogateescape') as f:
        return trim_end(f.read())


def parse_packed_references(lines: Iterable[str], path: str = PACKED_REFS_FILE_NAME) -> Dict[str, str]:
    """
    Parse packed-refs content into a {reference: object id} map.

    Format (https://git-scm.com/docs/git-pack-refs):
        # pack-refs with: peeled fully-peeled sorted
        <object id> refs/heads/main
        ^<object id>            (peeled tag target of the previous line)
    """
    iterator = iter(lines)
    header = next(iterator, None)
    if header is None or not header.startswith('# pack-refs with:'):
        raise MalformedReferenceError(f"Expected header not found at the beginning of file '{path}'")

    references: Dict[str, str] = {}
    previous_object_id = None

    for line in iterator:
        line = line.rstrip('\r\n')

        def invalid() -> MalformedReferenceError:
            return MalformedReferenceError(f"Invalid packed references specification in '{path}': '{line}'")

        if line.startswith('^'):
            if previous_object_id is None or not is_object_id(line[1:]):
                raise invalid()
            continue

        parts = re.split(r'[ \t]', line, maxsplit=2)
        if len(parts) < 2 or not is_object_id(parts[0]) or not parts[1]:
            raise invalid()

        object_id, reference = parts[0], parts[1]
        previous_object_id = object_id

        # lines with trailing fields are ignored
        if len(parts) > 2:
            continue

        if not reference.startswith(REFS_PREFIX):
            continue

        # first occurrence wins
        references.setdefault(reference, object_id)

    return references


class ReferenceResolver:
    """
    Resolves references for one repository (or work-tree).

    HEAD lives in the per-work-tree metadata directory; the references it
    points to live in the common directory.

    Example:
        resolver = ReferenceResolver(location.git_directory, location.common_directory)
        sha = resolver.resolve_head_reference()
    """

    def __init__(self, git_directory: str, common_directory: str):
        self.git_directory = git_directory
        self.common_directory = common_directory
        self._packed_references: Optional[Dict[str, str]] = None
        self._packed_lock = threading.Lock()

    def resolve_head_reference(self) -> Optional[str]:
        """Return the commit HEAD points to, or None for an unborn branch."""
        head_path = os.path.join(self.git_directory, HEAD_FILE_NAME)
        try:
            content = read_reference_file(head_path)
        except OSError as e:
            raise MalformedReferenceError(f"Unable to read '{head_path}': {e}") from e
        return self.resolve_reference(content)

    def resolve_reference(self, reference: str) -> Optional[str]:
        """
        Resolve a reference value to a commit id.

        Args:
            reference: A 40-hex object id or 'ref: refs/...'

        Returns:
            The commit id, or None if the referenced branch does not exist

        Raises:
            MalformedReferenceError: the value has any other shape
            ReferenceCycleError: symbolic references form a cycle
        """
        visited: Set[str] = set()
        value = trim_end(reference)

        while True:
            if is_object_id(value):
                return value

            if not value.startswith(SYMREF_PREFIX + REFS_PREFIX):
                raise MalformedReferenceError(f"Invalid reference: '{value}'")

            name = value[len(SYMREF_PREFIX):]
            if name in visited:
                raise ReferenceCycleError(value)
            visited.add(name)

            path = os.path.join(self.common_directory, *name.split('/'))
            if not os.path.isfile(path):
                return self._resolve_packed_reference(name)

            try:
                value = read_reference_file(path)
            except (FileNotFoundError, NotADirectoryError):
                return self._resolve_packed_reference(name)
            except OSError as e:
                raise MalformedReferenceError(f"Unable to read reference '{name}': {e}") from e

    def _resolve_packed_reference(self, name: str) -> Optional[str]:
        return self._get_packed_references().get(name)

    def _get_packed_references(self) -> Dict[str, str]:
        with self._packed_lock:
            if self._packed_references is None:
                self._packed_references = self._read_packed_references()
            return self._packed_references

    def _read_packed_references(self) -> Dict[str, str]:
        path = os.path.join(self.common_directory, PACKED_REFS_FILE_NAME)
        try:
            with open(path, 'r', encoding='utf-8', errors='surrogateescape') as f:
                references = parse_packed_references(f, path)
        except (FileNotFoundError, NotADirectoryError):
            return {}
        logger.debug(f"Loaded {len(references)} packed references from {path}")
        return references
