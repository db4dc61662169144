"""
Path helpers shared by the metadata readers.

Paths handed out by repometa are normalized absolute paths with platform
separators. Comparison rules are injected through PathComparer instead of
being decided at each call site.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional

_DRIVE_PATTERN = re.compile(r'^[A-Za-z]:')


def trim_end(value: str) -> str:
    """Strip trailing whitespace and ASCII control characters."""
    end = len(value)
    while end > 0 and ord(value[end - 1]) <= 0x20:
        end -= 1
    return value[:end]


def trim(value: str) -> str:
    """Strip whitespace and ASCII control characters from both ends."""
    value = trim_end(value)
    start = 0
    while start < len(value) and ord(value[start]) <= 0x20:
        start += 1
    return value[start:]


def full_path(base: str, relative: str) -> str:
    """Join relative onto base (absolute relative wins) and normalize."""
    return os.path.normpath(os.path.join(base, relative))


def to_posix(path: str) -> str:
    return path.replace('\\', '/') if os.sep == '\\' else path


def ensure_trailing_separator(path: str, separator: Optional[str] = None) -> str:
    separator = separator or os.sep
    if path.endswith('/') or path.endswith(separator):
        return path
    return path + separator


def has_drive_prefix(value: str) -> bool:
    """True for 'X:' style drive specifiers, with or without a path."""
    return bool(_DRIVE_PATTERN.match(value))


def split_path(path: str) -> List[str]:
    """
    Split a full path into its root marker and named segments.

    '/repo/src/a.c' -> ['/', 'repo', 'src', 'a.c']
    'C:\\repo\\a.c' -> ['C:\\', 'repo', 'a.c']
    """
    drive, rest = os.path.splitdrive(path)
    separators = os.sep + (os.altsep or '')
    segments = []
    root = drive
    stripped = rest.lstrip(separators)
    if len(stripped) != len(rest):
        root += os.sep
    if root:
        segments.append(root)
    segments.extend(s for s in re.split('[' + re.escape(separators) + ']', stripped) if s)
    return segments


@dataclass(frozen=True)
class PathComparer:
    """
    Ordering and equality rule for path segments.

    Case-sensitive on case-sensitive filesystems, case-insensitive
    otherwise. Use PathComparer.for_platform() for the running host.
    """

    case_sensitive: bool = True

    @classmethod
    def for_platform(cls) -> 'PathComparer':
        return cls(case_sensitive=os.path.normcase('A') == 'A')

    def key(self, segment: str) -> str:
        return segment if self.case_sensitive else segment.casefold()
