"""
Remote URL normalization for repometa.

git accepts many textual forms for a remote: absolute URLs, scp-like
'[user@]host:path' SSH shorthand, drive specifiers, and relative or
absolute local paths. normalize_url() turns each into an absolute URI
so that it can be used for source mapping.

See https://git-scm.com/book/en/v2/Git-on-the-Server-The-Protocols
"""

from typing import Optional
from urllib.parse import quote, urljoin, urlsplit

from .paths import ensure_trailing_separator, has_drive_prefix, to_posix

_SAFE_PATH_CHARACTERS = "/:@!$&'()*+,;=~%"


def _has_control_characters(value: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7f for c in value)


def is_valid_uri_reference(url: Optional[str]) -> bool:
    """True if url parses as an absolute or relative URI reference."""
    if not url or _has_control_characters(url):
        return False
    try:
        parts = urlsplit(url)
        # raises for a malformed port
        parts.port
    except ValueError:
        return False
    if parts.netloc and any(c.isspace() for c in parts.netloc):
        return False
    return True


def is_absolute_uri(url: str) -> bool:
    # single-letter schemes are drive letters, not URI schemes
    scheme = urlsplit(url).scheme
    return len(scheme) > 1


def file_uri(directory: str) -> str:
    """file:// URI of a directory, with a trailing slash."""
    path = ensure_trailing_separator(to_posix(directory), '/')
    if not path.startswith('/'):
        path = '/' + path
    return 'file://' + quote(path, safe='/:')


def try_parse_scp(url: str) -> Optional[str]:
    """
    Rewrite scp-like '[user@]host:path' syntax as an https URI.

    Returns None when url is not in scp-like form: it has no colon, the
    colon starts '://', or it is a drive specifier ('C:\\src').
    """
    colon = url.find(':')
    if colon == -1:
        return None

    if url[colon + 1:colon + 3] == '//':
        return None

    if has_drive_prefix(url):
        return None

    host = url[:colon].rsplit('@', 1)[-1]
    path = url[colon + 1:]
    if not host or '/' in host or '\\' in host or any(c.isspace() for c in host):
        return None

    candidate = f"https://{host}/{path.lstrip('/')}"
    return candidate if is_valid_uri_reference(candidate) else None


def normalize_url(url: str, root: str) -> Optional[str]:
    """
    Canonicalize a remote URL into an absolute URI.

    Args:
        url: Remote URL as written in configuration
        root: Working directory that relative local paths are resolved against

    Returns:
        Absolute URI, or None if url cannot be interpreted

    Examples:
        normalize_url("git@github.com:org/repo.git", "/src")
            -> "https://github.com/org/repo.git"
        normalize_url("../lib.git", "/src/app")
            -> "file:///src/lib.git"
    """
    if url is None:
        return None

    if len(url) == 2 and has_drive_prefix(url):
        return f"file:///{url}/"

    scp = try_parse_scp(url)
    if scp is not None:
        return scp

    if not is_valid_uri_reference(url):
        return None

    if is_absolute_uri(url):
        return url

    local = url.replace('\\', '/')
    if has_drive_prefix(local):
        return 'file:///' + quote(local, safe=_SAFE_PATH_CHARACTERS)

    return urljoin(file_uri(root), quote(local, safe=_SAFE_PATH_CHARACTERS))
