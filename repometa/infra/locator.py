"""
Repository discovery for repometa.

Walks up from a starting path to find the metadata directory, the common
directory and the working directory of the enclosing repository. Handles
plain checkouts, linked work-trees and submodules ('.git' files holding
'gitdir: <path>'), and bare or metadata-only layouts.
"""

import logging
import os
from typing import Optional, Tuple

from ..domain import RepositoryLocation
from ..errors import MalformedIndirectionFileError
from .paths import full_path, trim, trim_end
from .references import HEAD_FILE_NAME

logger = logging.getLogger(__name__)

GIT_DIR_NAME = '.git'
GIT_DIR_PREFIX = 'gitdir: '
COMMON_DIR_FILE_NAME = 'commondir'


def read_dot_git_file(path: str) -> str:
    """
    Read a '.git' indirection file and return the metadata directory it names.

    The path in the file is relative to the directory containing the file.

    Raises:
        MalformedIndirectionFileError: content is not 'gitdir: <path>'
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='surrogateescape') as f:
            content = trim(f.read())
    except OSError as e:
        raise MalformedIndirectionFileError(path, f"unable to read file: {e}") from e

    if not content.startswith(GIT_DIR_PREFIX):
        raise MalformedIndirectionFileError(path)

    link = content[len(GIT_DIR_PREFIX):]
    if not link or '\0' in link or '\n' in link:
        raise MalformedIndirectionFileError(path, f"the path specified is invalid: '{link}'")

    return full_path(os.path.dirname(path), link)


def get_common_directory(git_directory: str) -> Optional[str]:
    """
    Return the common directory of a metadata directory, or None if it is
    not a valid metadata directory.

    A metadata directory must contain HEAD. Its common directory is named by
    an optional 'commondir' file (relative to the metadata directory) and
    must exist. Work-trees typically have '../..' in 'commondir'.
    """
    if not os.path.isfile(os.path.join(git_directory, HEAD_FILE_NAME)):
        return None

    common_link_path = os.path.join(git_directory, COMMON_DIR_FILE_NAME)
    if os.path.isfile(common_link_path):
        try:
            with open(common_link_path, 'r', encoding='utf-8', errors='surrogateescape') as f:
                link = trim_end(f.read())
        except OSError:
            return None
        if not link or '\0' in link:
            # git does not accept a metadata directory with a malformed commondir
            return None
        common_directory = full_path(git_directory, link)
    else:
        common_directory = git_directory

    # objects/ and refs/ are not required
    return common_directory if os.path.isdir(common_directory) else None


def resolve_git_directory(directory: str) -> Optional[Tuple[str, str]]:
    """
    Resolve the metadata directory of a working directory without walking up.

    Checks 'directory/.git' only: a metadata directory (legacy submodule
    layout or plain checkout) or an indirection file.

    Returns:
        (git_directory, common_directory), or None if there is none
    """
    dot_git_path = os.path.join(directory, GIT_DIR_NAME)
    if os.path.isdir(dot_git_path):
        git_directory = dot_git_path
    elif os.path.isfile(dot_git_path):
        git_directory = read_dot_git_file(dot_git_path)
    else:
        return None

    common_directory = get_common_directory(git_directory)
    if common_directory is None:
        return None
    return git_directory, common_directory


def try_get_repository_location(directory: str) -> Optional[RepositoryLocation]:
    """
    Check whether a single directory is a repository root.

    Returns the location if directory holds a '.git' entry or is itself a
    metadata directory, otherwise None.
    """
    directory = os.path.abspath(directory)
    dot_git_path = os.path.join(directory, GIT_DIR_NAME)

    if os.path.isdir(dot_git_path):
        common_directory = get_common_directory(dot_git_path)
        if common_directory is not None:
            return RepositoryLocation(dot_git_path, common_directory, directory)
    elif os.path.isfile(dot_git_path):
        # the target's own indirection files (e.g. a work-tree's 'gitdir')
        # do not affect the working directory established here
        link = read_dot_git_file(dot_git_path)
        common_directory = get_common_directory(link)
        if common_directory is not None:
            return RepositoryLocation(link, common_directory, directory)
        logger.debug(f"{dot_git_path} points to '{link}' which is not a git directory")
        return None

    if os.path.isdir(directory):
        common_directory = get_common_directory(directory)
        if common_directory is not None:
            # metadata-only context: no working directory is assumed
            return RepositoryLocation(directory, common_directory, None)

    return None


def try_find_repository(start_path: str) -> Optional[RepositoryLocation]:
    """
    Find the repository containing start_path.

    Walks from start_path through its ancestors and returns the first
    repository location found, or None if the walk reaches the filesystem
    root without finding one.

    Raises:
        MalformedIndirectionFileError: a '.git' file on the way is malformed
    """
    directory = os.path.abspath(start_path)

    while True:
        location = try_get_repository_location(directory)
        if location is not None:
            logger.debug(f"Found repository for {start_path}: {location.git_directory}")
            return location

        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent
