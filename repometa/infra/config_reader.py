"""
Git configuration reader for repometa.

Parses the git-config dialect (https://git-scm.com/docs/git-config#_syntax)
into an immutable multimap keyed by (section, subsection, name). Section and
variable names compare case-insensitively, subsection names case-sensitively.

The same reader handles repository configuration files and the .gitmodules
manifest, which uses the same dialect.

Example:
    reader = ConfigReader(git_dir, common_dir, GitEnvironment.from_process_environment())
    config = reader.load()
    config.get_value("core", "repositoryformatversion")
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from ..errors import InvalidConfigurationError
from .paths import ensure_trailing_separator, to_posix

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 10

_WHITESPACE = ' \t\f\v'
_END_OF_LINE = '\r\n'
_COMMENT_START = '#;'


def _is_alpha(c: str) -> bool:
    return c != '' and ('a' <= c <= 'z' or 'A' <= c <= 'Z')


def _is_digit(c: str) -> bool:
    return c != '' and '0' <= c <= '9'


@dataclass(frozen=True)
class GitEnvironment:
    """
    Directories that contribute configuration files besides the repository.

    Any directory may be None, in which case the corresponding files are
    skipped. GitEnvironment() reads the repository configuration only.
    """

    home_directory: Optional[str] = None
    xdg_config_home_directory: Optional[str] = None
    system_directory: Optional[str] = None

    @classmethod
    def from_process_environment(cls) -> 'GitEnvironment':
        home = os.path.expanduser('~')
        return cls(
            home_directory=home if home != '~' else None,
            xdg_config_home_directory=os.environ.get('XDG_CONFIG_HOME') or None,
            system_directory='/etc' if os.name != 'nt' else None,
        )

    @classmethod
    def create(cls, configuration_scope: Optional[str] = None) -> 'GitEnvironment':
        """
        Create an environment for a configuration scope.

        Args:
            configuration_scope: None or "" for all configuration files,
                "local" for the repository configuration only
        """
        if not configuration_scope:
            return cls.from_process_environment()
        if configuration_scope == 'local':
            return cls()
        raise ValueError(f"Unsupported configuration scope: {configuration_scope!r}")

    @property
    def xdg_directory(self) -> Optional[str]:
        if self.xdg_config_home_directory:
            return os.path.join(self.xdg_config_home_directory, 'git')
        if self.home_directory:
            return os.path.join(self.home_directory, '.config', 'git')
        return None

    def get_home_directory_for_path_expansion(self, path: str) -> str:
        if not self.home_directory:
            raise InvalidConfigurationError(
                f"Home directory is required to expand path '{path}' but is not available"
            )
        return self.home_directory


@dataclass(frozen=True)
class VariableKey:
    """Normalized (section, subsection, name) triple."""

    section: str
    subsection: str
    name: str

    def __post_init__(self):
        object.__setattr__(self, 'section', self.section.lower())
        object.__setattr__(self, 'name', self.name.lower())

    def __str__(self) -> str:
        if self.subsection:
            return f"{self.section}.{self.subsection}.{self.name}"
        return f"{self.section}.{self.name}"


class GitConfig:
    """
    Immutable multimap of configuration variables.

    Variables keep file order: the first occurrence of a key fixes its
    position, and each key holds every value assigned to it in order.
    Scalar lookups return the last value.
    """

    def __init__(self, variables: Mapping[VariableKey, List[str]]):
        self._variables: Dict[VariableKey, Tuple[str, ...]] = {
            key: tuple(values) for key, values in variables.items()
        }

    @classmethod
    def empty(cls) -> 'GitConfig':
        return cls({})

    @property
    def variables(self) -> Mapping[VariableKey, Tuple[str, ...]]:
        return dict(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def get_values(self, section: str, name: str, subsection: str = "") -> Tuple[str, ...]:
        return self._variables.get(VariableKey(section, subsection, name), ())

    def get_value(self, section: str, name: str, subsection: str = "") -> Optional[str]:
        values = self.get_values(section, name, subsection)
        return values[-1] if values else None

    def get_boolean(self, section: str, name: str, default: bool = False, subsection: str = "") -> bool:
        value = parse_boolean(self.get_value(section, name, subsection))
        return default if value is None else value

    def get_int(self, section: str, name: str, default: int = 0, subsection: str = "") -> int:
        value = parse_int(self.get_value(section, name, subsection))
        return default if value is None else value

    def keys_in_section(self, section: str) -> Iterator[VariableKey]:
        section = section.lower()
        return (key for key in self._variables if key.section == section)

    def subsections(self, section: str) -> List[str]:
        """Distinct subsection names of a section in first-seen order."""
        seen: Dict[str, None] = {}
        for key in self.keys_in_section(section):
            seen.setdefault(key.subsection, None)
        return list(seen)

    def enumerate_variables(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        """Yield ("section[.subsection].name", values) pairs in file order."""
        for key, values in self._variables.items():
            yield str(key), values


def parse_boolean(value: Optional[str]) -> Optional[bool]:
    """
    Parse a git boolean. Returns None when the value is not a boolean.

    See https://git-scm.com/docs/git-config#Documentation/git-config.txt-boolean
    """
    if value is None:
        return None
    lowered = value.lower()
    if lowered in ('1', 'true', 'on', 'yes'):
        return True
    if lowered in ('0', 'false', 'off', 'no', ''):
        return False
    return None


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a git integer with optional k/m/g suffix (1024-based)."""
    if not value:
        return None
    multipliers = {'k': 1024, 'm': 1024 ** 2, 'g': 1024 ** 3}
    multiplier = multipliers.get(value[-1].lower(), 1)
    digits = value[:-1] if multiplier > 1 else value
    if not re.fullmatch(r'[+-]?[0-9]+', digits):
        return None
    return int(digits) * multiplier


class _TextReader:
    """Character cursor over a configuration file's text."""

    def __init__(self, text: str, path: Optional[str]):
        self.text = text
        self.path = path
        self.position = 0
        self.line = 1

    def peek(self) -> str:
        if self.position < len(self.text):
            return self.text[self.position]
        return ''

    def read(self) -> str:
        c = self.peek()
        if c:
            self.position += 1
            if c == '\n':
                self.line += 1
        return c

    def error(self, message: str) -> InvalidConfigurationError:
        return InvalidConfigurationError(message, self.path, self.line)

    def skip_whitespace(self) -> None:
        while self.peek() and self.peek() in _WHITESPACE:
            self.read()

    def skip_multiline_whitespace(self) -> None:
        while self.peek() and self.peek() in _WHITESPACE + _END_OF_LINE:
            self.read()

    def read_to_line_end(self) -> None:
        while True:
            c = self.read()
            if c == '' or c == '\n':
                return
            if c == '\r':
                if self.peek() == '\n':
                    self.read()
                return


def read_section_header(reader: _TextReader) -> Tuple[str, str]:
    """Read '[section]', '[section "sub"]' or the deprecated '[section.sub]'."""
    if reader.read() != '[':
        raise reader.error("Expected '[' to start section header")

    name = []
    while True:
        c = reader.read()
        if c == ']':
            subsection = ''
            break

        if c and c in _WHITESPACE:
            subsection = _read_subsection_name(reader)
            if reader.read() != ']':
                raise reader.error("Expected ']' after subsection name")
            break

        if _is_alpha(c) or _is_digit(c) or c in ('-', '.'):
            name.append(c)
        else:
            raise reader.error(f"Invalid character {c!r} in section name" if c else "Unterminated section header")

    section = ''.join(name).lower()

    first_dot = section.find('.')
    if first_dot != -1:
        # "[x.]" stays section "x."; "[.x]" is section "" subsection "x"
        prefix = section if first_dot == len(section) - 1 else section[:first_dot]
        suffix = section[first_dot + 1:]
        subsection = f"{suffix}.{subsection}" if subsection else suffix
        section = prefix

    return section, subsection


def _read_subsection_name(reader: _TextReader) -> str:
    reader.skip_whitespace()
    if reader.read() != '"':
        raise reader.error("Expected '\"' to start subsection name")

    name = []
    while True:
        c = reader.read()
        if c == '' or c in _END_OF_LINE:
            raise reader.error("Unterminated subsection name")
        if c == '"':
            return ''.join(name)
        if c == '\\':
            c = reader.read()
            if c == '' or c in _END_OF_LINE:
                raise reader.error("Unterminated subsection name")
        name.append(c)


def read_variable_declaration(reader: _TextReader) -> Tuple[str, str]:
    """Read 'name', 'name = value' or 'name = "quoted" value'."""
    name = _read_variable_name(reader)
    if not name:
        c = reader.peek()
        raise reader.error(f"Invalid character {c!r} in variable name" if c else "Expected variable name")

    reader.skip_whitespace()

    c = reader.peek()
    if c == '' or c in _COMMENT_START or c in _END_OF_LINE:
        reader.read_to_line_end()
        # a bare name is a boolean set to true
        return name, 'true'

    if c != '=':
        raise reader.error(f"Expected '=' after variable name '{name}'")

    reader.read()
    reader.skip_whitespace()
    return name, _read_variable_value(reader)


def _read_variable_name(reader: _TextReader) -> str:
    name = []
    while True:
        c = reader.peek()
        if _is_alpha(c) or (name and (_is_digit(c) or c == '-')):
            name.append(reader.read())
        else:
            return ''.join(name).lower()


def _read_variable_value(reader: _TextReader) -> str:
    in_quotes = False
    value = []
    # length of value excluding unquoted trailing whitespace
    significant = 0

    while True:
        c = reader.peek()
        if c == '' or c in _END_OF_LINE:
            if in_quotes:
                raise reader.error("Unterminated quoted value")
            reader.read_to_line_end()
            break

        reader.read()
        if c == '\\':
            escaped = reader.peek()
            if escaped and escaped in _END_OF_LINE:
                reader.read_to_line_end()
                continue
            if escaped == 'n':
                reader.read()
                value.append('\n')
            elif escaped == 't':
                reader.read()
                value.append('\t')
            elif escaped in ('\\', '"'):
                value.append(reader.read())
            else:
                raise reader.error(f"Invalid escape sequence '\\{escaped}'")
            significant = len(value)
            continue

        if c == '"':
            in_quotes = not in_quotes
            continue

        if c in _COMMENT_START and not in_quotes:
            reader.read_to_line_end()
            break

        value.append(c)
        if c not in _WHITESPACE or in_quotes:
            significant = len(value)

    return ''.join(value[:significant])


def parse_config_text(text: str, path: Optional[str] = None) -> GitConfig:
    """Parse configuration text without include processing."""
    variables: Dict[VariableKey, List[str]] = {}
    for key, value in _iterate_declarations(_TextReader(text, path)):
        variables.setdefault(key, []).append(value)
    return GitConfig(variables)


def _iterate_declarations(reader: _TextReader) -> Iterator[Tuple[VariableKey, str]]:
    section = ''
    subsection = ''
    while True:
        reader.skip_multiline_whitespace()
        c = reader.peek()
        if c == '':
            return

        if c in _COMMENT_START:
            reader.read_to_line_end()
            continue

        if c == '[':
            section, subsection = read_section_header(reader)
            continue

        # variables before any section header have an empty section name
        name, value = read_variable_declaration(reader)
        yield VariableKey(section, subsection, name), value


def _read_text_file(path: str) -> str:
    with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
        return f.read()


def gitdir_pattern_matches(pattern: str, path: str, ignore_case: bool = False) -> bool:
    """
    Match an includeIf gitdir glob against a posix path.

    '**' matches across '/', while '*' and '?' stay within one segment.
    """
    regex = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if pattern.startswith('**/', i):
            regex.append('(?:.*/)?')
            i += 3
            continue
        if pattern.startswith('**', i):
            regex.append('.*')
            i += 2
            continue
        if c == '*':
            regex.append('[^/]*')
        elif c == '?':
            regex.append('[^/]')
        elif c == '[':
            end = pattern.find(']', i + 2)
            if end == -1:
                regex.append(re.escape(c))
            else:
                body = pattern[i + 1:end]
                if body.startswith('!'):
                    body = '^' + body[1:]
                regex.append('[' + body.replace('\\', '\\\\') + ']')
                i = end
        else:
            regex.append(re.escape(c))
        i += 1

    flags = re.IGNORECASE if ignore_case else 0
    return re.fullmatch(''.join(regex), path, flags) is not None


class ConfigReader:
    """
    Loads configuration files for one repository.

    Args:
        git_directory: Repository metadata directory (used by includeIf gitdir)
        common_directory: Shared metadata directory holding the 'config' file
        environment: Source of system, XDG and global configuration locations
        file_opener: Callable returning a file's text; raises
            FileNotFoundError for missing files (for testing)
    """

    def __init__(
        self,
        git_directory: str,
        common_directory: str,
        environment: GitEnvironment,
        file_opener: Optional[Callable[[str], str]] = None
    ):
        self.environment = environment
        self._git_directory_posix = ensure_trailing_separator(to_posix(git_directory), '/')
        self._common_directory = common_directory
        self._file_opener = file_opener or _read_text_file

    def load(self) -> GitConfig:
        """Load every existing configuration file, lowest precedence first."""
        variables: Dict[VariableKey, List[str]] = {}
        for path in self.enumerate_existing_configuration_files():
            self._load_variables_from(path, variables, include_depth=0)
        return GitConfig(variables)

    def load_from(self, path: str) -> GitConfig:
        """Load a single file (and its includes)."""
        variables: Dict[VariableKey, List[str]] = {}
        self._load_variables_from(path, variables, include_depth=0)
        return GitConfig(variables)

    def enumerate_existing_configuration_files(self) -> Iterator[str]:
        env = self.environment

        if env.system_directory:
            system_config = os.path.join(env.system_directory, 'gitconfig')
            if os.path.isfile(system_config):
                yield system_config

        xdg_directory = env.xdg_directory
        if xdg_directory:
            xdg_config = os.path.join(xdg_directory, 'config')
            if os.path.isfile(xdg_config):
                yield xdg_config

        if env.home_directory:
            global_config = os.path.join(env.home_directory, '.gitconfig')
            if os.path.isfile(global_config):
                yield global_config

        local_config = os.path.join(self._common_directory, 'config')
        if os.path.isfile(local_config):
            yield local_config

    def _load_variables_from(
        self,
        path: str,
        variables: Dict[VariableKey, List[str]],
        include_depth: int
    ) -> None:
        if include_depth > MAX_INCLUDE_DEPTH:
            raise InvalidConfigurationError(
                f"Configuration file recursion exceeded maximum allowed depth of {MAX_INCLUDE_DEPTH}", path
            )

        try:
            text = self._file_opener(path)
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"Configuration file not found: {path}")
            return
        except OSError as e:
            raise InvalidConfigurationError(f"Unable to read configuration file: {e}", path) from e

        logger.debug(f"Loading configuration from {path}")

        for key, value in _iterate_declarations(_TextReader(text, path)):
            variables.setdefault(key, []).append(value)

            if self._is_include_path(key, path):
                included = self._normalize_relative_path(value, path, key)
                self._load_variables_from(included, variables, include_depth + 1)

    def _normalize_relative_path(self, relative_path: str, base_path: str, key: VariableKey) -> str:
        if len(relative_path) >= 2 and relative_path[0] == '~' and relative_path[1] in '/\\':
            root = self.environment.get_home_directory_for_path_expansion(relative_path)
            relative_path = relative_path[2:]
        else:
            root = os.path.dirname(base_path)

        if not relative_path or '\0' in relative_path:
            raise InvalidConfigurationError(f"The value of {key} is not a valid path: '{relative_path}'", base_path)

        return os.path.normpath(os.path.join(root, relative_path))

    def _is_include_path(self, key: VariableKey, config_file_path: str) -> bool:
        # https://git-scm.com/docs/git-config#_includes
        if key == VariableKey('include', '', 'path'):
            return True

        if key.section != 'includeif' or key.name != 'path' or not key.subsection:
            return False

        if key.subsection.startswith('gitdir:'):
            pattern = key.subsection[len('gitdir:'):]
            ignore_case = False
        elif key.subsection.startswith('gitdir/i:'):
            pattern = key.subsection[len('gitdir/i:'):]
            ignore_case = True
        else:
            return False

        if pattern.startswith('./'):
            directory = to_posix(os.path.dirname(config_file_path))
            pattern = ensure_trailing_separator(directory, '/') + pattern[2:]
        elif pattern.startswith('~/'):
            home = to_posix(self.environment.get_home_directory_for_path_expansion(pattern))
            pattern = ensure_trailing_separator(home, '/') + pattern[2:]
        elif not (pattern.startswith('/') or re.match(r'^[A-Za-z]:/', pattern)):
            pattern = '**/' + pattern

        if pattern.endswith('/'):
            pattern += '**'

        return gitdir_pattern_matches(pattern, self._git_directory_posix, ignore_case)
