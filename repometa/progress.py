"""
Progress reporting for repometa commands.

Messages go to stderr so that stdout carries only data records. Progress
is shown when stderr is a terminal, when --verbose is given, or when
REPOMETA_PROGRESS=1; REPOMETA_PROGRESS=0 turns it off.
"""

import os
import sys
from typing import Optional

_RED = '\033[31m'
_GREEN = '\033[32m'
_YELLOW = '\033[33m'
_RESET = '\033[0m'


class ProgressReporter:
    """Writes status lines for the user to stderr."""

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = sys.stderr.isatty() if enabled is None else enabled
        self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None

    def _write(self, text: str, color: Optional[str] = None) -> None:
        if color and self.use_colors:
            text = f"{color}{text}{_RESET}"
        print(text, file=sys.stderr, flush=True)

    def __call__(self, message: str) -> None:
        if self.enabled:
            self._write(message)

    def error(self, message: str) -> None:
        """Errors are shown even when progress is disabled."""
        self._write(f"ERROR: {message}", _RED)

    def warning(self, message: str) -> None:
        if self.enabled:
            self._write(f"WARNING: {message}", _YELLOW)

    def success(self, message: str) -> None:
        if self.enabled:
            self._write(f"✓ {message}", _GREEN)


def _enabled_from_environment() -> Optional[bool]:
    return {'0': False, '1': True}.get(os.environ.get('REPOMETA_PROGRESS', ''))


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Create the reporter for one command run.

    Args:
        enabled: True forces progress on; None defers to REPOMETA_PROGRESS,
            then to whether stderr is a terminal
    """
    if enabled is None:
        enabled = _enabled_from_environment()
    return ProgressReporter(enabled)
