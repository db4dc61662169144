"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator
from .config import load_config, setup_logging
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import format_output, get_format_from_env


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Logging and progress reporting on stderr
    - Clean data output on stdout
    - Consistent error handling with JSON error objects and exit codes

    The command receives the loaded tool configuration as `config` and a
    progress reporter as `progress`. It returns records (a list, generator
    or single dict) to be formatted, or None if it printed its own output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format', None)

        config = load_config()
        setup_logging('INFO' if verbose else config.get('logging', {}).get('level', 'WARNING'))

        if output_format is None:
            output_format = get_format_from_env(config.get('output', {}).get('format', 'jsonl'))

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress
        kwargs['config'] = config

        try:
            result = func(*args, **kwargs)

            if quiet:
                if isinstance(result, Generator):
                    for _ in result:
                        pass
            elif result is None or output_format == 'table':
                # Command handled its own output
                pass
            else:
                if isinstance(result, dict) or hasattr(result, 'to_dict'):
                    result = [result]
                for line in format_output(result, output_format):
                    print(line, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            progress.error(str(e))
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": e.exit_code
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            exit_code = get_exit_code_for_exception(e)
            progress.error(f"Command failed: {e}")
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": exit_code
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(exit_code)

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show progress and informational logging on stderr'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output'),
    'format': click.option('-f', '--format',
                           type=click.Choice(['json', 'jsonl', 'csv', 'tsv', 'yaml']),
                           help='Output format (default: jsonl, or from REPOMETA_FORMAT env)'),
    'table': click.option('--table', is_flag=True,
                          help='Display as a formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
