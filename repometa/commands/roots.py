import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.render import render_source_roots_table
from repometa.services import SourceControlService


@click.command("roots")
@click.argument("path", default=".", type=click.Path(exists=True))
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def roots_handler(path, table, config, progress, **kwargs):
    """
    List source roots of the repository containing PATH and its submodules.

    Each root has a path, revision id and normalized repository URL.
    Submodule roots also name their containing root and nested path.
    Warnings (no commit, invalid URL) go to stderr.

    \b
    Examples:
        repometa roots
        repometa roots --table
        repometa roots -f csv > roots.csv
    """
    service = SourceControlService(config)
    repository = service.open(path)

    progress(f"Reading source roots of {repository.working_directory}...")
    roots, warnings = service.get_source_roots(repository)
    for warning in warnings:
        progress.warning(str(warning))
    progress.success(f"Found {len(roots)} source roots")

    if table:
        render_source_roots_table([r.to_dict() for r in roots], [w.to_dict() for w in warnings])
        return None
    return roots
