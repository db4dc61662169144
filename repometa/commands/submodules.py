import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.render import render_submodules_table, render_diagnostics
from repometa.services import SourceControlService


@click.command("submodules")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--diagnostics", is_flag=True, help="List rejected manifest entries instead")
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def submodules_handler(path, diagnostics, table, config, progress, **kwargs):
    """
    List submodules declared in .gitmodules with their checked-out commit.

    Entries with a missing path or URL, or without a resolvable metadata
    directory, are excluded; --diagnostics lists them with the reason.

    \b
    Examples:
        repometa submodules
        repometa submodules --diagnostics
    """
    service = SourceControlService(config)
    repository = service.open(path)

    if diagnostics:
        records = service.get_submodule_diagnostics(repository)
        if table:
            render_diagnostics([d.to_dict() for d in records])
            return None
        return records

    submodules = service.get_submodules(repository)
    rejected = service.get_submodule_diagnostics(repository)
    if rejected:
        progress.warning(f"{len(rejected)} submodule entries were excluded (see --diagnostics)")

    if table:
        render_submodules_table([s.to_dict() for s in submodules])
        return None
    return submodules
