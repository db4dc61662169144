import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.render import render_table
from repometa.services import SourceControlService


@click.command("revision")
@click.argument("path", default=".", type=click.Path(exists=True))
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def revision_handler(path, table, config, progress, **kwargs):
    """
    Print the commit HEAD points to.

    revision_id is null for a repository without commits.

    \b
    Examples:
        repometa revision
        repometa revision ../other-checkout
    """
    service = SourceControlService(config)
    repository = service.open(path)

    revision_id = service.get_revision_id(repository)
    if revision_id is None:
        progress.warning("Repository doesn't have any commit")

    record = {
        "repository": repository.working_directory or repository.git_directory,
        "revision_id": revision_id,
    }

    if table:
        render_table(["Repository", "Revision"], [[record["repository"], revision_id or "(none)"]], title="Revision")
        return None
    return record
