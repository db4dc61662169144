import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.exit_codes import NoRepositoryFoundError
from repometa.render import render_location_table
from repometa.services import SourceControlService


@click.command("locate")
@click.argument("path", default=".", type=click.Path(exists=True))
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def locate_handler(path, table, config, progress, **kwargs):
    """
    Find the repository containing PATH.

    Prints the metadata, common and working directories. The working
    directory is omitted when PATH is inside a metadata directory.

    \b
    Examples:
        repometa locate
        repometa locate src/lib/file.c --table
    """
    service = SourceControlService(config)
    progress(f"Locating repository for {path}...")

    location = service.locate(path)
    if location is None:
        raise NoRepositoryFoundError(path)

    if table:
        render_location_table(location.to_dict())
        return None
    return location
