import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.render import render_classification_table
from repometa.services import SourceControlService


@click.command("classify")
@click.argument("repo_path", type=click.Path(exists=True))
@click.argument("files", nargs=-1, required=True)
@click.option("--recursive", is_flag=True, help="Also descend into submodules of submodules")
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def classify_handler(repo_path, files, recursive, table, config, progress, **kwargs):
    """
    Assign each FILE to the innermost repository containing it.

    The repository is the top-level repository containing REPO_PATH or
    one of its submodules. Files outside all of them get a null
    repository. FILES need not exist.

    \b
    Examples:
        repometa classify . src/main.c libs/x/util.c
        repometa classify . --recursive libs/x/vendor/y/y.c
    """
    service = SourceControlService(config)
    repository = service.open(repo_path)

    records = [
        {"path": path, "repository": containing}
        for path, containing in service.classify_files(repository, files, recursive=recursive)
    ]

    if table:
        render_classification_table(records)
        return None
    return records
