import click

from repometa.cli_utils import standard_command, add_common_options
from repometa.render import render_table, render_diagnostics
from repometa.services import SourceControlService


@click.command("url")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--remote", "remote_name", help="Remote to use (default: origin, else the first remote)")
@add_common_options('verbose', 'quiet', 'format', 'table')
@standard_command
def url_handler(path, remote_name, table, config, progress, **kwargs):
    """
    Print the normalized URL of a repository remote.

    scp-like addresses become https URLs and local paths become file URLs.
    When the remote is missing or its URL cannot be normalized, url is
    null and the warning is included.

    \b
    Examples:
        repometa url
        repometa url . --remote upstream
    """
    service = SourceControlService(config)
    repository = service.open(path)

    url, warnings = service.get_repository_url(repository, remote_name)
    for warning in warnings:
        progress.warning(str(warning))

    record = {
        "repository": repository.working_directory or repository.git_directory,
        "url": url,
    }
    if warnings:
        record["warnings"] = [w.to_dict() for w in warnings]

    if table:
        render_table(["Repository", "URL"], [[record["repository"], url or "(none)"]], title="Repository URL")
        render_diagnostics(record.get("warnings", []))
        return None
    return record
