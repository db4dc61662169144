#!/usr/bin/env python3

import click

from repometa import __version__

from repometa.commands.locate import locate_handler
from repometa.commands.url import url_handler
from repometa.commands.revision import revision_handler
from repometa.commands.roots import roots_handler
from repometa.commands.submodules import submodules_handler
from repometa.commands.classify import classify_handler
from repometa.commands.config import config_cmd


@click.group()
@click.version_option(version=__version__)
def cli():
    """repometa - Read git repository metadata without running git.

    Locates repositories, resolves HEAD, normalizes remote URLs, indexes
    submodules and reports source roots for build metadata.
    """
    pass


cli.add_command(locate_handler, name='locate')
cli.add_command(url_handler, name='url')
cli.add_command(revision_handler, name='revision')
cli.add_command(roots_handler, name='roots')
cli.add_command(submodules_handler, name='submodules')
cli.add_command(classify_handler, name='classify')

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
