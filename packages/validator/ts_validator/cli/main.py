"""CLI main entry point for ts-validator."""

import logging

import click

from ts_validator.version import __version__


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Only show errors')
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool):
    """ts-validator - Find unvalidated request input in TypeScript route handlers."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


# Register commands
from ts_validator.cli.commands.scan import scan
from ts_validator.cli.commands.init import init

cli.add_command(scan)
cli.add_command(init)


if __name__ == '__main__':
    cli()
