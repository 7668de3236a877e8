"""vaultseek CLI - vseek command."""

import click

from vaultseek.cli.search import explain_command, search_command
from vaultseek.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="vseek")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """vaultseek - search-as-you-type relevance engine for note vaults."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(search_command, name="search")
cli.add_command(explain_command, name="explain")


if __name__ == "__main__":
    cli()
