import logging

import click

from parca import __version__
from parca.cli.commands.config import config_group
from parca.cli.commands.install import install_cmd
from parca.cli.commands.list_cmd import list_cmd
from parca.cli.commands.list_remote import list_remote_cmd
from parca.cli.commands.publish import publish_cmd
from parca.cli.commands.remove import remove_cmd
from parca.cli.commands.resolve import resolve_cmd
from parca.cli.commands.update import update_cmd
from parca.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="parca")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Install versioned prompts, instructions and skills from Git registries."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(list_remote_cmd)
cli.add_command(install_cmd)
cli.add_command(resolve_cmd)
cli.add_command(update_cmd)
cli.add_command(list_cmd)
cli.add_command(remove_cmd)
cli.add_command(publish_cmd)
cli.add_command(config_group)


def main() -> None:
    """CLI entry point used by the `parca` console script."""
    cli()
