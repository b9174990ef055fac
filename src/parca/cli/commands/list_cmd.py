"""List installed assets."""

import click
from rich.table import Table

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import format_commit, print_table, user_output
from parca.core.context import ParcaContext
from parca.io.lockfile import LockfileStore


@click.command("list")
@click.pass_obj
@cli_error_boundary
def list_cmd(ctx: ParcaContext) -> None:
    """List the assets declared in this workspace."""
    entries = ctx.resolver().list_installed()
    if not entries:
        user_output("No assets installed.")
        return

    lockfile = LockfileStore(ctx.cwd).load()
    table = Table(show_header=True, header_style="bold")
    table.add_column("asset", style="cyan", no_wrap=True)
    table.add_column("version", no_wrap=True)
    table.add_column("source", no_wrap=True)
    table.add_column("commit", no_wrap=True)
    table.add_column("mapping")
    for entry in entries:
        locked = lockfile.find(entry.id, entry.source)
        commit = locked.commit if locked is not None and locked.version == entry.version else None
        table.add_row(
            entry.id, entry.version, entry.source, format_commit(commit), entry.mapping or "-"
        )
    print_table(table)
