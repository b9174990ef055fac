"""Remove an installed asset."""

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import user_output
from parca.core.context import ParcaContext


@click.command("remove")
@click.argument("asset_id", metavar="ASSET")
@click.pass_obj
@cli_error_boundary
def remove_cmd(ctx: ParcaContext, asset_id: str) -> None:
    """Remove ASSET from this workspace (the shared cache is kept)."""
    entry = ctx.resolver().remove(asset_id)
    user_output(f"Removed {entry.id}@{entry.version}")
