"""Move an installed asset to a newer version."""

import asyncio

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import format_commit, user_output
from parca.core.context import ParcaContext


@click.command("update")
@click.argument("asset_id", metavar="ASSET")
@click.option("--version", "specifier", default="latest", show_default=True,
              help="Version or SemVer range to update to.")
@click.pass_obj
@cli_error_boundary
def update_cmd(ctx: ParcaContext, asset_id: str, specifier: str) -> None:
    """Update ASSET to the newest matching version, accepting new content."""
    resolved = asyncio.run(ctx.resolver().update(asset_id, specifier))
    user_output(
        click.style("✓ ", fg="green")
        + f"{resolved.id} now at {resolved.version} ({format_commit(resolved.commit)})"
    )
