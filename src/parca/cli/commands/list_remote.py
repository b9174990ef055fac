"""List assets published by a remote source."""

import asyncio

import click
from rich.table import Table

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import format_commit, print_table, user_output
from parca.core.context import ParcaContext
from parca.models.manifest import ASSET_KINDS, validate_asset_kind


@click.command("list-remote")
@click.argument("url")
@click.option("--kind", type=click.Choice(ASSET_KINDS), help="Only show assets of this kind.")
@click.pass_obj
@cli_error_boundary
def list_remote_cmd(ctx: ParcaContext, url: str, kind: str | None) -> None:
    """List the assets available from the source repository at URL."""
    kind_filter = validate_asset_kind(kind) if kind is not None else None
    assets = asyncio.run(ctx.resolver().list_remote(url, kind_filter))

    if not assets:
        user_output("No assets found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("asset", style="cyan", no_wrap=True)
    table.add_column("kind", no_wrap=True)
    table.add_column("latest", no_wrap=True)
    table.add_column("versions")
    table.add_column("description")
    for info in assets:
        table.add_row(
            info.id, info.kind, info.latest_version, ", ".join(info.versions), info.description
        )
    print_table(table)
    user_output(f"Registry commit: {format_commit(assets[0].resolved_commit)}")
