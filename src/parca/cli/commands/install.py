"""Install an asset from a remote source."""

import asyncio

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import format_commit, user_output
from parca.core.context import ParcaContext
from parca.models.resolution import InstallConflict, ResolvedAsset


def _report(resolved: ResolvedAsset) -> None:
    user_output(
        click.style("✓ ", fg="green")
        + f"Installed {resolved.id}@{resolved.version} "
        + f"({format_commit(resolved.commit)}, sha256 {resolved.sha256[:12]})"
    )
    if resolved.mapping:
        user_output(f"  Linked at {resolved.mapping}")


@click.command("install")
@click.argument("url")
@click.argument("asset_id", metavar="ASSET")
@click.option("--version", "specifier", default="latest", show_default=True,
              help='Version or SemVer range, e.g. "^1.2.0".')
@click.option("--mapping", help="Workspace path for the asset (trailing / for a directory).")
@click.option("--force", is_flag=True, help="Replace an installed asset without asking.")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to the replace prompt.")
@click.pass_obj
@cli_error_boundary
def install_cmd(
    ctx: ParcaContext,
    url: str,
    asset_id: str,
    specifier: str,
    mapping: str | None,
    force: bool,
    yes: bool,
) -> None:
    """Install ASSET from the source repository at URL."""
    resolver = ctx.resolver()
    result = asyncio.run(resolver.install(url, asset_id, specifier, force, mapping))

    if isinstance(result, InstallConflict):
        user_output(
            f"{asset_id} is already installed at {result.existing.version} "
            f"(selected {result.selected_version})."
        )
        if not yes and not click.confirm("Replace?", default=False, err=True):
            user_output("Nothing changed.")
            return
        result = asyncio.run(resolver.install(url, asset_id, specifier, True, mapping))
        if isinstance(result, InstallConflict):
            raise RuntimeError(f"Forced install of {asset_id} reported a conflict")

    _report(result)
