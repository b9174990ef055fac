"""Publish a new asset version to the manifest of this source repository."""

from typing import cast

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import format_commit, user_output
from parca.core.context import ParcaContext
from parca.core.publisher import BumpLevel
from parca.core.versions import is_semver
from parca.models.manifest import ASSET_KINDS, validate_asset_kind


@click.command("publish")
@click.argument("asset_id", metavar="ASSET")
@click.option("--path", "content_path", required=True,
              help="Content location inside this repository (file, or directory for skills).")
@click.option("--version", "version", help="Exact version to publish.")
@click.option("--bump", type=click.Choice(["patch", "minor", "major"]),
              help="Publish the next version at this level (default: patch).")
@click.option("--kind", type=click.Choice(ASSET_KINDS), help="Kind for a new asset (default: prompt).")
@click.option("--init", "init_manifest", is_flag=True,
              help="Create parca-manifest.yaml if it does not exist.")
@click.pass_obj
@cli_error_boundary
def publish_cmd(
    ctx: ParcaContext,
    asset_id: str,
    content_path: str,
    version: str | None,
    bump: str | None,
    kind: str | None,
    init_manifest: bool,
) -> None:
    """Add a version of ASSET to parca-manifest.yaml.

    The previously rolling version is pinned to the current HEAD commit so
    consumers locked to it keep getting the same content.
    """
    if version is not None and bump is not None:
        raise click.UsageError("--version and --bump are mutually exclusive")

    publisher = ctx.publisher()
    if not publisher.is_source_repo() and init_manifest:
        manifest = publisher.init_manifest()
        user_output(f"Created {publisher.manifest_path.name}")
    else:
        manifest = publisher.load_manifest()

    if not (ctx.cwd / content_path).exists():
        raise FileNotFoundError(f"Content path not found: {content_path}")

    if version is None:
        level = cast(BumpLevel, bump or "patch")
        version = publisher.propose_next_version(manifest, asset_id, level)
    elif not is_semver(version):
        raise ValueError(f"Version must be valid SemVer (e.g. 1.2.0): {version}")

    result = publisher.publish(
        manifest,
        asset_id,
        version,
        content_path,
        validate_asset_kind(kind) if kind is not None else "prompt",
    )

    for warning in result.warnings:
        user_output(click.style("Warning: ", fg="yellow") + warning)
    if result.checkpointed_version is not None:
        user_output(
            f"Pinned {asset_id}@{result.checkpointed_version} "
            f"to {format_commit(result.checkpoint_ref)}"
        )
    user_output(click.style("✓ ", fg="green") + f"Published {asset_id}@{result.version}")
