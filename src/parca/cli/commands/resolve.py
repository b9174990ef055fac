"""Resolve every declared asset against the lockfile."""

import asyncio

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import user_output
from parca.core.context import ParcaContext
from parca.core.progress import ResolveProgress


class EchoProgress(ResolveProgress):
    """Prints each asset's outcome as it happens."""

    def __init__(self) -> None:
        self.failures = 0

    def on_asset_start(self, asset_id: str, version: str) -> None:
        user_output(f"Resolving {asset_id}@{version}...")

    def on_asset_done(self, asset_id: str, version: str) -> None:
        user_output(click.style("✓ ", fg="green") + f"{asset_id}@{version}")

    def on_asset_error(self, asset_id: str, message: str) -> None:
        self.failures += 1
        user_output(click.style("✗ ", fg="red") + f"{asset_id}: {message}")


@click.command("resolve")
@click.pass_obj
@cli_error_boundary
def resolve_cmd(ctx: ParcaContext) -> None:
    """Fetch, verify and link every asset in .parca-assets.yaml.

    Locked assets stay on their locked commit. Content that changed under a
    locked version is refused; use "parca install --force" or "parca update".
    """
    progress = EchoProgress()
    resolved = asyncio.run(ctx.resolver().resolve_all(progress))

    cached = sum(1 for r in resolved if r.from_cache)
    user_output(
        f"Resolved {len(resolved)} asset(s) ({cached} from cache), {progress.failures} failed."
    )
    if progress.failures:
        raise SystemExit(1)
