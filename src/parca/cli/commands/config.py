"""Show and change user settings."""

import click

from parca.cli.error_boundary import cli_error_boundary
from parca.cli.output import machine_output, user_output
from parca.core.context import ParcaContext
from parca.core.settings import SETTINGS_KEYS


@click.group("config")
def config_group() -> None:
    """Manage parca settings (~/.parca/config.toml)."""


@config_group.command("show")
@click.pass_obj
@cli_error_boundary
def show_cmd(ctx: ParcaContext) -> None:
    """Print the effective settings."""
    settings = ctx.settings_store.load()
    machine_output(f"cache_root={settings.cache_root}")
    machine_output(f"registry_ref={settings.registry_ref}")


@config_group.command("set")
@click.argument("key", type=click.Choice(SETTINGS_KEYS))
@click.argument("value")
@click.pass_obj
@cli_error_boundary
def set_cmd(ctx: ParcaContext, key: str, value: str) -> None:
    """Set KEY to VALUE."""
    settings = ctx.settings_store.load().with_value(key, value)
    ctx.settings_store.save(settings)
    user_output(f"Set {key} = {value} in {ctx.settings_store.path()}")
