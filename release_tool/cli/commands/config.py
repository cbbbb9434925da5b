"""Configuration management commands"""

import sys

import click
import yaml
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from ..utils.output import console
from ...api.exceptions import ConfigError
from ...constants import DEFAULT_STATE_DIR, EMOJI_SUCCESS, EMOJI_WARNING
from ...models.config import PackageSourceConfig, ReleaseToolConfig, RepositoryConfig


@click.group()
def config():
    """Manage release-tool configuration"""
    pass


@config.command()
@click.option('--packages', 'packages_path', default='packages', show_default=True,
              help='Directory holding packages')
@click.option('--force', is_flag=True, help='Overwrite an existing configuration file')
@click.pass_context
def init(ctx, packages_path, force):
    """Write a configuration using filesystem packages and state"""
    service = ctx.obj.config_service
    if service.config_path.exists() and not force:
        console.print(f"{EMOJI_WARNING} {service.config_path} already exists (use --force to overwrite)")
        sys.exit(1)

    new_config = ReleaseToolConfig(
        repository=RepositoryConfig(type="filesystem", path=DEFAULT_STATE_DIR),
        packages=PackageSourceConfig(type="filesystem", path=packages_path)
    )
    service.save_config(new_config)
    console.print(f"{EMOJI_SUCCESS} Configuration saved to {service.config_path}")


@config.command()
@click.pass_context
def show(ctx):
    """Show the effective configuration"""
    try:
        current = ctx.obj.config
    except ConfigError as e:
        console.print(f"[red]Error [{e.error_code}]: {escape(str(e))}[/red]")
        sys.exit(1)

    text = yaml.dump(current.to_dict(), default_flow_style=False, sort_keys=False)
    console.print(Syntax(text, "yaml"))

    table = Table(title="Platforms")
    table.add_column("Name", style="cyan")
    table.add_column("Deployer", style="yellow")
    for platform in current.platforms:
        table.add_row(platform.name, platform.deployer)
    console.print(table)
