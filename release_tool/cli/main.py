# release_tool/cli/main.py
"""Main CLI entry point for release-tool"""

import logging
import os
import sys
from typing import Optional

import click
from rich.logging import RichHandler
from rich.markup import escape

from ..constants import APP_NAME, LOG_FORMAT, ENV_LOG_LEVEL
from ..models.config import ReleaseToolConfig
from ..services.config_service import ConfigService
from ..services.release_service import ReleaseService
from .utils.output import console

# Import all commands
from .commands import (
    release,
    config,
)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = getattr(logging, os.environ.get(ENV_LOG_LEVEL, "WARNING").upper(), logging.WARNING)

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ],
        force=True
    )

    # Adjust third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiofiles").setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy configuration loading"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize CLI context

        Args:
            config_path: Explicit configuration file
        """
        self.config_path = config_path
        self._config_service: Optional[ConfigService] = None
        self.verbose: bool = False
        self.debug: bool = False

    @property
    def config_service(self) -> ConfigService:
        if self._config_service is None:
            self._config_service = ConfigService(self.config_path)
        return self._config_service

    @property
    def config(self) -> ReleaseToolConfig:
        """Get configuration (loaded on first access)"""
        return self.config_service.config

    def create_service(self) -> ReleaseService:
        """Build a release service from the configuration"""
        service = ReleaseService.from_config(self.config)
        if self.debug:
            console.print(f"[dim]Platforms: {', '.join(service.deployer_registry.platforms())}[/dim]")
        return service


@click.group(name=APP_NAME)
@click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False),
              help='Configuration file (default: ./release-tool.yaml)')
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, config_path, verbose, debug, quiet):
    """Release Tool - Versioned installs, upgrades and rollbacks

    Renders packages into manifests and rolls them out with a red/black
    strategy: new application instances are deployed and health checked
    before the ones they replace are retired.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context(config_path)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug


# Register commands
cli.add_command(release.release)
cli.add_command(config.config)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Auto-help for incomplete commands
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        # Handle help for incomplete commands
        if len(sys.argv) == 2 and sys.argv[1] not in [
            '-h', '--help', '-v', '--verbose', '-d', '--debug', '-q', '--quiet'
        ]:
            # If only command name provided, show its help
            sys.argv.append('--help')

        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
