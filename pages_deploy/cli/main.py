# pages_deploy/cli/main.py
"""Main CLI entry point for pages-deploy"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from ..constants import APP_NAME, LOG_FORMAT
from ..models import Config
from ..services import ConfigService

# Import all commands
from .commands import (
    deploy,
    status,
    manifest,
)

err_console = Console(stderr=True)


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
        level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=err_console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # Adjust third-party loggers
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy configuration loading

    The configuration file is only read when a command asks for it, so
    ``--help`` and argument errors never touch the file system.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize CLI context"""
        self.config_path = config_path
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Get configuration (lazy loading)

        A ``logging.level`` entry applies when no verbosity flag was given.
        """
        if self._config is None:
            self._config = ConfigService(self.config_path).load_config()

            level = self._config.logging.get("level")
            if level and not (self.verbose or self.debug or self.quiet):
                logging.getLogger().setLevel(str(level).upper())

        return self._config


@click.group(name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Configuration file (default: ./.pages-deploy.yaml)')
@click.pass_context
def cli(ctx, verbose, debug, quiet, config_path):
    """Pages Deploy - Publish static sites with direct upload

    Builds a content-addressed manifest of a folder, uploads only the
    files the platform does not already hold, creates a deployment and
    follows it until it is live.

    Credentials are read from CLOUDFLARE_API_TOKEN (or CLOUDFLARE_API_KEY
    with CLOUDFLARE_EMAIL) and CLOUDFLARE_ACCOUNT_ID.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context(config_path)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    ctx.obj.quiet = quiet


# Register commands
cli.add_command(deploy.deploy)
cli.add_command(status.status)
cli.add_command(manifest.manifest)


def main():
    """Console script entry point

    Errors that escape a command are printed on stderr; Ctrl-C exits 130.
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)

    except Exception as e:
        err_console.print(f"[red]{APP_NAME} failed:[/red] {e}")
        if {'-d', '--debug'} & set(sys.argv):
            err_console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
