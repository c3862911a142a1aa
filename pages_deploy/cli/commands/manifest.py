"""Manifest command implementation"""

import sys
from pathlib import Path

import click
from rich.console import Console

from ..utils.output import format_manifest, print_json
from ...api.exceptions import PagesDeployError, ValidationError
from ...core import ManifestEngine

err_console = Console(stderr=True)


@click.command()
@click.argument('folder', type=click.Path(path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.option('--summary', is_flag=True, help='Only show totals')
@click.pass_context
def manifest(ctx, folder, as_json, summary):
    """Build and show the manifest of FOLDER

    Works offline: nothing is uploaded and no credentials are needed.
    """
    try:
        build = ManifestEngine(ctx.obj.config.manifest).build(folder)
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except PagesDeployError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if as_json:
        data = build.to_dict()
        data['manifest'] = build.manifest.to_api_dict()
        print_json(data)
    else:
        format_manifest(build, show_files=not summary)
