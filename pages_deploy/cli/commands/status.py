"""Status command implementation"""

import sys

import click
from rich.console import Console

from ..utils.output import format_status, print_json
from ...api import Deployer
from ...api.exceptions import PagesDeployError, ValidationError

err_console = Console(stderr=True)


@click.command()
@click.argument('project')
@click.option('--deployment', 'deployment_id', help='Deployment id (default: latest)')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def status(ctx, project, deployment_id, as_json):
    """Show the status of a deployment

    Examples:

        pages-deploy status my-site

        pages-deploy status my-site --deployment 3f2b1c9e --json
    """
    try:
        deployer = Deployer(config=ctx.obj.config)
        snapshot = deployer.poll_status(project, deployment_id)
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except PagesDeployError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if as_json:
        print_json(snapshot.to_dict())
    else:
        title = f"{project} / {deployment_id}" if deployment_id else f"{project} (latest)"
        format_status(snapshot, title=title)
