"""Deploy command implementation"""

import sys
from pathlib import Path

import click
from rich.console import Console

from ..utils.output import format_deploy_result, format_poll_result, print_json
from ..utils.progress import ProgressManager
from ...api import Deployer
from ...api.exceptions import PagesDeployError, ValidationError, FileUploadError
from ...models import DeployResult
from ...utils.async_utils import run_async

console = Console()
err_console = Console(stderr=True)


async def _run_deploy(deployer: Deployer,
                      project: str,
                      folder: Path,
                      create_project: bool,
                      watch: bool,
                      as_json: bool) -> DeployResult:
    progress = ProgressManager(console)

    async with deployer:
        if as_json:
            result = await deployer.deploy_async(project, folder, create_project=create_project)
        else:
            with progress.basic_progress(f"Uploading {folder} to {project}..."):
                result = await deployer.deploy_async(project, folder, create_project=create_project)
            # The URL is known before the deployment is live
            format_deploy_result(result)

        if not watch:
            return result

        if as_json:
            result.final = await deployer.watch_async(project, result.deployment_id)
        else:
            with progress.deployment_progress(project) as tracker:
                result.final = await deployer.watch_async(project, result.deployment_id, on_update=tracker)
            format_poll_result(result.final)

    return result


@click.command()
@click.argument('project')
@click.argument('folder', type=click.Path(path_type=Path))
@click.option('--create-project/--no-create-project', default=True,
              help='Create the Pages project if it does not exist')
@click.option('--watch/--no-watch', default=True,
              help='Follow the deployment until it is live')
@click.option('--timeout', type=float, help='Stop following after SECONDS')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def deploy(ctx, project, folder, create_project, watch, timeout, as_json):
    """Deploy FOLDER to the Pages project PROJECT

    Only files the platform does not already hold are uploaded. The
    deployment URL is shown as soon as the deployment is created; with
    --watch (the default) the command then follows the build until it
    succeeds or fails. Ctrl-C stops following without cancelling the
    deployment itself.

    Exit codes: 0 success, 1 deployment or upload failure, 2 invalid input.

    Examples:

        # Deploy the build output
        pages-deploy deploy my-site ./dist

        # Fire and forget, machine readable
        pages-deploy deploy my-site ./dist --no-watch --json
    """
    try:
        config = ctx.obj.config
        if timeout is not None:
            config.polling.timeout = timeout

        deployer = Deployer(config=config)
        result = run_async(_run_deploy(deployer, project, folder, create_project, watch, as_json))

    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except FileUploadError as e:
        err_console.print(f"[red]Upload failed:[/red] {e}")
        err_console.print("[dim]No deployment was created.[/dim]")
        sys.exit(1)
    except PagesDeployError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Stopped following the deployment; it continues on the platform[/yellow]")
        sys.exit(130)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        if ctx.obj.debug:
            err_console.print_exception()
        sys.exit(1)

    if as_json:
        print_json(result.to_dict())

    if result.final is not None and result.final.failed:
        sys.exit(1)
