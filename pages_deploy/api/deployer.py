"""Deployer API for Pages deployments"""

from pathlib import Path
from typing import Optional, Union

from ..backends import CloudflarePagesBackend, PagesBackend
from ..core.fingerprint_cache import UploadedFingerprintCache
from ..core.status_poller import StatusCallback
from ..models import Config, DeployResult, DeploymentStatus, PollResult
from ..services.config_service import ConfigService
from ..services.deploy_service import DeployService
from ..utils.async_utils import run_async
from .exceptions import DeploymentFailedError


class Deployer:
    """Deployer class for Pages deployment operations

    Async callers use it as a context manager so the backend connection
    outlives the returned poller::

        async with Deployer() as deployer:
            result = await deployer.deploy_async("my-site", "dist", watch=True)
            final = await result.poller.wait()

    The synchronous methods open and close the backend per call.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 config_path: Optional[Union[str, Path]] = None,
                 backend: Optional[PagesBackend] = None,
                 cache: Optional[UploadedFingerprintCache] = None):
        """
        Initialize deployer

        Args:
            config: Configuration, loaded from file and environment if None
            config_path: Configuration file used when ``config`` is None
            backend: Platform backend, Cloudflare Pages if None
            cache: Caller-owned fingerprint cache shared across deployments
        """
        self.config = config or ConfigService(config_path).load_config()
        self.backend = backend or CloudflarePagesBackend(self.config.cloudflare)
        self.cache = cache
        self.service = DeployService(self.backend, self.config, cache)

    async def __aenter__(self) -> 'Deployer':
        await self.backend.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.backend.close()

    async def deploy_async(self,
                           project_name: str,
                           folder: Union[str, Path],
                           create_project: bool = True,
                           watch: bool = False,
                           on_update: Optional[StatusCallback] = None) -> DeployResult:
        """
        Deploy a folder to a Pages project

        Args:
            project_name: Pages project name
            folder: Folder to publish
            create_project: Create the project when missing
            watch: Attach a running status poller to the result
            on_update: Status callback for the poller

        Returns:
            DeployResult: Deployment result
        """
        await self.backend.initialize()
        return await self.service.deploy(
            project_name,
            folder,
            create_project=create_project,
            watch=watch,
            on_update=on_update,
        )

    def deploy(self,
               project_name: str,
               folder: Union[str, Path],
               create_project: bool = True,
               wait: bool = False,
               on_update: Optional[StatusCallback] = None) -> DeployResult:
        """
        Deploy a folder (blocking)

        Args:
            project_name: Pages project name
            folder: Folder to publish
            create_project: Create the project when missing
            wait: Follow the deployment until it finishes; the outcome is
                stored in ``result.final``
            on_update: Status callback used while waiting

        Returns:
            DeployResult: Deployment result

        Raises:
            DeploymentFailedError: If waiting and the platform reports failure
        """
        return run_async(self._deploy_blocking(project_name, folder, create_project, wait, on_update))

    async def _deploy_blocking(self, project_name, folder, create_project, wait, on_update) -> DeployResult:
        async with self:
            result = await self.deploy_async(
                project_name, folder,
                create_project=create_project,
                watch=wait,
                on_update=on_update,
            )
            if result.poller is not None:
                try:
                    result.final = await result.poller.wait()
                finally:
                    await result.poller.cancel()
                    result.poller = None
            if result.final is not None and result.final.failed:
                message = result.final.status.error_message or "Deployment failed"
                raise DeploymentFailedError(result.deployment_id, message)
            return result

    async def poll_status_async(self,
                                project_name: str,
                                deployment_id: Optional[str] = None) -> DeploymentStatus:
        """Current status of a deployment, latest deployment if no id is given"""
        await self.backend.initialize()
        return await self.service.poll_status(project_name, deployment_id)

    def poll_status(self,
                    project_name: str,
                    deployment_id: Optional[str] = None) -> DeploymentStatus:
        """Current status of a deployment (blocking)"""
        async def _run():
            async with self:
                return await self.poll_status_async(project_name, deployment_id)

        return run_async(_run())

    async def watch_async(self,
                          project_name: str,
                          deployment_id: str,
                          on_update: Optional[StatusCallback] = None) -> PollResult:
        """Follow a deployment until it finishes, times out or is cancelled"""
        await self.backend.initialize()
        poller = self.service.watch(project_name, deployment_id, on_update=on_update)
        try:
            return await poller.wait()
        finally:
            await poller.cancel()


def deploy(project_name: str,
           folder: Union[str, Path],
           create_project: bool = True,
           wait: bool = False,
           config_path: Optional[Union[str, Path]] = None) -> DeployResult:
    """
    Deploy a folder to a Pages project

    This is a convenience function that creates a Deployer instance
    and performs the deployment.

    Args:
        project_name: Pages project name
        folder: Folder to publish
        create_project: Create the project when missing
        wait: Follow the deployment until it finishes
        config_path: Configuration file

    Returns:
        DeployResult: Deployment result
    """
    deployer = Deployer(config_path=config_path)
    return deployer.deploy(project_name, folder, create_project=create_project, wait=wait)


def poll_status(project_name: str,
                deployment_id: Optional[str] = None,
                config_path: Optional[Union[str, Path]] = None) -> DeploymentStatus:
    """Convenience wrapper around :meth:`Deployer.poll_status`"""
    return Deployer(config_path=config_path).poll_status(project_name, deployment_id)
