"""Deployment creation"""

import logging

from ..api.exceptions import PlatformApiError
from ..backends.base import PagesBackend
from ..models.deployment import CreatedDeployment
from ..models.manifest import Manifest
from .status_poller import map_deployment_status
from .validation_engine import ValidationEngine, validate_project_name

logger = logging.getLogger(__name__)


class DeploymentInitiator:
    """Submits the full manifest to create a deployment

    The call is not retried: repeating it could create a second
    deployment.
    """

    def __init__(self, backend: PagesBackend):
        self.backend = backend
        self.validation_engine = ValidationEngine()

    async def create_deployment(self, project_name: str, manifest: Manifest) -> CreatedDeployment:
        """
        Create a deployment

        Args:
            project_name: Pages project name
            manifest: Complete path -> fingerprint mapping, unchanged files
                included

        Returns:
            CreatedDeployment with id, initial status and URL when the
            platform returned one
        """
        validate_project_name(project_name)
        wire_manifest = manifest.to_api_dict()
        self.validation_engine.validate_manifest(wire_manifest).raise_if_invalid()

        deployment = await self.backend.create_deployment(project_name, wire_manifest)
        if not deployment.id:
            raise PlatformApiError("Deployment created without an id")

        status = map_deployment_status(deployment)
        logger.info("Deployment %s created for %s (%s)", deployment.id, project_name, status.status.value)

        return CreatedDeployment(
            id=deployment.id,
            status=status,
            url=deployment.url,
            deployment=deployment
        )
