"""Hosting platform backend abstract base class"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models.deployment import Deployment
from ..models.upload import UploadCredential, UploadPayloadItem, UploadResponse


class PagesBackend(ABC):
    """Abstract base class for the upstream Pages API

    Implementations translate transport failures into the pipeline's
    error taxonomy: NetworkError / RequestTimeoutError for connection
    problems, PlatformApiError (or a subclass) for platform responses.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize backend

        Args:
            config: Backend-specific configuration
        """
        self.config = config or {}
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize backend (e.g., establish connections)"""
        if not self._initialized:
            await self._do_initialize()
            self._initialized = True

    async def _do_initialize(self) -> None:
        """Actual initialization logic, overridden by subclasses"""
        pass

    @abstractmethod
    async def get_project(self, project_name: str) -> Dict[str, Any]:
        """
        Fetch a Pages project

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        pass

    @abstractmethod
    async def create_project(self, project_name: str) -> Dict[str, Any]:
        """Create a Pages project"""
        pass

    @abstractmethod
    async def get_upload_token(self, project_name: str) -> str:
        """Request a short-lived upload JWT for a project"""
        pass

    @abstractmethod
    async def check_missing(self, credential: UploadCredential, hashes: List[str]) -> List[str]:
        """
        Ask which fingerprints the platform does not hold

        Args:
            credential: Upload credential
            hashes: Fingerprints to check

        Returns:
            Subset of ``hashes`` that is missing
        """
        pass

    @abstractmethod
    async def upload_assets(self,
                            credential: UploadCredential,
                            payload: List[UploadPayloadItem]) -> UploadResponse:
        """Upload a batch of assets"""
        pass

    @abstractmethod
    async def create_deployment(self, project_name: str, manifest: Dict[str, str]) -> Deployment:
        """
        Create a deployment from a manifest

        Args:
            project_name: Project name
            manifest: Wire form path -> fingerprint mapping
        """
        pass

    @abstractmethod
    async def get_deployment(self, project_name: str, deployment_id: str) -> Deployment:
        """Fetch a deployment"""
        pass

    async def get_latest_deployment(self, project_name: str) -> Optional[Deployment]:
        """Latest deployment of a project, if any"""
        project = await self.get_project(project_name)
        latest = project.get("latest_deployment")
        if not latest:
            return None
        return Deployment.from_dict(latest)

    async def close(self) -> None:
        """Close backend connections"""
        if self._initialized:
            await self._do_close()
            self._initialized = False

    async def _do_close(self) -> None:
        """Actual cleanup logic to be implemented by subclasses"""
        pass

    async def __aenter__(self):
        """Async context manager entry"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
