"""Pages project existence check and creation"""

import logging
from typing import Any, Dict, Optional, Tuple

from ..api.exceptions import ProjectNotFoundError
from ..backends.base import PagesBackend
from ..models.config import RetryPolicy
from ..utils.async_utils import retry_async
from .validation_engine import validate_project_name

logger = logging.getLogger(__name__)


class ProjectManager:
    """Makes sure the target project exists before deploying"""

    def __init__(self, backend: PagesBackend, retry_policy: Optional[RetryPolicy] = None):
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=1)

    async def ensure_project(self, project_name: str, create: bool = True) -> Tuple[Dict[str, Any], bool]:
        """
        Fetch the project, creating it when missing

        Args:
            project_name: Project name
            create: Create the project if it does not exist

        Returns:
            Tuple of (project data, created flag)

        Raises:
            ProjectNotFoundError: Project missing and ``create`` is False
        """
        validate_project_name(project_name)
        try:
            project = await retry_async(
                self.backend.get_project, project_name,
                policy=self.retry_policy,
                description="project lookup"
            )
            return project or {}, False
        except ProjectNotFoundError:
            if not create:
                raise

        logger.info("Project %s does not exist, creating it", project_name)
        project = await self.backend.create_project(project_name)
        return project or {}, True
