"""Upload credential issuance"""

import logging
from typing import Optional

from ..api.exceptions import AuthenticationError, ProjectNotFoundError
from ..backends.base import PagesBackend
from ..models.config import RetryPolicy
from ..models.upload import UploadCredential
from ..utils.async_utils import retry_async
from .validation_engine import validate_project_name

logger = logging.getLogger(__name__)


class UploadAuthorizer:
    """Obtains a project scoped upload credential for one attempt"""

    def __init__(self, backend: PagesBackend, retry_policy: Optional[RetryPolicy] = None):
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=1)

    async def get_upload_credential(self, project_name: str) -> UploadCredential:
        """
        Request a fresh upload credential

        Args:
            project_name: Pages project name

        Returns:
            UploadCredential valid for this attempt only

        Raises:
            AuthenticationError: Unknown project or issuance rejected
        """
        validate_project_name(project_name)

        try:
            token = await retry_async(
                self.backend.get_upload_token, project_name,
                policy=self.retry_policy,
                description="upload credential request"
            )
        except ProjectNotFoundError as e:
            raise AuthenticationError(
                f"Cannot issue upload credential: project '{project_name}' does not exist",
                404, e.errors
            ) from e

        if not token or not token.strip():
            raise AuthenticationError(
                f"Upload credential for project '{project_name}' was not issued", 0
            )

        logger.debug("Upload credential issued for %s", project_name)
        return UploadCredential(project_name=project_name, token=token.strip())
