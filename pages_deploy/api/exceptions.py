"""Exception definitions for pages-deploy API

Every error carries an ``ErrorKind`` tag so callers can dispatch on
``exc.kind`` instead of probing attributes.
"""

from enum import Enum
from typing import Any, Iterable, List, Optional

from ..constants import ErrorCode


class ErrorKind(Enum):
    """Error variants raised by the deployment pipeline"""
    VALIDATION = "validation"
    CONFIG = "config"
    NETWORK = "network"
    TIMEOUT = "timeout"
    PLATFORM_API = "platform_api"
    AUTHENTICATION = "authentication"
    PROJECT_NOT_FOUND = "project_not_found"
    UPLOAD_PARTIAL = "upload_partial"
    FILE_UPLOAD = "file_upload"
    POLLING = "polling"
    DEPLOYMENT_FAILED = "deployment_failed"


class PagesDeployError(Exception):
    """Base exception for pages-deploy"""

    kind: ErrorKind = ErrorKind.PLATFORM_API

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(PagesDeployError):
    """Invalid input: project name, oversized file, malformed payload"""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR)
        self.path = path


class ConfigError(PagesDeployError):
    """Configuration error"""

    kind = ErrorKind.CONFIG

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class NetworkError(PagesDeployError):
    """Connection level failure, retryable"""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, error_code: str = ErrorCode.NETWORK_ERROR):
        super().__init__(message, error_code)


class RequestTimeoutError(NetworkError):
    """A request exceeded its per-call timeout"""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TIMEOUT_ERROR)


class PlatformApiError(PagesDeployError):
    """Error reported by the hosting platform"""

    kind = ErrorKind.PLATFORM_API

    def __init__(self,
                 message: str,
                 status_code: int = 0,
                 errors: Optional[List[Any]] = None,
                 error_code: str = ErrorCode.PLATFORM_API_ERROR):
        super().__init__(message, error_code)
        self.status_code = status_code
        self.errors = errors or []

    @property
    def retryable(self) -> bool:
        """Server side and throttling errors are worth another try"""
        return self.status_code == 0 or self.status_code == 429 or self.status_code >= 500

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class AuthenticationError(PlatformApiError):
    """Credential rejected or not issued"""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str, status_code: int = 401, errors: Optional[List[Any]] = None):
        super().__init__(message, status_code, errors, ErrorCode.AUTHENTICATION_ERROR)


class ProjectNotFoundError(PlatformApiError):
    """Pages project does not exist"""

    kind = ErrorKind.PROJECT_NOT_FOUND

    def __init__(self, project_name: str, errors: Optional[List[Any]] = None):
        super().__init__(f"Project not found: {project_name}", 404, errors,
                         ErrorCode.PROJECT_NOT_FOUND)
        self.project_name = project_name


class UploadPartialFailure(PagesDeployError):
    """Some keys of an upload batch were not stored"""

    kind = ErrorKind.UPLOAD_PARTIAL

    def __init__(self, failed_keys: Iterable[str]):
        self.failed_keys = list(failed_keys)
        super().__init__(
            f"{len(self.failed_keys)} asset(s) not stored by the platform",
            ErrorCode.UPLOAD_PARTIAL_FAILURE
        )


class FileUploadError(PagesDeployError):
    """Assets could not be uploaded after exhausting retries"""

    kind = ErrorKind.FILE_UPLOAD

    def __init__(self, failed_keys: Iterable[str], message: Optional[str] = None):
        self.failed_keys = sorted(set(failed_keys))
        if message is None:
            message = f"Failed to upload {len(self.failed_keys)} asset(s): {', '.join(self.failed_keys)}"
        super().__init__(message, ErrorCode.FILE_UPLOAD_ERROR)


class PollingError(PagesDeployError):
    """Deployment status query failed; logged, never raised to callers"""

    kind = ErrorKind.POLLING

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.POLLING_ERROR)
        self.cause = cause


class DeploymentFailedError(PagesDeployError):
    """The platform reported a terminal failure for a deployment"""

    kind = ErrorKind.DEPLOYMENT_FAILED

    def __init__(self, deployment_id: str, message: str = "Deployment failed"):
        super().__init__(f"{message}: {deployment_id}", ErrorCode.DEPLOYMENT_FAILED)
        self.deployment_id = deployment_id


def is_retryable(exc: BaseException) -> bool:
    """Decide whether an error is transient

    Args:
        exc: Raised exception

    Returns:
        True for network errors, timeouts and retryable platform errors
    """
    if not isinstance(exc, PagesDeployError):
        return False

    kind = exc.kind
    if kind in (ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.UPLOAD_PARTIAL):
        return True
    if kind == ErrorKind.PLATFORM_API:
        return exc.retryable
    # authentication, not found, validation, config and terminal failures
    return False
