"""API layer for pages-deploy"""

from .deployer import Deployer, deploy, poll_status
from .exceptions import (
    ErrorKind,
    PagesDeployError,
    ValidationError,
    ConfigError,
    NetworkError,
    RequestTimeoutError,
    PlatformApiError,
    AuthenticationError,
    ProjectNotFoundError,
    UploadPartialFailure,
    FileUploadError,
    PollingError,
    DeploymentFailedError,
    is_retryable,
)

__all__ = [
    # Main classes
    "Deployer",

    # Convenience functions
    "deploy",
    "poll_status",

    # Exceptions
    "ErrorKind",
    "PagesDeployError",
    "ValidationError",
    "ConfigError",
    "NetworkError",
    "RequestTimeoutError",
    "PlatformApiError",
    "AuthenticationError",
    "ProjectNotFoundError",
    "UploadPartialFailure",
    "FileUploadError",
    "PollingError",
    "DeploymentFailedError",
    "is_retryable",
]
