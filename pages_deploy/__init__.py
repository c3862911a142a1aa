"""Pages Deploy - Direct-upload deployments for static sites.

Publishes a local folder to a hosting platform's Pages product:
content-addressed assets are uploaded only when the platform does not
already hold them, then a deployment is created and optionally followed
until it is live.
"""

from .__version__ import __version__, __version_info__, __author__, __email__, __license__

# Core API
from .api.deployer import Deployer, deploy, poll_status

# Data models
from .models.config import Config, RetryPolicy, PollingPolicy
from .models.manifest import Manifest, ManifestBuild
from .models.deployment import MappedStatus, DeploymentStatus, PollOutcome, PollResult
from .models.result import DeployResult

# Pipeline pieces
from .core.fingerprint_cache import UploadedFingerprintCache
from .core.status_poller import StatusPoller

# Exceptions
from .api.exceptions import (
    ErrorKind,
    PagesDeployError,
    ValidationError,
    ConfigError,
    NetworkError,
    PlatformApiError,
    AuthenticationError,
    ProjectNotFoundError,
    FileUploadError,
    DeploymentFailedError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__email__",
    "__license__",

    # Main classes
    "Deployer",
    "StatusPoller",
    "UploadedFingerprintCache",

    # Core API functions
    "deploy",
    "poll_status",

    # Data models
    "Config",
    "RetryPolicy",
    "PollingPolicy",
    "Manifest",
    "ManifestBuild",
    "MappedStatus",
    "DeploymentStatus",
    "PollOutcome",
    "PollResult",
    "DeployResult",

    # Exceptions
    "ErrorKind",
    "PagesDeployError",
    "ValidationError",
    "ConfigError",
    "NetworkError",
    "PlatformApiError",
    "AuthenticationError",
    "ProjectNotFoundError",
    "FileUploadError",
    "DeploymentFailedError",
]
