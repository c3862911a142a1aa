"""Data models for pages-deploy"""

from .config import (
    Config,
    CloudflareConfig,
    ManifestConfig,
    UploadConfig,
    RetryPolicy,
    PollingPolicy,
)
from .manifest import FileEntry, AssetSource, Manifest, ManifestBuild
from .upload import UploadCredential, UploadPayloadItem, UploadResponse, UploadOutcome
from .deployment import (
    MappedStatus,
    Stage,
    Deployment,
    DeploymentStatus,
    CreatedDeployment,
    PollOutcome,
    PollResult,
)
from .result import DeployResult

__all__ = [
    "Config",
    "CloudflareConfig",
    "ManifestConfig",
    "UploadConfig",
    "RetryPolicy",
    "PollingPolicy",
    "FileEntry",
    "AssetSource",
    "Manifest",
    "ManifestBuild",
    "UploadCredential",
    "UploadPayloadItem",
    "UploadResponse",
    "UploadOutcome",
    "MappedStatus",
    "Stage",
    "Deployment",
    "DeploymentStatus",
    "CreatedDeployment",
    "PollOutcome",
    "PollResult",
    "DeployResult",
]
