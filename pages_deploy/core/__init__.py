"""Core pipeline components"""

from .validation_engine import ValidationEngine, ValidationResult, validate_project_name
from .manifest_engine import ManifestEngine
from .upload_authorizer import UploadAuthorizer
from .asset_resolver import MissingAssetResolver
from .asset_uploader import AssetUploader
from .status_poller import StatusPoller, map_deployment_status, map_stage, fetch_status
from .deployment_initiator import DeploymentInitiator
from .project_manager import ProjectManager
from .fingerprint_cache import UploadedFingerprintCache

__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "validate_project_name",
    "ManifestEngine",
    "UploadAuthorizer",
    "MissingAssetResolver",
    "AssetUploader",
    "StatusPoller",
    "map_deployment_status",
    "map_stage",
    "fetch_status",
    "DeploymentInitiator",
    "ProjectManager",
    "UploadedFingerprintCache",
]
