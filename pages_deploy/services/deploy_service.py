"""Deployment pipeline service

One call to :meth:`DeployService.deploy` is one deployment attempt:

    manifest -> credential -> missing check -> upload (until nothing is
    missing) -> create deployment -> optional detached status poller

Nothing is shared between attempts except an optional, caller-owned
:class:`UploadedFingerprintCache`.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..api.exceptions import FileUploadError
from ..backends.base import PagesBackend
from ..core.asset_resolver import MissingAssetResolver
from ..core.asset_uploader import AssetUploader
from ..core.deployment_initiator import DeploymentInitiator
from ..core.fingerprint_cache import UploadedFingerprintCache
from ..core.manifest_engine import ManifestEngine
from ..core.project_manager import ProjectManager
from ..core.status_poller import StatusCallback, StatusPoller, fetch_status
from ..core.upload_authorizer import UploadAuthorizer
from ..core.validation_engine import validate_project_name
from ..models.config import Config, PollingPolicy
from ..models.deployment import DeploymentStatus
from ..models.manifest import ManifestBuild
from ..models.result import DeployResult
from ..models.upload import UploadCredential
from ..utils.file_utils import format_size

logger = logging.getLogger(__name__)


class DeployService:
    """Runs the deployment pipeline against a platform backend"""

    def __init__(self,
                 backend: PagesBackend,
                 config: Optional[Config] = None,
                 cache: Optional[UploadedFingerprintCache] = None):
        """Initialize deploy service

        Args:
            backend: Platform backend (not owned; the caller closes it)
            config: Pipeline configuration
            cache: Optional caller-owned record of stored fingerprints
        """
        self.backend = backend
        self.config = config or Config()
        self.cache = cache

        retry = self.config.retry
        self.manifest_engine = ManifestEngine(self.config.manifest)
        self.project_manager = ProjectManager(backend, retry)
        self.authorizer = UploadAuthorizer(backend, retry)
        self.resolver = MissingAssetResolver(backend, self.config.upload.check_batch_size, retry)
        self.uploader = AssetUploader(backend, self.config.upload, retry)
        self.initiator = DeploymentInitiator(backend)

    def build_manifest(self, folder: Union[str, Path]) -> ManifestBuild:
        """Build a fresh manifest for a folder (no network access)"""
        return self.manifest_engine.build(folder)

    async def deploy(self,
                     project_name: str,
                     folder: Union[str, Path],
                     create_project: bool = True,
                     check_project: bool = True,
                     watch: bool = False,
                     on_update: Optional[StatusCallback] = None,
                     polling: Optional[PollingPolicy] = None) -> DeployResult:
        """
        Run one deployment attempt

        Returns as soon as the platform acknowledged the deployment. With
        ``watch`` the result carries a started :class:`StatusPoller`.

        Args:
            project_name: Pages project name
            folder: Folder to publish
            create_project: Create the project when it does not exist
            check_project: Look the project up before deploying
            watch: Start a background status poller
            on_update: Callback for every status snapshot of the poller
            polling: Polling policy override

        Returns:
            DeployResult

        Raises:
            ValidationError: Bad project name or folder contents
            PlatformApiError: Fatal platform error
            FileUploadError: Assets could not be uploaded; no deployment
                was created
        """
        start_time = datetime.now(timezone.utc)
        validate_project_name(project_name)
        build = self.build_manifest(folder)

        result_created_project = False
        if check_project:
            _, result_created_project = await self.project_manager.ensure_project(
                project_name, create=create_project
            )

        credential = await self.authorizer.get_upload_credential(project_name)
        uploaded = await self._sync_assets(project_name, credential, build)
        del credential

        created = await self.initiator.create_deployment(project_name, build.manifest)
        if created.url:
            logger.info("Deployment URL: %s", created.url)

        result = DeployResult(
            project_name=project_name,
            deployment_id=created.id,
            initial_status=created.status,
            url=created.url,
            file_count=len(build.entries),
            unique_count=len(build.index),
            uploaded_count=len(uploaded),
            skipped_count=len(build.index) - len(uploaded),
            created_project=result_created_project,
            start_time=start_time,
        )
        result.complete()

        if watch:
            result.poller = self.watch(project_name, created.id, on_update=on_update, policy=polling)

        return result

    async def _sync_assets(self,
                           project_name: str,
                           credential: UploadCredential,
                           build: ManifestBuild) -> List[str]:
        """Upload until the platform holds every fingerprint of the manifest

        Returns:
            Fingerprints uploaded during this attempt
        """
        fingerprints = build.manifest.fingerprints
        to_check = fingerprints
        if self.cache is not None:
            to_check = self.cache.filter_unknown(project_name, fingerprints)

        missing = await self.resolver.resolve_missing(credential, to_check) if to_check else []
        if missing:
            logger.info("%d new asset(s) to upload (%s)", len(missing),
                        format_size(sum(build.index[f].size for f in missing)))
        else:
            logger.info("All %d asset(s) already stored", len(fingerprints))

        uploaded: Dict[str, None] = {}
        upload_round = 0
        max_rounds = self.config.upload.max_upload_rounds

        while missing:
            if upload_round >= max_rounds:
                raise FileUploadError(
                    missing,
                    f"{len(missing)} asset(s) still missing after {max_rounds} upload round(s): "
                    f"{', '.join(sorted(missing))}"
                )
            upload_round += 1

            outcome = await self.uploader.upload_missing(credential, missing, build.index)
            uploaded.update(dict.fromkeys(outcome.uploaded_keys))

            if not self.config.upload.verify_uploads:
                break
            missing = await self.resolver.resolve_missing(credential, missing)
            if missing:
                logger.warning("%d uploaded asset(s) not confirmed by the platform", len(missing))

        if self.cache is not None:
            self.cache.record(project_name, fingerprints)
        return list(uploaded)

    def watch(self,
              project_name: str,
              deployment_id: str,
              on_update: Optional[StatusCallback] = None,
              policy: Optional[PollingPolicy] = None) -> StatusPoller:
        """Start a background poller for a deployment"""
        validate_project_name(project_name)
        return StatusPoller(
            self.backend,
            project_name,
            deployment_id,
            policy=policy or self.config.polling,
            on_update=on_update,
        ).start()

    async def poll_status(self,
                          project_name: str,
                          deployment_id: Optional[str] = None) -> DeploymentStatus:
        """Single normalized snapshot of a deployment"""
        validate_project_name(project_name)
        return await fetch_status(self.backend, project_name, deployment_id)
