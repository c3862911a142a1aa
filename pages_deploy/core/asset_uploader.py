"""Asset uploader: sends missing content in bounded, retried batches"""

import base64
import logging
from typing import Dict, List, Optional

from ..api.exceptions import FileUploadError, UploadPartialFailure, ValidationError, is_retryable
from ..backends.base import PagesBackend
from ..models.config import RetryPolicy, UploadConfig
from ..models.manifest import AssetSource
from ..models.upload import UploadCredential, UploadOutcome, UploadPayloadItem
from ..utils.async_utils import gather_bounded
from ..utils.file_utils import base64_size
from ..utils.hash_utils import content_fingerprint, read_file_async
from .validation_engine import ValidationEngine

logger = logging.getLogger(__name__)


class AssetUploader:
    """Uploads the content behind missing fingerprints"""

    def __init__(self,
                 backend: PagesBackend,
                 config: Optional[UploadConfig] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        """
        Initialize uploader

        Args:
            backend: Platform backend
            config: Batch caps and concurrency
            retry_policy: Bound and backoff for unsuccessful keys
        """
        self.backend = backend
        self.config = config or UploadConfig()
        self.retry_policy = retry_policy or RetryPolicy()
        self.validation_engine = ValidationEngine()

    def plan_batches(self, missing: List[str], index: Dict[str, AssetSource]) -> List[List[str]]:
        """
        Group fingerprints into batches

        A batch closes when adding the next item would exceed either the
        item count cap or the encoded byte cap. An item larger than the
        byte cap travels alone.

        Args:
            missing: Fingerprints to upload
            index: Fingerprint -> byte source

        Returns:
            List of fingerprint batches
        """
        batches: List[List[str]] = []
        current: List[str] = []
        current_bytes = 0

        for fingerprint in dict.fromkeys(missing):
            source = index.get(fingerprint)
            if source is None:
                raise ValidationError(f"Missing asset {fingerprint} is not part of the manifest")

            encoded = base64_size(source.size)
            if current and (len(current) >= self.config.max_batch_files
                            or current_bytes + encoded > self.config.max_batch_bytes):
                batches.append(current)
                current, current_bytes = [], 0

            current.append(fingerprint)
            current_bytes += encoded

        if current:
            batches.append(current)
        return batches

    async def load_payload(self,
                           keys: List[str],
                           index: Dict[str, AssetSource]) -> Dict[str, UploadPayloadItem]:
        """
        Read and encode the bytes of a batch

        Raises:
            ValidationError: A file changed since the manifest was built, or
                an item is malformed
        """
        items = {}
        for key in keys:
            source = index[key]
            content = await read_file_async(source.path)
            if content_fingerprint(content) != key:
                raise ValidationError(
                    f"File changed since the manifest was built: {source.path}",
                    path=str(source.path)
                )
            items[key] = UploadPayloadItem(
                key=key,
                value=base64.b64encode(content).decode("ascii"),
                content_type=source.content_type,
            )

        self.validation_engine.validate_payload(list(items.values())).raise_if_invalid()
        return items

    async def _upload_batch(self,
                            credential: UploadCredential,
                            keys: List[str],
                            index: Dict[str, AssetSource]) -> UploadOutcome:
        """Submit one batch, retrying unsuccessful keys"""
        items = await self.load_payload(keys, index)
        outcome = UploadOutcome(batch_count=1)
        pending = list(keys)
        attempt = 1

        while True:
            try:
                response = await self.backend.upload_assets(credential, [items[k] for k in pending])
                unsuccessful = set(response.unsuccessful_keys)
                failed = [k for k in pending if k in unsuccessful]
                if failed:
                    raise UploadPartialFailure(failed)
            except UploadPartialFailure as e:
                logger.warning("Upload batch incomplete: %s", e)
                failed = e.failed_keys
            except Exception as e:
                if not is_retryable(e):
                    raise
                logger.warning("Upload of %d asset(s) failed: %s", len(pending), e)
                failed = pending
            outcome.request_count += 1

            failed_set = set(failed)
            outcome.uploaded_keys.extend(k for k in pending if k not in failed_set)

            if not failed or attempt >= self.retry_policy.max_attempts:
                break

            logger.info("Retrying %d asset(s) (attempt %d/%d)",
                        len(failed), attempt + 1, self.retry_policy.max_attempts)
            await self.retry_policy.wait(attempt)
            attempt += 1
            pending = failed

        outcome.failed_keys = failed
        return outcome

    async def upload_missing(self,
                             credential: UploadCredential,
                             missing: List[str],
                             index: Dict[str, AssetSource],
                             raise_on_failure: bool = True) -> UploadOutcome:
        """
        Upload every missing fingerprint

        Batches run concurrently up to the configured cap; all of them
        finish (or exhaust their retries) before this returns.

        Args:
            credential: Upload credential
            missing: Fingerprints reported missing
            index: Fingerprint -> byte source from the manifest build
            raise_on_failure: Raise FileUploadError for permanently failed keys

        Returns:
            UploadOutcome with uploaded and failed keys

        Raises:
            FileUploadError: Keys still failing after the retry bound
        """
        outcome = UploadOutcome()
        if not missing:
            return outcome

        batches = self.plan_batches(missing, index)
        logger.info("Uploading %d asset(s) in %d batch(es)", sum(len(b) for b in batches), len(batches))

        results = await gather_bounded(
            (self._upload_batch(credential, batch, index) for batch in batches),
            self.config.concurrency
        )

        fatal = None
        for result in results:
            if isinstance(result, BaseException):
                fatal = fatal or result
            else:
                outcome.merge(result)

        if fatal is not None:
            raise fatal

        if outcome.failed_keys and raise_on_failure:
            raise FileUploadError(outcome.failed_keys)

        return outcome
