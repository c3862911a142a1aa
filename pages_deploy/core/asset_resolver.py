"""Missing-asset resolution"""

import logging
from typing import List, Optional

from ..backends.base import PagesBackend
from ..constants import DEFAULT_CHECK_BATCH_SIZE
from ..models.config import RetryPolicy
from ..models.upload import UploadCredential
from ..utils.async_utils import retry_async
from .validation_engine import ValidationEngine

logger = logging.getLogger(__name__)


def partition(items: List[str], size: int) -> List[List[str]]:
    """Split items into consecutive chunks of at most ``size``"""
    return [items[i:i + size] for i in range(0, len(items), size)]


class MissingAssetResolver:
    """Asks the platform which fingerprints it does not hold yet

    Fingerprints that are not reported missing are treated as stored and
    are never uploaded again.
    """

    def __init__(self,
                 backend: PagesBackend,
                 batch_size: int = DEFAULT_CHECK_BATCH_SIZE,
                 retry_policy: Optional[RetryPolicy] = None):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.backend = backend
        self.batch_size = batch_size
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=1)
        self.validation_engine = ValidationEngine()

    async def resolve_missing(self,
                              credential: UploadCredential,
                              fingerprints: List[str]) -> List[str]:
        """
        Resolve the missing subset of fingerprints

        Batches are checked one after another; an error in any of them
        aborts the whole resolution.

        Args:
            credential: Upload credential
            fingerprints: Fingerprints to check

        Returns:
            Missing fingerprints, first-seen order, no duplicates

        Raises:
            ValidationError: Empty list or empty entries
        """
        self.validation_engine.validate_fingerprints(fingerprints).raise_if_invalid()

        unique = list(dict.fromkeys(fingerprints))
        requested = set(unique)
        batches = partition(unique, self.batch_size)
        missing = {}

        for number, batch in enumerate(batches, 1):
            result = await retry_async(
                self.backend.check_missing, credential, batch,
                policy=self.retry_policy,
                description=f"missing-asset check {number}/{len(batches)}"
            )
            for fingerprint in result:
                # Ignore anything the platform reports that was not asked about
                if fingerprint in requested:
                    missing.setdefault(fingerprint, None)

        logger.info("%d of %d assets missing on the platform", len(missing), len(unique))
        return list(missing)
