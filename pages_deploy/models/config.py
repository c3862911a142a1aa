"""Configuration data models"""

import asyncio
from dataclasses import dataclass, field, fields
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_UPLOAD_TIMEOUT,
    DEFAULT_IGNORE_PATTERNS,
    MAX_ASSET_SIZE,
    MAX_ASSET_COUNT,
    DEFAULT_CHECK_BATCH_SIZE,
    MAX_BUCKET_FILE_COUNT,
    MAX_BUCKET_SIZE,
    DEFAULT_UPLOAD_CONCURRENCY,
    DEFAULT_MAX_UPLOAD_ROUNDS,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_POLL_INITIAL_DELAY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_BACKOFF,
    DEFAULT_POLL_MAX_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
)

SleepFunc = Callable[[float], Awaitable[None]]


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are dataclass fields of cls"""
    names = {f.name for f in fields(cls) if f.init}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class CloudflareConfig:
    """Cloudflare account and API access"""

    account_id: Optional[str] = None
    api_token: Optional[str] = None
    api_key: Optional[str] = None
    email: Optional[str] = None
    base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT

    @property
    def uses_global_key(self) -> bool:
        """Global API key auth takes precedence when both key and email are set"""
        return bool(self.api_key and self.email)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_token) or self.uses_global_key

    def auth_headers(self) -> Dict[str, str]:
        """Headers authenticating account level requests"""
        if self.uses_global_key:
            return {"X-Auth-Email": self.email, "X-Auth-Key": self.api_key}
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (secrets omitted)"""
        data = {
            "base_url": self.base_url,
            "request_timeout": self.request_timeout,
            "upload_timeout": self.upload_timeout,
        }
        if self.account_id:
            data["account_id"] = self.account_id
        if self.email:
            data["email"] = self.email
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CloudflareConfig':
        """Create from dictionary"""
        return cls(**_known_fields(cls, data))


@dataclass
class ManifestConfig:
    """Manifest builder settings"""

    ignore: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_file_size: int = MAX_ASSET_SIZE
    max_files: int = MAX_ASSET_COUNT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "ignore": self.ignore,
            "max_file_size": self.max_file_size,
            "max_files": self.max_files,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ManifestConfig':
        """Create from dictionary

        Extra ignore patterns are appended to the defaults unless
        ``replace_ignore`` is set.
        """
        data = dict(data or {})
        extra = data.pop("ignore", None)
        replace = data.pop("replace_ignore", False)
        config = cls(**_known_fields(cls, data))
        if extra:
            config.ignore = list(extra) if replace else config.ignore + [p for p in extra if p not in config.ignore]
        return config


@dataclass
class UploadConfig:
    """Missing-check and upload batching"""

    check_batch_size: int = DEFAULT_CHECK_BATCH_SIZE
    max_batch_files: int = MAX_BUCKET_FILE_COUNT
    max_batch_bytes: int = MAX_BUCKET_SIZE
    concurrency: int = DEFAULT_UPLOAD_CONCURRENCY
    verify_uploads: bool = True
    max_upload_rounds: int = DEFAULT_MAX_UPLOAD_ROUNDS

    def __post_init__(self):
        """Validate limits"""
        for name in ("check_batch_size", "max_batch_files", "max_batch_bytes",
                     "concurrency", "max_upload_rounds"):
            if getattr(self, name) < 1:
                raise ValueError(f"upload.{name} must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "check_batch_size": self.check_batch_size,
            "max_batch_files": self.max_batch_files,
            "max_batch_bytes": self.max_batch_bytes,
            "concurrency": self.concurrency,
            "verify_uploads": self.verify_uploads,
            "max_upload_rounds": self.max_upload_rounds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadConfig':
        """Create from dictionary"""
        return cls(**_known_fields(cls, data))


@dataclass
class RetryPolicy:
    """Bounded retry with exponential backoff

    ``sleep`` is injectable so tests can run without real delays.
    """

    max_attempts: int = DEFAULT_RETRY_COUNT
    delay: float = DEFAULT_RETRY_DELAY
    backoff_multiplier: float = DEFAULT_RETRY_BACKOFF
    max_delay: float = DEFAULT_MAX_RETRY_DELAY
    sleep: SleepFunc = field(default=asyncio.sleep, repr=False, compare=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("retry.max_attempts must be at least 1")

    def get_retry_delay(self, attempt: int) -> float:
        """Calculate retry delay for given attempt with exponential backoff"""
        delay = self.delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay)

    async def wait(self, attempt: int) -> None:
        """Sleep before retry number ``attempt`` (1-based)"""
        await self.sleep(self.get_retry_delay(attempt))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "max_attempts": self.max_attempts,
            "delay": self.delay,
            "backoff_multiplier": self.backoff_multiplier,
            "max_delay": self.max_delay,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RetryPolicy':
        """Create from dictionary"""
        return cls(**_known_fields(cls, data))


@dataclass
class PollingPolicy:
    """Deployment status polling schedule"""

    initial_delay: float = DEFAULT_POLL_INITIAL_DELAY
    interval: float = DEFAULT_POLL_INTERVAL
    backoff_multiplier: float = DEFAULT_POLL_BACKOFF
    max_interval: float = DEFAULT_POLL_MAX_INTERVAL
    timeout: Optional[float] = DEFAULT_POLL_TIMEOUT
    sleep: SleepFunc = field(default=asyncio.sleep, repr=False, compare=False)

    def get_interval(self, poll_number: int) -> float:
        """Delay after query number ``poll_number`` (1-based)"""
        interval = self.interval * (self.backoff_multiplier ** (poll_number - 1))
        return min(interval, self.max_interval)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "initial_delay": self.initial_delay,
            "interval": self.interval,
            "backoff_multiplier": self.backoff_multiplier,
            "max_interval": self.max_interval,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PollingPolicy':
        """Create from dictionary"""
        return cls(**_known_fields(cls, data))


@dataclass
class Config:
    """Complete configuration"""

    version: str = "1.0"
    cloudflare: CloudflareConfig = field(default_factory=CloudflareConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    polling: PollingPolicy = field(default_factory=PollingPolicy)

    # Logging
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary"""
        data = data or {}
        return cls(
            version=str(data.get("version", "1.0")),
            cloudflare=CloudflareConfig.from_dict(data.get("cloudflare", {})),
            manifest=ManifestConfig.from_dict(data.get("manifest", {})),
            upload=UploadConfig.from_dict(data.get("upload", {})),
            retry=RetryPolicy.from_dict(data.get("retry", {})),
            polling=PollingPolicy.from_dict(data.get("polling", {})),
            logging=data.get("logging", {}) or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "version": self.version,
            "cloudflare": self.cloudflare.to_dict(),
            "manifest": self.manifest.to_dict(),
            "upload": self.upload.to_dict(),
            "retry": self.retry.to_dict(),
            "polling": self.polling.to_dict(),
            "logging": self.logging,
        }
