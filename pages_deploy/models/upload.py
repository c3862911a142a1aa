"""Upload protocol models"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class UploadCredential:
    """Short-lived, project scoped upload token

    Valid for one deployment attempt only. The token never appears in
    ``repr`` so it cannot leak through logging.
    """
    project_name: str
    token: str = field(repr=False)

    def auth_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def __str__(self) -> str:
        return f"<upload credential for {self.project_name}>"


@dataclass
class UploadPayloadItem:
    """One asset in an upload request"""
    key: str  # fingerprint
    value: str  # base64 encoded bytes
    content_type: str
    base64: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Wire form"""
        return {
            "key": self.key,
            "value": self.value,
            "metadata": {"contentType": self.content_type},
            "base64": self.base64,
        }


@dataclass
class UploadResponse:
    """Platform answer to one upload request"""
    successful_key_count: int = 0
    unsuccessful_keys: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadResponse':
        """Create from the ``result`` object of the API envelope"""
        data = data or {}
        return cls(
            successful_key_count=int(data.get("successful_key_count") or 0),
            unsuccessful_keys=list(data.get("unsuccessful_keys") or []),
        )


@dataclass
class UploadOutcome:
    """Aggregated result of uploading missing assets"""
    uploaded_keys: List[str] = field(default_factory=list)
    failed_keys: List[str] = field(default_factory=list)
    batch_count: int = 0
    request_count: int = 0

    @property
    def is_complete(self) -> bool:
        return not self.failed_keys

    def merge(self, other: 'UploadOutcome') -> None:
        """Merge another outcome into this one"""
        self.uploaded_keys = list(dict.fromkeys(self.uploaded_keys + other.uploaded_keys))
        self.failed_keys = list(dict.fromkeys(self.failed_keys + other.failed_keys))
        self.batch_count += other.batch_count
        self.request_count += other.request_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "uploaded_keys": self.uploaded_keys,
            "failed_keys": self.failed_keys,
            "batch_count": self.batch_count,
            "request_count": self.request_count,
        }
