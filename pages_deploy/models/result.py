"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TYPE_CHECKING

from .deployment import DeploymentStatus, PollResult

if TYPE_CHECKING:
    from ..core.status_poller import StatusPoller


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DeployResult:
    """Result of one deployment attempt

    Returned as soon as the platform acknowledged the deployment; the
    build and publish phases are tracked separately by a poller.
    """

    project_name: str
    deployment_id: str
    initial_status: DeploymentStatus
    url: Optional[str] = None
    file_count: int = 0
    unique_count: int = 0
    uploaded_count: int = 0
    skipped_count: int = 0
    created_project: bool = False
    start_time: datetime = field(default_factory=_utcnow)
    end_time: Optional[datetime] = None
    poller: Optional['StatusPoller'] = field(default=None, repr=False, compare=False)
    final: Optional[PollResult] = None  # set when the caller waited for the poller

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def complete(self) -> None:
        """Mark operation as complete"""
        self.end_time = _utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "project_name": self.project_name,
            "deployment_id": self.deployment_id,
            "status": self.initial_status.to_dict(),
            "file_count": self.file_count,
            "unique_count": self.unique_count,
            "uploaded_count": self.uploaded_count,
            "skipped_count": self.skipped_count,
            "created_project": self.created_project,
            "duration": self.duration,
        }
        if self.url:
            data["url"] = self.url
        if self.final is not None:
            data["final"] = self.final.to_dict()
        return data
