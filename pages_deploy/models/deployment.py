"""Deployment models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class MappedStatus(Enum):
    """Internal deployment state"""
    QUEUED = "queued"
    BUILDING = "building"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self in (MappedStatus.SUCCESS, MappedStatus.FAILURE)

    @property
    def progress(self) -> int:
        """Coarse progress indicator derived from the state"""
        return _PROGRESS[self]


_PROGRESS = {
    MappedStatus.QUEUED: 0,
    MappedStatus.BUILDING: 50,
    MappedStatus.DEPLOYING: 80,
    MappedStatus.SUCCESS: 100,
    MappedStatus.FAILURE: 100,
}


@dataclass(frozen=True)
class Stage:
    """Platform reported deployment stage"""
    name: str
    status: str
    started_on: Optional[str] = None
    ended_on: Optional[str] = None

    def log_line(self) -> str:
        return f"{self.name}: {self.status} ({self.started_on})"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Stage':
        """Create from dictionary"""
        return cls(
            name=str(data.get('name') or ''),
            status=str(data.get('status') or ''),
            started_on=data.get('started_on'),
            ended_on=data.get('ended_on'),
        )


@dataclass
class Deployment:
    """Deployment record owned by the platform (read only here)"""
    id: str
    url: Optional[str] = None
    stages: List[Stage] = field(default_factory=list)
    latest_stage: Optional[Stage] = None
    environment: Optional[str] = None
    created_on: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Deployment':
        """Create from the platform's deployment object"""
        stages = data.get('stages')
        latest = data.get('latest_stage')
        return cls(
            id=str(data.get('id') or ''),
            url=data.get('url') or None,
            stages=[Stage.from_dict(s) for s in stages] if isinstance(stages, list) else [],
            latest_stage=Stage.from_dict(latest) if isinstance(latest, dict) else None,
            environment=data.get('environment'),
            created_on=data.get('created_on'),
        )

    def current_stage(self) -> Optional[Stage]:
        """Stage that describes the deployment right now

        ``latest_stage`` when reported, otherwise the last stage that has
        left the idle state.
        """
        if self.latest_stage is not None:
            return self.latest_stage
        for stage in reversed(self.stages):
            if stage.status and stage.status != "idle":
                return stage
        return None


@dataclass
class DeploymentStatus:
    """Normalized snapshot of a deployment"""
    status: MappedStatus
    progress: int
    logs: List[str] = field(default_factory=list)
    url: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            'status': self.status.value,
            'progress': self.progress,
            'logs': self.logs,
        }
        if self.url:
            data['url'] = self.url
        if self.error_message:
            data['error_message'] = self.error_message
        return data


@dataclass
class CreatedDeployment:
    """Acknowledgement of a deployment creation"""
    id: str
    status: DeploymentStatus
    url: Optional[str] = None
    deployment: Optional[Deployment] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {'id': self.id, 'status': self.status.status.value}
        if self.url:
            data['url'] = self.url
        return data


class PollOutcome(Enum):
    """Why polling stopped"""
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class PollResult:
    """Final state of a polling task"""
    outcome: PollOutcome
    status: Optional[DeploymentStatus] = None  # last observed snapshot
    logs: List[str] = field(default_factory=list)
    polls: int = 0
    errors: int = 0

    @property
    def succeeded(self) -> bool:
        return (self.outcome == PollOutcome.COMPLETED
                and self.status is not None
                and self.status.status == MappedStatus.SUCCESS)

    @property
    def failed(self) -> bool:
        return (self.outcome == PollOutcome.COMPLETED
                and self.status is not None
                and self.status.status == MappedStatus.FAILURE)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'outcome': self.outcome.value,
            'status': self.status.to_dict() if self.status else None,
            'logs': self.logs,
            'polls': self.polls,
            'errors': self.errors,
        }
