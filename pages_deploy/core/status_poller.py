"""Deployment status tracking

Platform stages are normalized into a small state machine:

    queued -> building -> deploying -> success | failure

A status query that fails is logged and retried on the next interval;
only a platform reported failure or cancellation ends in ``failure``.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from ..api.exceptions import PollingError, ValidationError
from ..backends.base import PagesBackend
from ..constants import StageName, StageStatus
from ..models.config import PollingPolicy
from ..models.deployment import (
    Deployment,
    DeploymentStatus,
    MappedStatus,
    PollOutcome,
    PollResult,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[DeploymentStatus], None]


def map_stage(stage_name: Optional[str], stage_status: Optional[str]) -> MappedStatus:
    """
    Map one platform stage to the internal state

    Args:
        stage_name: Stage name (queued, initialize, build, deploy, ...)
        stage_status: Stage status (idle, active, success, failure, canceled, ...)

    Returns:
        MappedStatus, ``QUEUED`` for anything unrecognized
    """
    status = (stage_status or "").lower()
    name = (stage_name or "").lower()

    if status == StageStatus.SUCCESS:
        return MappedStatus.SUCCESS
    if status in (StageStatus.FAILURE, StageStatus.CANCELED):
        return MappedStatus.FAILURE
    if status == StageStatus.DEPLOYING:
        return MappedStatus.DEPLOYING
    if status in (StageStatus.ACTIVE, StageStatus.BUILDING):
        if name == StageName.DEPLOY:
            return MappedStatus.DEPLOYING
        if name == StageName.QUEUED:
            return MappedStatus.QUEUED
        return MappedStatus.BUILDING
    return MappedStatus.QUEUED


def map_deployment_status(deployment: Deployment) -> DeploymentStatus:
    """Normalize a platform deployment into a status snapshot"""
    stage = deployment.current_stage()
    if stage is None:
        mapped = MappedStatus.QUEUED
    else:
        mapped = map_stage(stage.name, stage.status)

    error_message = None
    if mapped == MappedStatus.FAILURE:
        if stage.status.lower() == StageStatus.CANCELED:
            error_message = f"Deployment canceled during {stage.name or 'unknown'} stage"
        else:
            error_message = f"Deployment failed during {stage.name or 'unknown'} stage"

    return DeploymentStatus(
        status=mapped,
        progress=mapped.progress,
        logs=[s.log_line() for s in deployment.stages],
        url=deployment.url,
        error_message=error_message,
    )


async def fetch_status(backend: PagesBackend,
                       project_name: str,
                       deployment_id: Optional[str] = None) -> DeploymentStatus:
    """
    Single normalized snapshot

    Args:
        backend: Platform backend
        project_name: Project name
        deployment_id: Deployment id, latest deployment of the project if None

    Returns:
        DeploymentStatus
    """
    if deployment_id:
        deployment = await backend.get_deployment(project_name, deployment_id)
    else:
        deployment = await backend.get_latest_deployment(project_name)
        if deployment is None:
            raise ValidationError(f"No deployments found for project {project_name}")
    return map_deployment_status(deployment)


class StatusPoller:
    """Cancellable background task following one deployment

    Usage::

        poller = StatusPoller(backend, "my-site", deployment_id).start()
        result = await poller.wait()      # or: await poller.cancel()
    """

    def __init__(self,
                 backend: PagesBackend,
                 project_name: str,
                 deployment_id: str,
                 policy: Optional[PollingPolicy] = None,
                 on_update: Optional[StatusCallback] = None):
        self.backend = backend
        self.project_name = project_name
        self.deployment_id = deployment_id
        self.policy = policy or PollingPolicy()
        self.on_update = on_update

        self._task: Optional[asyncio.Task] = None
        self._latest: Optional[DeploymentStatus] = None
        self._logs: List[str] = []
        self._seen_logs = set()
        self._polls = 0
        self._errors = 0
        self._result: Optional[PollResult] = None

    @property
    def latest(self) -> Optional[DeploymentStatus]:
        """Last snapshot observed"""
        return self._latest

    @property
    def logs(self) -> List[str]:
        """Accumulated stage log, newest last"""
        return list(self._logs)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> 'StatusPoller':
        """Schedule the polling task on the running loop"""
        if self._task is not None:
            raise RuntimeError("Poller already started")
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"poll-{self.project_name}-{self.deployment_id}"
        )
        return self

    async def wait(self) -> PollResult:
        """Wait until polling stops and return the final result"""
        if self._task is None:
            raise RuntimeError("Poller not started")
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return self._finish(PollOutcome.CANCELLED)
            raise

    async def cancel(self) -> PollResult:
        """
        Stop polling

        Returns once the task has stopped; no status query is issued
        after this returns.
        """
        if self._task is None:
            return self._finish(PollOutcome.CANCELLED)

        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._result is None or self._task.cancelled():
            return self._finish(PollOutcome.CANCELLED)
        return self._result

    async def __aenter__(self) -> 'StatusPoller':
        if self._task is None:
            self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cancel()

    def _finish(self, outcome: PollOutcome) -> PollResult:
        if self._result is None:
            self._result = PollResult(
                outcome=outcome,
                status=self._latest,
                logs=list(self._logs),
                polls=self._polls,
                errors=self._errors,
            )
        return self._result

    async def _run(self) -> PollResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.policy.timeout if self.policy.timeout else None

        # Give the platform time to initialize deployment state
        if not await self._sleep(self.policy.initial_delay, deadline):
            return self._finish(PollOutcome.TIMED_OUT)

        while True:
            status = await self._poll_once()
            if status is not None and status.is_terminal:
                logger.info("Deployment %s finished: %s", self.deployment_id, status.status.value)
                return self._finish(PollOutcome.COMPLETED)

            if not await self._sleep(self.policy.get_interval(self._polls), deadline):
                logger.warning("Stopped following deployment %s after %ss; final state unknown",
                               self.deployment_id, self.policy.timeout)
                return self._finish(PollOutcome.TIMED_OUT)

    async def _sleep(self, delay: float, deadline: Optional[float]) -> bool:
        """Sleep, bounded by the deadline; False once the deadline passed"""
        if deadline is None:
            await self.policy.sleep(delay)
            return True

        loop = asyncio.get_running_loop()
        remaining = deadline - loop.time()
        if remaining <= 0:
            return False
        await self.policy.sleep(min(delay, remaining))
        return loop.time() < deadline

    async def _poll_once(self) -> Optional[DeploymentStatus]:
        self._polls += 1
        try:
            deployment = await self.backend.get_deployment(self.project_name, self.deployment_id)
        except Exception as e:
            self._errors += 1
            error = PollingError(f"Status query for {self.deployment_id} failed: {e}", cause=e)
            logger.debug("%s", error)
            return None

        status = map_deployment_status(deployment)
        self._latest = status
        for line in status.logs:
            if line not in self._seen_logs:
                self._seen_logs.add(line)
                self._logs.append(line)

        if self.on_update is not None:
            self.on_update(status)
        return status
