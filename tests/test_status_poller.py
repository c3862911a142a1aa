"""Tests for the background status poller"""

import asyncio

import pytest

from pages_deploy.api.exceptions import NetworkError, PlatformApiError, ValidationError
from pages_deploy.core import StatusPoller, fetch_status
from pages_deploy.models import MappedStatus, PollingPolicy, PollOutcome

from conftest import make_deployment


def fast_policy(sleep, **overrides):
    values = dict(initial_delay=2.0, interval=1.0, timeout=None, sleep=sleep)
    values.update(overrides)
    return PollingPolicy(**values)


class TestStatusPoller:
    @pytest.mark.asyncio
    async def test_follows_until_success(self, backend, poll_sleep):
        backend.deployment_script = [
            make_deployment("build", "active"),
            make_deployment("deploy", "active"),
            make_deployment("deploy", "success"),
        ]
        updates = []
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep), on_update=updates.append)

        result = await poller.start().wait()

        assert result.outcome == PollOutcome.COMPLETED
        assert result.succeeded
        assert result.polls == 3
        assert [u.status for u in updates] == [
            MappedStatus.BUILDING, MappedStatus.DEPLOYING, MappedStatus.SUCCESS,
        ]
        assert [u.progress for u in updates] == [50, 80, 100]
        assert poll_sleep.delays == [2.0, 1.0, 1.0]

    @pytest.mark.asyncio
    async def test_first_query_after_initial_delay(self, backend, poll_sleep):
        backend.deployment_script = [make_deployment("deploy", "success")]
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep, initial_delay=5.0))

        await poller.start().wait()

        assert poll_sleep.delays[0] == 5.0
        assert backend.poll_count == 1

    @pytest.mark.asyncio
    async def test_logs_accumulate_without_duplicates(self, backend, poll_sleep):
        backend.deployment_script = [
            make_deployment("build", "active"),
            make_deployment("build", "active"),
            make_deployment("deploy", "success"),
        ]
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep))

        result = await poller.start().wait()

        assert len(result.logs) == len(set(result.logs))
        assert "build: active (build-start)" in result.logs
        assert result.logs[-1] == "deploy: success (deploy-start)"
        assert poller.logs == result.logs

    @pytest.mark.asyncio
    async def test_query_errors_are_silent(self, backend, poll_sleep, caplog):
        backend.deployment_script = [
            NetworkError("connection reset"),
            PlatformApiError("Internal error", 500),
            make_deployment("deploy", "success"),
        ]
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep))

        with caplog.at_level("DEBUG", logger="pages_deploy.core.status_poller"):
            result = await poller.start().wait()

        assert result.succeeded
        assert result.errors == 2
        assert result.polls == 3
        assert "connection reset" in caplog.text

    @pytest.mark.asyncio
    async def test_platform_failure_is_terminal(self, backend, poll_sleep):
        backend.deployment_script = [make_deployment("build", "failure")]
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep))

        result = await poller.start().wait()

        assert result.failed
        assert result.status.error_message == "Deployment failed during build stage"
        assert backend.poll_count == 1

    @pytest.mark.asyncio
    async def test_interval_backs_off_to_cap(self, backend, poll_sleep):
        backend.deployment_script = [make_deployment("build", "active")] * 4 + [make_deployment("deploy", "success")]
        policy = fast_policy(poll_sleep, interval=1.0, backoff_multiplier=2.0, max_interval=3.0)

        await StatusPoller(backend, "my-site", "dep-1", policy).start().wait()

        assert poll_sleep.delays == [2.0, 1.0, 2.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_times_out_with_unknown_state(self, backend):
        backend.deployment_script = [make_deployment("build", "active")]
        policy = PollingPolicy(initial_delay=0, interval=0.01, timeout=0.1)

        result = await StatusPoller(backend, "my-site", "dep-1", policy).start().wait()

        assert result.outcome == PollOutcome.TIMED_OUT
        assert not result.succeeded and not result.failed
        assert result.status.status == MappedStatus.BUILDING

    @pytest.mark.asyncio
    async def test_cancel_stops_all_queries(self, backend):
        backend.deployment_script = [make_deployment("build", "active")]
        poller = StatusPoller(backend, "my-site", "dep-1",
                              PollingPolicy(initial_delay=0, interval=0.01, timeout=None)).start()

        await asyncio.sleep(0.05)
        result = await poller.cancel()
        calls_at_cancel = backend.poll_count
        await asyncio.sleep(0.05)

        assert result.outcome == PollOutcome.CANCELLED
        assert calls_at_cancel >= 1
        assert backend.poll_count == calls_at_cancel
        assert not poller.running

    @pytest.mark.asyncio
    async def test_cancel_during_initial_delay_makes_no_query(self, backend):
        poller = StatusPoller(backend, "my-site", "dep-1",
                              PollingPolicy(initial_delay=10, timeout=None)).start()
        await asyncio.sleep(0)

        result = await poller.cancel()

        assert result.outcome == PollOutcome.CANCELLED
        assert result.polls == 0
        assert backend.poll_count == 0

    @pytest.mark.asyncio
    async def test_cancel_after_completion_keeps_result(self, backend, poll_sleep):
        backend.deployment_script = [make_deployment("deploy", "success")]
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep)).start()

        completed = await poller.wait()
        assert await poller.cancel() is completed

    @pytest.mark.asyncio
    async def test_context_manager_cancels_on_exit(self, backend):
        backend.deployment_script = [make_deployment("build", "active")]

        async with StatusPoller(backend, "my-site", "dep-1",
                                PollingPolicy(initial_delay=0, interval=0.01, timeout=None)) as poller:
            await asyncio.sleep(0.03)

        assert not poller.running
        calls = backend.poll_count
        await asyncio.sleep(0.03)
        assert backend.poll_count == calls

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self, backend, poll_sleep):
        poller = StatusPoller(backend, "my-site", "dep-1", fast_policy(poll_sleep)).start()

        with pytest.raises(RuntimeError):
            poller.start()
        await poller.cancel()


class TestFetchStatus:
    @pytest.mark.asyncio
    async def test_by_id(self, backend):
        backend.deployment_script = [make_deployment("deploy", "active")]

        status = await fetch_status(backend, "my-site", "dep-1")

        assert status.status == MappedStatus.DEPLOYING

    @pytest.mark.asyncio
    async def test_latest_deployment(self, backend):
        backend.projects["my-site"]["latest_deployment"] = {
            "id": "dep-7",
            "latest_stage": {"name": "deploy", "status": "success"},
        }

        status = await fetch_status(backend, "my-site")

        assert status.status == MappedStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_project_without_deployments(self, backend):
        with pytest.raises(ValidationError, match="No deployments"):
            await fetch_status(backend, "my-site")
