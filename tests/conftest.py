"""Shared fixtures: an in-memory Pages platform and sample sites"""

import asyncio
from pathlib import Path
from typing import Dict, List

import pytest

from pages_deploy.api.exceptions import ProjectNotFoundError
from pages_deploy.backends.base import PagesBackend
from pages_deploy.models import (
    Config,
    Deployment,
    PollingPolicy,
    RetryPolicy,
    Stage,
    UploadResponse,
)
from pages_deploy.utils.hash_utils import content_fingerprint

SITE_FILES = {
    "index.html": b"<html><body>home</body></html>",
    "about/index.html": b"<html><body>about</body></html>",
    "css/style.css": b"body { color: #333; }",
    "assets/copy.css": b"body { color: #333; }",  # same bytes as css/style.css
    ".git/config": b"[core]",
    "node_modules/lib/index.js": b"module.exports = 1;",
}

DEPLOYMENT_URL = "https://abc123.my-site.pages.dev"


class SleepRecorder:
    """Async sleep replacement that records delays and only yields"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


def make_deployment(stage_name: str = "queued",
                    stage_status: str = "active",
                    deployment_id: str = "dep-1",
                    url: str = DEPLOYMENT_URL) -> Deployment:
    """Deployment as the platform would report it"""
    stages = []
    for name in ("queued", "initialize", "clone_repo", "build", "deploy"):
        if name == stage_name:
            stages.append(Stage(name, stage_status, started_on=f"{name}-start"))
            break
        stages.append(Stage(name, "success", started_on=f"{name}-start"))
    return Deployment(
        id=deployment_id,
        url=url,
        stages=stages,
        latest_stage=stages[-1],
    )


class FakePagesBackend(PagesBackend):
    """In-memory platform recording every call"""

    def __init__(self, projects=("my-site",), stored=()):
        super().__init__()
        self.projects: Dict[str, dict] = {name: {"name": name} for name in projects}
        self.stored = set(stored)
        self.token = "upload-jwt"
        self.calls: List[str] = []

        self.check_batches: List[List[str]] = []
        self.check_errors: List[Exception] = []
        self.check_extra: List[str] = []

        self.upload_batches: List[List[str]] = []
        self.upload_values: Dict[str, str] = {}
        self.upload_errors: List[Exception] = []
        self.reject_keys = set()  # always unsuccessful
        self.flaky_keys: Dict[str, int] = {}  # unsuccessful this many times
        self.drop_keys: Dict[str, int] = {}  # reported stored, silently lost this many times
        self.upload_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

        self.created_manifests: List[Dict[str, str]] = []
        self.deployment_script: List = [make_deployment("queued", "active")]
        self.poll_count = 0

    async def get_project(self, project_name):
        self.calls.append("get_project")
        if project_name not in self.projects:
            raise ProjectNotFoundError(project_name)
        return self.projects[project_name]

    async def create_project(self, project_name):
        self.calls.append("create_project")
        self.projects[project_name] = {"name": project_name}
        return self.projects[project_name]

    async def get_upload_token(self, project_name):
        self.calls.append("get_upload_token")
        if project_name not in self.projects:
            raise ProjectNotFoundError(project_name)
        return self.token

    async def check_missing(self, credential, hashes):
        self.calls.append("check_missing")
        self.check_batches.append(list(hashes))
        if self.check_errors:
            raise self.check_errors.pop(0)
        return [h for h in hashes if h not in self.stored] + list(self.check_extra)

    async def upload_assets(self, credential, payload):
        self.calls.append("upload_assets")
        self.upload_batches.append([item.key for item in payload])

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.upload_delay)
        finally:
            self.in_flight -= 1

        if self.upload_errors:
            raise self.upload_errors.pop(0)

        unsuccessful = []
        for item in payload:
            if item.key in self.reject_keys:
                unsuccessful.append(item.key)
            elif self.flaky_keys.get(item.key, 0) > 0:
                self.flaky_keys[item.key] -= 1
                unsuccessful.append(item.key)
            elif self.drop_keys.get(item.key, 0) > 0:
                self.drop_keys[item.key] -= 1
            else:
                self.stored.add(item.key)
                self.upload_values[item.key] = item.value

        return UploadResponse(
            successful_key_count=len(payload) - len(unsuccessful),
            unsuccessful_keys=unsuccessful,
        )

    async def create_deployment(self, project_name, manifest):
        self.calls.append("create_deployment")
        self.created_manifests.append(dict(manifest))
        return make_deployment("queued", "active")

    async def get_deployment(self, project_name, deployment_id):
        self.poll_count += 1
        item = self.deployment_script.pop(0) if len(self.deployment_script) > 1 else self.deployment_script[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def backend():
    return FakePagesBackend()


@pytest.fixture
def retry_sleep():
    return SleepRecorder()


@pytest.fixture
def poll_sleep():
    return SleepRecorder()


@pytest.fixture
def config(retry_sleep, poll_sleep):
    """Configuration whose policies never really sleep"""
    cfg = Config()
    cfg.retry = RetryPolicy(max_attempts=3, delay=1.0, backoff_multiplier=2.0, sleep=retry_sleep)
    cfg.polling = PollingPolicy(initial_delay=2.0, interval=2.0, timeout=None, sleep=poll_sleep)
    return cfg


def write_site(root: Path, files: Dict[str, bytes]) -> Path:
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def site(tmp_path):
    """Sample static site"""
    return write_site(tmp_path / "site", SITE_FILES)


def fingerprint_of(content: bytes) -> str:
    return content_fingerprint(content)
