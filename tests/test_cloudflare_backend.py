"""Tests for the Cloudflare Pages backend over a mocked HTTP transport"""

import json

import httpx
import pytest

from pages_deploy.api.exceptions import (
    AuthenticationError,
    ConfigError,
    NetworkError,
    PlatformApiError,
    ProjectNotFoundError,
    RequestTimeoutError,
)
from pages_deploy.backends import CloudflarePagesBackend
from pages_deploy.models import CloudflareConfig, UploadCredential, UploadPayloadItem

API_PREFIX = "/client/v4"
PROJECT_PATH = "/accounts/acc-1/pages/projects/my-site"
CREDENTIAL = UploadCredential("my-site", "upload-jwt")


def envelope(result, success=True, errors=None, status_code=200):
    return httpx.Response(status_code, json={
        "success": success,
        "errors": errors or [],
        "messages": [],
        "result": result,
    })


class MockPlatform:
    """Routes requests by method and API path"""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, response):
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(API_PREFIX):]
        response = self.routes.get((request.method, path))
        if response is None:
            return envelope(None, success=False, errors=[{"code": 7003, "message": "No route"}],
                            status_code=404)
        if isinstance(response, Exception):
            raise response
        # fresh response per request so routes can be hit repeatedly
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


@pytest.fixture
def platform():
    return MockPlatform()


def make_backend(platform, **settings):
    values = dict(account_id="acc-1", api_token="api-token")
    values.update(settings)
    return CloudflarePagesBackend(CloudflareConfig(**values), transport=httpx.MockTransport(platform))


class TestAccountCalls:
    @pytest.mark.asyncio
    async def test_get_project_uses_api_token(self, platform):
        platform.add("GET", PROJECT_PATH, envelope({"name": "my-site"}))

        async with make_backend(platform) as backend:
            project = await backend.get_project("my-site")

        assert project == {"name": "my-site"}
        assert platform.requests[0].headers["Authorization"] == "Bearer api-token"

    @pytest.mark.asyncio
    async def test_global_key_headers(self, platform):
        platform.add("GET", PROJECT_PATH, envelope({"name": "my-site"}))

        async with make_backend(platform, api_token=None, api_key="key", email="me@example.com") as backend:
            await backend.get_project("my-site")

        headers = platform.requests[0].headers
        assert headers["X-Auth-Email"] == "me@example.com"
        assert headers["X-Auth-Key"] == "key"
        assert "Authorization" not in headers

    @pytest.mark.asyncio
    async def test_account_id_discovered(self, platform):
        platform.add("GET", "/accounts", envelope([{"id": "acc-1", "name": "Me"}]))
        platform.add("GET", PROJECT_PATH, envelope({"name": "my-site"}))

        async with make_backend(platform, account_id=None) as backend:
            await backend.get_project("my-site")
            await backend.get_project("my-site")

        paths = [r.url.path for r in platform.requests]
        assert paths.count(API_PREFIX + "/accounts") == 1

    @pytest.mark.asyncio
    async def test_missing_project(self, platform):
        platform.add("GET", PROJECT_PATH, envelope(
            None, success=False, errors=[{"code": 8000007, "message": "Project not found"}], status_code=404
        ))

        async with make_backend(platform) as backend:
            with pytest.raises(ProjectNotFoundError) as exc_info:
                await backend.get_project("my-site")

        assert exc_info.value.project_name == "my-site"
        assert exc_info.value.errors[0]["code"] == 8000007

    @pytest.mark.asyncio
    async def test_create_project(self, platform):
        platform.add("POST", "/accounts/acc-1/pages/projects", envelope({"name": "my-site"}))

        async with make_backend(platform) as backend:
            await backend.create_project("my-site")

        body = json.loads(platform.requests[0].content)
        assert body["name"] == "my-site"
        assert body["production_branch"] == "main"

    @pytest.mark.asyncio
    async def test_upload_token(self, platform):
        platform.add("GET", PROJECT_PATH + "/upload-token", envelope({"jwt": "upload-jwt"}))

        async with make_backend(platform) as backend:
            assert await backend.get_upload_token("my-site") == "upload-jwt"

    @pytest.mark.asyncio
    async def test_create_deployment_sends_multipart_manifest(self, platform):
        platform.add("POST", PROJECT_PATH + "/deployments", envelope({
            "id": "dep-1",
            "url": "https://dep-1.my-site.pages.dev",
            "latest_stage": {"name": "queued", "status": "active"},
            "stages": [{"name": "queued", "status": "active"}],
        }))
        manifest = {"/index.html": "a" * 32}

        async with make_backend(platform) as backend:
            deployment = await backend.create_deployment("my-site", manifest)

        request = platform.requests[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="manifest"' in request.content
        assert json.dumps(manifest).encode() in request.content
        assert deployment.id == "dep-1"
        assert deployment.url == "https://dep-1.my-site.pages.dev"
        assert deployment.latest_stage.name == "queued"

    @pytest.mark.asyncio
    async def test_get_deployment(self, platform):
        platform.add("GET", PROJECT_PATH + "/deployments/dep-1", envelope({
            "id": "dep-1",
            "latest_stage": {"name": "deploy", "status": "success"},
        }))

        async with make_backend(platform) as backend:
            deployment = await backend.get_deployment("my-site", "dep-1")

        assert deployment.latest_stage.status == "success"

    @pytest.mark.asyncio
    async def test_latest_deployment_from_project(self, platform):
        platform.add("GET", PROJECT_PATH, envelope({
            "name": "my-site",
            "latest_deployment": {"id": "dep-3", "latest_stage": {"name": "build", "status": "active"}},
        }))

        async with make_backend(platform) as backend:
            deployment = await backend.get_latest_deployment("my-site")

        assert deployment.id == "dep-3"


class TestAssetCalls:
    @pytest.mark.asyncio
    async def test_check_missing_authenticates_with_upload_jwt(self, platform):
        platform.add("POST", "/pages/assets/check-missing", envelope(["b" * 32]))

        async with make_backend(platform) as backend:
            missing = await backend.check_missing(CREDENTIAL, ["a" * 32, "b" * 32])

        request = platform.requests[0]
        assert missing == ["b" * 32]
        assert request.headers["Authorization"] == "Bearer upload-jwt"
        assert json.loads(request.content) == {"hashes": ["a" * 32, "b" * 32]}

    @pytest.mark.asyncio
    async def test_upload_assets(self, platform):
        platform.add("POST", "/pages/assets/upload", envelope({
            "successful_key_count": 1,
            "unsuccessful_keys": ["b" * 32],
        }))
        payload = [
            UploadPayloadItem("a" * 32, "aGk=", "text/plain"),
            UploadPayloadItem("b" * 32, "aG8=", "text/css"),
        ]

        async with make_backend(platform) as backend:
            response = await backend.upload_assets(CREDENTIAL, payload)

        body = json.loads(platform.requests[0].content)
        assert body[0] == {"key": "a" * 32, "value": "aGk=", "metadata": {"contentType": "text/plain"},
                           "base64": True}
        assert platform.requests[0].headers["Authorization"] == "Bearer upload-jwt"
        assert response.unsuccessful_keys == ["b" * 32]
        assert response.successful_key_count == 1

    @pytest.mark.asyncio
    async def test_expired_jwt(self, platform):
        platform.add("POST", "/pages/assets/check-missing", httpx.Response(401, json={"success": False}))

        async with make_backend(platform) as backend:
            with pytest.raises(AuthenticationError, match="JWT"):
                await backend.check_missing(CREDENTIAL, ["a" * 32])


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_rejected_api_token(self, platform):
        platform.add("GET", PROJECT_PATH, httpx.Response(403, json={"success": False, "errors": []}))

        async with make_backend(platform) as backend:
            with pytest.raises(AuthenticationError) as exc_info:
                await backend.get_project("my-site")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self, platform):
        platform.add("GET", PROJECT_PATH + "/deployments/dep-1", httpx.Response(502, text="Bad gateway"))

        async with make_backend(platform) as backend:
            with pytest.raises(PlatformApiError) as exc_info:
                await backend.get_deployment("my-site", "dep-1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_client_error_message_from_envelope(self, platform):
        platform.add("POST", "/pages/assets/check-missing", envelope(
            None, success=False, errors=[{"code": 8000096, "message": "Invalid hashes"}], status_code=400
        ))

        async with make_backend(platform) as backend:
            with pytest.raises(PlatformApiError, match="Invalid hashes") as exc_info:
                await backend.check_missing(CREDENTIAL, ["bad"])

        assert not exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope(self, platform):
        platform.add("GET", PROJECT_PATH, envelope(None, success=False, errors=[{"message": "Nope"}]))

        async with make_backend(platform) as backend:
            with pytest.raises(PlatformApiError, match="Nope"):
                await backend.get_project("my-site")

    @pytest.mark.asyncio
    async def test_connection_failure(self, platform):
        platform.add("GET", PROJECT_PATH, httpx.ConnectError("connection refused"))

        async with make_backend(platform) as backend:
            with pytest.raises(NetworkError):
                await backend.get_project("my-site")

    @pytest.mark.asyncio
    async def test_timeout(self, platform):
        platform.add("GET", PROJECT_PATH, httpx.ReadTimeout("slow"))

        async with make_backend(platform) as backend:
            with pytest.raises(RequestTimeoutError):
                await backend.get_project("my-site")

    @pytest.mark.asyncio
    async def test_missing_credentials(self, platform):
        backend = make_backend(platform, api_token=None)

        with pytest.raises(ConfigError, match="No Cloudflare credentials"):
            await backend.initialize()
