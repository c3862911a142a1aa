"""Cloudflare Pages backend implementation"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import PagesBackend
from ..api.exceptions import (
    AuthenticationError,
    ConfigError,
    NetworkError,
    PlatformApiError,
    ProjectNotFoundError,
    RequestTimeoutError,
)
from ..constants import DEFAULT_PRODUCTION_BRANCH
from ..models.config import CloudflareConfig
from ..models.deployment import Deployment
from ..models.upload import UploadCredential, UploadPayloadItem, UploadResponse

logger = logging.getLogger(__name__)


class CloudflarePagesBackend(PagesBackend):
    """Cloudflare Pages direct-upload API over httpx"""

    def __init__(self,
                 settings: CloudflareConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Cloudflare backend

        Args:
            settings: Account, credentials, endpoint and timeouts
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(settings.to_dict())
        self.settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._asset_client: Optional[httpx.AsyncClient] = None
        self._account_id: Optional[str] = settings.account_id

    async def _do_initialize(self) -> None:
        """Create HTTP clients"""
        if not self.settings.has_credentials:
            raise ConfigError(
                "No Cloudflare credentials configured. Set CLOUDFLARE_API_TOKEN "
                "or CLOUDFLARE_API_KEY with CLOUDFLARE_EMAIL."
            )

        # Account scoped calls
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            headers=self.settings.auth_headers(),
            timeout=self.settings.request_timeout,
            transport=self._transport,
        )
        # Asset calls authenticate with the upload JWT only
        self._asset_client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.upload_timeout,
            transport=self._transport,
        )

    async def _do_close(self) -> None:
        """Close HTTP clients"""
        for client in (self._client, self._asset_client):
            if client is not None:
                await client.aclose()
        self._client = None
        self._asset_client = None

    async def _request(self,
                       client: httpx.AsyncClient,
                       method: str,
                       url: str,
                       *,
                       not_found_project: Optional[str] = None,
                       auth_message: str = "Cloudflare API authentication failed. Please check your API token.",
                       **kwargs) -> Any:
        """
        Send a request and unwrap the Cloudflare response envelope

        Args:
            client: Client to send with
            method: HTTP method
            url: Path relative to the API base URL
            not_found_project: Project name to report when the call returns 404
            auth_message: Message used for 401/403 answers
            **kwargs: Passed to httpx

        Returns:
            The ``result`` member of the envelope
        """
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request to Cloudflare API timed out: {method} {url}") from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Unable to connect to Cloudflare API ({e.__class__.__name__}). "
                "Please check your internet connection."
            ) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        errors = data.get("errors", []) if isinstance(data, dict) else []
        first_error = None
        if errors and isinstance(errors[0], dict):
            first_error = errors[0].get("message")

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(auth_message, status, errors)
        if status == 404 and not_found_project is not None:
            raise ProjectNotFoundError(not_found_project, errors)
        if status >= 500:
            raise PlatformApiError(
                first_error or "Cloudflare API server error. Please try again later.",
                status, errors
            )
        if status >= 400:
            raise PlatformApiError(first_error or "Invalid request to Cloudflare API", status, errors)

        if not isinstance(data, dict):
            raise PlatformApiError("Unexpected response from Cloudflare API", status)
        if not data.get("success", False):
            raise PlatformApiError(first_error or "Cloudflare API request failed", status, errors)

        return data.get("result")

    async def _account_client(self) -> httpx.AsyncClient:
        await self.initialize()
        return self._client

    async def get_account_id(self) -> str:
        """Configured account id, or the first account visible to the token"""
        if self._account_id:
            return self._account_id

        client = await self._account_client()
        accounts = await self._request(client, "GET", "/accounts")
        if not accounts:
            raise PlatformApiError("No Cloudflare accounts found for this API token", 404)
        account_id = accounts[0].get("id") if isinstance(accounts[0], dict) else None
        if not account_id:
            raise PlatformApiError("Invalid account data received from Cloudflare API", 500)

        logger.debug("Using Cloudflare account %s", account_id)
        self._account_id = account_id
        return account_id

    async def _project_path(self, project_name: str) -> str:
        account_id = await self.get_account_id()
        return f"/accounts/{account_id}/pages/projects/{project_name}"

    async def get_project(self, project_name: str) -> Dict[str, Any]:
        client = await self._account_client()
        return await self._request(
            client, "GET", await self._project_path(project_name),
            not_found_project=project_name
        )

    async def create_project(self, project_name: str) -> Dict[str, Any]:
        client = await self._account_client()
        account_id = await self.get_account_id()
        return await self._request(
            client, "POST", f"/accounts/{account_id}/pages/projects",
            json={
                "name": project_name,
                "production_branch": DEFAULT_PRODUCTION_BRANCH,
                "build_config": {"destination_dir": "/", "root_dir": "/"},
            }
        )

    async def get_upload_token(self, project_name: str) -> str:
        client = await self._account_client()
        result = await self._request(
            client, "GET", f"{await self._project_path(project_name)}/upload-token",
            not_found_project=project_name
        )
        return (result or {}).get("jwt") or ""

    async def check_missing(self, credential: UploadCredential, hashes: List[str]) -> List[str]:
        await self.initialize()
        result = await self._request(
            self._asset_client, "POST", "/pages/assets/check-missing",
            headers=credential.auth_header(),
            json={"hashes": hashes},
            timeout=self.settings.request_timeout,
            auth_message="Invalid or expired JWT token for asset upload",
        )
        return list(result or [])

    async def upload_assets(self,
                            credential: UploadCredential,
                            payload: List[UploadPayloadItem]) -> UploadResponse:
        await self.initialize()
        result = await self._request(
            self._asset_client, "POST", "/pages/assets/upload",
            headers=credential.auth_header(),
            json=[item.to_dict() for item in payload],
            auth_message="Invalid or expired JWT token for asset upload",
        )
        return UploadResponse.from_dict(result)

    async def create_deployment(self, project_name: str, manifest: Dict[str, str]) -> Deployment:
        client = await self._account_client()
        result = await self._request(
            client, "POST", f"{await self._project_path(project_name)}/deployments",
            files={"manifest": (None, json.dumps(manifest))},
            timeout=self.settings.upload_timeout,
            not_found_project=project_name,
        )
        return Deployment.from_dict(result or {})

    async def get_deployment(self, project_name: str, deployment_id: str) -> Deployment:
        client = await self._account_client()
        result = await self._request(
            client, "GET", f"{await self._project_path(project_name)}/deployments/{deployment_id}"
        )
        return Deployment.from_dict(result or {})
