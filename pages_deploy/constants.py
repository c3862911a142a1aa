"""Global constants for pages-deploy"""

from enum import Enum
import re

APP_NAME = "pages-deploy"

# Project identification
PROJECT_CONFIG_FILE = ".pages-deploy.yaml"

# Cloudflare API
DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds
DEFAULT_UPLOAD_TIMEOUT = 60.0  # seconds
DEFAULT_PRODUCTION_BRANCH = "main"

# Environment variables
ENV_API_TOKEN = "CLOUDFLARE_API_TOKEN"
ENV_API_KEY = "CLOUDFLARE_API_KEY"
ENV_EMAIL = "CLOUDFLARE_EMAIL"
ENV_ACCOUNT_ID = "CLOUDFLARE_ACCOUNT_ID"
ENV_API_BASE_URL = "CLOUDFLARE_API_BASE_URL"

# Project naming (Cloudflare Pages rules)
PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
MAX_PROJECT_NAME_LENGTH = 58

# Manifest limits
FINGERPRINT_LENGTH = 32
MAX_ASSET_SIZE = 25 * 1024 * 1024  # 25 MiB
MAX_ASSET_COUNT = 20000
DEFAULT_CONTENT_TYPE = "application/octet-stream"
HASH_CHUNK_SIZE = 64 * 1024

# Upload limits
DEFAULT_CHECK_BATCH_SIZE = 1000
MAX_BUCKET_FILE_COUNT = 5000
MAX_BUCKET_SIZE = 50 * 1024 * 1024  # 50 MiB of base64 payload
DEFAULT_UPLOAD_CONCURRENCY = 3
DEFAULT_MAX_UPLOAD_ROUNDS = 3

# Retry policy defaults
DEFAULT_RETRY_COUNT = 5
DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_RETRY_BACKOFF = 2.0
DEFAULT_MAX_RETRY_DELAY = 30.0

# Polling policy defaults
DEFAULT_POLL_INITIAL_DELAY = 2.0
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_BACKOFF = 1.0
DEFAULT_POLL_MAX_INTERVAL = 30.0
DEFAULT_POLL_TIMEOUT = 600.0

# Files never published
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".hg/",
    ".svn/",
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    "*.swp",
    "*~",
    ".vscode/",
    ".idea/",
    # Pages Functions and worker sources are server-side code
    "_worker.js",
    "_routes.json",
    "functions/",
    "node_modules/",
    ".wrangler/",
    "__pycache__/",
    PROJECT_CONFIG_FILE,
]

# Logging
LOG_FORMAT = "%(message)s"


class StageStatus(str, Enum):
    """Stage status values reported by the platform"""
    IDLE = "idle"
    ACTIVE = "active"
    BUILDING = "building"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELED = "canceled"


class StageName(str, Enum):
    """Stage names reported by the platform"""
    QUEUED = "queued"
    INITIALIZE = "initialize"
    CLONE_REPO = "clone_repo"
    BUILD = "build"
    DEPLOY = "deploy"


class ErrorCode:
    """Error codes"""
    VALIDATION_ERROR = "PD001"
    CONFIG_ERROR = "PD002"
    NETWORK_ERROR = "PD003"
    TIMEOUT_ERROR = "PD004"
    PLATFORM_API_ERROR = "PD005"
    AUTHENTICATION_ERROR = "PD006"
    PROJECT_NOT_FOUND = "PD007"
    UPLOAD_PARTIAL_FAILURE = "PD008"
    FILE_UPLOAD_ERROR = "PD009"
    POLLING_ERROR = "PD010"
    DEPLOYMENT_FAILED = "PD011"


# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ROCKET = "🚀"
EMOJI_LINK = "🔗"
