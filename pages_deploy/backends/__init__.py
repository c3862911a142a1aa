"""Hosting platform backends"""

from .base import PagesBackend
from .cloudflare import CloudflarePagesBackend

__all__ = [
    "PagesBackend",
    "CloudflarePagesBackend",
]
