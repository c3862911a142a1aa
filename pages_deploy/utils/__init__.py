"""Utility functions for pages-deploy"""

from .file_utils import format_size, guess_content_type, scan_directory
from .hash_utils import file_fingerprint, content_fingerprint

__all__ = [
    "format_size",
    "guess_content_type",
    "scan_directory",
    "file_fingerprint",
    "content_fingerprint",
]
