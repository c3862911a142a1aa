"""File operation utilities"""

import fnmatch
import mimetypes
import os
import unicodedata
from pathlib import Path
from typing import Iterator, List, Optional

from ..constants import DEFAULT_CONTENT_TYPE


def format_size(size: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def base64_size(size: int) -> int:
    """Length of the base64 encoding of ``size`` bytes"""
    return 4 * ((size + 2) // 3)


def guess_content_type(path: str) -> str:
    """MIME type inferred from the file extension"""
    content_type, _ = mimetypes.guess_type(path, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def normalize_relative_path(relative_path: str) -> str:
    """POSIX separators, NFC form, no leading slash"""
    path = relative_path.replace(os.sep, '/').replace('\\', '/')
    return unicodedata.normalize('NFC', path).lstrip('/')


def is_excluded(relative_path: str, patterns: List[str], is_dir: bool = False) -> bool:
    """
    Check a path against exclude patterns

    A pattern with a trailing '/' only matches directories; other
    patterns match the name or the full relative path.

    Args:
        relative_path: POSIX path relative to the scanned root
        patterns: fnmatch patterns
        is_dir: Whether the path is a directory

    Returns:
        True if the path is excluded
    """
    name = relative_path.rsplit('/', 1)[-1]

    for pattern in patterns:
        if pattern.endswith('/'):
            if not is_dir:
                continue
            pattern = pattern.rstrip('/')
        if fnmatch.fnmatchcase(name, pattern) or fnmatch.fnmatchcase(relative_path, pattern):
            return True

    return False


def scan_directory(directory: Path,
                   exclude_patterns: Optional[List[str]] = None) -> Iterator[Path]:
    """
    Walk a directory yielding regular files in sorted order

    Excluded directories are pruned and never descended into. Symbolic
    links are skipped.

    Args:
        directory: Directory to scan
        exclude_patterns: Patterns to exclude

    Yields:
        File paths
    """
    exclude_patterns = exclude_patterns or []

    for current, dirnames, filenames in os.walk(directory):
        current_path = Path(current)
        rel_dir = current_path.relative_to(directory).as_posix()
        rel_dir = '' if rel_dir == '.' else rel_dir + '/'

        kept = []
        for dirname in sorted(dirnames):
            if (current_path / dirname).is_symlink():
                continue
            if not is_excluded(rel_dir + dirname, exclude_patterns, is_dir=True):
                kept.append(dirname)
        dirnames[:] = kept

        for filename in sorted(filenames):
            file_path = current_path / filename
            if file_path.is_symlink() or not file_path.is_file():
                continue
            if is_excluded(rel_dir + filename, exclude_patterns):
                continue
            yield file_path
