"""Hash calculation utilities"""

import hashlib
from pathlib import Path

import aiofiles

from ..constants import FINGERPRINT_LENGTH, HASH_CHUNK_SIZE


def calculate_file_hash(file_path: Path,
                        algorithm: str = "sha256",
                        chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """
    Calculate file hash

    Args:
        file_path: Path to file
        algorithm: Hash algorithm
        chunk_size: Read chunk size

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hash_func.update(chunk)

    return hash_func.hexdigest()


def calculate_content_hash(content: bytes, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content bytes

    Args:
        content: Content bytes
        algorithm: Hash algorithm

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)
    hash_func.update(content)
    return hash_func.hexdigest()


def file_fingerprint(file_path: Path) -> str:
    """Content fingerprint of a file (path does not take part)"""
    return calculate_file_hash(file_path)[:FINGERPRINT_LENGTH]


def content_fingerprint(content: bytes) -> str:
    """Content fingerprint of in-memory bytes, equal to file_fingerprint for the same bytes"""
    return calculate_content_hash(content)[:FINGERPRINT_LENGTH]


async def read_file_async(file_path: Path) -> bytes:
    """Read a whole file without blocking the event loop"""
    async with aiofiles.open(file_path, 'rb') as f:
        return await f.read()
