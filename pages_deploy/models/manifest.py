"""Manifest models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Any


@dataclass(frozen=True)
class FileEntry:
    """File entry in manifest"""
    relative_path: str  # POSIX path relative to the deployment root
    fingerprint: str  # Content fingerprint
    size: int  # File size in bytes
    content_type: str  # MIME type inferred from extension

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'path': self.relative_path,
            'fingerprint': self.fingerprint,
            'size': self.size,
            'content_type': self.content_type
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileEntry':
        """Create from dictionary"""
        return cls(
            relative_path=data['path'],
            fingerprint=data['fingerprint'],
            size=data['size'],
            content_type=data['content_type']
        )


@dataclass(frozen=True)
class AssetSource:
    """Where the bytes behind a fingerprint can be read from"""
    path: Path
    size: int
    content_type: str


class Manifest:
    """Ordered mapping of relative path to content fingerprint

    Paths are unique; adding the same path twice is an error.
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = {}
        for path, fingerprint in (entries or {}).items():
            self.add(path, fingerprint)

    def add(self, path: str, fingerprint: str) -> None:
        """Add a path, refusing duplicates"""
        if path in self._entries:
            raise KeyError(f"Duplicate manifest path: {path}")
        self._entries[path] = fingerprint

    @property
    def fingerprints(self) -> List[str]:
        """Distinct fingerprints in first-seen order"""
        return list(dict.fromkeys(self._entries.values()))

    def to_dict(self) -> Dict[str, str]:
        """Plain path -> fingerprint mapping"""
        return dict(self._entries)

    def to_api_dict(self) -> Dict[str, str]:
        """Wire form, every path rooted at '/'"""
        return {f"/{path.lstrip('/')}": fingerprint for path, fingerprint in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Manifest':
        """Create from dictionary (leading '/' is stripped)"""
        return cls({path.lstrip('/'): fingerprint for path, fingerprint in data.items()})

    def __getitem__(self, path: str) -> str:
        return self._entries[path]

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Manifest):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Manifest({len(self._entries)} files, {len(self.fingerprints)} unique)"


@dataclass
class ManifestBuild:
    """Result of walking a deployment folder"""
    root: Path
    manifest: Manifest
    entries: List[FileEntry] = field(default_factory=list)
    index: Dict[str, AssetSource] = field(default_factory=dict)  # fingerprint -> source

    @property
    def total_size(self) -> int:
        """Total size of all files in bytes"""
        return sum(e.size for e in self.entries)

    @property
    def unique_size(self) -> int:
        """Size of distinct content in bytes"""
        return sum(s.size for s in self.index.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'root': str(self.root),
            'file_count': len(self.entries),
            'unique_count': len(self.index),
            'total_size': self.total_size,
            'files': [e.to_dict() for e in self.entries]
        }
