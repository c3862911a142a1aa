"""Caller-owned record of fingerprints known to be stored"""

import threading
from typing import Dict, Iterable, List, Set


class UploadedFingerprintCache:
    """Best-effort memory of fingerprints the platform confirmed

    Owned and passed in by the caller; nothing here is global. Only
    fingerprints confirmed stored are recorded, so a cache can skip work
    but never hide content that still has to be uploaded. Entries are kept
    per project because upload credentials are project scoped.
    """

    def __init__(self):
        self._known: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def record(self, project_name: str, fingerprints: Iterable[str]) -> None:
        """Remember confirmed fingerprints"""
        with self._lock:
            self._known.setdefault(project_name, set()).update(fingerprints)

    def filter_unknown(self, project_name: str, fingerprints: Iterable[str]) -> List[str]:
        """Fingerprints that are not known to be stored, input order kept"""
        with self._lock:
            known = self._known.get(project_name, set())
            return [f for f in fingerprints if f not in known]

    def forget(self, project_name: str, fingerprints: Iterable[str] = None) -> None:
        """Drop entries for a project, or only the given fingerprints"""
        with self._lock:
            if fingerprints is None:
                self._known.pop(project_name, None)
            else:
                self._known.get(project_name, set()).difference_update(fingerprints)

    def clear(self) -> None:
        with self._lock:
            self._known.clear()

    def __contains__(self, item) -> bool:
        project_name, fingerprint = item
        with self._lock:
            return fingerprint in self._known.get(project_name, set())

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._known.values())
