"""CLI commands"""

from . import deploy
from . import status
from . import manifest

__all__ = [
    "deploy",
    "status",
    "manifest",
]
