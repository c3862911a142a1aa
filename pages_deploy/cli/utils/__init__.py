"""CLI utility functions"""

from .progress import (
    ProgressManager,
    DeploymentProgress,
)
from .output import (
    format_deploy_result,
    format_status,
    format_poll_result,
    format_manifest,
    print_json,
)

__all__ = [

    # Progress utilities
    'ProgressManager',
    'DeploymentProgress',

    # Output formatting
    'format_deploy_result',
    'format_status',
    'format_poll_result',
    'format_manifest',
    'print_json',
]
