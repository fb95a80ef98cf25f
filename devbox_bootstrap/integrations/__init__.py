"""
Integration modules for external tools, services and CI systems.
"""

from .ci import AzurePipelinesNotifier, GitHubActionsNotifier, NullNotifier, detect_notifier
from .path_store import InMemoryPathStore, WindowsUserPathStore, default_path_store
from .releases import ReleaseMetadataClient
from .version_probe import VersionProbe

__all__ = [
    "AzurePipelinesNotifier",
    "GitHubActionsNotifier",
    "NullNotifier",
    "detect_notifier",
    "InMemoryPathStore",
    "WindowsUserPathStore",
    "default_path_store",
    "ReleaseMetadataClient",
    "VersionProbe"
]
