"""
Data models for the bootstrap run.
"""

from .version import SemanticVersion, VersionRequirement
from .environment import EnvironmentState
from .retry import RetryPolicy
from .target import InstallTarget, PathRegistration, ProbeResult
from .installation import InstallOutcome, InstallStatus, RunSummary

__all__ = [
    "SemanticVersion",
    "VersionRequirement",
    "EnvironmentState",
    "RetryPolicy",
    "InstallTarget",
    "PathRegistration",
    "ProbeResult",
    "InstallOutcome",
    "InstallStatus",
    "RunSummary"
]
