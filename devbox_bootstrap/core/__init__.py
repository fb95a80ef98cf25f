"""
Core modules for the bootstrap: orchestration, retry, path registration,
scaffolding and diagnostics.
"""

from .orchestrator import InstallerOrchestrator
from .path_registry import PathRegistrar, add_path_entry
from .retry import with_retry
from .scaffold import TerraformScaffolder

__all__ = [
    "InstallerOrchestrator",
    "PathRegistrar",
    "add_path_entry",
    "with_retry",
    "TerraformScaffolder"
]
