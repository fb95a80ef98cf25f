"""
Install-target data models.
"""

from typing import Callable, Optional

from pydantic import BaseModel, Field

from .environment import EnvironmentState
from .version import SemanticVersion


class ProbeResult(BaseModel):
    """What a presence-check found for one executable."""
    present: bool = Field(..., description="Whether the executable resolved on the search path")
    version: Optional[SemanticVersion] = Field(None, description="Parsed version, if present")
    location: Optional[str] = Field(None, description="Resolved executable path")
    raw_output: Optional[str] = Field(None, description="Output of the version command")

    @classmethod
    def absent(cls) -> "ProbeResult":
        return cls(present=False)


class PathRegistration(BaseModel):
    """A directory that must be on the search path after installation."""
    directory: str = Field(..., min_length=1, description="Directory to append to PATH")

    class Config:
        frozen = True


class InstallTarget(BaseModel):
    """A named capability the bootstrap run must leave present."""
    name: str = Field(..., description="Display name")
    check: Callable[[EnvironmentState], ProbeResult] = Field(..., description="Presence-check")
    minimum_version: Optional[SemanticVersion] = Field(None, description="Minimum acceptable version")
    install: Optional[Callable[[EnvironmentState], None]] = Field(
        None, description="Installation action; raises on failure"
    )
    path_registration: Optional[PathRegistration] = Field(
        None, description="Directory registered on PATH after a successful install"
    )

    def is_satisfied_by(self, probe: ProbeResult) -> bool:
        """True when the probe shows the target present at an acceptable version."""
        if not probe.present:
            return False
        if self.minimum_version is None:
            return True
        return probe.version is not None and probe.version >= self.minimum_version
