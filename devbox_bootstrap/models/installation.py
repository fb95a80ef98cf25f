"""
Installation outcome and run summary models.
"""

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class InstallStatus(str, Enum):
    """How a target ended up present."""
    ALREADY_SATISFIED = "already_satisfied"
    INSTALLED = "installed"
    WOULD_INSTALL = "would_install"


class InstallOutcome(BaseModel):
    """Result of ensuring a single target."""
    name: str = Field(..., description="Target name")
    status: InstallStatus = Field(..., description="Outcome status")
    attempts: int = Field(default=0, ge=0, description="Installation action invocations")
    detected_version: Optional[str] = Field(None, description="Version seen by the final presence-check")
    location: Optional[str] = Field(None, description="Resolved executable path")

    @property
    def changed(self) -> bool:
        return self.status == InstallStatus.INSTALLED

    class Config:
        json_schema_extra = {
            "example": {
                "name": "terraform",
                "status": "installed",
                "attempts": 1,
                "detected_version": "1.7.5",
                "location": "C:\\tools\\terraform\\terraform.exe"
            }
        }


class RunSummary(BaseModel):
    """Summary of a bootstrap run, written with --report."""
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    success: bool = False
    outcomes: List[InstallOutcome] = Field(default_factory=list)
    scaffolded: List[str] = Field(default_factory=list)
    auth_profile: Optional[str] = None
    error: Optional[str] = None

    def complete(self, success: bool, error: Optional[str] = None) -> None:
        """Mark the run as complete."""
        self.success = success
        self.error = error
        self.completed_at = datetime.utcnow()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
