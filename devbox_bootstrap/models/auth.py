"""
Authentication profile models for the Databricks CLI.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, SecretStr, root_validator, validator


class AuthMode(str, Enum):
    """Authentication types understood by the Databricks unified CLI."""
    PAT = "pat"
    AZURE_CLI = "azure-cli"
    OAUTH_M2M = "oauth-m2m"
    AZURE_CLIENT_SECRET = "azure-client-secret"


REQUIRED_FIELDS = {
    AuthMode.PAT: ("token",),
    AuthMode.AZURE_CLI: (),
    AuthMode.OAUTH_M2M: ("client_id", "client_secret"),
    AuthMode.AZURE_CLIENT_SECRET: ("tenant_id", "client_id", "client_secret"),
}


class DatabricksProfile(BaseModel):
    """One section of ~/.databrickscfg."""
    name: str = Field(default="DEFAULT", min_length=1, description="Profile (section) name")
    auth_mode: AuthMode = Field(default=AuthMode.AZURE_CLI, description="Authentication type")
    host: str = Field(..., description="Workspace URL")
    token: Optional[SecretStr] = Field(None, description="Personal access token (pat)")
    client_id: Optional[str] = Field(None, description="Service principal application id")
    client_secret: Optional[SecretStr] = Field(None, description="Service principal secret")
    tenant_id: Optional[str] = Field(None, description="Entra ID tenant (azure-client-secret)")

    @validator('host')
    def validate_host(cls, v):
        v = v.strip().rstrip("/")
        if not v.startswith("https://"):
            raise ValueError("Databricks host must be an https:// workspace URL")
        return v

    @validator('name')
    def validate_name(cls, v):
        if any(ch in v for ch in "[]\n"):
            raise ValueError(f"Invalid profile name: {v!r}")
        return v

    @root_validator(skip_on_failure=True)
    def validate_mode_fields(cls, values):
        mode = values.get("auth_mode")
        missing = [field for field in REQUIRED_FIELDS.get(mode, ()) if not values.get(field)]
        if missing:
            raise ValueError(f"auth mode {mode.value} requires: {', '.join(missing)}")
        return values

    def entries(self) -> Dict[str, str]:
        """Key/value pairs written under the profile section."""
        entries = {"host": self.host}
        if self.auth_mode == AuthMode.PAT:
            entries["token"] = self.token.get_secret_value()
        elif self.auth_mode == AuthMode.OAUTH_M2M:
            entries["client_id"] = self.client_id
            entries["client_secret"] = self.client_secret.get_secret_value()
        elif self.auth_mode == AuthMode.AZURE_CLIENT_SECRET:
            entries["azure_tenant_id"] = self.tenant_id
            entries["azure_client_id"] = self.client_id
            entries["azure_client_secret"] = self.client_secret.get_secret_value()
        entries["auth_type"] = self.auth_mode.value
        return entries

    def render(self) -> str:
        """INI text for this profile."""
        lines = [f"[{self.name}]"]
        lines.extend(f"{key} = {value}" for key, value in self.entries().items())
        return "\n".join(lines) + "\n"
