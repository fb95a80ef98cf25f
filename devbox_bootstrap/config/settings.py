"""
Configuration settings for the machine bootstrap.
"""

from typing import ClassVar, Optional, Tuple
from pathlib import Path
from pydantic import BaseModel, Field, SecretStr, validator
from pydantic_settings import BaseSettings

from ..exceptions import VersionParseError
from ..models.auth import AuthMode
from ..models.retry import RetryPolicy
from ..models.version import SemanticVersion

PACKAGE_MANAGERS = ("choco", "winget")
INSTALL_METHODS = ("package", "archive", "msi", "script")


class RetryConfig(BaseModel):
    """Retry behaviour for installation actions."""
    max_attempts: int = Field(default=3, ge=1, description="Attempts per installation action")
    initial_delay_seconds: float = Field(default=2.0, ge=0, description="Initial retry delay")
    max_delay_seconds: Optional[float] = Field(None, gt=0, description="Cap on any single delay")

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay_seconds,
            max_delay=self.max_delay_seconds
        )


class ToolConfig(BaseModel):
    """How one prerequisite tool is checked and installed."""
    # Install methods the catalog can build for this tool
    install_methods: ClassVar[Tuple[str, ...]] = INSTALL_METHODS

    enabled: bool = Field(default=True, description="Ensure this tool during install")
    minimum_version: Optional[str] = Field(None, description="Minimum acceptable version")
    version: Optional[str] = Field(None, description="Version to install (latest if unset)")
    package_id: Optional[str] = Field(None, description="Package id override for the package manager")
    install_method: str = Field(default="package", description="package, archive, msi or script")

    @validator('minimum_version', 'version')
    def validate_version(cls, v):
        if v is None:
            return v
        try:
            return str(SemanticVersion.parse(v))
        except VersionParseError as e:
            raise ValueError(str(e))

    @validator('install_method')
    def validate_install_method(cls, v):
        if v not in cls.install_methods:
            raise ValueError(f"install_method must be one of {', '.join(cls.install_methods)}")
        return v

    def requirement(self) -> Optional[SemanticVersion]:
        return SemanticVersion.parse(self.minimum_version) if self.minimum_version else None


class ChocolateyConfig(ToolConfig):
    install_methods: ClassVar[Tuple[str, ...]] = ("script",)

    minimum_version: Optional[str] = Field("1.0.0", description="Minimum acceptable version")
    install_method: str = Field(default="script", description="Only the bootstrap script")


class GitConfig(ToolConfig):
    install_methods: ClassVar[Tuple[str, ...]] = ("package",)

    minimum_version: Optional[str] = Field("2.30.0", description="Minimum acceptable version")


class AzureCliConfig(ToolConfig):
    install_methods: ClassVar[Tuple[str, ...]] = ("package", "msi")

    minimum_version: Optional[str] = Field("2.50.0", description="Minimum acceptable version")


class TerraformConfig(ToolConfig):
    install_methods: ClassVar[Tuple[str, ...]] = ("package", "archive")

    minimum_version: Optional[str] = Field("1.5.0", description="Minimum acceptable version")
    version: Optional[str] = Field("1.7.5", description="Version to install (latest if unset)")
    install_method: str = Field(default="archive", description="package or archive")


class DatabricksCliConfig(ToolConfig):
    install_methods: ClassVar[Tuple[str, ...]] = ("package", "archive")

    minimum_version: Optional[str] = Field("0.200.0", description="Minimum acceptable version")
    version: Optional[str] = Field("0.218.0", description="Version to install (latest if unset)")
    install_method: str = Field(default="archive", description="package or archive")


class ToolsConfig(BaseModel):
    """Per-tool configuration, in install order."""
    chocolatey: ChocolateyConfig = Field(default_factory=ChocolateyConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    azure_cli: AzureCliConfig = Field(default_factory=AzureCliConfig)
    terraform: TerraformConfig = Field(default_factory=TerraformConfig)
    databricks: DatabricksCliConfig = Field(default_factory=DatabricksCliConfig)


class ScaffoldConfig(BaseModel):
    """Infrastructure-as-code project scaffolding."""
    directory: Path = Field(default=Path("infra"), description="Where the Terraform project lives")
    project_name: str = Field(default="devbox", description="Name used in resource templates")
    azurerm_version: str = Field(default="~> 3.100", description="azurerm provider constraint")
    databricks_provider_version: str = Field(default="~> 1.40", description="databricks provider constraint")


class DatabricksConfig(BaseModel):
    """Databricks CLI authentication profile."""
    host: Optional[str] = Field(None, description="Workspace URL; auth is skipped when unset")
    profile: str = Field(default="DEFAULT", description="Profile section name")
    auth_mode: AuthMode = Field(default=AuthMode.AZURE_CLI, description="Authentication type")
    token: Optional[SecretStr] = Field(None, description="Personal access token")
    client_id: Optional[str] = Field(None, description="Service principal application id")
    client_secret: Optional[SecretStr] = Field(None, description="Service principal secret")
    tenant_id: Optional[str] = Field(None, description="Entra ID tenant id")
    config_path: Path = Field(default_factory=lambda: Path.home() / ".databrickscfg")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        description="Log format"
    )
    file_path: Optional[Path] = Field(default=Path("logs/bootstrap.log"))
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")


class Settings(BaseSettings):
    """Main application settings."""
    # Component configs
    retry: RetryConfig = Field(default_factory=RetryConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    scaffold: ScaffoldConfig = Field(default_factory=ScaffoldConfig)
    databricks: DatabricksConfig = Field(default_factory=DatabricksConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Installation
    package_manager: str = Field(default="choco", description="choco or winget")
    install_root: Path = Field(default=Path("C:/tools"), description="Root for direct-download installs")

    # Operational settings
    dry_run: bool = Field(default=False, description="Probe only; report what would be installed")

    class Config:
        env_prefix = "DEVBOX_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra fields from environment

    @validator('package_manager')
    def validate_package_manager(cls, v):
        v = v.lower()
        if v not in PACKAGE_MANAGERS:
            raise ValueError(f"package_manager must be one of {', '.join(PACKAGE_MANAGERS)}")
        return v
