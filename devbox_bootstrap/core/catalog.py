"""
The prerequisite tools a development machine needs, in install order.

Order matters: the package manager must resolve before anything is installed
through it, and later tools may rely on PATH entries registered earlier.
"""

import logging
import shutil
import subprocess
import urllib.request
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..config.settings import Settings, ToolConfig
from ..exceptions import ReleaseLookupError
from ..integrations.installers import (
    ArchiveInstaller,
    MsiInstaller,
    PackageManagerInstaller,
    chocolatey_bootstrap,
)
from ..integrations.releases import ReleaseMetadataClient
from ..integrations.version_probe import VersionProbe
from ..models.environment import EnvironmentState
from ..models.target import InstallTarget, PathRegistration
from ..models.version import SemanticVersion

logger = logging.getLogger(__name__)

TERRAFORM_ARCHIVE_URL = "https://releases.hashicorp.com/terraform/{version}/terraform_{version}_windows_amd64.zip"
DATABRICKS_ARCHIVE_URL = (
    "https://github.com/databricks/cli/releases/download/v{version}/databricks_cli_{version}_windows_amd64.zip"
)
AZURE_CLI_MSI_URL = "https://aka.ms/installazurecliwindowsx64"

CHOCOLATEY_BIN = r"C:\ProgramData\chocolatey\bin"
GIT_CMD_DIR = r"C:\Program Files\Git\cmd"
AZURE_CLI_BIN = r"C:\Program Files\Microsoft SDKs\Azure\CLI2\wbin"

PACKAGE_IDS: Dict[str, Dict[str, str]] = {
    "git": {"choco": "git", "winget": "Git.Git"},
    "azure-cli": {"choco": "azure-cli", "winget": "Microsoft.AzureCLI"},
    "terraform": {"choco": "terraform", "winget": "Hashicorp.Terraform"},
    "databricks": {"choco": "databricks-cli", "winget": "Databricks.DatabricksCLI"},
}

# name -> (executable, version flags)
PROBES = {
    "chocolatey": ("choco", ("--version",)),
    "winget": ("winget", ("--version",)),
    "git": ("git", ("--version",)),
    "azure-cli": ("az", ("--version",)),
    "terraform": ("terraform", ("-version",)),
    "databricks": ("databricks", ("--version",)),
}


def resolve_version(name: str,
                    config: ToolConfig,
                    lookup: Callable[[], SemanticVersion]) -> str:
    """
    Pick the version to download: the pinned one, else the latest published,
    else the configured minimum when the metadata service is unavailable.
    """
    if config.version:
        return config.version
    try:
        return str(lookup())
    except ReleaseLookupError as e:
        if not config.minimum_version:
            logger.error(f"Cannot determine a {name} version to install: {e}")
            raise
        logger.warning(f"{e}; falling back to {name} {config.minimum_version}")
        return config.minimum_version


class ReleaseArchiveInstaller:
    """Resolves the release version at install time, then installs the archive."""

    def __init__(self,
                 name: str,
                 url_template: str,
                 destination: Path,
                 expected_member: str,
                 config: ToolConfig,
                 lookup: Callable[[], SemanticVersion],
                 opener: Callable = urllib.request.urlopen):
        self.name = name
        self.url_template = url_template
        self.destination = destination
        self.expected_member = expected_member
        self.config = config
        self.lookup = lookup
        self.opener = opener

    def __call__(self, state: EnvironmentState) -> None:
        version = resolve_version(self.name, self.config, self.lookup)
        url = self.url_template.format(version=version)
        ArchiveInstaller(url, self.destination, self.expected_member, opener=self.opener)(state)


def build_probes(runner: Callable = subprocess.run,
                 which: Callable = shutil.which) -> Dict[str, VersionProbe]:
    """A version probe for every known tool."""
    return {
        name: VersionProbe(executable, flags, runner=runner, which=which)
        for name, (executable, flags) in PROBES.items()
    }


def build_targets(settings: Settings,
                  releases: Optional[ReleaseMetadataClient] = None,
                  runner: Callable = subprocess.run,
                  opener: Callable = urllib.request.urlopen,
                  which: Callable = shutil.which,
                  only: Optional[Sequence[str]] = None) -> List[InstallTarget]:
    """
    Build the ordered target list from settings.

    Args:
        settings: Application settings
        releases: Release-metadata client for unpinned direct downloads
        runner: subprocess.run-compatible callable for probes and installers
        opener: urlopen-compatible callable for downloads
        which: shutil.which-compatible callable
        only: Restrict to these target names (order is still the catalog's)

    Returns:
        Install targets in dependency order
    """
    releases = releases or ReleaseMetadataClient(opener=opener)
    probes = build_probes(runner=runner, which=which)
    tools = settings.tools
    manager = settings.package_manager
    root = Path(settings.install_root)

    def package(name: str, config: ToolConfig) -> PackageManagerInstaller:
        package_id = config.package_id or PACKAGE_IDS[name][manager]
        return PackageManagerInstaller(
            package_id, manager=manager, version=config.version, runner=runner, which=which
        )

    targets: List[InstallTarget] = []

    if manager == "choco":
        if tools.chocolatey.enabled:
            targets.append(InstallTarget(
                name="chocolatey",
                check=probes["chocolatey"],
                minimum_version=tools.chocolatey.requirement(),
                install=chocolatey_bootstrap(runner=runner),
                path_registration=PathRegistration(directory=CHOCOLATEY_BIN),
            ))
    else:
        # winget ships with Windows; there is nothing to install it with
        targets.append(InstallTarget(name="winget", check=probes["winget"]))

    if tools.git.enabled:
        targets.append(InstallTarget(
            name="git",
            check=probes["git"],
            minimum_version=tools.git.requirement(),
            install=package("git", tools.git),
            path_registration=PathRegistration(directory=GIT_CMD_DIR),
        ))

    if tools.azure_cli.enabled:
        if tools.azure_cli.install_method == "msi":
            azure_install = MsiInstaller(AZURE_CLI_MSI_URL, opener=opener, runner=runner)
        else:
            azure_install = package("azure-cli", tools.azure_cli)
        targets.append(InstallTarget(
            name="azure-cli",
            check=probes["azure-cli"],
            minimum_version=tools.azure_cli.requirement(),
            install=azure_install,
            path_registration=PathRegistration(directory=AZURE_CLI_BIN),
        ))

    if tools.terraform.enabled:
        if tools.terraform.install_method == "archive":
            destination = root / "terraform"
            targets.append(InstallTarget(
                name="terraform",
                check=probes["terraform"],
                minimum_version=tools.terraform.requirement(),
                install=ReleaseArchiveInstaller(
                    "terraform", TERRAFORM_ARCHIVE_URL, destination, "terraform.exe",
                    tools.terraform, releases.latest_terraform, opener=opener
                ),
                path_registration=PathRegistration(directory=str(destination)),
            ))
        else:
            targets.append(InstallTarget(
                name="terraform",
                check=probes["terraform"],
                minimum_version=tools.terraform.requirement(),
                install=package("terraform", tools.terraform),
            ))

    if tools.databricks.enabled:
        if tools.databricks.install_method == "archive":
            destination = root / "databricks"
            targets.append(InstallTarget(
                name="databricks",
                check=probes["databricks"],
                minimum_version=tools.databricks.requirement(),
                install=ReleaseArchiveInstaller(
                    "databricks", DATABRICKS_ARCHIVE_URL, destination, "databricks.exe",
                    tools.databricks, releases.latest_databricks_cli, opener=opener
                ),
                path_registration=PathRegistration(directory=str(destination)),
            ))
        else:
            targets.append(InstallTarget(
                name="databricks",
                check=probes["databricks"],
                minimum_version=tools.databricks.requirement(),
                install=package("databricks", tools.databricks),
            ))

    if only:
        wanted = set(only)
        unknown = wanted - {target.name for target in targets}
        if unknown:
            raise ValueError(f"Unknown or disabled tool(s): {', '.join(sorted(unknown))}")
        targets = [target for target in targets if target.name in wanted]

    return targets
