"""
Installation actions.

Each installer is a callable taking the current EnvironmentState. It returns
nothing on success and raises on failure; retrying is the orchestrator's job.
"""

import logging
import os
import shutil
import subprocess
import tempfile
import urllib.request
import zipfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..exceptions import CommandFailedError
from ..models.environment import EnvironmentState

CHOCOLATEY_BOOTSTRAP_URL = "https://community.chocolatey.org/install.ps1"

# ERROR_SUCCESS_REBOOT_REQUIRED
MSI_REBOOT_REQUIRED = 3010


def _run(command: List[str],
         runner: Callable,
         timeout: float,
         env: Optional[dict] = None,
         success_codes: Sequence[int] = (0,)) -> str:
    """Run a command, raising CommandFailedError on any exit code outside success_codes."""
    try:
        result = runner(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env
        )
    except subprocess.TimeoutExpired as e:
        raise CommandFailedError(command, -1, f"timed out after {timeout} seconds") from e

    output = "\n".join(part for part in (result.stdout, result.stderr) if part)
    if result.returncode not in success_codes:
        raise CommandFailedError(command, result.returncode, output)
    return output


def _process_env(state: EnvironmentState) -> dict:
    env = dict(os.environ)
    env["PATH"] = state.search_path()
    return env


class CommandInstaller:
    """Runs a fixed command line."""

    def __init__(self,
                 command: Sequence[str],
                 timeout: float = 1800,
                 runner: Callable = subprocess.run):
        self.logger = logging.getLogger(__name__)
        self.command = list(command)
        self.timeout = timeout
        self.runner = runner

    def __call__(self, state: EnvironmentState) -> None:
        self.logger.info(f"Running: {' '.join(self.command)}")
        _run(self.command, self.runner, self.timeout, env=_process_env(state))


def chocolatey_bootstrap(runner: Callable = subprocess.run) -> CommandInstaller:
    """Installer for Chocolatey itself, via its published PowerShell script."""
    script = (
        "Set-ExecutionPolicy Bypass -Scope Process -Force; "
        "[System.Net.ServicePointManager]::SecurityProtocol = "
        "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
        f"iex ((New-Object System.Net.WebClient).DownloadString('{CHOCOLATEY_BOOTSTRAP_URL}'))"
    )
    return CommandInstaller(
        ["powershell", "-NoProfile", "-InputFormat", "None", "-ExecutionPolicy", "Bypass",
         "-Command", script],
        runner=runner
    )


class PackageManagerInstaller:
    """
    Installs or upgrades a package through Chocolatey or winget.

    This action also runs when the tool is present but below its minimum
    version, so it must upgrade. `choco upgrade` installs missing packages too;
    winget has no such verb, so the package list decides between `upgrade`
    and `install`.
    """

    SUPPORTED = ("choco", "winget")

    def __init__(self,
                 package_id: str,
                 manager: str = "choco",
                 version: Optional[str] = None,
                 timeout: float = 1800,
                 runner: Callable = subprocess.run,
                 which: Callable = shutil.which):
        if manager not in self.SUPPORTED:
            raise ValueError(f"Unsupported package manager: {manager}")
        self.logger = logging.getLogger(__name__)
        self.package_id = package_id
        self.manager = manager
        self.version = version
        self.timeout = timeout
        self.runner = runner
        self.which = which

    def build_command(self, executable: str, installed: bool = False) -> List[str]:
        if self.manager == "choco":
            command = [executable, "upgrade", self.package_id, "-y", "--no-progress"]
            if self.version:
                command.append(f"--version={self.version}")
        else:
            verb = "upgrade" if installed else "install"
            command = [
                executable, verb, "--id", self.package_id, "-e", "--silent",
                "--accept-package-agreements", "--accept-source-agreements"
            ]
            if self.version:
                command.extend(["--version", self.version])
        return command

    def is_installed(self, executable: str, env: dict) -> bool:
        """Whether winget already tracks the package (exit code 0 from `winget list`)."""
        try:
            result = self.runner(
                [executable, "list", "--id", self.package_id, "-e", "--accept-source-agreements"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env
            )
        except subprocess.TimeoutExpired as e:
            raise CommandFailedError(e.cmd, -1, f"timed out after {self.timeout} seconds") from e
        return result.returncode == 0

    def __call__(self, state: EnvironmentState) -> None:
        # The manager may have been installed earlier in this run, so resolve it
        # against the state's path rather than the inherited one.
        executable = self.which(self.manager, path=state.search_path())
        if not executable:
            raise FileNotFoundError(f"{self.manager} is not on PATH; cannot install {self.package_id}")
        env = _process_env(state)
        installed = self.manager == "winget" and self.is_installed(executable, env)
        command = self.build_command(executable, installed=installed)
        self.logger.info(f"Running {self.manager} {command[1]} for {self.package_id}")
        _run(command, self.runner, self.timeout, env=env)


def download(url: str, destination: Path, opener: Callable = urllib.request.urlopen,
             timeout: float = 300) -> Path:
    """Stream a URL to a local file."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    with opener(url, timeout=timeout) as response, open(destination, "wb") as f:
        shutil.copyfileobj(response, f)
    return destination


class ArchiveInstaller:
    """Downloads a zip archive and extracts it into a directory."""

    def __init__(self,
                 url: str,
                 destination: Path,
                 expected_member: Optional[str] = None,
                 opener: Callable = urllib.request.urlopen,
                 timeout: float = 300):
        """
        Args:
            url: Archive download URL
            destination: Directory to extract into (created if missing)
            expected_member: File that must exist after extraction, relative to destination
            opener: urllib.request.urlopen-compatible callable
            timeout: Download timeout in seconds
        """
        self.logger = logging.getLogger(__name__)
        self.url = url
        self.destination = Path(destination)
        self.expected_member = expected_member
        self.opener = opener
        self.timeout = timeout

    def __call__(self, state: EnvironmentState) -> None:
        self.logger.info(f"Downloading {self.url}")
        with tempfile.TemporaryDirectory() as temp_dir:
            archive = download(self.url, Path(temp_dir) / "archive.zip", self.opener, self.timeout)
            self.destination.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(self.destination)
        self.logger.info(f"Extracted to {self.destination}")

        if self.expected_member and not (self.destination / self.expected_member).exists():
            raise FileNotFoundError(
                f"{self.expected_member} missing from {self.destination} after extracting {self.url}"
            )


class MsiInstaller:
    """Downloads an MSI package and installs it silently."""

    def __init__(self,
                 url: str,
                 timeout: float = 1800,
                 opener: Callable = urllib.request.urlopen,
                 runner: Callable = subprocess.run):
        self.logger = logging.getLogger(__name__)
        self.url = url
        self.timeout = timeout
        self.opener = opener
        self.runner = runner

    def __call__(self, state: EnvironmentState) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            package = download(self.url, Path(temp_dir) / "package.msi", self.opener)
            command = ["msiexec.exe", "/i", str(package), "/quiet", "/norestart"]
            self.logger.info(f"Running msiexec for {self.url}")
            # A pending reboot does not stop the CLI from running in new processes
            _run(command, self.runner, self.timeout, success_codes=(0, MSI_REBOOT_REQUIRED))
