"""
Presence and version checks for command-line tools.
"""

import logging
import shutil
import subprocess
from typing import Callable, Sequence

from ..models.environment import EnvironmentState
from ..models.target import ProbeResult
from ..models.version import SemanticVersion


class VersionProbe:
    """Resolves an executable on the search path and parses its version output."""

    def __init__(self,
                 executable: str,
                 version_args: Sequence[str] = ("--version",),
                 timeout: float = 60,
                 runner: Callable = subprocess.run,
                 which: Callable = shutil.which):
        """
        Args:
            executable: Bare command name, e.g. "terraform"
            version_args: Flags that make the tool print its version
            timeout: Seconds to wait for the version command
            runner: subprocess.run-compatible callable
            which: shutil.which-compatible callable
        """
        self.logger = logging.getLogger(__name__)
        self.executable = executable
        self.version_args = list(version_args)
        self.timeout = timeout
        self.runner = runner
        self.which = which

    def __call__(self, state: EnvironmentState) -> ProbeResult:
        return self.probe(state)

    def probe(self, state: EnvironmentState) -> ProbeResult:
        """
        Check whether the executable is present and which version it reports.

        Raises:
            VersionParseError: if the tool runs but prints no major.minor.patch
        """
        location = self.which(self.executable, path=state.search_path())
        if not location:
            self.logger.debug(f"{self.executable} not found on PATH")
            return ProbeResult.absent()

        try:
            result = self.runner(
                [location, *self.version_args],
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            self.logger.warning(f"{self.executable} version check timed out after {self.timeout}s")
            return ProbeResult.absent()
        except OSError as e:
            self.logger.warning(f"{self.executable} at {location} could not be run: {e}")
            return ProbeResult.absent()

        output = "\n".join(part for part in (result.stdout, result.stderr) if part)
        if result.returncode != 0:
            self.logger.debug(f"{self.executable} version command exited with {result.returncode}")

        version = SemanticVersion.parse(output)
        self.logger.debug(f"{self.executable} {version} at {location}")
        return ProbeResult(present=True, version=version, location=location, raw_output=output)
