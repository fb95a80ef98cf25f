"""Test doubles shared across the suite."""

from types import SimpleNamespace
from typing import List, Sequence

from devbox_bootstrap.models.environment import EnvironmentState
from devbox_bootstrap.models.target import ProbeResult
from devbox_bootstrap.models.version import SemanticVersion


class RecordingNotifier:
    name = "recording"

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def notify(self, key: str, value: str) -> None:
        self.calls.append((key, value))


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ScriptedProbe:
    """Returns one scripted result per call; the last one repeats."""

    def __init__(self, results: Sequence[ProbeResult]) -> None:
        self.results = list(results)
        self.calls = 0
        self.states: List[EnvironmentState] = []

    def __call__(self, state: EnvironmentState) -> ProbeResult:
        self.states.append(state)
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, Exception):
            raise result
        return result


class FlakyInstaller:
    """Fails a fixed number of times, then succeeds."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self, state: EnvironmentState) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"download interrupted (call {self.calls})")


def present(version: str, location: str = r"C:\tools\tool.exe") -> ProbeResult:
    return ProbeResult(present=True, version=SemanticVersion.parse(version), location=location)


def absent() -> ProbeResult:
    return ProbeResult.absent()


def completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> SimpleNamespace:
    """Stand-in for subprocess.CompletedProcess."""
    return SimpleNamespace(stdout=stdout, stderr=stderr, returncode=returncode)


