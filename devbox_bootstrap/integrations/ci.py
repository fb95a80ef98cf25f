"""
Environment-change notifiers for CI orchestrators.

A bootstrap step that changes PATH or sets a session variable only affects
its own process. CI systems offer a side channel so later steps inherit the
change; each notifier speaks one of those channels.
"""

import logging
import os
import sys
from typing import Mapping, Optional, TextIO


class NullNotifier:
    """Used outside CI: nothing downstream needs telling."""

    name = "none"

    def notify(self, key: str, value: str) -> None:
        return None


class AzurePipelinesNotifier:
    """Emits ##vso logging commands on stdout."""

    name = "azure-pipelines"

    def __init__(self, stream: Optional[TextIO] = None):
        self.logger = logging.getLogger(__name__)
        self.stream = stream

    def notify(self, key: str, value: str) -> None:
        if key.upper() == "PATH":
            line = f"##vso[task.prependpath]{value}"
        else:
            line = f"##vso[task.setvariable variable={key}]{value}"
        stream = self.stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()
        self.logger.debug(f"Emitted Azure Pipelines directive for {key}")


class GitHubActionsNotifier:
    """Appends to the files GitHub Actions exposes via GITHUB_PATH and GITHUB_ENV."""

    name = "github-actions"

    def __init__(self, path_file: Optional[str], env_file: Optional[str]):
        self.logger = logging.getLogger(__name__)
        self.path_file = path_file
        self.env_file = env_file

    def notify(self, key: str, value: str) -> None:
        if key.upper() == "PATH":
            target, line = self.path_file, value
        else:
            target, line = self.env_file, f"{key}={value}"
        if not target:
            self.logger.warning(f"GitHub Actions detected but no command file for {key}; skipping")
            return
        with open(target, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        self.logger.debug(f"Appended {key} to {target}")


def detect_notifier(environ: Optional[Mapping[str, str]] = None):
    """Pick a notifier for the CI system the process is running under."""
    environ = os.environ if environ is None else environ
    if environ.get("TF_BUILD", "").lower() == "true":
        return AzurePipelinesNotifier()
    if environ.get("GITHUB_ACTIONS", "").lower() == "true":
        return GitHubActionsNotifier(environ.get("GITHUB_PATH"), environ.get("GITHUB_ENV"))
    return NullNotifier()
