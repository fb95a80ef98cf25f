"""
Append-only, de-duplicating search-path registration.
"""

import logging
import ntpath
import os
from typing import MutableMapping, Optional, Sequence, Tuple

from ..integrations.ci import NullNotifier
from ..models.environment import EnvironmentState
from ..models.target import PathRegistration


def normalize_entry(entry: str) -> str:
    """Comparison key for a PATH entry (Windows semantics: case and separators ignored)."""
    cleaned = entry.strip().strip('"')
    normalized = ntpath.normcase(ntpath.normpath(cleaned)) if cleaned else ""
    return normalized.rstrip("\\")


def add_path_entry(entries: Sequence[str], directory: str) -> Tuple[str, ...]:
    """Return entries with directory appended unless an equivalent entry exists."""
    key = normalize_entry(directory)
    if any(normalize_entry(existing) == key for existing in entries):
        return tuple(entries)
    return tuple(entries) + (directory,)


class PathRegistrar:
    """Applies path registrations to the durable store, the process copy and CI."""

    def __init__(self,
                 store,
                 notifier=None,
                 process_environ: Optional[MutableMapping[str, str]] = None):
        """
        Args:
            store: Durable path store exposing write(entries)
            notifier: Receives notify(key, value) for each change
            process_environ: Mapping to mirror process changes into (os.environ in production)
        """
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.notifier = notifier or NullNotifier()
        self.process_environ = process_environ

    def register(self, state: EnvironmentState, registration: PathRegistration) -> EnvironmentState:
        """Ensure registration.directory is on both paths; no writes if already there."""
        directory = registration.directory
        persistent = add_path_entry(state.persistent_path, directory)
        process = add_path_entry(state.process_path, directory)

        if persistent == state.persistent_path and process == state.process_path:
            self.logger.debug(f"{directory} already on PATH")
            return state

        if persistent != state.persistent_path:
            self.store.write(persistent)
            self.logger.info(f"Added {directory} to the persistent PATH")

        if process != state.process_path:
            if self.process_environ is not None:
                self.process_environ["PATH"] = os.pathsep.join(process)
            self.notifier.notify("PATH", directory)
            self.logger.info(f"Added {directory} to the process PATH")

        return state.with_paths(persistent, process)

    def set_variable(self, state: EnvironmentState, key: str, value: str) -> EnvironmentState:
        """Set a session variable for this process and downstream CI steps."""
        if state.variables.get(key) == value:
            return state
        if self.process_environ is not None:
            self.process_environ[key] = value
        self.notifier.notify(key, value)
        self.logger.info(f"Set {key} for this session")
        return state.with_variable(key, value)
