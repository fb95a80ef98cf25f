"""
Pytest configuration and fixtures for bootstrap tests.
"""

from __future__ import annotations

import pytest

from devbox_bootstrap.core.path_registry import PathRegistrar
from devbox_bootstrap.integrations.path_store import InMemoryPathStore
from devbox_bootstrap.models.environment import EnvironmentState

from .helpers import RecordingNotifier, RecordingSleep


@pytest.fixture
def state() -> EnvironmentState:
    return EnvironmentState(
        persistent_path=(r"C:\Windows\System32",),
        process_path=(r"C:\Windows\System32", r"C:\Windows"),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def path_store(state: EnvironmentState) -> InMemoryPathStore:
    return InMemoryPathStore(state.persistent_path)


@pytest.fixture
def process_environ() -> dict:
    return {}


@pytest.fixture
def registrar(path_store, notifier, process_environ) -> PathRegistrar:
    return PathRegistrar(path_store, notifier=notifier, process_environ=process_environ)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
