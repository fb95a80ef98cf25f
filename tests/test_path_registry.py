"""Tests for de-duplicating search-path registration."""

import logging
import os
from contextlib import contextmanager

import pytest

from devbox_bootstrap.core.path_registry import PathRegistrar, add_path_entry, normalize_entry
from devbox_bootstrap.integrations.path_store import InMemoryPathStore, WindowsUserPathStore
from devbox_bootstrap.models.target import PathRegistration


class TestAddPathEntry:

    def test_appends_new_directory(self):
        assert add_path_entry((r"C:\a",), r"C:\b") == (r"C:\a", r"C:\b")

    def test_existing_directory_not_reappended(self):
        entries = (r"C:\a", r"C:\b")
        assert add_path_entry(entries, r"C:\b") == entries

    @pytest.mark.parametrize("variant", [
        r"c:\tools\bin",
        r"C:\TOOLS\BIN\\",
        "C:/Tools/bin",
        r' "C:\Tools\bin" ',
    ])
    def test_equivalent_spellings_deduplicate(self, variant):
        entries = (r"C:\Tools\bin",)
        assert add_path_entry(entries, variant) == entries

    def test_normalize_entry(self):
        assert normalize_entry(r"C:\Tools\Bin\\") == normalize_entry("c:/tools/bin")


class TestPathRegistrar:

    def test_registering_twice_leaves_one_occurrence(self, registrar, state, path_store, notifier):
        registration = PathRegistration(directory=r"C:\tools\terraform")

        once = registrar.register(state, registration)
        twice = registrar.register(once, registration)

        assert twice.persistent_path.count(r"C:\tools\terraform") == 1
        assert twice.process_path.count(r"C:\tools\terraform") == 1
        assert path_store.read().count(r"C:\tools\terraform") == 1
        assert path_store.writes == 1
        assert len(notifier.calls) == 1
        assert twice is once

    def test_mirrors_process_path_into_environ(self, registrar, state, process_environ):
        new_state = registrar.register(state, PathRegistration(directory=r"C:\tools\databricks"))
        assert process_environ["PATH"] == os.pathsep.join(new_state.process_path)

    def test_only_persistent_missing(self, path_store, notifier, state):
        state = state.with_paths(state.persistent_path, state.process_path + (r"C:\x",))
        registrar = PathRegistrar(path_store, notifier=notifier, process_environ={})

        new_state = registrar.register(state, PathRegistration(directory=r"C:\x"))

        assert path_store.writes == 1
        assert r"C:\x" in new_state.persistent_path
        assert notifier.calls == []

    def test_without_process_environ_only_state_changes(self, state, notifier):
        store = InMemoryPathStore()
        registrar = PathRegistrar(store, notifier=notifier)
        new_state = registrar.register(state, PathRegistration(directory=r"C:\y"))
        assert new_state.process_path[-1] == r"C:\y"

    def test_set_variable(self, registrar, state, notifier, process_environ):
        new_state = registrar.set_variable(state, "DATABRICKS_CONFIG_PROFILE", "dev")
        again = registrar.set_variable(new_state, "DATABRICKS_CONFIG_PROFILE", "dev")

        assert again.variables == {"DATABRICKS_CONFIG_PROFILE": "dev"}
        assert process_environ["DATABRICKS_CONFIG_PROFILE"] == "dev"
        assert notifier.calls == [("DATABRICKS_CONFIG_PROFILE", "dev")]
        assert state.variables == {}


class FakeWinreg:
    HKEY_CURRENT_USER = "HKCU"
    KEY_SET_VALUE = 2
    REG_EXPAND_SZ = 2

    def __init__(self, value=None):
        self.value = value
        self.written = []

    @contextmanager
    def OpenKey(self, root, key, reserved=0, access=0):
        yield (root, key)

    def QueryValueEx(self, key, name):
        if self.value is None:
            raise FileNotFoundError(name)
        return self.value, self.REG_EXPAND_SZ

    def SetValueEx(self, key, name, reserved, kind, value):
        self.written.append((key, name, kind, value))


def registry_store(fake):
    store = WindowsUserPathStore.__new__(WindowsUserPathStore)
    store._winreg = fake
    store.logger = logging.getLogger("devbox_bootstrap.integrations.path_store")
    return store


class TestWindowsUserPathStore:

    def test_read_splits_registry_value(self):
        store = registry_store(FakeWinreg(r"C:\Windows;;C:\tools\terraform"))
        assert store.read() == [r"C:\Windows", r"C:\tools\terraform"]

    def test_missing_value_reads_empty(self):
        assert registry_store(FakeWinreg()).read() == []

    def test_write_keeps_expandable_string(self, caplog):
        fake = FakeWinreg()
        with caplog.at_level(logging.INFO):
            registry_store(fake).write([r"%USERPROFILE%\bin", r"C:\tools\terraform"])

        assert fake.written == [(("HKCU", "Environment"), "Path", fake.REG_EXPAND_SZ,
                                 r"%USERPROFILE%\bin;C:\tools\terraform")]
        assert "next sign-in" in caplog.text
        assert "new shells" not in caplog.text
