"""
Durable search-path storage.
"""

import logging
import sys
from typing import List, Sequence

from ..models.environment import split_path

WINDOWS_PATH_SEPARATOR = ";"


class InMemoryPathStore:
    """Keeps the durable path in memory; used off Windows and in dry runs."""

    def __init__(self, entries: Sequence[str] = ()):
        self.entries: List[str] = list(entries)
        self.writes = 0

    def read(self) -> List[str]:
        return list(self.entries)

    def write(self, entries: Sequence[str]) -> None:
        self.entries = list(entries)
        self.writes += 1


class WindowsUserPathStore:
    """The per-user Path value under HKCU\\Environment."""

    KEY = "Environment"
    VALUE = "Path"

    def __init__(self):
        if sys.platform != "win32":
            raise RuntimeError("The Windows registry path store is only available on Windows")
        import winreg
        self._winreg = winreg
        self.logger = logging.getLogger(__name__)

    def read(self) -> List[str]:
        winreg = self._winreg
        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.KEY) as key:
                value, _ = winreg.QueryValueEx(key, self.VALUE)
        except FileNotFoundError:
            return []
        return list(split_path(value, WINDOWS_PATH_SEPARATOR))

    def write(self, entries: Sequence[str]) -> None:
        winreg = self._winreg
        value = WINDOWS_PATH_SEPARATOR.join(entries)
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.KEY, 0, winreg.KEY_SET_VALUE) as key:
            winreg.SetValueEx(key, self.VALUE, 0, winreg.REG_EXPAND_SZ, value)
        self.logger.info("Updated user Path in the registry; shells started after the next sign-in will see it")


def default_path_store():
    """Registry-backed store on Windows, in-memory elsewhere."""
    if sys.platform == "win32":
        return WindowsUserPathStore()
    return InMemoryPathStore()
