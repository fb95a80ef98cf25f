"""
Explicit search-path and session-variable state threaded through a run.
"""

import os
from typing import Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field


def split_path(value: Optional[str], separator: str = os.pathsep) -> Tuple[str, ...]:
    """Split a PATH-style string, dropping empty entries."""
    if not value:
        return ()
    return tuple(entry for entry in (part.strip() for part in value.split(separator)) if entry)


class EnvironmentState(BaseModel):
    """Snapshot of the search path (durable and in-process) plus session variables."""
    persistent_path: Tuple[str, ...] = Field(default_factory=tuple)
    process_path: Tuple[str, ...] = Field(default_factory=tuple)
    variables: Dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True

    @classmethod
    def capture(cls,
                environ: Optional[Mapping[str, str]] = None,
                persistent_path: Sequence[str] = ()) -> "EnvironmentState":
        """
        Build a state from a process environment mapping.

        Args:
            environ: Process environment (defaults to os.environ)
            persistent_path: Entries read from the durable path store
        """
        environ = os.environ if environ is None else environ
        return cls(
            persistent_path=tuple(persistent_path),
            process_path=split_path(environ.get("PATH")),
        )

    def search_path(self) -> str:
        """Process path joined for shutil.which and subprocess environments."""
        return os.pathsep.join(self.process_path)

    def with_paths(self,
                   persistent_path: Sequence[str],
                   process_path: Sequence[str]) -> "EnvironmentState":
        return self.model_copy(update={
            "persistent_path": tuple(persistent_path),
            "process_path": tuple(process_path),
        })

    def with_variable(self, key: str, value: str) -> "EnvironmentState":
        variables = dict(self.variables)
        variables[key] = value
        return self.model_copy(update={"variables": variables})
