"""
Error types raised while bootstrapping a machine.

Every orchestrator failure derives from InstallError so a driver can halt
the whole run with a single except clause.
"""

from typing import Optional


class InstallError(Exception):
    """Base class for failures surfaced by the installer orchestrator."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class NotFound(InstallError):
    """The capability is absent and no installer made it present."""


class VersionParseError(InstallError):
    """A detected version string held no major.minor.patch triple."""

    def __init__(self, text: str, target: Optional[str] = None):
        snippet = (text or "").strip().splitlines()[0][:120] if (text or "").strip() else "<empty>"
        super().__init__(f"Could not parse a version from output: {snippet!r}", target)
        self.text = text


class VersionMismatch(InstallError):
    """Installation completed but the resulting version is below the minimum."""

    def __init__(self, target: str, detected: object, required: object):
        super().__init__(
            f"{target} {detected} is installed but {required} or newer is required",
            target,
        )
        self.detected = detected
        self.required = required


class InstallActionFailed(InstallError):
    """The final retry attempt of an installation action failed."""

    def __init__(self, attempts: int, cause: BaseException, target: Optional[str] = None):
        label = target or "installation action"
        super().__init__(f"{label} failed after {attempts} attempt(s): {cause}", target)
        self.attempts = attempts
        self.cause = cause


class InstallCancelled(InstallError):
    """The surrounding run asked the retry loop to stop."""


class CommandFailedError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list, returncode: int, output: str = ""):
        tail = "\n".join(output.strip().splitlines()[-5:]) if output else ""
        message = f"Command {' '.join(str(part) for part in command)!r} exited with {returncode}"
        if tail:
            message = f"{message}: {tail}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.output = output


class ReleaseLookupError(RuntimeError):
    """The release-metadata service could not tell us the latest version."""


class ProfileConfigError(ValueError):
    """A data-platform authentication profile is incomplete or invalid."""
