"""
Idempotent installer orchestrator.

Each target is checked first and only installed when absent or too old, so
re-running a bootstrap against an unchanged machine performs no mutations.
"""

import logging
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

from ..exceptions import NotFound, VersionMismatch, VersionParseError
from ..models.environment import EnvironmentState
from ..models.installation import InstallOutcome, InstallStatus
from ..models.retry import RetryPolicy
from ..models.target import InstallTarget, ProbeResult
from .path_registry import PathRegistrar
from .retry import with_retry


class InstallerOrchestrator:
    """Ensures install targets are present, one after another."""

    def __init__(self,
                 registrar: PathRegistrar,
                 policy: Optional[RetryPolicy] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 cancel: Optional[threading.Event] = None,
                 dry_run: bool = False):
        """
        Initialize the orchestrator.

        Args:
            registrar: Applies post-install path registrations
            policy: Retry policy for installation actions
            sleep: Blocking wait between retries
            cancel: Optional event that stops further install attempts
            dry_run: If True, report targets that need installing without touching them
        """
        self.logger = logging.getLogger(__name__)
        self.registrar = registrar
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.cancel = cancel
        self.dry_run = dry_run

    def ensure_present(self,
                       target: InstallTarget,
                       state: EnvironmentState) -> Tuple[InstallOutcome, EnvironmentState]:
        """
        Make sure a target is present at an acceptable version.

        Args:
            target: What to check and, if needed, install
            state: Current search-path state

        Returns:
            The outcome and the (possibly updated) environment state

        Raises:
            NotFound, VersionParseError, VersionMismatch, InstallActionFailed
        """
        probe = self._probe(target, state)
        if target.is_satisfied_by(probe):
            self.logger.info(f"{target.name} already satisfied ({probe.version or 'no version requirement'})")
            return self._outcome(target, InstallStatus.ALREADY_SATISFIED, probe, 0), state

        if probe.present:
            self.logger.info(f"{target.name} {probe.version} is below minimum {target.minimum_version}")
        else:
            self.logger.info(f"{target.name} not found on PATH")

        if target.install is None:
            self.logger.error(f"{target.name} is missing and has no installer")
            raise NotFound(f"{target.name} is not installed and no installer is configured", target.name)

        if self.dry_run:
            self.logger.info(f"[dry-run] would install {target.name}")
            return self._outcome(target, InstallStatus.WOULD_INSTALL, probe, 0), state

        attempts = 0

        def attempt() -> None:
            nonlocal attempts
            attempts += 1
            target.install(state)

        self.logger.info(f"Installing {target.name}")
        with_retry(attempt, self.policy, sleep=self.sleep, cancel=self.cancel, label=target.name)

        if target.path_registration is not None:
            state = self.registrar.register(state, target.path_registration)

        probe = self._probe(target, state)
        if not probe.present:
            self.logger.error(f"{target.name} still not found after installation")
            raise NotFound(f"{target.name} was installed but does not resolve on PATH", target.name)
        if not target.is_satisfied_by(probe):
            self.logger.error(
                f"{target.name} installed at {probe.version}, below minimum {target.minimum_version}"
            )
            raise VersionMismatch(target.name, probe.version, target.minimum_version)

        self.logger.info(f"{target.name} {probe.version or '(unversioned)'} installed after {attempts} attempt(s)")
        return self._outcome(target, InstallStatus.INSTALLED, probe, attempts), state

    def ensure_all(self,
                   targets: Sequence[InstallTarget],
                   state: EnvironmentState) -> Tuple[List[InstallOutcome], EnvironmentState]:
        """Ensure targets strictly in order; the first error stops the run."""
        outcomes: List[InstallOutcome] = []
        for target in targets:
            outcome, state = self.ensure_present(target, state)
            outcomes.append(outcome)
        return outcomes, state

    def _probe(self, target: InstallTarget, state: EnvironmentState) -> ProbeResult:
        try:
            return target.check(state)
        except VersionParseError as e:
            e.target = target.name
            self.logger.error(f"{target.name}: {e}")
            raise

    @staticmethod
    def _outcome(target: InstallTarget,
                 status: InstallStatus,
                 probe: ProbeResult,
                 attempts: int) -> InstallOutcome:
        return InstallOutcome(
            name=target.name,
            status=status,
            attempts=attempts,
            detected_version=str(probe.version) if probe.version else None,
            location=probe.location,
        )
