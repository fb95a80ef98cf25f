"""Tests for the idempotent installer orchestrator."""

import pytest

from devbox_bootstrap.core.orchestrator import InstallerOrchestrator
from devbox_bootstrap.exceptions import (
    InstallActionFailed,
    NotFound,
    VersionMismatch,
    VersionParseError,
)
from devbox_bootstrap.models.installation import InstallStatus
from devbox_bootstrap.models.retry import RetryPolicy
from devbox_bootstrap.models.target import InstallTarget, PathRegistration
from devbox_bootstrap.models.version import SemanticVersion

from .helpers import FlakyInstaller, ScriptedProbe, absent, present


def make_target(probe, install=None, minimum=None, directory=None, name="terraform"):
    return InstallTarget(
        name=name,
        check=probe,
        minimum_version=SemanticVersion.parse(minimum) if minimum else None,
        install=install,
        path_registration=PathRegistration(directory=directory) if directory else None,
    )


@pytest.fixture
def orchestrator(registrar, sleep):
    return InstallerOrchestrator(registrar, RetryPolicy(max_attempts=3, initial_delay=1), sleep=sleep)


class TestIdempotence:

    def test_present_target_is_not_installed(self, orchestrator, state, sleep, path_store):
        installer = FlakyInstaller()
        target = make_target(ScriptedProbe([present("1.13.7")]), installer, minimum="1.13.0")

        outcome, new_state = orchestrator.ensure_present(target, state)

        assert outcome.status == InstallStatus.ALREADY_SATISFIED
        assert outcome.attempts == 0
        assert installer.calls == 0
        assert new_state == state
        assert sleep.delays == []
        assert path_store.writes == 0

    def test_repeated_runs_perform_no_actions(self, orchestrator, state):
        installer = FlakyInstaller()
        target = make_target(ScriptedProbe([present("2.43.0")]), installer, directory=r"C:\Git\cmd")

        for _ in range(3):
            outcome, state = orchestrator.ensure_present(target, state)
            assert outcome.status == InstallStatus.ALREADY_SATISFIED

        assert installer.calls == 0

    def test_no_minimum_accepts_any_version(self, orchestrator, state):
        target = make_target(ScriptedProbe([present("0.0.1")]), FlakyInstaller())
        outcome, _ = orchestrator.ensure_present(target, state)
        assert outcome.status == InstallStatus.ALREADY_SATISFIED


class TestVersionGate:

    def test_below_minimum_triggers_install(self, orchestrator, state):
        installer = FlakyInstaller()
        probe = ScriptedProbe([present("1.12.9"), present("1.13.0")])
        target = make_target(probe, installer, minimum="1.13.0")

        outcome, _ = orchestrator.ensure_present(target, state)

        assert installer.calls == 1
        assert outcome.status == InstallStatus.INSTALLED
        assert outcome.detected_version == "1.13.0"

    def test_equal_to_minimum_does_not_install(self, orchestrator, state):
        installer = FlakyInstaller()
        target = make_target(ScriptedProbe([present("1.13.0")]), installer, minimum="1.13.0")
        orchestrator.ensure_present(target, state)
        assert installer.calls == 0

    def test_still_below_minimum_after_install_is_mismatch(self, orchestrator, state):
        probe = ScriptedProbe([absent(), present("1.0.0")])
        target = make_target(probe, FlakyInstaller(), minimum="1.13.0")

        with pytest.raises(VersionMismatch) as excinfo:
            orchestrator.ensure_present(target, state)

        assert str(excinfo.value.required) == "1.13.0"
        assert str(excinfo.value.detected) == "1.0.0"


class TestVersionParseFailure:

    def test_unparseable_version_never_reaches_retry(self, orchestrator, state, sleep):
        installer = FlakyInstaller()
        probe = ScriptedProbe([VersionParseError("Terraform (dev build)")])
        target = make_target(probe, installer, minimum="1.0.0")

        with pytest.raises(VersionParseError) as excinfo:
            orchestrator.ensure_present(target, state)

        assert excinfo.value.target == "terraform"
        assert installer.calls == 0
        assert sleep.delays == []

    def test_unparseable_version_after_install_propagates(self, orchestrator, state):
        probe = ScriptedProbe([absent(), VersionParseError("garbage")])
        target = make_target(probe, FlakyInstaller(), minimum="1.0.0")
        with pytest.raises(VersionParseError):
            orchestrator.ensure_present(target, state)


class TestFailures:

    def test_missing_without_installer_is_not_found(self, orchestrator, state):
        target = make_target(ScriptedProbe([absent()]), install=None, name="winget")
        with pytest.raises(NotFound) as excinfo:
            orchestrator.ensure_present(target, state)
        assert excinfo.value.target == "winget"

    def test_still_absent_after_install_is_not_found(self, orchestrator, state):
        installer = FlakyInstaller()
        target = make_target(ScriptedProbe([absent(), absent()]), installer)
        with pytest.raises(NotFound):
            orchestrator.ensure_present(target, state)
        assert installer.calls == 1

    def test_exhausted_retries_raise_install_action_failed(self, orchestrator, state, sleep):
        installer = FlakyInstaller(failures=10)
        target = make_target(ScriptedProbe([absent()]), installer)

        with pytest.raises(InstallActionFailed) as excinfo:
            orchestrator.ensure_present(target, state)

        assert installer.calls == 3
        assert sleep.delays == [1, 2]
        assert excinfo.value.target == "terraform"


class TestPathRegistration:

    def test_registration_runs_after_install(self, orchestrator, state, path_store, notifier, process_environ):
        probe = ScriptedProbe([absent(), present("1.7.5")])
        target = make_target(probe, FlakyInstaller(), directory=r"C:\tools\terraform")

        outcome, new_state = orchestrator.ensure_present(target, state)

        assert r"C:\tools\terraform" in new_state.persistent_path
        assert r"C:\tools\terraform" in new_state.process_path
        assert path_store.writes == 1
        assert notifier.calls == [("PATH", r"C:\tools\terraform")]
        assert "PATH" in process_environ
        # the re-check sees the registered directory
        assert r"C:\tools\terraform" in probe.states[-1].process_path

    def test_original_state_is_not_mutated(self, orchestrator, state):
        probe = ScriptedProbe([absent(), present("1.7.5")])
        target = make_target(probe, FlakyInstaller(), directory=r"C:\tools\terraform")
        orchestrator.ensure_present(target, state)
        assert r"C:\tools\terraform" not in state.process_path


class TestEndToEnd:

    def test_fails_twice_then_succeeds_on_third_attempt(self, registrar, state, sleep):
        orchestrator = InstallerOrchestrator(registrar, RetryPolicy(max_attempts=3, initial_delay=1), sleep=sleep)
        installer = FlakyInstaller(failures=2)
        probe = ScriptedProbe([absent(), present("1.13.7")])
        target = make_target(probe, installer, minimum="1.13.0", directory=r"C:\tools\terraform")

        outcome, _ = orchestrator.ensure_present(target, state)

        assert outcome.status == InstallStatus.INSTALLED
        assert outcome.attempts == 3
        assert installer.calls == 3
        assert len(sleep.delays) == 2
        assert outcome.detected_version == "1.13.7"


class TestEnsureAll:

    def test_targets_run_in_order_with_state_threaded(self, orchestrator, state):
        first_probe = ScriptedProbe([absent(), present("2.2.2")])
        second_probe = ScriptedProbe([present("2.43.0")])
        targets = [
            make_target(first_probe, FlakyInstaller(), name="chocolatey", directory=r"C:\ProgramData\chocolatey\bin"),
            make_target(second_probe, FlakyInstaller(), name="git"),
        ]

        outcomes, final_state = orchestrator.ensure_all(targets, state)

        assert [o.name for o in outcomes] == ["chocolatey", "git"]
        assert [o.status for o in outcomes] == [InstallStatus.INSTALLED, InstallStatus.ALREADY_SATISFIED]
        # git was probed against the path chocolatey registered
        assert r"C:\ProgramData\chocolatey\bin" in second_probe.states[0].process_path
        assert r"C:\ProgramData\chocolatey\bin" in final_state.process_path

    def test_first_failure_halts_the_run(self, orchestrator, state):
        later_probe = ScriptedProbe([present("1.0.0")])
        targets = [
            make_target(ScriptedProbe([absent()]), None, name="winget"),
            make_target(later_probe, FlakyInstaller(), name="git"),
        ]
        with pytest.raises(NotFound):
            orchestrator.ensure_all(targets, state)
        assert later_probe.calls == 0


class TestDryRun:

    def test_reports_without_installing(self, registrar, state, sleep):
        orchestrator = InstallerOrchestrator(registrar, dry_run=True, sleep=sleep)
        installer = FlakyInstaller()
        target = make_target(ScriptedProbe([absent()]), installer, directory=r"C:\tools\x")

        outcome, new_state = orchestrator.ensure_present(target, state)

        assert outcome.status == InstallStatus.WOULD_INSTALL
        assert installer.calls == 0
        assert new_state == state
