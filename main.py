#!/usr/bin/env python3
"""
Main entry point for the development machine bootstrap.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from devbox_bootstrap.config.settings import Settings
from devbox_bootstrap.core.catalog import build_probes, build_targets
from devbox_bootstrap.core.diagnostics import collect_diagnostics, render_text
from devbox_bootstrap.core.orchestrator import InstallerOrchestrator
from devbox_bootstrap.core.path_registry import PathRegistrar
from devbox_bootstrap.core.scaffold import TerraformScaffolder
from devbox_bootstrap.exceptions import InstallError, ProfileConfigError
from devbox_bootstrap.integrations.ci import detect_notifier
from devbox_bootstrap.integrations.databricks_auth import build_profile, configure_profile
from devbox_bootstrap.integrations.path_store import InMemoryPathStore, default_path_store
from devbox_bootstrap.models.environment import EnvironmentState
from devbox_bootstrap.models.installation import InstallOutcome, RunSummary
from devbox_bootstrap.utils.logging import setup_root_logger

COMMANDS = ("install", "scaffold", "auth", "diagnostics", "all")

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Bootstrap a Windows development or CI machine"
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="What to do: install tools, scaffold Terraform, configure auth, print diagnostics, or all"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--only",
        action="append",
        metavar="TOOL",
        help="Restrict install to this tool (repeatable)"
    )

    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Attempts per installation action (default: 3)"
    )

    parser.add_argument(
        "--initial-delay",
        type=float,
        help="Seconds before the first retry; doubles after each failure (default: 2)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only probe; report what would be installed"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print diagnostics as JSON"
    )

    parser.add_argument(
        "--report",
        type=Path,
        help="Write a JSON run summary to this path"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Log file path (default: logs/bootstrap.log)"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, environment and command line."""
    config_data = {}
    if args.config:
        if not args.config.exists():
            raise ValueError(f"Config file not found: {args.config}")
        with open(args.config) as f:
            config_data = json.load(f)

    # Override with command line args
    if args.max_attempts is not None:
        config_data.setdefault("retry", {})["max_attempts"] = args.max_attempts
    if args.initial_delay is not None:
        config_data.setdefault("retry", {})["initial_delay_seconds"] = args.initial_delay
    if args.dry_run:
        config_data["dry_run"] = True
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.log_file:
        config_data.setdefault("logging", {})["file_path"] = str(args.log_file)

    return Settings(**config_data)


def run_install(settings: Settings,
                registrar: PathRegistrar,
                state: EnvironmentState,
                only: Optional[List[str]] = None) -> Tuple[List[InstallOutcome], EnvironmentState]:
    """Ensure every configured tool, in catalog order."""
    targets = build_targets(settings, only=only)
    logger.info(f"Ensuring {len(targets)} tool(s): {', '.join(t.name for t in targets)}")
    orchestrator = InstallerOrchestrator(
        registrar=registrar,
        policy=settings.retry.to_policy(),
        dry_run=settings.dry_run
    )
    return orchestrator.ensure_all(targets, state)


def run_scaffold(settings: Settings) -> List[str]:
    """Create missing Terraform project files."""
    if settings.dry_run:
        logger.info(f"[dry-run] would scaffold Terraform files in {settings.scaffold.directory}")
        return []
    scaffolder = TerraformScaffolder(
        directory=settings.scaffold.directory,
        project_name=settings.scaffold.project_name,
        azurerm_version=settings.scaffold.azurerm_version,
        databricks_provider_version=settings.scaffold.databricks_provider_version
    )
    result = scaffolder.scaffold()
    logger.info(f"Scaffold: {len(result.created)} created, {len(result.skipped)} kept")
    return [str(path) for path in result.created]


def run_auth(settings: Settings,
             registrar: PathRegistrar,
             state: EnvironmentState,
             required: bool = True) -> Tuple[Optional[str], EnvironmentState]:
    """Write the Databricks CLI profile and export its name for this session."""
    config = settings.databricks
    if not config.host:
        if required:
            raise ProfileConfigError("Databricks host is not configured (DEVBOX_DATABRICKS__HOST)")
        logger.info("No Databricks host configured; skipping authentication setup")
        return None, state

    token = config.token
    if token is None and os.environ.get("DATABRICKS_TOKEN"):
        token = os.environ["DATABRICKS_TOKEN"]

    profile = build_profile(
        name=config.profile,
        auth_mode=config.auth_mode,
        host=config.host,
        token=token,
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id
    )
    if settings.dry_run:
        logger.info(f"[dry-run] would configure profile [{profile.name}] in {config.config_path}")
        return profile.name, state

    action = configure_profile(profile, config.config_path)
    logger.info(f"Databricks profile [{profile.name}]: {action.value}")
    state = registrar.set_variable(state, "DATABRICKS_CONFIG_PROFILE", profile.name)
    return profile.name, state


def run_diagnostics(state: EnvironmentState, as_json: bool = False) -> None:
    """Print environment diagnostics to stdout."""
    report = collect_diagnostics(state, build_probes())
    if as_json:
        print(report.model_dump_json(indent=2))
    else:
        for line in render_text(report):
            print(line)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    # Load environment variables from .env file
    load_dotenv()

    args = parse_arguments(argv)

    try:
        settings = load_config(args)
    except Exception as e:
        setup_root_logger(level="INFO")
        logger.error(f"Invalid configuration: {e}")
        return 2

    setup_root_logger(
        settings.logging.file_path,
        settings.logging.level,
        format_string=settings.logging.format,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )

    logger.info(f"Starting bootstrap: {args.command}")
    logger.debug(f"Arguments: {vars(args)}")

    summary = RunSummary()
    exit_code = 0

    try:
        store = InMemoryPathStore() if settings.dry_run else default_path_store()
        registrar = PathRegistrar(
            store=store,
            notifier=detect_notifier(),
            process_environ=None if settings.dry_run else os.environ
        )
        state = EnvironmentState.capture(os.environ, store.read())

        if args.command in ("install", "all"):
            summary.outcomes, state = run_install(settings, registrar, state, only=args.only)
        if args.command in ("scaffold", "all"):
            summary.scaffolded = run_scaffold(settings)
        if args.command in ("auth", "all"):
            summary.auth_profile, state = run_auth(
                settings, registrar, state, required=args.command == "auth"
            )
        if args.command in ("diagnostics", "all"):
            run_diagnostics(state, as_json=args.json)

        summary.complete(success=True)

    except (InstallError, ProfileConfigError) as e:
        logger.error(f"Bootstrap failed: {e}")
        summary.complete(success=False, error=str(e))
        exit_code = 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        summary.complete(success=False, error=str(e))
        exit_code = 1

    # Print summary
    if summary.outcomes:
        installed = sum(1 for outcome in summary.outcomes if outcome.changed)
        logger.info(f"Tools: {len(summary.outcomes)} ensured, {installed} installed")
    for outcome in summary.outcomes:
        logger.info(f"  {outcome.name:<12} {outcome.status.value} {outcome.detected_version or ''}".rstrip())

    if args.report:
        args.report.parent.mkdir(parents=True, exist_ok=True)
        args.report.write_text(summary.model_dump_json(indent=2))
        logger.info(f"Summary saved to {args.report}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
