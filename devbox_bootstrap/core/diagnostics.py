"""
Environment diagnostics printed at the end of a run (or on demand).
"""

import logging
import os
import platform
import sys
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..exceptions import VersionParseError
from ..integrations.ci import detect_notifier
from ..models.environment import EnvironmentState

logger = logging.getLogger(__name__)

# Reported as set/unset only; values are never echoed.
WATCHED_VARIABLES = (
    "DATABRICKS_HOST",
    "DATABRICKS_TOKEN",
    "DATABRICKS_CONFIG_PROFILE",
    "ARM_CLIENT_ID",
    "ARM_TENANT_ID",
    "ARM_SUBSCRIPTION_ID",
    "TF_BUILD",
    "GITHUB_ACTIONS",
)


class ToolDiagnostic(BaseModel):
    name: str
    present: bool = False
    version: Optional[str] = None
    location: Optional[str] = None
    error: Optional[str] = None


class DiagnosticsReport(BaseModel):
    """What the machine looks like to the bootstrap."""
    platform: str
    python_version: str
    machine: str
    ci_system: str = Field(default="none")
    path_entries: List[str] = Field(default_factory=list)
    tools: List[ToolDiagnostic] = Field(default_factory=list)
    variables: Dict[str, bool] = Field(default_factory=dict)


def collect_diagnostics(state: EnvironmentState,
                        probes: Mapping[str, object],
                        environ: Optional[Mapping[str, str]] = None) -> DiagnosticsReport:
    """
    Probe every tool and gather platform details.

    A probe that cannot parse a version is recorded rather than raised, since
    diagnostics must still print on a broken machine.
    """
    environ = os.environ if environ is None else environ
    tools = []
    for name, probe in probes.items():
        try:
            result = probe(state)
        except VersionParseError as e:
            logger.warning(f"{name}: {e}")
            tools.append(ToolDiagnostic(name=name, present=True, error=str(e)))
            continue
        tools.append(ToolDiagnostic(
            name=name,
            present=result.present,
            version=str(result.version) if result.version else None,
            location=result.location,
        ))

    return DiagnosticsReport(
        platform=platform.platform(),
        python_version=sys.version.split()[0],
        machine=platform.machine(),
        ci_system=detect_notifier(environ).name,
        path_entries=list(state.process_path),
        tools=tools,
        variables={key: bool(environ.get(key)) for key in WATCHED_VARIABLES},
    )


def render_text(report: DiagnosticsReport) -> List[str]:
    lines = [
        f"Platform:   {report.platform} ({report.machine})",
        f"Python:     {report.python_version}",
        f"CI system:  {report.ci_system}",
        "Tools:",
    ]
    for tool in report.tools:
        if tool.error:
            status = f"ERROR ({tool.error})"
        elif tool.present:
            status = f"{tool.version or 'unknown version'} at {tool.location}"
        else:
            status = "not found"
        lines.append(f"  {tool.name:<12} {status}")
    lines.append("Variables:")
    for key, is_set in report.variables.items():
        lines.append(f"  {key:<26} {'set' if is_set else 'unset'}")
    lines.append(f"PATH ({len(report.path_entries)} entries):")
    lines.extend(f"  {entry}" for entry in report.path_entries)
    return lines
