"""
Terraform project scaffolding.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .templates import PROJECT_FILES


class ScaffoldResult(BaseModel):
    """Which files were written and which already existed."""
    created: List[Path] = Field(default_factory=list)
    skipped: List[Path] = Field(default_factory=list)


class TerraformScaffolder:
    """Writes the starter files of a Terraform project, never overwriting."""

    def __init__(self,
                 directory: Path,
                 project_name: str = "devbox",
                 azurerm_version: str = "~> 3.100",
                 databricks_provider_version: str = "~> 1.40",
                 files: Optional[Dict[str, str]] = None):
        self.logger = logging.getLogger(__name__)
        self.directory = Path(directory)
        self.files = files if files is not None else PROJECT_FILES
        self.values = {
            "project_name": project_name,
            "azurerm_version": azurerm_version,
            "databricks_provider_version": databricks_provider_version,
        }

    def render(self, name: str) -> str:
        return self.files[name].format(**self.values)

    def scaffold(self) -> ScaffoldResult:
        """
        Create each template file that does not exist yet.

        Returns:
            Created and skipped paths
        """
        result = ScaffoldResult()
        self.directory.mkdir(parents=True, exist_ok=True)

        for name in self.files:
            path = self.directory / name
            content = self.render(name)
            try:
                # "x" fails if the file appeared since we last looked
                with open(path, "x", encoding="utf-8", newline="\n") as f:
                    f.write(content)
            except FileExistsError:
                self.logger.info(f"Keeping existing {path}")
                result.skipped.append(path)
                continue
            self.logger.info(f"Created {path}")
            result.created.append(path)

        return result
