"""
Databricks CLI authentication profile setup.
"""

import configparser
import logging
import re
import shutil
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from ..exceptions import ProfileConfigError
from ..models.auth import DatabricksProfile

logger = logging.getLogger(__name__)

SECTION_HEADER = re.compile(r"^\s*\[([^\]]+)\]", re.MULTILINE)


class ProfileAction(str, Enum):
    CREATED = "created"
    APPENDED = "appended"
    UNCHANGED = "unchanged"


def build_profile(**fields) -> DatabricksProfile:
    """Validate profile fields, raising ProfileConfigError with the pydantic details."""
    try:
        return DatabricksProfile(**fields)
    except ValidationError as e:
        details = "; ".join(error["msg"] for error in e.errors())
        raise ProfileConfigError(f"Invalid Databricks profile: {details}") from e


def existing_profiles(config_path: Path) -> set:
    text = config_path.read_text(encoding="utf-8")
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(text, source=str(config_path))
    # configparser hides DEFAULT from sections(), even when the header is present
    return set(parser.sections()) | {name.strip() for name in SECTION_HEADER.findall(text)}


def configure_profile(profile: DatabricksProfile, config_path: Path) -> ProfileAction:
    """
    Add a profile to a Databricks config file without touching existing ones.

    A missing file is created. An existing file that already holds the profile is
    left alone. Otherwise the file is backed up to <name>.bak (best effort) and
    the profile appended.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(profile.render(), encoding="utf-8")
        logger.info(f"Created {config_path} with profile [{profile.name}]")
        return ProfileAction.CREATED

    try:
        profiles = existing_profiles(config_path)
    except configparser.Error as e:
        raise ProfileConfigError(f"{config_path} is not a valid config file: {e}") from e

    if profile.name in profiles:
        logger.info(f"Profile [{profile.name}] already present in {config_path}; leaving it unchanged")
        return ProfileAction.UNCHANGED

    backup = config_path.with_name(config_path.name + ".bak")
    try:
        shutil.copy2(config_path, backup)
        logger.info(f"Backed up {config_path} to {backup}")
    except OSError as e:
        logger.warning(f"Could not back up {config_path}: {e}")

    existing = config_path.read_text(encoding="utf-8")
    separator = "" if not existing or existing.endswith("\n\n") else ("\n" if existing.endswith("\n") else "\n\n")
    with open(config_path, "a", encoding="utf-8") as f:
        f.write(separator + profile.render())
    logger.info(f"Appended profile [{profile.name}] to {config_path}")
    return ProfileAction.APPENDED
