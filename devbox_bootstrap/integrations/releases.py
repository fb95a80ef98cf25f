"""
Release-metadata lookups for tools installed from direct downloads.
"""

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Callable, Optional

from ..exceptions import ReleaseLookupError, VersionParseError
from ..models.version import SemanticVersion

HASHICORP_CHECKPOINT_URL = "https://checkpoint-api.hashicorp.com/v1/check/{product}"
GITHUB_LATEST_RELEASE_URL = "https://api.github.com/repos/{owner}/{repo}/releases/latest"


class ReleaseMetadataClient:
    """Asks upstream services for the latest published version of a tool."""

    def __init__(self,
                 github_token: Optional[str] = None,
                 opener: Callable = urllib.request.urlopen,
                 timeout: float = 10):
        self.logger = logging.getLogger(__name__)
        self.github_token = github_token or os.environ.get("GITHUB_TOKEN")
        self.opener = opener
        self.timeout = timeout

    def latest_terraform(self) -> SemanticVersion:
        """Latest Terraform release according to HashiCorp's checkpoint service."""
        data = self._fetch_json(HASHICORP_CHECKPOINT_URL.format(product="terraform"))
        return self._parse(data.get("current_version"), "terraform")

    def latest_github_release(self, owner: str, repo: str) -> SemanticVersion:
        """Latest release tag of a GitHub repository."""
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        data = self._fetch_json(GITHUB_LATEST_RELEASE_URL.format(owner=owner, repo=repo), headers)
        return self._parse(data.get("tag_name"), f"{owner}/{repo}")

    def latest_databricks_cli(self) -> SemanticVersion:
        return self.latest_github_release("databricks", "cli")

    def _parse(self, value: Optional[str], label: str) -> SemanticVersion:
        if not value:
            raise ReleaseLookupError(f"No version field in release metadata for {label}")
        try:
            return SemanticVersion.parse(value)
        except VersionParseError as e:
            raise ReleaseLookupError(f"Unusable version {value!r} for {label}") from e

    def _fetch_json(self, url: str, headers: Optional[dict] = None) -> dict:
        request = urllib.request.Request(url)
        for name, value in (headers or {}).items():
            request.add_header(name, value)

        try:
            with self.opener(request, timeout=self.timeout) as response:
                data = json.loads(response.read().decode())
        except urllib.error.HTTPError as e:
            if e.code == 403:
                raise ReleaseLookupError(f"Rate limited by {url}. Set GITHUB_TOKEN to increase the limit.") from e
            raise ReleaseLookupError(f"Release metadata request to {url} failed: HTTP {e.code}") from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise ReleaseLookupError(f"Release metadata request to {url} failed: {e}") from e

        if not isinstance(data, dict):
            raise ReleaseLookupError(f"Unexpected release metadata from {url}")
        return data
