"""
Semantic version model used for minimum-version gates.
"""

import re
from typing import Tuple

from pydantic import BaseModel, Field

from ..exceptions import VersionParseError

VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)")


class SemanticVersion(BaseModel):
    """A major.minor.patch triple, ordered lexicographically."""
    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)
    patch: int = Field(..., ge=0)

    class Config:
        frozen = True

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """
        Extract the first three-part numeric version from text.

        Raises:
            VersionParseError: if text contains no major.minor.patch substring
        """
        match = VERSION_PATTERN.search(text or "")
        if not match:
            raise VersionParseError(text)
        major, minor, patch = (int(group) for group in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: "SemanticVersion") -> bool:
        return self.as_tuple() < other.as_tuple()

    def __le__(self, other: "SemanticVersion") -> bool:
        return self.as_tuple() <= other.as_tuple()

    def __gt__(self, other: "SemanticVersion") -> bool:
        return self.as_tuple() > other.as_tuple()

    def __ge__(self, other: "SemanticVersion") -> bool:
        return self.as_tuple() >= other.as_tuple()

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


# A minimum version is just a version the installed one must meet or exceed.
VersionRequirement = SemanticVersion
