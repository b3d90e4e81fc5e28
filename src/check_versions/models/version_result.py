"""Version lookup result model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Resolution(str, Enum):
    """Outcome of looking a package up in one lockfile."""

    FOUND = "found"
    NOT_FOUND = "not-found"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class VersionResult:
    """Resolved version of the target package for a single repository."""

    resolution: Resolution
    version: str | None = None
    detail: str | None = None

    def __post_init__(self) -> None:
        if self.resolution is Resolution.FOUND and self.version is None:
            raise ValueError("A found result must carry a version")
        if self.resolution is not Resolution.FOUND and self.version is not None:
            raise ValueError("Only found results carry a version")

    @property
    def is_found(self) -> bool:
        return self.resolution is Resolution.FOUND

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "resolution": self.resolution.value,
            "version": self.version,
        }
        if self.detail:
            data["detail"] = self.detail
        return data

    @classmethod
    def found(cls, version: str) -> VersionResult:
        return cls(resolution=Resolution.FOUND, version=version)

    @classmethod
    def not_found(cls) -> VersionResult:
        return cls(resolution=Resolution.NOT_FOUND)

    @classmethod
    def unreadable(cls, detail: str) -> VersionResult:
        return cls(resolution=Resolution.UNREADABLE, detail=detail)
