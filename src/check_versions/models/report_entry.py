"""Ordered report of per-repository results."""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterator

from .version_result import Resolution, VersionResult


def short_name(repository: str) -> str:
    """Return the repository name with its ``owner/`` prefix stripped."""
    _, sep, name = repository.partition("/")
    return name if sep else repository


@dataclass(frozen=True)
class ReportEntry:
    """One input slot: the repository and what was resolved for it.

    ``result`` is None when the work item itself failed; ``error`` then holds
    the failure message.
    """

    index: int
    repository: str
    result: VersionResult | None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("index must be non-negative")
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of result or error must be set")

    @property
    def failed(self) -> bool:
        return self.result is None

    @property
    def short_name(self) -> str:
        return short_name(self.repository)


@dataclass(frozen=True)
class VersionReport:
    """Results for every input repository, in input order."""

    package: str
    entries: tuple[ReportEntry, ...]

    def __post_init__(self) -> None:
        for position, entry in enumerate(self.entries):
            if entry.index != position:
                raise ValueError(
                    f"Entry for {entry.repository!r} has index {entry.index}, expected {position}"
                )

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.entries)

    @property
    def repositories(self) -> list[str]:
        return [entry.repository for entry in self.entries]

    @property
    def resolved(self) -> list[ReportEntry]:
        """Entries that produced a result, in input order."""
        return [entry for entry in self.entries if not entry.failed]

    @property
    def failures(self) -> list[ReportEntry]:
        return [entry for entry in self.entries if entry.failed]

    @property
    def totals(self) -> dict[str, int]:
        counts = {resolution: 0 for resolution in Resolution}
        for entry in self.entries:
            if entry.result is not None:
                counts[entry.result.resolution] += 1
        return {
            "repositories": len(self.entries),
            "found": counts[Resolution.FOUND],
            "notFound": counts[Resolution.NOT_FOUND],
            "unreadable": counts[Resolution.UNREADABLE],
            "failed": len(self.failures),
        }
