"""Report assembly: correlate results with repositories in input order."""

from __future__ import annotations

from typing import Any

from .models import ReportEntry, VersionReport

NOT_FOUND_PLACEHOLDER = "-------"
REPORT_SCHEMA_VERSION = "1"


def format_line(entry: ReportEntry) -> str:
    """Return ``<version>\\t: <repo-short-name>`` for one resolved entry."""
    version = entry.result.version if entry.result is not None else None
    if version is None:
        version = NOT_FOUND_PLACEHOLDER
    return f"{version}\t: {entry.short_name}"


def render_lines(report: VersionReport) -> list[str]:
    """Return one table line per resolved repository, in input order.

    Entries whose work item failed are left out; see ``failure_lines``.
    """
    return [format_line(entry) for entry in report.resolved]


def failure_lines(report: VersionReport) -> list[str]:
    return [f"TaskError: {entry.repository}: {entry.error}" for entry in report.failures]


def aggregate(report: VersionReport) -> dict[str, Any]:
    """Return a JSON-friendly document describing the whole run."""
    repositories: list[dict[str, Any]] = []
    for entry in report.entries:
        if entry.result is None:
            continue
        item: dict[str, Any] = {
            "repository": entry.repository,
            "shortName": entry.short_name,
        }
        item.update(entry.result.to_dict())
        repositories.append(item)

    failures = [
        {"repository": entry.repository, "error": entry.error} for entry in report.failures
    ]

    return {
        "version": REPORT_SCHEMA_VERSION,
        "package": report.package,
        "repositories": repositories,
        "failures": failures,
        "totals": report.totals,
    }
