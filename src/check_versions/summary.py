"""Human-readable summary rendering for $GITHUB_STEP_SUMMARY."""

from __future__ import annotations

from typing import Any

from .report import NOT_FOUND_PLACEHOLDER


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and a table of resolved versions."""
    totals = report.get("totals", {})
    package = report.get("package") or "(unknown package)"
    repositories = report.get("repositories", [])
    failures = report.get("failures", [])

    lines = []
    lines.append(f"# {package} versions")
    lines.append("")
    lines.append(
        f"Repositories: {totals.get('repositories', 0)} | Found: {totals.get('found', 0)}"
        f" | Not found: {totals.get('notFound', 0)} | Unreadable: {totals.get('unreadable', 0)}"
    )
    lines.append("")
    lines.append("| Repository | Version |")
    lines.append("| --- | --- |")

    for item in repositories:
        name = item.get("repository", "")
        version = item.get("version")
        if version is None:
            version = NOT_FOUND_PLACEHOLDER
        lines.append(f"| {name} | {version} |")

    if not repositories:
        lines.append("| (no repositories checked) | n/a |")

    if failures:
        lines.append("")
        lines.append("## Failed checks")
        lines.append("")
        for failure in failures:
            lines.append(f"- {failure.get('repository', '')}: {failure.get('error', '')}")

    return "\n".join(lines) + "\n"
