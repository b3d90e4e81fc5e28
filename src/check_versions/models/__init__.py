"""Data models for lockfile version lookups."""

from __future__ import annotations

from .report_entry import ReportEntry, VersionReport, short_name
from .version_result import Resolution, VersionResult

__all__ = [
    "ReportEntry",
    "Resolution",
    "VersionReport",
    "VersionResult",
    "short_name",
]
