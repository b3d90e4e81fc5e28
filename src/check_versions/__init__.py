"""check-versions core package.

Reports which version of an npm package is locked in each of a list of
GitHub repositories.
"""

from .core import check_versions, collect_versions
from .models import ReportEntry, Resolution, VersionReport, VersionResult

__all__ = [
    "ReportEntry",
    "Resolution",
    "VersionReport",
    "VersionResult",
    "check_versions",
    "collect_versions",
]
