"""Core pipeline: fetch every lockfile with bounded concurrency and resolve versions.

This module MUST NOT read files, parse arguments or print, so it can be reused
by the CLI and by other callers that already hold a repository list.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Protocol

from .config import DEFAULT_CONCURRENCY, Settings
from .fetcher import FetchError, LockfileFetcher, build_session
from .logging import get_logger
from .models import ReportEntry, VersionReport, VersionResult
from .parsers.package_lock import resolve_version

logger = get_logger("core")


class Fetcher(Protocol):
    """Anything that can fetch one repository's lockfile."""

    def fetch(self, repository: str) -> bytes | None: ...


def _check_one(fetcher: Fetcher, repository: str, package: str) -> VersionResult:
    try:
        payload = fetcher.fetch(repository)
    except FetchError as exc:
        logger.error("Request failed for %s: %s", repository, exc.cause)
        return VersionResult.unreadable(f"request failed: {exc.cause}")

    if payload is None:
        return VersionResult.not_found()

    result = resolve_version(payload, package, source=repository)
    if result.is_found:
        logger.debug("%s: found %s", repository, result.version)
    else:
        logger.debug("%s: %s", repository, result.resolution.value)
    return result


def collect_versions(
    repositories: Sequence[str],
    package: str,
    fetcher: Fetcher,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> VersionReport:
    """Resolve ``package`` in every repository and return results in input order.

    At most ``concurrency`` fetches run at once; a new one starts as soon as a
    worker frees up. Each future is paired with its input index, so completion
    order never affects output order and duplicate repositories each get their
    own slot. Blocks until every repository has been processed.

    A failure inside one work item never stops the others: request failures
    become unreadable results and unexpected errors become failed entries.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    slots: list[ReportEntry | None] = [None] * len(repositories)
    logger.info(
        "Checking %s in %d repositories (%d concurrent requests)",
        package,
        len(repositories),
        concurrency,
    )

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="check-versions") as pool:
        futures: dict[Future[VersionResult], int] = {
            pool.submit(_check_one, fetcher, repository, package): index
            for index, repository in enumerate(repositories)
        }
        for future in as_completed(futures):
            index = futures[future]
            repository = repositories[index]
            try:
                result = future.result()
            except Exception as exc:
                logger.error("Task for %s failed", repository, exc_info=exc)
                slots[index] = ReportEntry(
                    index=index,
                    repository=repository,
                    result=None,
                    error=f"{type(exc).__name__}: {exc}",
                )
            else:
                slots[index] = ReportEntry(index=index, repository=repository, result=result)

    entries = tuple(entry for entry in slots if entry is not None)
    report = VersionReport(package=package, entries=entries)
    logger.info("Finished: %s", report.totals)
    return report


def check_versions(
    repositories: Sequence[str],
    package: str,
    settings: Settings,
) -> VersionReport:
    """Run the full pipeline against the GitHub API described by ``settings``."""
    session = build_session(settings)
    try:
        fetcher = LockfileFetcher(session, settings)
        return collect_versions(
            repositories,
            package,
            fetcher,
            concurrency=settings.concurrency,
        )
    finally:
        session.close()
