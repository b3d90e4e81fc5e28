"""Command line entrypoint.

Usage:
  check-versions --repos repos.json --package lodash [--concurrency 64]
  check-versions --lockfile package-lock.json --package lodash

Prints ``<version>\\t: <repo>`` per repository in input order on stdout;
diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import DEFAULT_CONCURRENCY, ConfigError, load_settings
from .core import check_versions
from .logging import configure_logging
from .parsers.package_lock import resolve_version
from .repos import load_repositories
from .report import NOT_FOUND_PLACEHOLDER, aggregate, failure_lines, render_lines
from .summary import render_summary


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="check-versions",
        description="Check versions of an npm package given a list of repositories",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-r",
        "--repos",
        type=Path,
        help="Path of the file containing a JSON list of owner/name repositories",
    )
    source.add_argument(
        "--lockfile",
        type=Path,
        help="Check a local package-lock.json instead of remote repositories",
    )
    parser.add_argument("-p", "--package", required=True, help="Package name to check versions of")
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=None,
        help=f"Maximum number of parallel requests (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--ref", default=None, help="Git ref to read the lockfile from")
    parser.add_argument("--format", choices=("text", "json"), default="text")
    parser.add_argument("--summary", type=Path, default=None, help="Write a Markdown summary here")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--log-file", type=Path, default=None)
    return parser.parse_args(argv)


def _check_lockfile(path: Path, package: str) -> int:
    try:
        payload = path.read_bytes()
    except OSError as exc:
        print(f"ERROR: Unable to read lockfile {path}: {exc}", file=sys.stderr)
        return 2
    result = resolve_version(payload, package, source=str(path))
    version = result.version if result.is_found else NOT_FOUND_PLACEHOLDER
    print(f"{version}\t: {path.name}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    if args.lockfile is not None:
        return _check_lockfile(args.lockfile, args.package)

    try:
        repositories = load_repositories(args.repos)
        settings = load_settings(
            concurrency=args.concurrency,
            timeout=args.timeout,
            ref=args.ref,
        )
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    report = check_versions(repositories, args.package, settings)
    document = aggregate(report)

    if args.format == "json":
        print(json.dumps(document, indent=2))
    else:
        for line in render_lines(report):
            print(line)
    for line in failure_lines(report):
        print(line, file=sys.stderr)

    if args.summary is not None:
        try:
            args.summary.write_text(render_summary(document), encoding="utf-8")
        except OSError as exc:
            print(f"ERROR: Unable to write summary {args.summary}: {exc}", file=sys.stderr)
            return 2

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
