"""Parse npm package-lock.json and resolve the locked version of one package.

Three lockfile generations exist in the wild:

* v1 (npm 5/6): ``dependencies`` tree keyed by bare package name.
* v2 (npm 7/8): ``packages`` map keyed by install path, plus a v1-compatible
  ``dependencies`` tree.
* v3 (npm 9+): ``packages`` map only.

The ``lockfileVersion`` field is the only reliable discriminant. A lockfile
without it is treated as the newer ``packages`` shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..logging import get_logger
from ..models import VersionResult

logger = get_logger("parsers.package_lock")

NODE_MODULES_PREFIX = "node_modules/"


class LockfileParseError(ValueError):
    """Raised when a payload does not match the expected lockfile shape."""


def _entries(data: dict[str, Any], field: str) -> dict[str, dict[str, Any]]:
    section = data.get(field)
    if not isinstance(section, dict):
        raise LockfileParseError(f"missing or invalid '{field}' object")
    for key, meta in section.items():
        if not isinstance(meta, dict):
            raise LockfileParseError(f"'{field}' entry {key!r} is not an object")
        version = meta.get("version")
        if version is not None and not isinstance(version, str):
            raise LockfileParseError(
                f"'{field}' entry {key!r} has non-string version {version!r}"
            )
    return section


def _version_of(meta: dict[str, Any] | None) -> str | None:
    if meta is None:
        return None
    return meta.get("version")


@dataclass(frozen=True)
class LockfileEnvelope:
    """Discriminant-only view of a lockfile."""

    lockfile_version: int | None

    @property
    def is_v1(self) -> bool:
        return self.lockfile_version == 1

    @classmethod
    def from_json(cls, data: Any) -> LockfileEnvelope:
        if not isinstance(data, dict):
            raise LockfileParseError("lockfile is not a JSON object")
        version = data.get("lockfileVersion")
        # bool is an int subclass; true/false is not a valid discriminant
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise LockfileParseError(f"invalid lockfileVersion {version!r}")
        return cls(lockfile_version=version)


@dataclass(frozen=True)
class LockfileV1:
    """npm v1 shape: ``dependencies`` keyed by bare package name."""

    dependencies: dict[str, dict[str, Any]]

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> LockfileV1:
        return cls(dependencies=_entries(data, "dependencies"))

    def version_of(self, package: str) -> str | None:
        return _version_of(self.dependencies.get(package))


@dataclass(frozen=True)
class LockfileV2:
    """npm v2+ shape: ``packages`` keyed by ``node_modules/<name>`` path."""

    packages: dict[str, dict[str, Any]]

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> LockfileV2:
        return cls(packages=_entries(data, "packages"))

    def version_of(self, package: str) -> str | None:
        return _version_of(self.packages.get(f"{NODE_MODULES_PREFIX}{package}"))


def load_lockfile(text: str) -> LockfileV1 | LockfileV2:
    """Probe the discriminant, then parse the full payload in the matching shape.

    Raises:
        LockfileParseError: If either pass fails.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LockfileParseError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    except RecursionError as exc:
        raise LockfileParseError("invalid JSON (nesting too deep)") from exc

    envelope = LockfileEnvelope.from_json(data)
    if envelope.is_v1:
        return LockfileV1.from_json(data)
    return LockfileV2.from_json(data)


def resolve_version(payload: bytes, package: str, *, source: str = "<payload>") -> VersionResult:
    """Return the locked version of ``package`` in a raw lockfile payload.

    Never raises: undecodable or malformed payloads resolve to an unreadable
    result and a warning is logged naming ``source``.
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("%s: error converting body to UTF-8: %s", source, exc)
        return VersionResult.unreadable(f"invalid UTF-8: {exc}")

    try:
        lockfile = load_lockfile(text)
    except LockfileParseError as exc:
        logger.warning("%s: error parsing lockfile: %s", source, exc)
        return VersionResult.unreadable(str(exc))

    version = lockfile.version_of(package)
    if version is None:
        return VersionResult.not_found()
    return VersionResult.found(version)

