"""Load the list of repositories to check."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from .config import ConfigError


REPOSITORY_LIST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {"type": "string", "minLength": 1},
}


class RepositoryListError(ConfigError):
    """Raised when the repository list cannot be read or is malformed."""


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def validate_repositories(document: Any) -> list[str]:
    """Return the document as a list of identifiers if it matches the schema."""
    validator = Draft202012Validator(REPOSITORY_LIST_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda e: list(e.path))
    if errors:
        raise RepositoryListError("Repository list failed validation:\n" + _format_errors(errors))
    return list(document)


def load_repositories(path: Path | str) -> list[str]:
    """Read a JSON array of ``owner/name`` strings.

    Identifiers are returned in file order, duplicates included. Their
    ``owner/name`` form is not checked here.

    Raises:
        RepositoryListError: If the file is unreadable, not JSON, or not an
            array of strings.
    """
    list_path = Path(path)
    try:
        content = list_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RepositoryListError(f"Unable to read repository list {list_path}: {exc}") from exc

    try:
        document = json.loads(content)
    except json.JSONDecodeError as exc:
        raise RepositoryListError(f"Invalid JSON in repository list {list_path}: {exc}") from exc

    return validate_repositories(document)
