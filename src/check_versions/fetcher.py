"""Fetch package-lock.json from the GitHub contents API."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter

from .config import Settings
from .logging import get_logger

logger = get_logger("fetcher")

LOCKFILE_PATH = "package-lock.json"
USER_AGENT = "check-versions"
API_VERSION = "2022-11-28"
RAW_MEDIA_TYPE = "application/vnd.github.raw"


class FetchError(RuntimeError):
    """Raised when a lockfile request fails below the HTTP status level."""

    def __init__(self, repository: str, cause: Exception) -> None:
        super().__init__(f"{repository}: {cause}")
        self.repository = repository
        self.cause = cause


def build_session(settings: Settings) -> requests.Session:
    """Return a session whose connection pool can serve every worker at once."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=settings.concurrency)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Authorization": f"token {settings.token}",
            "Accept": RAW_MEDIA_TYPE,
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
    )
    return session


class LockfileFetcher:
    """Issue one GET per repository against a shared session.

    The session is only read from, so a single fetcher can be used from many
    worker threads. No retries are attempted.
    """

    def __init__(self, session: requests.Session, settings: Settings) -> None:
        self.session = session
        self.api_url = settings.api_url.rstrip("/")
        self.timeout = settings.timeout
        self.ref = settings.ref

    def url_for(self, repository: str) -> str:
        return f"{self.api_url}/repos/{repository}/contents/{LOCKFILE_PATH}"

    def fetch(self, repository: str) -> bytes | None:
        """Return the raw lockfile bytes, or None when the file does not exist.

        Non-404 error statuses are logged and their body is returned as-is for
        the resolver to reject.

        Raises:
            FetchError: On DNS, TLS, connection or timeout failures.
        """
        url = self.url_for(repository)
        params = {"ref": self.ref} if self.ref else None
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(repository, exc) from exc

        if response.status_code == 404:
            logger.warning("%s: %s", response.status_code, url)
            return None
        if not response.ok:
            logger.warning("%s: unexpected status %s from %s", repository, response.status_code, url)

        return response.content
