"""
github_api.py
GitHub REST client for the release feeds of the external requirements.

Only the releases endpoint is used:
  GET https://api.github.com/repos/<owner>/<repo>/releases

Rate limits
-----------
  Anonymous      : 60 requests / hour
  With a token   : 5000 requests / hour

The server returns the remaining quota in response headers:
  x-ratelimit-remaining, x-ratelimit-reset (epoch seconds)

A 403/404 whose x-ratelimit-remaining is 0 means the quota is exhausted;
that raises RateLimitError, a ProcessCanceled, so callers can tell "try
again later" apart from a broken feed.

Usage
-----
    from GitHub.github_api import GitHubAPI

    api = GitHubAPI()
    asset = api.get_latest_release_asset(
        "https://api.github.com/repos/atenfyr/AutoIntegrator",
        pattern=AUTOINTEGRATOR_ARCHIVE_PATTERN,
    )
"""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import keyring
import requests

from Utils.app_log import app_log
from Utils.host import ProcessCanceled
from version import __version__

APP_NAME = "AstroneerModManager"
USER_AGENT = f"{APP_NAME}/{__version__}"

# How long to wait between retries after a connection error (seconds)
_RETRY_BACKOFF = 2.0
_MAX_RETRIES = 3
_DEFAULT_TIMEOUT = 30.0

_RATE_LIMIT_STATUSES = (403, 404)


# ---------------------------------------------------------------------------
# Data classes for typed responses
# ---------------------------------------------------------------------------

@dataclass
class GitHubAsset:
    name: str
    download_url: str
    size: int = 0


@dataclass
class GitHubRelease:
    tag_name: str
    prerelease: bool = False
    name: str = ""
    published_at: str = ""
    assets: list[GitHubAsset] = field(default_factory=list)


@dataclass
class ResolvedAsset:
    """The release asset chosen for a requirement during one sync pass."""
    name: str
    download_url: str
    version: str
    release: GitHubRelease


# ---------------------------------------------------------------------------
# Token persistence (environment, then system keyring)
# ---------------------------------------------------------------------------

_KEYRING_SERVICE = APP_NAME
_KEYRING_USER = "github_token"


def load_github_token() -> str:
    """GITHUB_TOKEN from the environment, else the keyring, else ''."""
    env = os.environ.get("GITHUB_TOKEN", "").strip()
    if env:
        return env
    try:
        token = keyring.get_password(_KEYRING_SERVICE, _KEYRING_USER)
        return token.strip() if token else ""
    except keyring.errors.KeyringError as e:
        app_log(f"Keyring unavailable for GitHub token: {e}", "warn")
        return ""


def save_github_token(token: str) -> None:
    """Persist a GitHub token to the system keyring."""
    try:
        keyring.set_password(_KEYRING_SERVICE, _KEYRING_USER, token.strip())
    except keyring.errors.KeyringError as e:
        app_log(f"Keyring unavailable for saving GitHub token: {e}", "error")
        raise RuntimeError(f"Cannot save GitHub token: {e}") from e


def clear_github_token() -> None:
    try:
        keyring.delete_password(_KEYRING_SERVICE, _KEYRING_USER)
    except keyring.errors.PasswordDeleteError:
        pass
    except keyring.errors.KeyringError as e:
        app_log(f"Keyring unavailable when clearing GitHub token: {e}", "warn")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GitHubAPIError(Exception):
    """Raised for non-recoverable API errors."""
    def __init__(self, message: str, status_code: int = 0, url: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class RateLimitError(GitHubAPIError, ProcessCanceled):
    """Raised when the hourly quota is used up."""
    def __init__(self, url: str = "", reset_at: Optional[datetime] = None,
                 status_code: int = 403):
        super().__init__("GitHub rate limit exceeded", status_code, url)
        self.reset_at = reset_at


def check_rate_limit(resp: requests.Response, url: str = "") -> None:
    """Raise RateLimitError if *resp* signals an exhausted quota."""
    if resp.status_code not in _RATE_LIMIT_STATUSES:
        return
    remaining = resp.headers.get("x-ratelimit-remaining")
    if remaining is None:
        return
    try:
        if int(remaining) != 0:
            return
    except ValueError:
        return
    try:
        reset_at = datetime.fromtimestamp(int(resp.headers.get("x-ratelimit-reset", "0")))
    except (ValueError, OverflowError, OSError):
        reset_at = None
    app_log(f"GitHub rate limit exceeded (reset at {reset_at})", "info")
    raise RateLimitError(url or resp.url, reset_at, resp.status_code)


def _parse_release(data: dict[str, Any]) -> GitHubRelease:
    return GitHubRelease(
        tag_name=data.get("tag_name", ""),
        prerelease=bool(data.get("prerelease", False)),
        name=data.get("name") or "",
        published_at=data.get("published_at") or "",
        assets=[
            GitHubAsset(
                name=a.get("name", ""),
                download_url=a.get("browser_download_url", ""),
                size=a.get("size", 0),
            )
            for a in data.get("assets", [])
        ],
    )


# ---------------------------------------------------------------------------
# Main API client
# ---------------------------------------------------------------------------

class GitHubAPI:
    """
    Synchronous GitHub releases client.

    Parameters
    ----------
    token : str | None
        Personal access token. ``None`` loads one via load_github_token();
        pass ``""`` to stay anonymous.
    timeout : float
        Per-request timeout in seconds.
    backoff : float
        Base delay between retries after a connection error or timeout.
    """

    def __init__(self, token: str | None = None, timeout: float = _DEFAULT_TIMEOUT,
                 backoff: float = _RETRY_BACKOFF, session: requests.Session | None = None):
        self._timeout = timeout
        self._backoff = backoff
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        })
        if token is None:
            token = load_github_token()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def timeout(self) -> float:
        return self._timeout

    # -- low-level ----------------------------------------------------------

    def _get(self, url: str, retries: int = _MAX_RETRIES) -> Any:
        """Issue a GET request, retrying connection failures and timeouts."""
        last_exc: Exception | None = None
        for attempt in range(retries):
            try:
                resp = self._session.get(url, timeout=self._timeout)
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_exc = exc
                wait = self._backoff * (attempt + 1)
                app_log(f"GitHub GET {url} failed ({exc}), retrying in {wait:.1f}s "
                        f"(attempt {attempt + 1}/{retries})", "warn")
                time.sleep(wait)
                continue
            except requests.RequestException as exc:
                app_log(f"GitHub GET {url} failed: {exc}", "warn")
                raise GitHubAPIError(f"Request failed: {exc}", url=url) from exc

            app_log(f"GitHub GET {url} → {resp.status_code}", "debug")
            check_rate_limit(resp, url)

            if not resp.ok:
                try:
                    msg = resp.json().get("message", resp.reason)
                except Exception:
                    msg = resp.text[:300] or resp.reason
                raise GitHubAPIError(msg, resp.status_code, url)

            return resp.json()

        raise GitHubAPIError(f"Connection failed: {last_exc}", url=url)

    # -- Releases -----------------------------------------------------------

    def list_releases(self, repo_url: str) -> list[GitHubRelease]:
        """Releases of *repo_url* (an api.github.com/repos/<owner>/<repo> URL), newest first."""
        data = self._get(f"{repo_url.rstrip('/')}/releases")
        if not isinstance(data, list):
            raise GitHubAPIError("Unexpected releases payload", url=repo_url)
        return [_parse_release(r) for r in data]

    def get_latest_release_asset(
        self,
        repo_url: str,
        pattern: Optional[re.Pattern] = None,
        archive_file_name: str = "",
        prerelease: bool = True,
    ) -> ResolvedAsset | None:
        """Pick the asset to install from the newest release.

        With *pattern*, the first asset whose name matches is chosen and its
        group 1 is the version. Without one, the asset whose name contains
        *archive_file_name* (else the first asset) is chosen and the release
        tag is the version. Returns None if nothing suitable exists.
        """
        releases = [r for r in self.list_releases(repo_url) if prerelease or not r.prerelease]
        if not releases or not releases[0].assets:
            return None
        return choose_asset(releases[0], pattern, archive_file_name)


def choose_asset(release: GitHubRelease, pattern: Optional[re.Pattern] = None,
                 archive_file_name: str = "") -> ResolvedAsset | None:
    if pattern is not None:
        for asset in release.assets:
            m = pattern.search(asset.name)
            if m:
                return ResolvedAsset(asset.name, asset.download_url, m.group(1), release)
        return None
    if not release.assets:
        return None
    asset = next(
        (a for a in release.assets if archive_file_name and archive_file_name in a.name),
        release.assets[0],
    )
    return ResolvedAsset(asset.name, asset.download_url, release.tag_name.lstrip("vV"), release)
