"""
github_download.py
Stream a release asset from GitHub to a local file.

Release assets redirect to GitHub's object storage; ``requests`` follows the
redirect. A 403/404 carrying an exhausted x-ratelimit-remaining header is
reported as RateLimitError like every other GitHub call.

Usage
-----
    from GitHub.github_download import download_asset

    path = download_asset(asset.download_url, get_temp_dir() / asset.name,
                          progress_cb=lambda cur, total: print(f"{cur}/{total}"))
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

import requests

from .github_api import USER_AGENT, check_rate_limit
from Utils.app_log import app_log
from Utils.host import ProcessCanceled

# Default chunk size for streaming downloads (256 KB)
_CHUNK_SIZE = 256 * 1024
_DEFAULT_TIMEOUT = 60

# Callback signature: (bytes_downloaded, total_bytes_or_zero)
ProgressCallback = Callable[[int, int], None]

# Signature shared by download_asset and test doubles
Downloader = Callable[[str, Path], Path]


class DownloadError(Exception):
    """Raised when an asset cannot be fetched or written."""
    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class DownloadCancelled(ProcessCanceled):
    """Raised when a download is cancelled via the cancel event."""


def download_asset(
    url: str,
    dest: Path | str,
    session: Optional[requests.Session] = None,
    timeout: float = _DEFAULT_TIMEOUT,
    progress_cb: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> Path:
    """Download *url* to *dest*, replacing any existing file. Returns *dest*."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    getter = session.get if session is not None else requests.get
    headers = {
        "Accept-Encoding": "gzip, deflate",
        "User-Agent": USER_AGENT,
    }

    try:
        with getter(url, headers=headers, stream=True, timeout=timeout) as resp:
            check_rate_limit(resp, url)
            resp.raise_for_status()

            total = int(resp.headers.get("Content-Length", 0) or 0)
            downloaded = 0
            with open(dest, "wb") as fh:
                for chunk in resp.iter_content(_CHUNK_SIZE):
                    if cancel and cancel.is_set():
                        fh.close()
                        dest.unlink(missing_ok=True)
                        raise DownloadCancelled(f"Download of {dest.name} cancelled")

                    fh.write(chunk)
                    downloaded += len(chunk)

                    if progress_cb:
                        progress_cb(downloaded, total)
    except requests.RequestException as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {dest.name}: {exc}", url) from exc
    except OSError as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Failed to write {dest}: {exc}", url) from exc

    app_log(f"Downloaded {dest.name} ({downloaded} bytes) → {dest}")
    return dest
