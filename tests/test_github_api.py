"""
Tests for GitHub.github_api and GitHub.github_download with the HTTP layer mocked.
"""

import io
import json
import threading
from datetime import datetime
from unittest.mock import patch

import keyring
import pytest
import requests

from GitHub.github_api import (
    GitHubAPI,
    GitHubAPIError,
    RateLimitError,
    check_rate_limit,
    clear_github_token,
    load_github_token,
    save_github_token,
)
from GitHub.github_download import DownloadCancelled, DownloadError, download_asset
from Utils.host import ProcessCanceled
from Utils.installers import AUTOINTEGRATOR_ARCHIVE_PATTERN, UE4SS_ARCHIVE_PATTERN

REPO = "https://api.github.com/repos/atenfyr/RE-UE4SS"

RELEASES = [
    {
        "tag_name": "experimental-latest",
        "prerelease": True,
        "assets": [
            {"name": "zCustomGameConfigs.zip", "browser_download_url": "https://dl/cfg.zip"},
            {"name": "UE4SS_v3.0.1-394-g437a8ff.zip", "browser_download_url": "https://dl/exp.zip"},
        ],
    },
    {
        "tag_name": "v3.0.1",
        "prerelease": False,
        "assets": [
            {"name": "UE4SS_v3.0.1.zip", "browser_download_url": "https://dl/stable.zip", "size": 12},
        ],
    },
]


# ── helpers ──────────────────────────────────────────────────────────────────

def make_response(status=200, payload=None, headers=None, body=b"", url=REPO):
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    resp.headers.update(headers or {})
    if payload is not None:
        resp._content = json.dumps(payload).encode()
    else:
        resp.raw = io.BytesIO(body)
    return resp


def make_api(*responses, token=""):
    session = requests.Session()
    api = GitHubAPI(token=token, backoff=0, session=session)
    getter = patch.object(session, "get", side_effect=list(responses))
    return api, getter


RATE_LIMITED = {"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"}


# ── releases ─────────────────────────────────────────────────────────────────

def test_list_releases_parses_assets():
    api, getter = make_api(make_response(payload=RELEASES))
    with getter as get:
        releases = api.list_releases(REPO + "/")

    get.assert_called_once_with(REPO + "/releases", timeout=api.timeout)
    assert [r.tag_name for r in releases] == ["experimental-latest", "v3.0.1"]
    assert releases[1].assets[0].download_url == "https://dl/stable.zip"
    assert releases[1].assets[0].size == 12


def test_latest_asset_includes_prereleases():
    api, getter = make_api(make_response(payload=RELEASES))
    with getter:
        asset = api.get_latest_release_asset(REPO, UE4SS_ARCHIVE_PATTERN)

    assert asset.name == "UE4SS_v3.0.1-394-g437a8ff.zip"
    assert asset.version == "3.0.1-394"
    assert asset.release.tag_name == "experimental-latest"


def test_latest_asset_without_prereleases():
    api, getter = make_api(make_response(payload=RELEASES))
    with getter:
        asset = api.get_latest_release_asset(REPO, UE4SS_ARCHIVE_PATTERN, prerelease=False)

    assert asset.download_url == "https://dl/stable.zip"
    assert asset.version == "3.0.1"


def test_latest_asset_without_pattern_uses_name_and_tag():
    api, getter = make_api(make_response(payload=RELEASES[1:]), make_response(payload=RELEASES[1:]))
    with getter:
        by_name = api.get_latest_release_asset(REPO, None, archive_file_name="UE4SS")
        fallback = api.get_latest_release_asset(REPO, None, archive_file_name="missing")

    assert by_name.name == "UE4SS_v3.0.1.zip"
    assert by_name.version == "3.0.1"
    assert fallback.name == "UE4SS_v3.0.1.zip"


def test_no_matching_asset_returns_none():
    empty_release = [{"tag_name": "v1", "assets": []}]
    api, getter = make_api(make_response(payload=[]), make_response(payload=empty_release),
                           make_response(payload=RELEASES))
    with getter:
        assert api.get_latest_release_asset(REPO, UE4SS_ARCHIVE_PATTERN) is None
        assert api.get_latest_release_asset(REPO, UE4SS_ARCHIVE_PATTERN) is None
        assert api.get_latest_release_asset(REPO, AUTOINTEGRATOR_ARCHIVE_PATTERN) is None


# ── errors & rate limits ─────────────────────────────────────────────────────

def test_rate_limit_raises_cancellation(log_lines):
    api, getter = make_api(make_response(403, {"message": "API rate limit exceeded"}, RATE_LIMITED))
    with getter, pytest.raises(RateLimitError) as info:
        api.list_releases(REPO)

    assert isinstance(info.value, ProcessCanceled)
    assert info.value.reset_at == datetime.fromtimestamp(1700000000)
    assert info.value.status_code == 403
    assert any(line.startswith("[info] GitHub rate limit exceeded") for line in log_lines)


def test_404_with_exhausted_quota_is_rate_limit():
    resp = make_response(404, {"message": "Not Found"}, {"x-ratelimit-remaining": "0"})
    with pytest.raises(RateLimitError):
        check_rate_limit(resp)


def test_error_without_exhausted_quota_is_api_error():
    api, getter = make_api(
        make_response(403, {"message": "Forbidden"}, {"x-ratelimit-remaining": "12"}),
        make_response(404, {"message": "Not Found"}),
    )
    with getter:
        with pytest.raises(GitHubAPIError) as first:
            api.list_releases(REPO)
        with pytest.raises(GitHubAPIError) as second:
            api.list_releases(REPO)

    assert not isinstance(first.value, RateLimitError)
    assert str(first.value) == "Forbidden"
    assert second.value.status_code == 404


def test_success_with_zero_quota_is_not_rate_limited():
    check_rate_limit(make_response(200, [], RATE_LIMITED))


def test_connection_errors_are_retried():
    api, getter = make_api(requests.ConnectionError("reset"), make_response(payload=RELEASES))
    with getter as get, patch("GitHub.github_api.time.sleep"):
        releases = api.list_releases(REPO)

    assert len(releases) == 2
    assert get.call_count == 2


def test_gives_up_after_retries():
    api, getter = make_api(*[requests.Timeout("slow")] * 3)
    with getter, patch("GitHub.github_api.time.sleep"), pytest.raises(GitHubAPIError) as info:
        api.list_releases(REPO)

    assert "Connection failed" in str(info.value)


def test_other_request_errors_become_api_errors():
    api, getter = make_api(requests.TooManyRedirects("loop"))
    with getter as get, pytest.raises(GitHubAPIError, match="loop"):
        api.list_releases(REPO)
    assert get.call_count == 1


def test_unexpected_payload():
    api, getter = make_api(make_response(payload={"message": "weird"}))
    with getter, pytest.raises(GitHubAPIError):
        api.list_releases(REPO)


# ── token ────────────────────────────────────────────────────────────────────

def test_token_sets_authorization_header():
    assert GitHubAPI(token="abc").session.headers["Authorization"] == "Bearer abc"
    assert "Authorization" not in GitHubAPI(token="").session.headers


def test_token_from_environment_wins(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", " env-token ")
    with patch("GitHub.github_api.keyring.get_password") as get_password:
        assert load_github_token() == "env-token"
    get_password.assert_not_called()


def test_token_from_keyring():
    with patch("GitHub.github_api.keyring.get_password", return_value=" stored\n"):
        assert load_github_token() == "stored"


def test_keyring_failure_means_anonymous():
    with patch("GitHub.github_api.keyring.get_password",
               side_effect=keyring.errors.KeyringError("no backend")):
        assert load_github_token() == ""


def test_save_and_clear_token():
    with patch("GitHub.github_api.keyring.set_password") as set_password, \
         patch("GitHub.github_api.keyring.delete_password") as delete_password:
        save_github_token("  abc \n")
        clear_github_token()

    set_password.assert_called_once_with("AstroneerModManager", "github_token", "abc")
    delete_password.assert_called_once_with("AstroneerModManager", "github_token")


def test_save_token_without_keyring_backend():
    with patch("GitHub.github_api.keyring.set_password",
               side_effect=keyring.errors.KeyringError("no backend")):
        with pytest.raises(RuntimeError, match="Cannot save GitHub token"):
            save_github_token("abc")


def test_clearing_missing_token_is_quiet():
    with patch("GitHub.github_api.keyring.delete_password",
               side_effect=keyring.errors.PasswordDeleteError("none")):
        clear_github_token()


# ── downloads ────────────────────────────────────────────────────────────────

def test_download_writes_file_and_reports_progress(tmp_path):
    dest = tmp_path / "dl" / "UE4SS_v3.0.1.zip"
    dest.parent.mkdir()
    dest.write_bytes(b"old")
    session = requests.Session()
    progress = []
    resp = make_response(body=b"new archive", headers={"Content-Length": "11"})

    with patch.object(session, "get", return_value=resp):
        result = download_asset("https://dl/stable.zip", dest, session=session,
                                progress_cb=lambda cur, total: progress.append((cur, total)))

    assert result == dest
    assert dest.read_bytes() == b"new archive"
    assert progress[-1] == (11, 11)


def test_download_rate_limited(tmp_path):
    session = requests.Session()
    with patch.object(session, "get", return_value=make_response(403, headers=RATE_LIMITED)):
        with pytest.raises(RateLimitError):
            download_asset("https://dl/x.zip", tmp_path / "x.zip", session=session)
    assert not (tmp_path / "x.zip").exists()


def test_download_http_error(tmp_path):
    session = requests.Session()
    with patch.object(session, "get", return_value=make_response(500)):
        with pytest.raises(DownloadError):
            download_asset("https://dl/x.zip", tmp_path / "x.zip", session=session)
    assert not (tmp_path / "x.zip").exists()


def test_download_cancelled(tmp_path):
    session = requests.Session()
    cancel = threading.Event()
    cancel.set()
    with patch.object(session, "get", return_value=make_response(body=b"data")):
        with pytest.raises(DownloadCancelled):
            download_asset("https://dl/x.zip", tmp_path / "x.zip", session=session, cancel=cancel)
    assert not (tmp_path / "x.zip").exists()
