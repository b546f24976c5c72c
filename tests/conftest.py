"""
Shared fixtures and fakes for the ASTRONEER extension test suite.
"""

from pathlib import Path

import pytest

from GitHub.github_api import GitHubRelease, ResolvedAsset
from Utils.app_log import clear_app_log
from Utils.constants import GAME_ID
from Utils.host import Discovery, Download, Mod, NotFound


class FakeHost:
    """In-memory host: records every action, install and notification."""

    def __init__(self, staging: Path, temp: Path):
        self.staging = staging
        self.temp = temp
        self.profile_id = "profile-1"
        self.mods: dict[str, Mod] = {}
        self.mod_state: dict[str, bool] = {}
        self.downloads: dict[str, Download] = {}
        self.game_discovery: Discovery | None = None

        self.batches: list[list] = []
        self.notifications: list[tuple] = []
        self.dismissed: list[str] = []
        self.errors: list[tuple] = []
        self.installed: list[tuple] = []
        self.imported: list[Path] = []
        self.removed: list[list[str]] = []

        self.install_error: Exception | None = None
        self.import_id: str | None = "dl-imported"

    # ── test setup ──

    def add_mod(self, mod_id, files, type="", enabled=True, attributes=None):
        folder = self.staging / mod_id
        for rel in files:
            target = folder / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("x", encoding="utf-8")
        self.mods[mod_id] = Mod(mod_id, type, mod_id, dict(attributes or {}))
        self.mod_state[mod_id] = enabled
        return self.mods[mod_id]

    def add_download(self, dl_id, local_path):
        self.downloads[dl_id] = Download(dl_id, local_path)

    @property
    def actions(self) -> list:
        return [a for batch in self.batches for a in batch]

    # ── StateQuery ──

    def get_mods(self, game_id):
        return dict(self.mods) if game_id == GAME_ID else {}

    def get_profile_mod_state(self, profile_id):
        return dict(self.mod_state) if profile_id == self.profile_id else {}

    def last_active_profile(self, game_id):
        return self.profile_id

    def get_downloads(self):
        return dict(self.downloads)

    def get_discovery(self, game_id):
        return self.game_discovery if game_id == GAME_ID else None

    def get_install_path(self, game_id):
        return self.staging

    def get_temp_path(self):
        return self.temp

    # ── ActionDispatch ──

    def batch_dispatch(self, actions):
        self.batches.append(list(actions))

    # ── InstallPipeline ──

    def install_from_download(self, download_id, options):
        if self.install_error is not None:
            raise self.install_error
        self.installed.append((download_id, options))
        return f"mod-{download_id}"

    def import_download(self, local_path):
        self.imported.append(Path(local_path))
        if self.import_id is None:
            raise NotFound(str(local_path))
        return self.import_id

    def remove_mods(self, game_id, mod_ids):
        self.removed.append(list(mod_ids))

    # ── Notifier ──

    def send_notification(self, id, message, type="info", no_dismiss=False):
        self.notifications.append((id, message, type, no_dismiss))

    def dismiss_notification(self, id):
        self.dismissed.append(id)

    def show_error_notification(self, message, error=None, allow_report=False):
        self.errors.append((message, error))


class FakeFeed:
    """Release feed returning canned assets (or raising) per repository URL."""

    def __init__(self):
        self.assets: dict[str, ResolvedAsset | None] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []

    def set_asset(self, repo_url, name, version, tag=None):
        self.assets[repo_url] = ResolvedAsset(
            name=name,
            download_url=f"https://example.invalid/{name}",
            version=version,
            release=GitHubRelease(tag_name=tag or f"v{version}"),
        )

    def get_latest_release_asset(self, repo_url, pattern=None, archive_file_name="",
                                 prerelease=True):
        self.calls.append(repo_url)
        if repo_url in self.failures:
            raise self.failures[repo_url]
        return self.assets.get(repo_url)


class FakeDownloader:
    """Writes a placeholder file instead of fetching the URL."""

    def __init__(self):
        self.calls: list[tuple[str, Path]] = []
        self.error: Exception | None = None

    def __call__(self, url, dest):
        self.calls.append((url, Path(dest)))
        if self.error is not None:
            raise self.error
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        Path(dest).write_bytes(b"archive")
        return Path(dest)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config/cache writes and tokens out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    yield
    clear_app_log()


@pytest.fixture
def host(tmp_path):
    staging = tmp_path / "staging"
    temp = tmp_path / "temp"
    staging.mkdir()
    temp.mkdir()
    return FakeHost(staging, temp)


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def game_root(tmp_path):
    """A minimal Steam ASTRONEER install."""
    root = tmp_path / "ASTRONEER"
    (root / "Astro" / "Content" / "Paks").mkdir(parents=True)
    (root / "Astro.exe").write_bytes(b"exe")
    return root


@pytest.fixture
def log_lines():
    """Capture app_log output."""
    from Utils.app_log import set_app_log

    lines: list[str] = []
    set_app_log(lines.append)
    return lines
