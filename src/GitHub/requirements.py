"""
requirements.py
Keep the ASTRONEER modding requirements (UE4SS and AutoIntegrator)
installed, enabled and current.

A synchronization pass walks the requirement list in order. For each one it:
  1. Asks the release feed for the newest matching asset (pre-releases
     included). A feed failure only skips that requirement.
  2. Looks for an enabled mod whose staged folder contains the marker file.
  3. Installed and current      -> nothing to do.
     Installed but outdated     -> disable it and reinstall.
     Installed, version unknown -> re-enable it and refresh its attributes.
  4. Otherwise installs from a cached download, or downloads the asset,
     imports it and installs it. A failure here abandons the rest of the pass.

Enable/disable/attribute changes are queued and dispatched as one batch when
the pass ends, so every requirement sees the mod state as it was at pass
start. The batch is dispatched and the activity notification dismissed on
every exit path.

Usage
-----
    from GitHub import GitHubAPI, RequirementResolver

    outcomes = RequirementResolver(host, GitHubAPI()).sync()
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol

from .github_api import GitHubAPIError, ResolvedAsset
from .github_download import Downloader, download_asset
from Utils.app_log import app_log
from Utils.config_paths import get_temp_dir
from Utils.constants import (
    AUTOINTEGRATOR_MARKER,
    AUTOINTEGRATOR_NAME,
    GAME_ID,
    MOD_TYPE_AUTOINTEGRATOR,
    MOD_TYPE_UE4SS,
    NOTIF_ID_REQUIREMENTS,
    UE4SS_SETTINGS_FILE,
)
from Utils.host import (
    Action,
    Host,
    Mod,
    NotFound,
    ProcessCanceled,
    SetDownloadModInfo,
    SetModAttributes,
    SetModEnabled,
    StateQuery,
    get_enabled_mods,
)
from Utils.installers import (
    AUTOINTEGRATOR_ARCHIVE_PATTERN,
    VERSION_ATTRIBUTE,
)
from Utils.versions import is_newer, return_larger_version

REQUIREMENT_DESCRIPTION = "This is an Astroneer modding requirement - leave it enabled."
ACTIVITY_MESSAGE = "Installing Astroneer Requirements"

# Anchored: Lua mods like "BetterUE4SSConsole_v1.0.0" must not count as UE4SS
UE4SS_REQUIREMENT_PATTERN = re.compile(r"^UE4SS.*v(\d+\.\d+\.\d+(-\d+)?)", re.IGNORECASE)

INSTALL_OPTIONS: dict[str, Any] = {
    "allowAutoEnable": True,
    "unattended": True,
    "choices": {"action": "replace"},
}

# Outcome actions
UP_TO_DATE = "up_to_date"
ENABLED = "enabled"
INSTALLED_CACHED = "installed_cached"
INSTALLED_DOWNLOAD = "installed_download"
FEED_ERROR = "feed_error"
FAILED = "failed"


class ReleaseFeed(Protocol):
    def get_latest_release_asset(
        self,
        repo_url: str,
        pattern: Optional[re.Pattern] = None,
        archive_file_name: str = "",
        prerelease: bool = True,
    ) -> ResolvedAsset | None: ...


@dataclass(frozen=True)
class RequirementDescriptor:
    """A companion tool that must be present for mods to load.

    marker_file      file whose presence in a staged mod identifies it
    archive_pattern  matches the release asset name; group 1 is the version
    resolves_version whether the installed version can be worked out
    """
    user_facing_name: str
    github_url: str
    marker_file: str
    mod_type: str = ""
    archive_file_name: str = ""
    archive_pattern: Optional[re.Pattern] = None
    resolves_version: bool = True


@dataclass
class RequirementOutcome:
    name: str
    action: str
    version: str = ""
    error: Optional[BaseException] = None


DEFAULT_REQUIREMENTS: list[RequirementDescriptor] = [
    RequirementDescriptor(
        user_facing_name="UE4SS",
        github_url="https://api.github.com/repos/atenfyr/RE-UE4SS",
        marker_file=UE4SS_SETTINGS_FILE,
        mod_type=MOD_TYPE_UE4SS,
        archive_file_name="UE4SS",
        archive_pattern=UE4SS_REQUIREMENT_PATTERN,
    ),
    RequirementDescriptor(
        user_facing_name=AUTOINTEGRATOR_NAME,
        github_url="https://api.github.com/repos/atenfyr/AutoIntegrator",
        marker_file=AUTOINTEGRATOR_MARKER,
        mod_type=MOD_TYPE_AUTOINTEGRATOR,
        archive_file_name=AUTOINTEGRATOR_NAME,
        archive_pattern=AUTOINTEGRATOR_ARCHIVE_PATTERN,
    ),
]


# ---------------------------------------------------------------------------
# State lookups
# ---------------------------------------------------------------------------

def _contains_file(folder: Path, file_name: str) -> bool:
    target = os.path.basename(file_name).lower()
    for _root, _dirs, files in os.walk(folder):
        if any(f.lower() == target for f in files):
            return True
    return False


def find_mod(state: StateQuery, req: RequirementDescriptor) -> Mod | None:
    """The enabled mod whose staged folder contains *req*'s marker file."""
    staging = Path(state.get_install_path(GAME_ID))
    for mod in get_enabled_mods(state, GAME_ID, req.mod_type):
        if not mod.installation_path:
            continue
        if _contains_file(staging / mod.installation_path, req.marker_file):
            return mod
    return None


def _download_name(local_path: str) -> str:
    return os.path.basename(local_path.replace("\\", "/"))


def find_download_id(state: StateQuery, req: RequirementDescriptor) -> str | None:
    """First persisted download whose archive name matches *req*."""
    for dl_id, dl in state.get_downloads().items():
        name = _download_name(dl.local_path)
        if req.archive_pattern is not None:
            if req.archive_pattern.search(name):
                return dl_id
        elif req.archive_file_name and name.lower() == req.archive_file_name.lower():
            return dl_id
    return None


def resolve_version(state: StateQuery, req: RequirementDescriptor,
                    mod: Mod | None = None) -> str | None:
    """Installed version of *req*.

    The highest version among matching downloads, else the mod's
    ``version`` attribute, else None.
    """
    best: str | None = None
    if req.archive_pattern is not None:
        for dl in state.get_downloads().values():
            m = req.archive_pattern.search(_download_name(dl.local_path))
            if m and m.group(1):
                best = return_larger_version(best, m.group(1))
    if best is None and mod is not None:
        best = mod.attributes.get(VERSION_ATTRIBUTE) or None
    return best


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class RequirementResolver:
    """
    Runs synchronization passes against one host.

    Parameters
    ----------
    host : Host
        The mod manager's state, actions, install pipeline and notifications.
    feed : ReleaseFeed
        Usually a GitHubAPI.
    downloader : Downloader
        ``(url, dest) -> Path``; streams an asset to disk.
    """

    def __init__(self, host: Host, feed: ReleaseFeed,
                 downloader: Downloader = download_asset):
        self._host = host
        self._feed = feed
        self._downloader = downloader

    def sync(self, requirements: list[RequirementDescriptor] | None = None,
             force: bool = False) -> list[RequirementOutcome]:
        """Run one pass. Returns an outcome per requirement processed."""
        if requirements is None:
            requirements = DEFAULT_REQUIREMENTS
        host = self._host
        host.send_notification(NOTIF_ID_REQUIREMENTS, ACTIVITY_MESSAGE,
                               type="activity", no_dismiss=True)
        queued: list[Action] = []
        outcomes: list[RequirementOutcome] = []
        profile_id = host.last_active_profile(GAME_ID)
        try:
            for req in requirements:
                outcome = self._process(req, force, profile_id, queued)
                outcomes.append(outcome)
                app_log(f"Requirement {req.user_facing_name}: {outcome.action}"
                        + (f" ({outcome.version})" if outcome.version else ""))
                if outcome.action == FAILED:
                    break
        finally:
            if queued:
                host.batch_dispatch(queued)
            host.dismiss_notification(NOTIF_ID_REQUIREMENTS)
        return outcomes

    # -- one requirement ----------------------------------------------------

    def _process(self, req: RequirementDescriptor, force: bool,
                 profile_id: str | None, queued: list[Action]) -> RequirementOutcome:
        host = self._host
        name = req.user_facing_name

        try:
            asset = self._feed.get_latest_release_asset(
                req.github_url, req.archive_pattern, req.archive_file_name)
        except (GitHubAPIError, ProcessCanceled, ValueError) as exc:
            app_log(f"Fetching latest release of {name} failed: {exc}", "warn")
            host.show_error_notification(
                f"Error fetching the latest release url for {name}", exc, allow_report=False)
            return RequirementOutcome(name, FEED_ERROR, error=exc)
        if asset is None:
            app_log(f"No release asset found for {name}", "warn")
            host.show_error_notification(
                f"Error fetching the latest release url for {name}", None, allow_report=False)
            return RequirementOutcome(name, FEED_ERROR)

        latest = asset.version
        mod = find_mod(host, req)
        mismatch = False

        if mod is not None and not force:
            installed = resolve_version(host, req, mod) if req.resolves_version else None
            if installed is not None:
                if not is_newer(latest, installed):
                    return RequirementOutcome(name, UP_TO_DATE, installed)
                app_log(f"{name} {installed} is outdated, latest is {latest}")
                mismatch = True
                if profile_id is not None:
                    queued.append(SetModEnabled(profile_id, mod.id, False))
            else:
                if profile_id is not None:
                    queued.append(SetModEnabled(profile_id, mod.id, True))
                queued.append(SetModAttributes(GAME_ID, mod.id, {
                    "customFileName": name,
                    "version": latest,
                    "description": REQUIREMENT_DESCRIPTION,
                }))
                return RequirementOutcome(name, ENABLED, latest)

        try:
            dl_id = find_download_id(host, req)
            if dl_id is not None and not force and not mismatch:
                self._install_download(dl_id, name, profile_id)
                return RequirementOutcome(name, INSTALLED_CACHED, latest)

            if force and mod is not None:
                host.remove_mods(GAME_ID, [mod.id])
            dest = Path(host.get_temp_path() or get_temp_dir()) / asset.name
            archive = self._downloader(asset.download_url, dest)
            self._import_and_install(Path(archive), name, profile_id)
            return RequirementOutcome(name, INSTALLED_DOWNLOAD, latest)
        except Exception as exc:
            app_log(f"Installing {name} failed: {exc}", "error")
            host.show_error_notification("Failed to download requirements", exc,
                                         allow_report=False)
            return RequirementOutcome(name, FAILED, latest, exc)

    # -- host pipeline ------------------------------------------------------

    def _install_download(self, dl_id: str, name: str, profile_id: str | None) -> str:
        host = self._host
        mod_id = host.install_from_download(dl_id, INSTALL_OPTIONS)
        batch: list[Action] = [
            SetModAttributes(GAME_ID, mod_id, {"installTime": datetime.now(), "name": name}),
        ]
        if profile_id is not None:
            batch.append(SetModEnabled(profile_id, mod_id, True))
        host.batch_dispatch(batch)
        return mod_id

    def _import_and_install(self, archive: Path, name: str, profile_id: str | None) -> str:
        host = self._host
        dl_id = host.import_download(archive)
        if not dl_id:
            raise NotFound(str(archive))
        host.batch_dispatch([SetDownloadModInfo(dl_id, "source", "other")])
        return self._install_download(dl_id, name, profile_id)
