"""
extension.py
The ASTRONEER extension as the host mod manager sees it.

register(context) hands the host everything it needs:
  - three archive installers (UE4SS, AutoIntegrator, Lua mods)
  - two mod types (.pak and .lua)
  - the "Open Lua Mods Folder" action
  - handlers for the mods-enabled / will-remove-mods / did-deploy /
    did-purge events, which keep UE4SS's mods.txt in sync

setup(discovery) runs once the game is discovered: it creates the mod
folders and makes sure UE4SS and AutoIntegrator are installed.
"""

from __future__ import annotations

import dataclasses
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from GitHub.github_api import GitHubAPI
from GitHub.github_download import Downloader, download_asset
from GitHub.requirements import (
    DEFAULT_REQUIREMENTS,
    ReleaseFeed,
    RequirementDescriptor,
    RequirementOutcome,
    RequirementResolver,
)
from Games.Astroneer.astroneer import Astroneer
from Utils.app_log import app_log, set_app_log
from Utils.archive_listing import list_archive
from Utils.constants import DEFAULT_STORE, GAME_ID
from Utils.host import Discovery, Host
from Utils.installers import INSTALLERS, InstallerRecipe
from Utils.instructions import Instruction
from Utils.mod_types import MOD_TYPES, ModTypeDescriptor
from Utils.mods_txt import regenerate_mods_txt
from Utils.ue4ss_paths import NO_PATH, resolve_lua_root, resolve_pak_root

OPEN_LUA_MODS_ACTION = "Open Lua Mods Folder"
SETUP_FAILED_MESSAGE = "Failed to setup ASTRONEER extension"

EVENT_MODS_ENABLED = "mods-enabled"
EVENT_WILL_REMOVE_MODS = "will-remove-mods"
EVENT_DID_DEPLOY = "did-deploy"
EVENT_DID_PURGE = "did-purge"


class ExtensionContext(Protocol):
    """Registration hooks the host offers while loading extensions."""

    def register_installer(self, recipe: InstallerRecipe) -> None: ...

    def register_mod_type(self, mod_type: ModTypeDescriptor) -> None: ...

    def register_action(self, title: str, callback: Callable[[], Any]) -> None: ...

    def on(self, event: str, handler: Callable[..., Any]) -> None: ...


@dataclass
class InstallPlan:
    """Result of running the installers over an archive listing."""
    installer_id: str
    instructions: list[Instruction]


class AstroneerExtension:
    """
    Glue between the host and the ASTRONEER modules.

    Parameters
    ----------
    host : Host
        The mod manager's state, actions, install pipeline and notifications.
    game : Astroneer | None
        Game handler used when the host has no discovery for the game.
    feed : ReleaseFeed | None
        Release feed for requirements. A GitHubAPI is created on first use.
    downloader : Downloader
        Streams a requirement asset to disk.
    """

    def __init__(self, host: Host, game: Optional[Astroneer] = None,
                 feed: Optional[ReleaseFeed] = None,
                 downloader: Downloader = download_asset):
        self._host = host
        self._game = game
        self._feed = feed
        self._downloader = downloader

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    def register(self, context: ExtensionContext) -> bool:
        log_fn = getattr(context, "log", None)
        if callable(log_fn):
            set_app_log(log_fn)

        for recipe in self.bound_installers():
            context.register_installer(recipe)
        for mod_type in MOD_TYPES:
            context.register_mod_type(mod_type)
        context.register_action(OPEN_LUA_MODS_ACTION, self.open_lua_mods_folder)

        context.on(EVENT_MODS_ENABLED, self.on_mods_enabled)
        context.on(EVENT_WILL_REMOVE_MODS, self.on_will_remove_mods)
        context.on(EVENT_DID_DEPLOY, self.on_did_deploy)
        context.on(EVENT_DID_PURGE, self.on_did_purge)
        return True

    def bound_installers(self) -> list[InstallerRecipe]:
        """The installers with their store argument taken from discovery at install time."""
        return [self._bind_store(recipe) for recipe in INSTALLERS]

    def _bind_store(self, recipe: InstallerRecipe) -> InstallerRecipe:
        def install(files: list[str], destination_path: str, *_args) -> list[Instruction]:
            return recipe.install(files, destination_path, self._store())
        return dataclasses.replace(recipe, install=install)

    # -----------------------------------------------------------------------
    # Discovery
    # -----------------------------------------------------------------------

    def discovery(self) -> Discovery | None:
        """The host's discovery for the game, else the game handler's."""
        discovery = self._host.get_discovery(GAME_ID)
        if (discovery is None or not discovery.path) and self._game is not None:
            discovery = self._game.discovery()
        if discovery is None or not discovery.path:
            return None
        return discovery

    def _store(self) -> str:
        discovery = self.discovery()
        return (discovery.store if discovery else None) or DEFAULT_STORE

    def lua_mods_path(self) -> Path | None:
        discovery = self.discovery()
        if discovery is None:
            return None
        root = resolve_lua_root(discovery.path, discovery.store)
        return None if root == NO_PATH else Path(root)

    def pak_mods_path(self) -> Path | None:
        discovery = self.discovery()
        if discovery is None:
            return None
        root = resolve_pak_root(discovery.path)
        return None if root == NO_PATH else Path(root)

    # -----------------------------------------------------------------------
    # Setup & requirements
    # -----------------------------------------------------------------------

    def _resolver(self) -> RequirementResolver:
        if self._feed is None:
            self._feed = GitHubAPI()
        return RequirementResolver(self._host, self._feed, self._downloader)

    def setup(self, discovery: Discovery | None) -> list[RequirementOutcome]:
        """Create the mod folders and run a requirement pass."""
        if discovery is None or not discovery.path:
            return []
        try:
            for folder in (resolve_lua_root(discovery.path, discovery.store),
                           resolve_pak_root(discovery.path)):
                Path(folder).mkdir(parents=True, exist_ok=True)
            return self._resolver().sync(DEFAULT_REQUIREMENTS, force=False)
        except Exception as exc:
            app_log(f"{SETUP_FAILED_MESSAGE}: {exc}", "error")
            self._host.show_error_notification(SETUP_FAILED_MESSAGE, exc)
            return []

    def update_requirements(self, force: bool = False,
                            requirements: list[RequirementDescriptor] | None = None,
                            ) -> list[RequirementOutcome]:
        """Run a requirement pass; *force* reinstalls everything."""
        return self._resolver().sync(requirements, force=force)

    # -----------------------------------------------------------------------
    # Event handlers
    # -----------------------------------------------------------------------

    def refresh_mods_txt(self) -> bool:
        mods_dir = self.lua_mods_path()
        if mods_dir is None:
            return False
        return regenerate_mods_txt(mods_dir)

    def on_mods_enabled(self, mod_ids: list[str], enabled: bool, game_id: str) -> bool:
        return game_id == GAME_ID and self.refresh_mods_txt()

    def on_will_remove_mods(self, game_id: str, mod_ids: list[str]) -> bool:
        return game_id == GAME_ID and self.refresh_mods_txt()

    def on_did_deploy(self, game_id: str, *args: Any) -> bool:
        return game_id == GAME_ID and self.refresh_mods_txt()

    def on_did_purge(self, game_id: str, *args: Any) -> bool:
        return game_id == GAME_ID and self.refresh_mods_txt()

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    def open_lua_mods_folder(self) -> bool:
        """Open the UE4SS Mods folder in the system file manager via xdg-open."""
        path = self.lua_mods_path()
        if path is None or not path.is_dir():
            app_log(f"Lua mods folder not found: {path}", "warn")
            return False
        try:
            subprocess.Popen(["xdg-open", str(path)])
        except OSError as e:
            app_log(f"Could not open folder: {e}", "warn")
            return False
        return True

    # -----------------------------------------------------------------------
    # Archive installs
    # -----------------------------------------------------------------------

    def plan_install(self, files: list[str], destination_path: str) -> InstallPlan | None:
        """Run the installers over an archive listing; first supporter wins."""
        store = self._store()
        for recipe in sorted(INSTALLERS, key=lambda r: r.priority):
            if recipe.test(files, GAME_ID).supported:
                return InstallPlan(recipe.id, recipe.install(files, destination_path, store))
        return None

    def plan_archive_install(self, archive_path: Path | str,
                             destination_path: str) -> InstallPlan | None:
        """List *archive_path* and plan its installation into *destination_path*."""
        files = list_archive(archive_path)
        plan = self.plan_install(files, destination_path)
        if plan is None:
            app_log(f"No ASTRONEER installer supports {Path(archive_path).name}", "debug")
        else:
            app_log(f"{Path(archive_path).name}: {plan.installer_id}, "
                    f"{len(plan.instructions)} instruction(s)", "debug")
        return plan
