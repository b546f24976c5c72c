"""
astroneer.py
Game handler for ASTRONEER.

Mod structure:
  Mods deploy relative to the game install root (merged).
  .pak mods        -> Astro/Content/Paks/LogicMods/
  UE4SS            -> Astro/Binaries/<arch>/
  Lua mods         -> Astro/Binaries/<arch>/ue4ss/Mods/<ModName>/

  <arch> is Win64 for Steam and WinGDK for the Xbox / Game Pass build, which
  is recognised by gamelaunchhelper.exe in the install root.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from Games.base_game import BaseGame
from Utils.app_log import app_log
from Utils.constants import (
    DEFAULT_EXECUTABLE,
    DEFAULT_STORE,
    GAME_ID,
    GAME_NAME,
    IGNORE_CONFLICTS,
    IGNORE_DEPLOY,
    LUA_EXTENSIONS,
    PAK_EXTENSIONS,
    STEAMAPP_ID,
    STORE_STEAM,
    STORE_XBOX,
    TOP_LEVEL_DIRECTORIES,
    XBOX_APP_EXEC_NAME,
    XBOX_EXECUTABLE,
    XBOX_ID,
)
from Utils.host import Discovery
from Utils.steam_finder import (
    find_app_install,
    find_game_in_libraries,
    find_steam_libraries,
)
from Utils.ue4ss_paths import PAK_MODSFOLDER_PATH

_REQUIRED_FILES = ["Astro/Content/Paks"]
_SCRIPT_FOLDERS = ["scripts"]


@dataclass(frozen=True)
class LauncherInfo:
    """How the host must start the game when a store launcher is involved."""
    launcher: str
    app_id: str
    parameters: list[dict] = field(default_factory=list)


def _dir_pattern(name: str) -> str:
    return rf"(^|/){re.escape(name.lower())}(/|$)"


def _ext_pattern(ext: str) -> str:
    return rf"[^/]*{re.escape(ext.lower())}$"


def get_executable(game_path: Path | str | None) -> str:
    """Xbox launch helper when present, otherwise Astro.exe."""
    if not game_path:
        return DEFAULT_EXECUTABLE
    if (Path(game_path) / XBOX_EXECUTABLE).exists():
        return XBOX_EXECUTABLE
    return DEFAULT_EXECUTABLE


def detect_store(game_path: Path | str | None) -> str:
    if game_path and (Path(game_path) / XBOX_EXECUTABLE).exists():
        return STORE_XBOX
    return STORE_STEAM


def requires_launcher(game_path: Path | str | None, store: str | None) -> LauncherInfo | None:
    if store == STORE_XBOX:
        return LauncherInfo(
            launcher=STORE_XBOX,
            app_id=XBOX_ID,
            parameters=[{"appExecName": XBOX_APP_EXEC_NAME}],
        )
    return None


def top_level_patterns() -> list[str]:
    return [_dir_pattern(d) for d in TOP_LEVEL_DIRECTORIES]


def stop_patterns() -> list[str]:
    """Path regexes marking where an archive's deployable content starts."""
    return (
        top_level_patterns()
        + [_ext_pattern(e) for e in PAK_EXTENSIONS]
        + [_dir_pattern(d) for d in _SCRIPT_FOLDERS]
        + [_ext_pattern(e) for e in LUA_EXTENSIONS]
    )


class Astroneer(BaseGame):

    def __init__(self):
        self._game_path: Path | None = None
        self._store: str | None = None
        self.load_paths()

    # -----------------------------------------------------------------------
    # Identity
    # -----------------------------------------------------------------------

    @property
    def name(self) -> str:
        return GAME_NAME

    @property
    def game_id(self) -> str:
        return GAME_ID

    @property
    def exe_name(self) -> str:
        return DEFAULT_EXECUTABLE

    @property
    def steam_id(self) -> str:
        return STEAMAPP_ID

    @property
    def xbox_id(self) -> str:
        return XBOX_ID

    @property
    def required_files(self) -> list[str]:
        return list(_REQUIRED_FILES)

    @property
    def merge_mods(self) -> bool:
        return True

    @property
    def mod_path(self) -> str:
        """Mods deploy relative to the game root."""
        return "."

    @property
    def custom_open_mods_path(self) -> str:
        return str(PAK_MODSFOLDER_PATH)

    @property
    def ignore_conflicts(self) -> list[str]:
        return list(IGNORE_CONFLICTS)

    @property
    def ignore_deploy(self) -> list[str]:
        return list(IGNORE_DEPLOY)

    # -----------------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------------

    def get_game_path(self) -> Path | None:
        return self._game_path

    def get_mod_data_path(self) -> Path | None:
        return self._game_path

    def get_store(self) -> str:
        return self._store or DEFAULT_STORE

    def get_executable(self) -> str:
        return get_executable(self._game_path)

    def requires_launcher(self) -> LauncherInfo | None:
        return requires_launcher(self._game_path, self.get_store())

    def discovery(self) -> Discovery | None:
        if self._game_path is None:
            return None
        return Discovery(path=self._game_path, store=self.get_store())

    def query_path(self) -> Path | None:
        """Look the game up in the Steam libraries by App ID, then by executable."""
        found = find_app_install(self.steam_id)
        if found is None:
            found = find_game_in_libraries(find_steam_libraries(), self.exe_name)
        if found is not None:
            app_log(f"Found {self.name} in Steam library: {found}")
        return found

    # -----------------------------------------------------------------------
    # Configuration persistence
    # -----------------------------------------------------------------------

    def load_paths(self) -> bool:
        if not self._paths_file.exists():
            self._game_path = None
            self._store = None
            return False
        try:
            data = json.loads(self._paths_file.read_text(encoding="utf-8"))
            raw = data.get("game_path", "")
            self._game_path = Path(raw) if raw else None
            self._store = data.get("store") or None
            return bool(self._game_path)
        except (json.JSONDecodeError, OSError, AttributeError):
            pass
        self._game_path = None
        self._store = None
        return False

    def save_paths(self) -> None:
        self._paths_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "game_path": str(self._game_path) if self._game_path else "",
            "store":     self._store or "",
        }
        self._paths_file.write_text(
            json.dumps(data, indent=2), encoding="utf-8"
        )

    def set_game_path(self, path: Path | str | None, store: str | None = None) -> None:
        """Set the install root; the store is detected when not given."""
        self._game_path = Path(path) if path else None
        if self._game_path is None:
            self._store = None
        else:
            self._store = store or detect_store(self._game_path)
        self.save_paths()

    def discover(self) -> Discovery | None:
        """Use the saved path, else query Steam and persist what was found."""
        if self._game_path is None:
            found = self.query_path()
            if found is not None:
                self.set_game_path(found)
        return self.discovery()
