"""
steam_finder.py
Utilities for locating Steam game installations across all configured library paths.
No UI, no game-specific knowledge.
"""

from __future__ import annotations

import re
from pathlib import Path

# ---------------------------------------------------------------------------
# Known Steam base directories for different install methods
# ---------------------------------------------------------------------------
_HOME = Path.home()

_STEAM_CANDIDATES: list[Path] = [
    _HOME / ".local" / "share" / "Steam",                                          # Standard
    _HOME / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",  # Flatpak
    _HOME / "snap" / "steam" / "common" / ".local" / "share" / "Steam",            # Snap
    _HOME / ".steam" / "steam",                                                     # Symlink fallback
]

_VDF_FILENAME = "libraryfolders.vdf"
_PATH_RE = re.compile(r'"path"\s+"([^"]+)"')
_INSTALLDIR_RE = re.compile(r'"installdir"\s+"([^"]+)"')


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_steam_libraries(candidates: list[Path] | None = None) -> list[Path]:
    """
    Parse libraryfolders.vdf from all known Steam install locations.
    Returns a deduplicated list of existing steamapps/common/ directories.
    """
    seen: set[Path] = set()
    libraries: list[Path] = []

    for steam_root in (_STEAM_CANDIDATES if candidates is None else candidates):
        vdf_path = steam_root / "steamapps" / _VDF_FILENAME
        if vdf_path.is_file():
            for common in parse_vdf_libraries(vdf_path):
                resolved = common.resolve()
                if resolved not in seen:
                    seen.add(resolved)
                    libraries.append(common)

    return libraries


def parse_vdf_libraries(vdf_path: Path) -> list[Path]:
    """
    Parse a libraryfolders.vdf file and return all steamapps/common paths
    that currently exist on disk.

    The VDF format contains lines like:
        "path"    "/home/deck/.local/share/Steam"
    We extract every "path" value and append steamapps/common to each.
    """
    libraries: list[Path] = []

    try:
        text = vdf_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return libraries

    for match in _PATH_RE.finditer(text):
        common = Path(match.group(1)) / "steamapps" / "common"
        if common.is_dir():
            libraries.append(common)

    return libraries


def read_app_installdir(manifest_path: Path) -> str | None:
    """Return the ``installdir`` value of an appmanifest_<id>.acf, or None."""
    try:
        text = manifest_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    m = _INSTALLDIR_RE.search(text)
    return m.group(1) if m else None


def find_app_install(steam_id: str, libraries: list[Path] | None = None) -> Path | None:
    """
    Locate a game by its Steam App ID.

    Each library's steamapps/ folder holds appmanifest_<steam_id>.acf for the
    games installed there; its ``installdir`` names the folder under
    steamapps/common/. Returns the first such folder that exists.
    """
    if not steam_id:
        return None

    for common in (find_steam_libraries() if libraries is None else libraries):
        manifest = common.parent / f"appmanifest_{steam_id}.acf"
        if not manifest.is_file():
            continue
        installdir = read_app_installdir(manifest)
        if installdir and (common / installdir).is_dir():
            return common / installdir

    return None


def find_game_in_libraries(libraries: list[Path], exe_name: str) -> Path | None:
    """
    Search each library's steamapps/common/* subfolder for exe_name.
    Checks one level deep: <library>/<GameFolder>/<exe_name>
    Returns the game root directory (the <GameFolder>) or None if not found.

    The search is case-insensitive on the exe name to handle Linux/Proton layouts.
    """
    exe_lower = exe_name.lower()

    for common in libraries:
        try:
            for game_dir in common.iterdir():
                if not game_dir.is_dir():
                    continue
                for entry in game_dir.iterdir():
                    if entry.name.lower() == exe_lower and entry.is_file():
                        return game_dir
        except PermissionError:
            continue

    return None
