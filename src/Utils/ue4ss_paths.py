"""
ue4ss_paths.py
Where UE4SS and the two mod types live inside an ASTRONEER install.

The Steam build ships 64-bit Windows binaries under Astro/Binaries/Win64/;
the Xbox / Game Pass build uses Astro/Binaries/WinGDK/. UE4SS sits in a
``ue4ss`` folder next to the game binaries and loads Lua mods from its own
``Mods`` folder. Blueprint (.pak) mods go to Content/Paks/LogicMods.

Every function here is pure: no filesystem access, no failure mode. Relative
paths are returned as forward-slash strings.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from Utils.constants import STORE_XBOX

BINARIES_PREFIX = PurePosixPath("Astro", "Binaries")
PAK_MODSFOLDER_PATH = PurePosixPath("Astro", "Content", "Paks", "LogicMods")
LOADER_DIR = "ue4ss"
LOADER_MODS_DIR = "Mods"

ARCH_CONSOLE = "WinGDK"
ARCH_DEFAULT = "Win64"

# Returned instead of a path when the game has not been discovered
NO_PATH = "."


def resolve_architecture(store: str | None) -> str:
    """``WinGDK`` for the Xbox store, ``Win64`` for anything else."""
    return ARCH_CONSOLE if store == STORE_XBOX else ARCH_DEFAULT


def resolve_binaries_path(store: str | None) -> str:
    """Astro/Binaries/<arch>: the folder UE4SS's proxy DLL is copied into."""
    return str(BINARIES_PREFIX / resolve_architecture(store))


def resolve_loader_root(store: str | None) -> str:
    """Astro/Binaries/<arch>/ue4ss"""
    return str(BINARIES_PREFIX / resolve_architecture(store) / LOADER_DIR)


def resolve_loader_mods_path(store: str | None) -> str:
    """Astro/Binaries/<arch>/ue4ss/Mods: Lua mods and mods.txt live here."""
    return str(PurePosixPath(resolve_loader_root(store), LOADER_MODS_DIR))


def resolve_pak_root(install_root: "Path | str | None") -> "Path | str":
    """Absolute LogicMods folder, or ``NO_PATH`` if the game is not discovered.

    Callers must treat ``NO_PATH`` as "do not act".
    """
    if not install_root:
        return NO_PATH
    return Path(install_root) / PAK_MODSFOLDER_PATH


def resolve_lua_root(install_root: "Path | str | None", store: str | None) -> "Path | str":
    """Absolute UE4SS Mods folder, or ``NO_PATH`` if the game is not discovered."""
    if not install_root:
        return NO_PATH
    return Path(install_root) / resolve_loader_mods_path(store)
