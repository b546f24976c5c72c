"""
installers.py
Archive installers for ASTRONEER: decide whether an archive is UE4SS itself,
the AutoIntegrator tool, or a UE4SS Lua mod, and turn its file listing into
an ordered instruction list.

Each installer is a pair of plain functions:

  supports_*(files, game_id)                 -> SupportResult
  install_*(files, destination_path, store)  -> list[Instruction]

``files`` is the archive listing (archive-relative paths, duplicates allowed),
``destination_path`` is the folder the host is installing into (normally
ending in ``.installing``) and ``store`` is the discovered store variant.
Both kinds of function are total: any listing, including an empty one,
produces a result and never raises.

INSTALLERS lists them in registration order with their host priorities;
lower priority numbers are tried first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from Utils.constants import (
    AUTOINTEGRATOR_MARKER,
    AUTOINTEGRATOR_NAME,
    DEFAULT_STORE,
    GAME_ID,
    INSTALLING_SUFFIX,
    LUA_EXTENSIONS,
    MOD_TYPE_AUTOINTEGRATOR,
    MOD_TYPE_LUA,
    MOD_TYPE_UE4SS,
    UE4SS_SETTINGS_FILE,
)
from Utils.instructions import (
    Copy,
    Instruction,
    PathSegments,
    SetAttribute,
    SetModType,
)
from Utils.ue4ss_paths import resolve_binaries_path, resolve_loader_mods_path

# Archive naming conventions, one per tool. Group 1 is the version.
UE4SS_ARCHIVE_PATTERN = re.compile(r"UE4SS.*v(\d+\.\d+\.\d+(-\d+)?)", re.IGNORECASE)
AUTOINTEGRATOR_ARCHIVE_PATTERN = re.compile(r"^atenfyr-AutoIntegrator-(\d+\.\d+\.\d+)", re.IGNORECASE)

VERSION_ATTRIBUTE = "version"
FOLDER_ID_ATTRIBUTE = "astroneerFolderId"
UNKNOWN_VERSION = "unknown"

# First segment of every payload file inside an AutoIntegrator archive
AUTOINTEGRATOR_WRAPPER = "mod"


@dataclass(frozen=True)
class SupportResult:
    supported: bool
    required_files: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InstallerRecipe:
    id: str
    priority: int
    test: Callable[[list[str], str], SupportResult]
    install: Callable[[list[str], str, Optional[str]], list[Instruction]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def install_folder_name(destination_path: str) -> str:
    """Destination folder name without the host's in-progress suffix."""
    name = PathSegments.from_path(destination_path or "").basename
    if name.endswith(INSTALLING_SUFFIX):
        name = name[: -len(INSTALLING_SUFFIX)]
    return name


def extract_version(pattern: re.Pattern, name: str) -> str:
    """Group 1 of *pattern* searched in *name*, or ``"unknown"``."""
    m = pattern.search(name or "")
    return m.group(1) if m else UNKNOWN_VERSION


def _has_basename(files: list[str], file_name: str) -> bool:
    target = file_name.lower()
    return any(PathSegments.from_path(f).basename.lower() == target for f in files)


def _is_lua(path: PathSegments) -> bool:
    return path.extension in LUA_EXTENSIONS


# ---------------------------------------------------------------------------
# UE4SS injector
# ---------------------------------------------------------------------------

def supports_ue4ss_injector(files: list[str], game_id: str) -> SupportResult:
    """UE4SS archives always ship UE4SS-settings.ini."""
    supported = game_id == GAME_ID and _has_basename(files, UE4SS_SETTINGS_FILE)
    return SupportResult(supported)


def install_ue4ss_injector(files: list[str], destination_path: str,
                           store: Optional[str] = None) -> list[Instruction]:
    """Copy every file into Astro/Binaries/<arch>/, keeping archive layout.

    The shipped UE4SS-settings.ini is copied as-is.
    """
    target = resolve_binaries_path(store or DEFAULT_STORE)
    version = extract_version(UE4SS_ARCHIVE_PATTERN, install_folder_name(destination_path))

    instructions: list[Instruction] = [SetAttribute(VERSION_ATTRIBUTE, version)]
    for source in files:
        segments = PathSegments.from_path(source)
        if not segments.has_extension():
            continue
        instructions.append(Copy(source=source, destination=segments.join(target)))
    instructions.append(SetModType(MOD_TYPE_UE4SS))
    return instructions


# ---------------------------------------------------------------------------
# AutoIntegrator
# ---------------------------------------------------------------------------

def supports_autointegrator(files: list[str], game_id: str) -> SupportResult:
    supported = game_id == GAME_ID and _has_basename(files, AUTOINTEGRATOR_MARKER)
    return SupportResult(supported)


def install_autointegrator(files: list[str], destination_path: str,
                           store: Optional[str] = None) -> list[Instruction]:
    """Copy the contents of the archive's ``mod/`` wrapper into
    <loader>/Mods/AutoIntegrator/. Files outside the wrapper are dropped.
    """
    target = f"{resolve_loader_mods_path(store or DEFAULT_STORE)}/{AUTOINTEGRATOR_NAME}"
    version = extract_version(AUTOINTEGRATOR_ARCHIVE_PATTERN, install_folder_name(destination_path))

    instructions: list[Instruction] = [SetAttribute(VERSION_ATTRIBUTE, version)]
    for source in files:
        segments = PathSegments.from_path(source)
        if not segments.has_extension():
            continue
        if not segments.first_segment_equals(AUTOINTEGRATOR_WRAPPER):
            continue
        rest = segments.drop_prefix(1)
        if not len(rest):
            continue
        instructions.append(Copy(source=source, destination=rest.join(target)))
    instructions.append(SetModType(MOD_TYPE_AUTOINTEGRATOR))
    return instructions


# ---------------------------------------------------------------------------
# UE4SS Lua mods
# ---------------------------------------------------------------------------

def supports_lua_mod(files: list[str], game_id: str) -> SupportResult:
    supported = game_id == GAME_ID and any(
        _is_lua(PathSegments.from_path(f)) for f in files
    )
    return SupportResult(supported)


@dataclass(frozen=True)
class LuaLayout:
    """How a Lua mod archive is laid out.

    mods_index   index of a ``Mods`` segment in the anchor, or -1
    folder_id    the mod's folder name under <loader>/Mods/
    """
    folder_id: str
    mods_index: int = -1

    def destination(self, segments: PathSegments) -> str | None:
        """Mods-folder-relative destination for one archive file, or None to skip."""
        if self.mods_index != -1:
            # Drop everything up to and including "Mods"
            rest = segments.drop_prefix(self.mods_index + 1)
            return rest.join() if len(rest) else None
        if len(segments) > 1:
            return segments.drop_prefix(1).join(self.folder_id)
        return segments.join(self.folder_id)


def resolve_lua_layout(files: list[str], destination_path: str) -> LuaLayout:
    """Work out the mod's folder id from the shortest .lua path.

    1. ``.../Mods/<id>/...``  -> id, paths re-rooted below Mods/
    2. ``<id>/...``           -> id, first segment replaced by id
    3. flat archive           -> destination folder name
    """
    lua_files = [f for f in files if _is_lua(PathSegments.from_path(f))]
    candidates = lua_files or files
    anchor = min(candidates, key=len) if candidates else ""
    segments = PathSegments.from_path(anchor)

    mods_index = segments.index_of("mods")
    if mods_index != -1 and mods_index + 1 < len(segments):
        return LuaLayout(folder_id=segments[mods_index + 1], mods_index=mods_index)
    if len(segments) > 1:
        return LuaLayout(folder_id=segments[0])
    return LuaLayout(folder_id=install_folder_name(destination_path))


def install_lua_mod(files: list[str], destination_path: str,
                    store: Optional[str] = None) -> list[Instruction]:
    layout = resolve_lua_layout(files, destination_path)

    instructions: list[Instruction] = [SetAttribute(FOLDER_ID_ATTRIBUTE, layout.folder_id)]
    for source in files:
        segments = PathSegments.from_path(source)
        if segments.is_dir_entry or not segments.has_extension():
            continue
        destination = layout.destination(segments)
        if destination is None:
            continue
        instructions.append(Copy(source=source, destination=destination))
    instructions.append(SetModType(MOD_TYPE_LUA))
    return instructions


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

INSTALLERS: list[InstallerRecipe] = [
    InstallerRecipe("astroneer-ue4ss", 25, supports_ue4ss_injector, install_ue4ss_injector),
    InstallerRecipe("astroneer-autointegrator", 30, supports_autointegrator, install_autointegrator),
    InstallerRecipe("astroneer-lua-installer", 45, supports_lua_mod, install_lua_mod),
]


def select_installer(files: list[str], game_id: str = GAME_ID) -> InstallerRecipe | None:
    """First installer, by priority, that supports *files*."""
    for recipe in sorted(INSTALLERS, key=lambda r: r.priority):
        if recipe.test(files, game_id).supported:
            return recipe
    return None
