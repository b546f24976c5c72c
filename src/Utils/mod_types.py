"""
mod_types.py
The two ASTRONEER mod types and their passive classification tests.

When an archive was installed without one of our installers (so no
``setmodtype`` instruction was emitted), the host asks every registered mod
type whether it wants the resulting instruction list:

  astroneer-pak-modtype   .pak files, deployed into Astro/Content/Paks/LogicMods
  astroneer-lua-modtype   .lua files, deployed into <UE4SS>/Mods

Instructions may be passed as Instruction objects or as the host's dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from Utils.constants import (
    IGNORE_CONFLICTS,
    LUA_EXTENSIONS,
    MOD_TYPE_LUA,
    MOD_TYPE_PAK,
    PAK_EXTENSIONS,
)
from Utils.instructions import Copy, Instruction, SetModType, PathSegments, from_host_dict
from Utils.ue4ss_paths import resolve_lua_root, resolve_pak_root

_IGNORE_LOWER = {name.lower() for name in IGNORE_CONFLICTS}


def _normalize(instructions: Iterable[Union[Instruction, dict]]) -> list[Instruction]:
    result: list[Instruction] = []
    for instr in instructions:
        if isinstance(instr, dict):
            try:
                instr = from_host_dict(instr)
            except (KeyError, ValueError):
                continue
        result.append(instr)
    return result


def _copies(instructions: list[Instruction]) -> list[Copy]:
    return [i for i in instructions if isinstance(i, Copy)]


def supports_pak_mod_type(instructions: Iterable[Union[Instruction, dict]]) -> bool:
    """At least one .pak copy and no UE4SS logic-mod marker files."""
    instrs = _normalize(instructions)
    if any(isinstance(i, SetModType) for i in instrs):
        return False
    copies = _copies(instrs)
    paks = [c for c in copies if PathSegments.from_path(c.source).extension in PAK_EXTENSIONS]
    excluded = [
        c for c in copies
        if PathSegments.from_path(c.source).basename.lower() in _IGNORE_LOWER
    ]
    return len(paks) > 0 and len(excluded) == 0


def supports_lua_mod_type(instructions: Iterable[Union[Instruction, dict]]) -> bool:
    """Any .lua copy."""
    instrs = _normalize(instructions)
    if any(isinstance(i, SetModType) for i in instrs):
        return False
    return any(
        PathSegments.from_path(c.source).extension in LUA_EXTENSIONS
        for c in _copies(instrs)
    )


@dataclass(frozen=True)
class ModTypeDescriptor:
    """A mod type as registered with the host.

    get_path(install_root, store) returns the deployment root, or the "."
    sentinel while the game has not been discovered.
    """
    id: str
    priority: int
    name: str
    get_path: Callable[[Optional[Path], Optional[str]], "Path | str"]
    test: Callable[[Iterable[Union[Instruction, dict]]], bool]
    deployment_essential: bool = True


MOD_TYPES: list[ModTypeDescriptor] = [
    ModTypeDescriptor(
        id=MOD_TYPE_PAK,
        priority=10,
        name=".pak Mod",
        get_path=lambda install_root, store: resolve_pak_root(install_root),
        test=supports_pak_mod_type,
    ),
    ModTypeDescriptor(
        id=MOD_TYPE_LUA,
        priority=9,
        name=".lua Mod",
        get_path=resolve_lua_root,
        test=supports_lua_mod_type,
    ),
]
