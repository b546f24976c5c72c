"""
Tests for Utils.mod_types: passive .pak / .lua classification.
"""

from pathlib import Path

from Utils.constants import MOD_TYPE_LUA, MOD_TYPE_PAK
from Utils.mod_types import MOD_TYPES, supports_lua_mod_type, supports_pak_mod_type
from Utils.instructions import Copy, SetAttribute, SetModType
from Utils.ue4ss_paths import NO_PATH


def copy(source):
    return {"type": "copy", "source": source, "destination": source}


# ── .pak ─────────────────────────────────────────────────────────────────────

def test_pak_copy_is_supported():
    assert supports_pak_mod_type([copy("MyMod_P.pak")])
    assert supports_pak_mod_type([Copy("sub/MyMod_P.PAK", "MyMod_P.PAK")])


def test_pak_with_logicmod_marker_is_rejected():
    assert not supports_pak_mod_type([copy("MyMod_P.pak"), copy("sub/enabled.txt")])
    assert not supports_pak_mod_type([copy("MyMod_P.pak"), copy("ue4sslogicmod.info")])


def test_pak_requires_a_pak_copy():
    assert not supports_pak_mod_type([copy("readme.txt")])
    assert not supports_pak_mod_type([])


def test_installer_typed_lists_are_left_alone():
    typed = [copy("MyMod_P.pak"), {"type": "setmodtype", "value": MOD_TYPE_LUA}]
    assert not supports_pak_mod_type(typed)
    assert not supports_lua_mod_type([Copy("main.lua", "x/main.lua"), SetModType("")])


def test_unknown_instruction_types_are_ignored():
    assert supports_pak_mod_type([{"type": "mkdir", "destination": "x"}, copy("a.pak")])


# ── .lua ─────────────────────────────────────────────────────────────────────

def test_lua_copy_is_supported():
    assert supports_lua_mod_type([copy("Scripts/main.lua"), SetAttribute("k", "v")])
    assert not supports_lua_mod_type([copy("Scripts/main.luac")])


# ── descriptors ──────────────────────────────────────────────────────────────

def test_descriptors():
    by_id = {m.id: m for m in MOD_TYPES}
    assert by_id[MOD_TYPE_PAK].priority == 10
    assert by_id[MOD_TYPE_PAK].name == ".pak Mod"
    assert by_id[MOD_TYPE_LUA].priority == 9
    assert by_id[MOD_TYPE_LUA].name == ".lua Mod"
    assert all(m.deployment_essential for m in MOD_TYPES)


def test_descriptor_paths(tmp_path):
    by_id = {m.id: m for m in MOD_TYPES}
    assert by_id[MOD_TYPE_PAK].get_path(tmp_path, "xbox") == Path(tmp_path, "Astro/Content/Paks/LogicMods")
    assert by_id[MOD_TYPE_LUA].get_path(tmp_path, "xbox") == Path(tmp_path, "Astro/Binaries/WinGDK/ue4ss/Mods")
    assert by_id[MOD_TYPE_LUA].get_path(None, "steam") == NO_PATH
