"""
mods_txt.py
Regenerate UE4SS's mods.txt from the Lua mod folders actually present.

Format (one mod per line, no header, UTF-8):
  ModFolderName : 1

UE4SS only loads Lua mods listed in mods.txt. The file is rewritten from
scratch on every call, so it converges no matter how many enable/disable
events were missed and concurrent calls simply leave the last write in place.

This runs as a side effect of unrelated host operations (enable, remove,
deploy, purge), so it never raises: failures are written to the app log.
"""

from __future__ import annotations

import os
from pathlib import Path

from Utils.app_log import app_log
from Utils.constants import UE4SS_MODS_TXT

ENABLED_FLAG = "1"


def format_mods_txt(folder_names: list[str]) -> str:
    return "".join(f"{name} : {ENABLED_FLAG}\n" for name in folder_names)


def list_mod_folders(mods_dir: Path) -> list[str]:
    """Immediate subdirectory names of *mods_dir*, in directory listing order."""
    with os.scandir(mods_dir) as it:
        return [entry.name for entry in it if entry.is_dir()]


def regenerate_mods_txt(mods_dir: Path | str) -> bool:
    """Rewrite <mods_dir>/mods.txt. Returns True if the file was written."""
    mods_dir = Path(mods_dir)
    try:
        mods_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass

    try:
        names = list_mod_folders(mods_dir)
        (mods_dir / UE4SS_MODS_TXT).write_text(format_mods_txt(names), encoding="utf-8")
    except OSError as exc:
        app_log(f"failed to update {UE4SS_MODS_TXT} in {mods_dir}: {exc}", "error")
        return False

    app_log(f"{UE4SS_MODS_TXT}: {len(names)} Lua mod folder(s) listed.", "debug")
    return True
