"""
archive_listing.py
List the members of a mod archive without extracting it.

Installers only need the archive's file listing to decide how to install
it. Supported formats: .zip, .7z (py7zr) and .tar.*. Member paths are
returned with forward slashes; directory entries end in "/".
"""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path

import py7zr

_TAR_SUFFIXES = (".tar", ".tar.gz", ".tar.bz2", ".tar.xz", ".tgz")


class ArchiveError(Exception):
    """Raised when an archive cannot be read or its format is unsupported."""


def _normalize(name: str, is_dir: bool) -> str:
    name = name.replace("\\", "/").lstrip("/")
    if is_dir and not name.endswith("/"):
        name += "/"
    return name


def list_archive(archive: Path | str) -> list[str]:
    """Return the archive-relative paths of every member of *archive*."""
    archive = Path(archive)
    name_lower = archive.name.lower()

    try:
        if name_lower.endswith(".zip"):
            with zipfile.ZipFile(archive, "r") as zf:
                return [_normalize(i.filename, i.is_dir()) for i in zf.infolist()]

        if name_lower.endswith(".7z"):
            with py7zr.SevenZipFile(archive, "r") as zf:
                return [_normalize(i.filename, i.is_directory) for i in zf.list()]

        if name_lower.endswith(_TAR_SUFFIXES):
            with tarfile.open(archive, "r:*") as tf:
                return [_normalize(m.name, m.isdir()) for m in tf.getmembers()]
    except (OSError, zipfile.BadZipFile, tarfile.TarError, py7zr.Bad7zFile) as exc:
        raise ArchiveError(f"Cannot read {archive.name}: {exc}") from exc

    raise ArchiveError(f"Unsupported archive format: {archive.name}")
