"""
instructions.py
Installation instructions handed back to the host, and the path-segment
helper the installers use to rewrite archive paths.

An installer never touches the filesystem: it returns an ordered list of
instructions and the host's deploy pipeline carries them out.

  Copy           copy <source> (archive-relative) to <destination> (mod-relative)
  GenerateFile   write <data> to <destination>
  SetAttribute   store <key>=<value> on the installed mod
  SetModType     assign the mod type (exactly once per install that sets one)

Each instruction serializes to the dict shape the host expects
(``{"type": "copy", "source": ..., "destination": ...}``).
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from pathlib import PurePosixPath
from typing import Any, Union

_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class Copy:
    source: str
    destination: str
    type: str = "copy"


@dataclass(frozen=True)
class GenerateFile:
    data: str
    destination: str
    type: str = "generatefile"


@dataclass(frozen=True)
class SetAttribute:
    key: str
    value: Any
    type: str = "attribute"


@dataclass(frozen=True)
class SetModType:
    value: str
    type: str = "setmodtype"


Instruction = Union[Copy, GenerateFile, SetAttribute, SetModType]


def to_host_dicts(instructions: list[Instruction]) -> list[dict]:
    """Serialize an instruction list into the host's plain-dict form."""
    return [asdict(instr) for instr in instructions]


def from_host_dict(data: dict) -> Instruction:
    """Inverse of to_host_dicts() for a single entry.

    Raises ValueError for an unknown ``type`` tag.
    """
    kind = data.get("type")
    if kind == "copy":
        return Copy(source=data["source"], destination=data["destination"])
    if kind == "generatefile":
        return GenerateFile(data=data["data"], destination=data["destination"])
    if kind == "attribute":
        return SetAttribute(key=data["key"], value=data.get("value"))
    if kind == "setmodtype":
        return SetModType(value=data.get("value", ""))
    raise ValueError(f"Unknown instruction type: {kind!r}")


# ---------------------------------------------------------------------------
# Path segments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PathSegments:
    """An archive path as an ordered tuple of segments.

    Archive listings may use either ``/`` or ``\\``; both are accepted.
    A trailing separator (a directory placeholder entry) is remembered in
    ``is_dir_entry`` and does not produce an empty trailing segment.
    """
    parts: tuple[str, ...]
    is_dir_entry: bool = False

    @classmethod
    def from_path(cls, path: str) -> "PathSegments":
        is_dir = bool(path) and path[-1] in "/\\"
        parts = tuple(p for p in _SEPARATORS.split(path) if p)
        return cls(parts, is_dir)

    def __len__(self) -> int:
        return len(self.parts)

    def __getitem__(self, index: int) -> str:
        return self.parts[index]

    @property
    def basename(self) -> str:
        return self.parts[-1] if self.parts else ""

    @property
    def extension(self) -> str:
        """Lower-case extension of the last segment, '' for none.

        Dot-files such as ``.gitignore`` have no extension.
        """
        if self.is_dir_entry:
            return ""
        return PurePosixPath(self.basename).suffix.lower() if self.basename else ""

    def has_extension(self) -> bool:
        return self.extension != ""

    def first_segment_equals(self, name: str) -> bool:
        """Exact (case-sensitive) comparison of the first segment."""
        return bool(self.parts) and self.parts[0] == name

    def index_of(self, name: str, case_insensitive: bool = True) -> int:
        """Index of the first segment equal to *name*, or -1."""
        target = name.lower() if case_insensitive else name
        for i, part in enumerate(self.parts):
            if (part.lower() if case_insensitive else part) == target:
                return i
        return -1

    def drop_prefix(self, count: int) -> "PathSegments":
        """Segments with the first *count* removed."""
        return PathSegments(self.parts[count:], self.is_dir_entry)

    def join(self, *prefix: str) -> str:
        """Forward-slash path of *prefix* followed by these segments."""
        pieces = [p for p in prefix if p] + list(self.parts)
        return "/".join(pieces)
