"""
host.py
What the extension needs from the mod manager hosting it.

The host owns persistent state (mods, profiles, downloads, discovery), the
download/import/install pipeline and the notification area. The extension
only reads state and *requests* changes:

  StateQuery       read-only view of the host's state
  ActionDispatch   apply a batch of state actions atomically
  InstallPipeline  install/import/remove through the host
  Notifier         user-visible notifications

A host adapter implements all four; ``Host`` is the union the extension
facade receives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable


# ---------------------------------------------------------------------------
# Conditions raised by the host or by our own I/O
# ---------------------------------------------------------------------------

class ProcessCanceled(Exception):
    """The operation was cancelled and may be retried later."""


class NotFound(Exception):
    """A file, download or mod the operation relied on does not exist."""


# ---------------------------------------------------------------------------
# State records
# ---------------------------------------------------------------------------

@dataclass
class Discovery:
    """Where the game was found and through which store."""
    path: Optional[Path] = None
    store: Optional[str] = None


@dataclass
class Mod:
    id: str
    type: str = ""
    installation_path: str = ""        # folder name under the host's staging dir
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class Download:
    id: str
    local_path: str                    # archive file name in the download dir


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SetModEnabled:
    profile_id: str
    mod_id: str
    enabled: bool


@dataclass(frozen=True)
class SetModAttributes:
    game_id: str
    mod_id: str
    attributes: dict[str, Any]


@dataclass(frozen=True)
class SetDownloadModInfo:
    download_id: str
    key: str
    value: Any


Action = Union[SetModEnabled, SetModAttributes, SetDownloadModInfo]


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

@runtime_checkable
class StateQuery(Protocol):
    def get_mods(self, game_id: str) -> dict[str, Mod]: ...

    def get_profile_mod_state(self, profile_id: str) -> dict[str, bool]:
        """mod id -> enabled flag for one profile."""
        ...

    def last_active_profile(self, game_id: str) -> Optional[str]: ...

    def get_downloads(self) -> dict[str, Download]: ...

    def get_discovery(self, game_id: str) -> Optional[Discovery]: ...

    def get_install_path(self, game_id: str) -> Path:
        """The host's staging directory for *game_id*'s mods."""
        ...

    def get_temp_path(self) -> Optional[Path]:
        """Scratch directory for downloads; None to use the app cache."""
        ...


@runtime_checkable
class ActionDispatch(Protocol):
    def batch_dispatch(self, actions: list[Action]) -> None: ...


@runtime_checkable
class InstallPipeline(Protocol):
    def install_from_download(self, download_id: str, options: dict[str, Any]) -> str:
        """Install a download, returning the new mod id. Raises on failure."""
        ...

    def import_download(self, local_path: Path) -> str:
        """Move an archive into the download store, returning its id.

        Raises NotFound if the host did not register the file.
        """
        ...

    def remove_mods(self, game_id: str, mod_ids: list[str]) -> None: ...


@runtime_checkable
class Notifier(Protocol):
    def send_notification(self, id: str, message: str, type: str = "info",
                          no_dismiss: bool = False) -> None: ...

    def dismiss_notification(self, id: str) -> None: ...

    def show_error_notification(self, message: str, error: Optional[BaseException] = None,
                                allow_report: bool = False) -> None: ...


class Host(StateQuery, ActionDispatch, InstallPipeline, Notifier, Protocol):
    """Everything the extension facade needs from the host."""


# ---------------------------------------------------------------------------
# State helpers
# ---------------------------------------------------------------------------

def get_enabled_mods(state: StateQuery, game_id: str, mod_type: str) -> list[Mod]:
    """Enabled mods of *mod_type* (or of the default type ``""``) in the
    game's last active profile."""
    profile_id = state.last_active_profile(game_id)
    if profile_id is None:
        return []
    enabled = state.get_profile_mod_state(profile_id)
    return [
        mod for mod in state.get_mods(game_id).values()
        if enabled.get(mod.id, False) and mod.type in (mod_type, "")
    ]
