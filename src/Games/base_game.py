"""
base_game.py
Abstract base class that all game handlers must subclass.

A handler knows the game's identity, where it is installed and through which
store, and persists that in the user config directory as paths.json.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from Utils.config_paths import get_game_config_path


class BaseGame(ABC):

    # -----------------------------------------------------------------------
    # Identity
    # -----------------------------------------------------------------------

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Human-readable display name, e.g. 'ASTRONEER'.
        Used as the folder name of the game's config directory.
        """

    @property
    @abstractmethod
    def game_id(self) -> str:
        """
        Identifier the host registers the game under, e.g. 'astroneer'.
        """

    @property
    @abstractmethod
    def exe_name(self) -> str:
        """
        The game's default executable, relative to the install root.
        """

    @property
    def steam_id(self) -> str:
        """
        Steam App ID for this game. Used to find the install in Steam
        libraries. Return an empty string for non-Steam games.
        """
        return ""

    @property
    def required_files(self) -> list[str]:
        """
        Relative paths that must exist for a folder to be accepted as the
        game's install root.
        """
        return []

    # -----------------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------------

    @abstractmethod
    def get_game_path(self) -> Path | None:
        """
        Return the root install directory of the game, or None if not set.
        """

    @abstractmethod
    def get_mod_data_path(self) -> Path | None:
        """
        Return the directory mods are deployed relative to.
        Returns None if game_path is not configured.
        """

    # -----------------------------------------------------------------------
    # Configuration persistence
    # -----------------------------------------------------------------------

    @property
    def _paths_file(self) -> Path:
        """Path to this game's paths.json in the user config directory.

        Resolves to: ~/.config/AstroneerModManager/games/<game_name>/paths.json
        """
        return get_game_config_path(self.name)

    @abstractmethod
    def load_paths(self) -> bool:
        """
        Load path configuration from the user config directory.
        Returns True if a valid game_path was loaded, False otherwise.
        """

    @abstractmethod
    def save_paths(self) -> None:
        """Write current path configuration to the user config directory."""

    def set_game_path(self, path: Path | str | None) -> None:
        """
        Convenience: set game_path and immediately persist it.
        Pass None to clear the configured path.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement set_game_path()"
        )

    # -----------------------------------------------------------------------
    # Validation (concrete, subclasses may override)
    # -----------------------------------------------------------------------

    def is_configured(self) -> bool:
        """Returns True if game_path is set and the directory exists on disk."""
        p = self.get_game_path()
        return p is not None and p.exists()

    def validate_install(self) -> list[str]:
        """
        Check that the game is ready to receive mod installs.
        Returns a list of human-readable error strings; empty list = all good.
        """
        errors: list[str] = []
        if not self.is_configured():
            errors.append(
                f"Game path not set or does not exist for '{self.name}'."
            )
            return errors
        game_path = self.get_game_path()
        for rel in self.required_files:
            if not (game_path / rel).exists():
                errors.append(f"Required game file missing: {rel}")
        return errors
