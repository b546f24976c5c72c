"""
config_paths.py
Central helpers for resolving user-writable config and cache directories.

Follows the XDG Base Directory Specification:
  Config lives in $XDG_CONFIG_HOME/AstroneerModManager  (default: ~/.config/AstroneerModManager)
  Downloads live in $XDG_CACHE_HOME/AstroneerModManager  (default: ~/.cache/AstroneerModManager)
"""

import os
from pathlib import Path

APP_NAME = "AstroneerModManager"


def get_config_dir() -> Path:
    """Return the app config directory, creating it if it doesn't exist.

    Respects $XDG_CONFIG_HOME; falls back to ~/.config/AstroneerModManager.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    config_dir = base / APP_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_game_config_path(game_name: str) -> Path:
    """Return the paths.json path for a given game, creating parent dirs as needed.

    Result: ~/.config/AstroneerModManager/games/<game_name>/paths.json
    """
    path = get_config_dir() / "games" / game_name / "paths.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the app cache directory, creating it if needed.

    Respects $XDG_CACHE_HOME; falls back to ~/.cache/AstroneerModManager.
    """
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    cache_dir = base / APP_NAME
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def get_temp_dir() -> Path:
    """Return the directory requirement archives are downloaded into.

    Result: ~/.cache/AstroneerModManager/downloads/
    """
    d = get_cache_dir() / "downloads"
    d.mkdir(parents=True, exist_ok=True)
    return d
