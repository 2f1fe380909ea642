"""
Path Configuration for Admiral

This module locates the configuration file. Lookup order is
``$XDG_CONFIG_HOME/admiral.d`` then ``$HOME/.config/admiral.d``; ``admiral.toml``
is searched for in both before ``admiral.yaml``.
"""

import os
from pathlib import Path
from typing import List, Mapping, Optional

CONFIG_DIR_NAME = "admiral.d"
CONFIG_FILE_NAMES = ("admiral.toml", "admiral.yaml")


def candidate_config_dirs(environ: Optional[Mapping[str, str]] = None) -> List[Path]:
    """Directories searched for a configuration file, in order."""
    env = os.environ if environ is None else environ
    dirs = []
    if env.get("XDG_CONFIG_HOME"):
        dirs.append(Path(env["XDG_CONFIG_HOME"]) / CONFIG_DIR_NAME)
    if env.get("HOME"):
        dirs.append(Path(env["HOME"]) / ".config" / CONFIG_DIR_NAME)
    return dirs


def find_config_file(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Return the first existing configuration file, or None."""
    for name in CONFIG_FILE_NAMES:
        for directory in candidate_config_dirs(environ):
            path = directory / name
            if path.exists():
                return path
    return None
