"""
Configuration Package for Admiral

Locates the configuration file the status line is built from.
"""

from .paths import CONFIG_DIR_NAME, CONFIG_FILE_NAMES, find_config_file

__all__ = ["CONFIG_DIR_NAME", "CONFIG_FILE_NAMES", "find_config_file"]
