"""
Admiral Main Application Entry Point

This module serves as the entry point for the Admiral status line generator.
It handles:

- Configuration file discovery and loading (TOML or YAML)
- Logging setup with optional colorization, always on stderr
- Runner bootstrap
- The aggregator loop that prints the status line on stdout

Usage:
    admiral [-c CONFIG_FILE] [--log-level LEVEL]
    python src/main.py [-c CONFIG_FILE]

Configuration:
    - $XDG_CONFIG_HOME/admiral.d/admiral.toml
    - $HOME/.config/admiral.d/admiral.toml
    - admiral.yaml in the same directories
"""

import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

import colorlog
import yaml

from config.paths import find_config_file
from config_validator import (
    ConfigurationError,
    LogLevel,
    StatusConfig,
    validate_configuration,
)
from runners.runner_manager import RunnerManager
from statusline.aggregator import Aggregator
from statusline.channel import ScriptSpawnError, UpdateChannel

YAML_SUFFIXES = {".yaml", ".yml"}


def _string_table(value: Any) -> Dict[str, str]:
    """Keep only the string entries of a logging sub-table."""
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(v, str)}


def setup_logging(
    config: Dict[str, Any], level_override: Optional[str] = None
) -> logging.Logger:
    """Configure stderr logging with colorized output based on configuration."""
    logging_config = config.get("logging") if isinstance(config, dict) else None
    if not isinstance(logging_config, dict):
        logging_config = {}
    log_level = str(level_override or logging_config.get("level", "WARNING")).upper()
    if log_level not in LogLevel.__members__:
        log_level = "WARNING"
    use_colors = logging_config.get("colorized", True) is True

    colors = _string_table(logging_config.get("colors")) or {
        "DEBUG": "blue",
        "INFO": "white",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "red,bg_white",
    }

    format_config = _string_table(logging_config.get("format"))
    date_format = format_config.get("date_format", "%Y-%m-%d %H:%M:%S")
    color_format = format_config.get(
        "message_format",
        "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    simple_format = format_config.get(
        "simple_format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # stdout carries the status line, diagnostics go to stderr
    if use_colors:
        formatter = colorlog.ColoredFormatter(
            color_format,
            datefmt=date_format,
            log_colors=colors,
            secondary_log_colors={},
            style="%",
        )
        handler = colorlog.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logging.basicConfig(
            level=getattr(logging, log_level), handlers=[handler], force=True
        )
    else:
        logging.basicConfig(
            level=getattr(logging, log_level),
            format=simple_format,
            datefmt=date_format,
            stream=sys.stderr,
            force=True,
        )

    return logging.getLogger(__name__)


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Parse a configuration file.

    Args:
        path: TOML file, or YAML when the suffix is .yaml/.yml

    Returns:
        Parsed configuration document

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        else:
            with open(path, "rb") as f:
                document = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file: {e}") from e
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Syntax error in configuration file: {e}") from e

    return document if document is not None else {}


def resolve_config_path(option: Optional[str]) -> Path:
    """
    Pick the configuration file from the command line or the default locations.

    Raises:
        ConfigurationError: If no usable file is found
    """
    if option:
        path = Path(option)
    else:
        path = find_config_file()
        if path is None:
            raise ConfigurationError("Configuration file not found")

    if not path.is_file():
        raise ConfigurationError("Invalid configuration file specified")
    return path.resolve()


def run_status_line(
    status_config: StatusConfig, config_root: Optional[Path], output=None
) -> int:
    """
    Start every runner and print the status line until they all finish.

    Args:
        status_config: Validated configuration
        config_root: Working directory for the item commands
        output: Stream for status lines (defaults to stdout)

    Returns:
        Number of lines printed

    Raises:
        ScriptSpawnError: If an item command could not be launched
    """
    channel = UpdateChannel()
    runner_manager = RunnerManager(
        status_config.items,
        channel,
        working_dir=config_root,
        restart_delay=status_config.settings.restart_delay,
    )
    aggregator = Aggregator(
        channel,
        runner_manager.size,
        settle_delay=status_config.settings.settle_delay,
        output=output,
    )

    if not runner_manager.start():
        logging.getLogger(__name__).error("Some runners failed to start")

    return aggregator.run()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="admiral",
        description="Merge the output of several commands into one status line.",
    )
    parser.add_argument(
        "-c",
        "--config-file",
        dest="config",
        help="Specify alternate config file",
    )
    parser.add_argument(
        "--log-level",
        help="Override the configured log level",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point."""
    args = parse_args(argv)
    logger = setup_logging({}, args.log_level)

    try:
        config_path = resolve_config_path(args.config)
        document = read_config_file(config_path)
        status_config = validate_configuration(document)
        logger = setup_logging(document, args.log_level)
        logger.info(f"Using configuration {config_path}")
        run_status_line(status_config, config_path.parent)
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)
    except ScriptSpawnError as e:
        logger.critical(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
