"""
Configuration Validation for Admiral

This module checks a parsed configuration document and turns it into the
ordered list of item specifications the runners consume. Problems that make
the configuration impossible to honor are errors; items listed without a
section and unknown keys are warnings.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from runners.streaming_runner import DEFAULT_RESTART_DELAY
from statusline.aggregator import DEFAULT_SETTLE_DELAY
from statusline.models import ItemSpec, Policy


class LogLevel(str, Enum):
    """Valid log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


ITEM_KEYS = {"path", "static", "reload", "shell"}
RESERVED_SECTIONS = ("admiral", "logging")
FORMAT_KEYS = {"date_format", "message_format", "simple_format"}


@dataclass
class ValidationError:
    """Represents a validation error with context."""

    path: str  # Dot-separated path to the invalid field
    message: str
    value: Any = None
    expected: Any = None

    def __str__(self) -> str:
        msg = f"{self.path}: {self.message}"
        if self.value is not None:
            msg += f" (got: {self.value})"
        if self.expected is not None:
            msg += f" (expected: {self.expected})"
        return msg


class ConfigurationError(Exception):
    """The configuration cannot be honored."""

    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass
class AppSettings:
    """Timing options from the ``[admiral]`` table."""

    settle_delay: float = DEFAULT_SETTLE_DELAY
    restart_delay: float = DEFAULT_RESTART_DELAY


@dataclass
class StatusConfig:
    """Validated configuration."""

    items: List[ItemSpec]
    settings: AppSettings = field(default_factory=AppSettings)
    logging: Dict[str, Any] = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration dictionaries and builds item specifications."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the configuration validator.

        Args:
            environ: Environment used to resolve ``$SHELL``
        """
        self.logger = logging.getLogger(__name__)
        self.environ = os.environ if environ is None else environ
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []

    def validate_config(
        self, config: Dict[str, Any]
    ) -> Tuple[Optional[StatusConfig], List[ValidationError], List[ValidationError]]:
        """
        Validate the configuration document.

        Args:
            config: Parsed configuration document

        Returns:
            Tuple of (config or None if invalid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        if not isinstance(config, dict):
            self.errors.append(
                ValidationError(
                    "<root>",
                    "Must be a table",
                    value=type(config).__name__,
                    expected="table",
                )
            )
            return None, self.errors, self.warnings

        settings, order = self._validate_admiral_section(config.get("admiral"))
        self._validate_logging_config(config.get("logging", {}))

        items: List[ItemSpec] = []
        for name in order:
            if name in RESERVED_SECTIONS:
                self.warnings.append(
                    ValidationError(
                        name,
                        f"'{name}' is a reserved section name and cannot be an item",
                    )
                )
                continue
            if name not in config:
                self.warnings.append(ValidationError(name, f"No {name} found"))
                continue
            spec = self._validate_item(name, len(items), config[name])
            if spec is not None:
                items.append(spec)

        if self.errors:
            return None, self.errors, self.warnings

        status_config = StatusConfig(
            items=items,
            settings=settings,
            logging=config.get("logging") or {},
        )
        return status_config, self.errors, self.warnings

    def _validate_admiral_section(self, section: Any) -> Tuple[AppSettings, List[str]]:
        """Validate the ``[admiral]`` table holding the item order."""
        settings = AppSettings()

        if not isinstance(section, dict):
            self.errors.append(
                ValidationError(
                    "admiral",
                    "Missing required section",
                    expected="table with an 'items' list",
                )
            )
            return settings, []

        items = section.get("items")
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            self.errors.append(
                ValidationError(
                    "admiral.items",
                    "Must be a list of item names",
                    value=items,
                    expected="list of strings",
                )
            )
            items = []
        elif not items:
            self.warnings.append(
                ValidationError("admiral.items", "No items listed")
            )

        if "settle_delay" in section:
            value = section["settle_delay"]
            if not _is_number(value) or value <= 0:
                self.errors.append(
                    ValidationError(
                        "admiral.settle_delay",
                        "Must be a positive number",
                        value=value,
                        expected="seconds > 0",
                    )
                )
            else:
                settings.settle_delay = float(value)

        if "restart_delay" in section:
            value = section["restart_delay"]
            if not _is_number(value) or value < 0:
                self.errors.append(
                    ValidationError(
                        "admiral.restart_delay",
                        "Must be a non-negative number",
                        value=value,
                        expected="seconds >= 0",
                    )
                )
            else:
                settings.restart_delay = float(value)

        return settings, items

    def _validate_item(self, name: str, position: int, section: Any) -> Optional[ItemSpec]:
        """
        Validate one item section.

        Args:
            name: Item name from the order list
            position: Slot the item gets if it is valid
            section: The item's table

        Returns:
            ItemSpec, or None if the section has errors
        """
        error_count = len(self.errors)

        if not isinstance(section, dict):
            self.errors.append(
                ValidationError(
                    name,
                    "Must be a table",
                    value=type(section).__name__,
                    expected="table",
                )
            )
            return None

        unknown = set(section.keys()) - ITEM_KEYS
        if unknown:
            self.warnings.append(
                ValidationError(
                    name,
                    "Unknown fields found",
                    value=sorted(unknown),
                    expected=f"only {sorted(ITEM_KEYS)}",
                )
            )

        command = section.get("path")
        if command is None:
            self.errors.append(ValidationError(f"{name}.path", f"No path found for {name}"))
        elif isinstance(command, list):
            self.errors.append(
                ValidationError(
                    f"{name}.path",
                    f"Invalid path found for {name}: arrays are deprecated - "
                    "use a string instead",
                )
            )
        elif not isinstance(command, str):
            self.errors.append(
                ValidationError(
                    f"{name}.path",
                    f"Invalid path found for {name}",
                    value=type(command).__name__,
                    expected="string",
                )
            )

        is_static = section.get("static", False)
        if not isinstance(is_static, bool):
            self.errors.append(
                ValidationError(
                    f"{name}.static",
                    "Must be a boolean",
                    value=type(is_static).__name__,
                    expected="boolean",
                )
            )

        interval = section.get("reload")
        if interval is not None:
            if not _is_number(interval):
                self.errors.append(
                    ValidationError(
                        f"{name}.reload",
                        "Must be a number of seconds",
                        value=type(interval).__name__,
                        expected="integer or float",
                    )
                )
            elif interval < 0:
                self.errors.append(
                    ValidationError(
                        f"{name}.reload",
                        "Must be non-negative",
                        value=interval,
                        expected="seconds >= 0",
                    )
                )

        shell = section.get("shell")
        if shell is None:
            shell = self.environ.get("SHELL")
            if not shell:
                self.errors.append(
                    ValidationError(
                        f"{name}.shell",
                        "Could not find your system's shell. "
                        "Make sure the $SHELL variable is set.",
                    )
                )
        elif not isinstance(shell, str) or not shell:
            self.errors.append(
                ValidationError(
                    f"{name}.shell",
                    f"Invalid shell found for {name}",
                    value=shell,
                    expected="non-empty string",
                )
            )

        if len(self.errors) > error_count:
            return None

        if is_static:
            policy = Policy.STATIC
        elif interval is not None:
            policy = Policy.PERIODIC
        else:
            policy = Policy.STREAMING

        return ItemSpec(
            name=name,
            position=position,
            command=command,
            shell=shell,
            policy=policy,
            interval=float(interval) if policy == Policy.PERIODIC else None,
        )

    def _validate_logging_config(self, logging_config: Any) -> None:
        """
        Validate the optional logging table.

        Args:
            logging_config: Dictionary containing logging configuration
        """
        if not isinstance(logging_config, dict):
            self.errors.append(
                ValidationError(
                    "logging",
                    "Must be a table",
                    value=type(logging_config).__name__,
                    expected="table",
                )
            )
            return

        if "level" in logging_config:
            level = logging_config["level"]
            try:
                LogLevel(str(level).upper())
            except ValueError:
                self.errors.append(
                    ValidationError(
                        "logging.level",
                        "Invalid log level",
                        value=level,
                        expected=f"one of: {[lvl.value for lvl in LogLevel]}",
                    )
                )

        if "colorized" in logging_config and not isinstance(
            logging_config["colorized"], bool
        ):
            self.errors.append(
                ValidationError(
                    "logging.colorized",
                    "Must be a boolean",
                    value=type(logging_config["colorized"]).__name__,
                    expected="boolean",
                )
            )

        colors = logging_config.get("colors")
        if colors is not None and not (
            isinstance(colors, dict) and all(isinstance(c, str) for c in colors.values())
        ):
            self.errors.append(
                ValidationError(
                    "logging.colors",
                    "Must be a table of color names",
                    value=colors,
                    expected="table of strings",
                )
            )

        format_config = logging_config.get("format")
        if format_config is not None:
            if not isinstance(format_config, dict) or not all(
                isinstance(v, str) for v in format_config.values()
            ):
                self.errors.append(
                    ValidationError(
                        "logging.format",
                        "Must be a table of format strings",
                        value=format_config,
                        expected=f"table with keys {sorted(FORMAT_KEYS)}",
                    )
                )
            elif set(format_config) - FORMAT_KEYS:
                self.warnings.append(
                    ValidationError(
                        "logging.format",
                        "Unknown fields found",
                        value=sorted(set(format_config) - FORMAT_KEYS),
                        expected=f"only {sorted(FORMAT_KEYS)}",
                    )
                )


def validate_configuration(
    config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> StatusConfig:
    """
    Validate a parsed configuration and report any issues.

    Args:
        config: Parsed configuration document
        environ: Environment used to resolve ``$SHELL``

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: If the configuration has errors
    """
    validator = ConfigValidator(environ)
    logger = logging.getLogger(__name__)

    status_config, errors, warnings = validator.validate_config(config)

    for warning in warnings:
        logger.warning(str(warning))

    if errors:
        logger.error("Configuration validation errors:")
        for error in errors:
            logger.error(f"  - {error}")
        raise ConfigurationError(
            f"Configuration has {len(errors)} error(s)", errors=errors
        )

    return status_config
