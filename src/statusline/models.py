"""
Status Line Data Models

This module defines the data types shared by the runners and the aggregator:
item specifications, execution policies and the updates passed between them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Policy(str, Enum):
    """Execution strategy for an item."""

    STATIC = "static"
    PERIODIC = "periodic"
    STREAMING = "streaming"


@dataclass(frozen=True)
class ItemSpec:
    """Resolved configuration for one status line item."""

    name: str
    position: int
    command: str
    shell: str
    policy: Policy
    interval: Optional[float] = None  # seconds, periodic items only

    def __post_init__(self) -> None:
        if self.policy == Policy.PERIODIC and self.interval is None:
            raise ValueError(f"Periodic item '{self.name}' needs an interval")
        if self.interval is not None and self.interval < 0:
            raise ValueError(f"Interval for '{self.name}' must be non-negative")

    @property
    def arguments(self) -> list:
        """Argument vector used to launch the command."""
        return [self.shell, "-c", self.command]


@dataclass(frozen=True)
class Update:
    """Newest output of the item at ``position``."""

    position: int
    message: str
