"""
Status Line Aggregator

This module owns the line state: the latest message for every item position
and the last line written to the output. It consumes updates from the
channel and prints the concatenated line whenever it changes.
"""

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO

from .channel import UpdateChannel
from .models import Update

DEFAULT_SETTLE_DELAY = 0.005


@dataclass
class LineState:
    """Latest text per position plus the last printed line."""

    slots: List[str]
    last_printed: str = ""
    updates_received: int = field(default=0)

    @classmethod
    def empty(cls, size: int) -> "LineState":
        return cls(slots=[""] * size)

    def apply(self, update: Update) -> None:
        self.slots[update.position] = update.message
        self.updates_received += 1

    def render(self) -> str:
        return "".join(self.slots)


class Aggregator:
    """
    Single consumer of the update channel.

    All line state mutation happens in ``run``; nothing else touches it,
    so no locking is needed.
    """

    def __init__(
        self,
        channel: UpdateChannel,
        size: int,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        output: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the aggregator.

        Args:
            channel: Channel the runners post updates to
            size: Number of item positions in the line
            settle_delay: Pause before printing a changed line, in seconds
            output: Stream lines are written to (defaults to stdout)
            sleep: Sleep function, replaceable in tests
        """
        if settle_delay <= 0:
            raise ValueError("settle_delay must be positive")

        self.channel = channel
        self.settle_delay = settle_delay
        self.output = output
        self.state = LineState.empty(size)
        self.lines_printed = 0
        self.logger = logging.getLogger(__name__)
        self._sleep = sleep

    def run(self) -> int:
        """
        Consume updates until every runner has finished.

        Returns:
            Number of lines printed

        Raises:
            ScriptSpawnError: If a runner failed to launch its command
        """
        self.logger.debug(f"Aggregator started with {len(self.state.slots)} slots")

        while True:
            update = self.channel.receive()
            if update is None:
                break
            self.handle(update)

        self.logger.debug(
            f"Aggregator finished: {self.state.updates_received} updates, "
            f"{self.lines_printed} lines"
        )
        return self.lines_printed

    def handle(self, update: Update) -> bool:
        """
        Apply one update and print the line if it changed.

        Returns:
            True if a line was printed
        """
        self.state.apply(update)
        if self.state.render() == self.state.last_printed:
            return False

        # Let near-simultaneous updates from other items land first.
        self._sleep(self.settle_delay)
        self._drain()

        line = self.state.render()
        if line == self.state.last_printed:
            return False

        self.state.last_printed = line
        self._emit(line)
        return True

    def _drain(self) -> None:
        while True:
            pending = self.channel.receive_nowait()
            if pending is None:
                return
            self.state.apply(pending)

    def _emit(self, line: str) -> None:
        stream = self.output if self.output is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()
        self.lines_printed += 1
