"""
Runner Manager Module for Admiral

This module bootstraps the item runners: it fixes the working directory,
creates one runner per item specification and wires each one to the
shared update channel.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type, Union

from statusline.channel import UpdateChannel
from statusline.models import ItemSpec, Policy

from .base_runner import RunnerStatus
from .periodic_runner import PeriodicRunner
from .script_runner import ScriptRunner
from .static_runner import StaticRunner
from .streaming_runner import DEFAULT_RESTART_DELAY, StreamingRunner


class RunnerManager:
    """
    Central manager for all item runners.

    Provides:
    - Runner creation per item policy
    - One-time working directory setup
    - Runner startup and (for tests) stopping
    - Status reporting
    """

    def __init__(
        self,
        specs: Sequence[ItemSpec],
        channel: UpdateChannel,
        working_dir: Optional[Union[str, Path]] = None,
        restart_delay: float = DEFAULT_RESTART_DELAY,
    ):
        """
        Initialize the runner manager.

        Args:
            specs: Item specifications in line order
            channel: Channel shared by all runners
            working_dir: Directory commands run from, normally the
                configuration file's directory
            restart_delay: Pause before restarting a streaming command
        """
        self.specs = list(specs)
        self.channel = channel
        self.working_dir = Path(working_dir) if working_dir is not None else None
        self.restart_delay = restart_delay
        self.logger = logging.getLogger(__name__)

        # Keyed by position, an item listed twice gets two runners
        self._runners: Dict[int, ScriptRunner] = {}
        self._started = False

        # Policy registry - maps execution policies to runner classes
        self._runner_classes: Dict[Policy, Type[ScriptRunner]] = {
            Policy.STATIC: StaticRunner,
            Policy.PERIODIC: PeriodicRunner,
            Policy.STREAMING: StreamingRunner,
        }

        positions = sorted(spec.position for spec in self.specs)
        if positions != list(range(len(self.specs))):
            raise ValueError(f"Item positions must be 0..N-1, got {positions}")

    @property
    def size(self) -> int:
        """Number of slots in the status line."""
        return len(self.specs)

    def _create_runner(self, spec: ItemSpec) -> ScriptRunner:
        runner_class = self._runner_classes[spec.policy]
        return runner_class(
            spec, self.channel.sender(), restart_delay=self.restart_delay
        )

    def _enter_working_dir(self) -> None:
        # Set once, before any runner thread exists.
        if self.working_dir is None:
            return
        os.chdir(self.working_dir)
        self.logger.debug(f"Working directory set to {self.working_dir}")

    def start(self) -> bool:
        """
        Create and start one runner per item.

        Returns:
            True if every runner started, False otherwise
        """
        if self._started:
            self.logger.warning("Runner manager is already started")
            return False
        self._started = True

        self._enter_working_dir()

        if not self.specs:
            self.logger.warning("No items configured")
            self.channel.close()
            return True

        for spec in self.specs:
            self._runners[spec.position] = self._create_runner(spec)

        success_count = 0
        for position, runner in sorted(self._runners.items()):
            if runner.start():
                success_count += 1
                self.logger.debug(f"Started runner: {runner.name} ({position})")
            else:
                self.logger.error(
                    f"Failed to start runner: {runner.name} ({position})"
                )
                runner.sender.close()

        success = success_count == len(self._runners)
        if success:
            self.logger.info(f"All {success_count} runners started")
        else:
            self.logger.warning(
                f"Only {success_count}/{len(self._runners)} runners started"
            )
        return success

    def stop_all_runners(self, timeout: float = 5.0) -> bool:
        """
        Stop every runner.

        Returns:
            True if all runners stopped, False otherwise
        """
        results = [runner.stop(timeout) for runner in self._runners.values()]
        return all(results)

    def get_runner(self, name: str) -> Optional[ScriptRunner]:
        """
        Get the runner of an item by name.

        An item listed more than once returns its leftmost runner.

        Args:
            name: Name of the item

        Returns:
            Runner instance or None if not found
        """
        for runner in self.get_all_runners():
            if runner.name == name:
                return runner
        return None

    def get_all_runners(self) -> List[ScriptRunner]:
        """Get all runners in line order."""
        return [self._runners[position] for position in sorted(self._runners)]

    def get_all_runner_statuses(self) -> List[RunnerStatus]:
        """Get status for all runners in line order."""
        return [runner.get_status() for runner in self.get_all_runners()]
