"""
Base Runner Module for Admiral

This module provides the abstract base class for all threaded item runners.
Each runner drives one status line item on its own daemon thread.
"""

import abc
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunnerState(Enum):
    """Enum for runner states."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    FINISHED = "finished"
    ERROR = "error"


@dataclass
class RunnerStatus:
    """Status information for a runner."""

    name: str
    position: int
    state: RunnerState
    healthy: bool
    updates_sent: int
    error_count: int
    last_error: Optional[str]
    uptime: float
    last_activity: Optional[float]


class BaseRunner(abc.ABC):
    """
    Abstract base class for all threaded runners.

    Provides common functionality for:
    - Thread management
    - State tracking
    - Error recording
    - Stopping on request (tests and embedding code)

    Subclasses implement ``_work_cycle``. The loop waits ``interval`` seconds
    between cycles and exits after the first cycle when ``run_once`` is set.
    """

    def __init__(self, name: str, position: int, interval: float = 0.0):
        """
        Initialize the base runner.

        Args:
            name: Item name, used for logging and the thread name
            position: Slot of the item in the status line
            interval: Pause between work cycles, in seconds
        """
        self.name = name
        self.position = position
        self.interval = interval
        self.run_once = False
        self.logger = logging.getLogger(f"{__name__}.{name}")

        # Threading
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()

        # State tracking
        self._state = RunnerState.STOPPED
        self._error_count = 0
        self._last_error: Optional[str] = None
        self._start_time: Optional[float] = None
        self._last_activity: Optional[float] = None

    @property
    def state(self) -> RunnerState:
        """Get the current runner state."""
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        """Check if the runner is currently running."""
        return self.state == RunnerState.RUNNING

    def start(self) -> bool:
        """
        Start the runner thread.

        Returns:
            True if started successfully, False otherwise
        """
        with self._state_lock:
            if self._state != RunnerState.STOPPED:
                self.logger.warning(
                    f"Runner '{self.name}' is not stopped, cannot start"
                )
                return False

            self._state = RunnerState.STARTING

        if not self._initialize():
            with self._state_lock:
                self._state = RunnerState.ERROR
            self.logger.error(f"Failed to initialize runner '{self.name}'")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"{self.name}_runner", daemon=True
        )
        self._start_time = time.time()

        # Set before the thread starts so a one-shot runner cannot finish first.
        with self._state_lock:
            self._state = RunnerState.RUNNING

        self._thread.start()
        self.logger.debug(f"Runner '{self.name}' started at position {self.position}")
        return True

    def stop(self, timeout: float = 5.0) -> bool:
        """
        Stop the runner thread.

        Args:
            timeout: Maximum time to wait for the thread to end

        Returns:
            True if stopped, False if the thread is still alive
        """
        with self._state_lock:
            if self._state in [RunnerState.STOPPED, RunnerState.STOPPING]:
                return True
            finished = self._state in [RunnerState.FINISHED, RunnerState.ERROR]
            self._state = RunnerState.STOPPING

        self.logger.debug(f"Stopping runner '{self.name}'...")
        self._stop_event.set()
        self._interrupt()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout)
            if self._thread.is_alive():
                self.logger.warning(f"Runner '{self.name}' did not stop in time")
                with self._state_lock:
                    self._state = RunnerState.ERROR
                return False

        with self._state_lock:
            self._state = RunnerState.STOPPED

        if not finished:
            self.logger.debug(f"Runner '{self.name}' stopped")
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the runner thread to end on its own."""
        if self._thread:
            self._thread.join(timeout)

    def get_status(self) -> RunnerStatus:
        """Get comprehensive status information."""
        uptime = 0.0
        if self._start_time:
            uptime = time.time() - self._start_time

        return RunnerStatus(
            name=self.name,
            position=self.position,
            state=self.state,
            healthy=self.is_healthy(),
            updates_sent=self.updates_sent,
            error_count=self._error_count,
            last_error=self._last_error,
            uptime=uptime,
            last_activity=self._last_activity,
        )

    @property
    def updates_sent(self) -> int:
        return 0

    def _run(self) -> None:
        """Main thread loop - runs the actual worker logic."""
        self.logger.debug(f"Runner '{self.name}' thread started")
        failed = False

        try:
            while not self._stop_event.is_set():
                try:
                    self._last_activity = time.time()
                    self._work_cycle()
                except Exception as e:
                    self._record_error(f"Error in work cycle: {e}")
                    if not self._handle_error(e):
                        failed = True
                        break

                if self.run_once:
                    break

                # Wait for next cycle or stop signal
                if self._stop_event.wait(self.interval):
                    break

        finally:
            self.logger.debug(f"Runner '{self.name}' thread ending")
            with self._state_lock:
                if self._state == RunnerState.RUNNING:
                    self._state = (
                        RunnerState.ERROR if failed else RunnerState.FINISHED
                    )
            try:
                self._cleanup()
            except Exception as e:
                self.logger.error(f"Error during cleanup: {e}")

    def _record_error(self, error_msg: str) -> None:
        """Record an error for status tracking."""
        self._error_count += 1
        self._last_error = error_msg
        self.logger.error(f"Runner '{self.name}': {error_msg}")

    def _initialize(self) -> bool:
        """
        Prepare runner-specific resources before the thread starts.

        Returns:
            True if initialization successful, False otherwise
        """
        return True

    @abc.abstractmethod
    def _work_cycle(self) -> None:
        """
        Perform one cycle of work.

        This method is called repeatedly in the runner thread.
        """

    @abc.abstractmethod
    def is_healthy(self) -> bool:
        """Check if the runner is healthy."""

    def _interrupt(self) -> None:
        """
        Unblock a work cycle in progress after a stop request.

        Override to terminate whatever the cycle is waiting on.
        """

    def _cleanup(self) -> None:
        """
        Cleanup runner-specific resources.

        Called in the worker thread right before it exits.
        """

    def _handle_error(self, error: Exception) -> bool:
        """
        Handle errors during work cycle.

        Args:
            error: The exception that occurred

        Returns:
            True to continue running, False to stop runner
        """
        return True
