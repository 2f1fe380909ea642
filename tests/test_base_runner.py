"""
Unit Tests for BaseRunner

This module contains unit tests for the BaseRunner abstract class
thread lifecycle, independent of any command execution.
"""

import time
import unittest

# Add parent directory to path for imports
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from runners.base_runner import BaseRunner, RunnerState, RunnerStatus


class ConcreteRunner(BaseRunner):
    """Concrete implementation of BaseRunner for testing."""

    def __init__(self, name: str, position: int = 0, interval: float = 0.05):
        super().__init__(name, position, interval)
        self.work_cycle_count = 0
        self.cleanup_called = False
        self.interrupt_called = False
        self.should_fail_init = False
        self.should_fail_work = False
        self.continue_on_error = True

    def _initialize(self) -> bool:
        return not self.should_fail_init

    def _work_cycle(self) -> None:
        self.work_cycle_count += 1
        if self.should_fail_work:
            raise RuntimeError("Test work cycle error")

    def is_healthy(self) -> bool:
        return self._error_count == 0

    def _interrupt(self) -> None:
        self.interrupt_called = True

    def _cleanup(self) -> None:
        self.cleanup_called = True

    def _handle_error(self, error: Exception) -> bool:
        return self.continue_on_error


class TestBaseRunner(unittest.TestCase):
    """Test cases for BaseRunner functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.runner = ConcreteRunner("test_runner", position=3)

    def tearDown(self):
        """Clean up after tests."""
        self.runner.stop()

    def test_initialization(self):
        """Test runner initialization."""
        self.assertEqual(self.runner.name, "test_runner")
        self.assertEqual(self.runner.position, 3)
        self.assertEqual(self.runner.state, RunnerState.STOPPED)
        self.assertEqual(self.runner.interval, 0.05)
        self.assertFalse(self.runner.run_once)

    def test_start_stop(self):
        """Test starting and stopping the runner."""
        self.assertTrue(self.runner.start())
        self.assertEqual(self.runner.state, RunnerState.RUNNING)
        self.assertTrue(self.runner.is_running)

        time.sleep(0.3)
        self.assertGreater(self.runner.work_cycle_count, 1)

        self.assertTrue(self.runner.stop())
        self.assertTrue(self.runner.interrupt_called)
        self.assertTrue(self.runner.cleanup_called)
        self.assertEqual(self.runner.state, RunnerState.STOPPED)
        self.assertFalse(self.runner.is_running)

    def test_run_once(self):
        """A one-shot runner performs a single cycle and finishes."""
        self.runner.run_once = True
        self.assertTrue(self.runner.start())
        self.runner.join(timeout=2)

        self.assertEqual(self.runner.work_cycle_count, 1)
        self.assertEqual(self.runner.state, RunnerState.FINISHED)
        self.assertTrue(self.runner.cleanup_called)

    def test_double_start(self):
        """Test starting an already running runner."""
        self.assertTrue(self.runner.start())
        self.assertFalse(self.runner.start())

    def test_initialization_failure(self):
        """Test handling of initialization failure."""
        self.runner.should_fail_init = True
        self.assertFalse(self.runner.start())
        self.assertEqual(self.runner.state, RunnerState.ERROR)

    def test_work_cycle_error_continues(self):
        """Errors are recorded and the loop keeps going by default."""
        self.runner.should_fail_work = True
        self.assertTrue(self.runner.start())
        time.sleep(0.2)

        self.assertTrue(self.runner.is_running)
        self.assertGreater(self.runner.work_cycle_count, 1)
        self.assertGreater(self.runner._error_count, 0)
        self.assertIsNotNone(self.runner._last_error)
        self.assertFalse(self.runner.is_healthy())

    def test_work_cycle_error_stops_runner(self):
        """A fatal error ends the thread in the error state."""
        self.runner.should_fail_work = True
        self.runner.continue_on_error = False
        self.assertTrue(self.runner.start())
        self.runner.join(timeout=2)

        self.assertEqual(self.runner.work_cycle_count, 1)
        self.assertEqual(self.runner.state, RunnerState.ERROR)
        self.assertTrue(self.runner.cleanup_called)

    def test_get_status(self):
        """Test status reporting."""
        self.runner.start()
        time.sleep(0.1)

        status = self.runner.get_status()
        self.assertEqual(status.name, "test_runner")
        self.assertEqual(status.position, 3)
        self.assertEqual(status.state, RunnerState.RUNNING)
        self.assertTrue(status.healthy)
        self.assertEqual(status.updates_sent, 0)
        self.assertEqual(status.error_count, 0)
        self.assertIsNone(status.last_error)
        self.assertGreater(status.uptime, 0)
        self.assertIsNotNone(status.last_activity)

    def test_stop_timeout(self):
        """Stop reports failure when the thread outlives the timeout."""

        class SlowRunner(ConcreteRunner):
            def _cleanup(self):
                time.sleep(1)
                super()._cleanup()

        slow_runner = SlowRunner("slow")
        slow_runner.start()
        time.sleep(0.1)

        start_time = time.time()
        result = slow_runner.stop(timeout=0.2)
        elapsed = time.time() - start_time

        self.assertFalse(result)
        self.assertLess(elapsed, 0.9)
        self.assertEqual(slow_runner.state, RunnerState.ERROR)
        slow_runner.join(timeout=2)


class TestRunnerStatus(unittest.TestCase):
    """Test cases for RunnerStatus dataclass."""

    def test_status_creation(self):
        """Test creating a RunnerStatus instance."""
        status = RunnerStatus(
            name="clock",
            position=0,
            state=RunnerState.RUNNING,
            healthy=True,
            updates_sent=4,
            error_count=0,
            last_error=None,
            uptime=10.5,
            last_activity=time.time(),
        )

        self.assertEqual(status.name, "clock")
        self.assertEqual(status.state.value, "running")
        self.assertEqual(status.updates_sent, 4)
        self.assertEqual(status.uptime, 10.5)


if __name__ == "__main__":
    unittest.main()
