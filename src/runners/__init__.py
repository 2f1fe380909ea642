"""
Runner System for Admiral

This package implements the threaded runners that execute each status line
item's command and report its output. The architecture provides:

- One daemon thread per item
- Static, periodic and streaming execution policies
- Fatal spawn errors surfaced to the consumer
- Extensible base classes for new policies

Core Components:
    - BaseRunner: Abstract base class for all runners
    - ScriptRunner: Command launching and output handling
    - StaticRunner, PeriodicRunner, StreamingRunner: Policy implementations
    - RunnerManager: Bootstrap that wires runners to the update channel

Usage:
    from runners import RunnerManager

    runner_manager = RunnerManager(specs, channel, working_dir)
    runner_manager.start()
"""

from .base_runner import BaseRunner, RunnerState, RunnerStatus
from .periodic_runner import PeriodicRunner
from .runner_manager import RunnerManager
from .script_runner import ScriptRunner, clean_output
from .static_runner import StaticRunner
from .streaming_runner import DEFAULT_RESTART_DELAY, StreamingRunner

__all__ = [
    "BaseRunner",
    "DEFAULT_RESTART_DELAY",
    "PeriodicRunner",
    "RunnerManager",
    "RunnerState",
    "RunnerStatus",
    "ScriptRunner",
    "StaticRunner",
    "StreamingRunner",
    "clean_output",
]
