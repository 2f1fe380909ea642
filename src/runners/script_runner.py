"""
Script Runner Module for Admiral

Shared behaviour of the runners that execute an item's shell command:
launching the process, decoding its output and posting updates.
"""

import subprocess
import threading
from typing import Optional

from statusline.channel import ScriptSpawnError, Sender
from statusline.models import ItemSpec

from .base_runner import BaseRunner

LINE_ENDINGS = "\r\n"


def clean_output(raw: bytes) -> str:
    """Decode command output and strip surrounding line endings."""
    return raw.decode("utf-8", errors="replace").strip(LINE_ENDINGS)


class ScriptRunner(BaseRunner):
    """
    Base class for runners that execute ``ItemSpec.command``.

    Only standard output is read. Exit codes and stderr are ignored; a
    failure to launch the process is fatal and is handed to the consumer
    through the sender.
    """

    def __init__(self, spec: ItemSpec, sender: Sender, interval: float = 0.0):
        super().__init__(spec.name, spec.position, interval)
        self.spec = spec
        self.sender = sender
        self._updates_sent = 0
        self._process: Optional[subprocess.Popen] = None
        self._process_lock = threading.Lock()

    @property
    def updates_sent(self) -> int:
        return self._updates_sent

    def _initialize(self) -> bool:
        if self.sender.closed:
            self.logger.error(f"Sender for '{self.name}' is already closed")
            return False
        self.logger.debug(
            f"{self.name}: {self.spec.policy.value} via {self.spec.shell}: "
            f"{self.spec.command}"
        )
        return True

    def _launch(self) -> subprocess.Popen:
        """Spawn the command with stdout piped."""
        try:
            process = subprocess.Popen(self.spec.arguments, stdout=subprocess.PIPE)
        except OSError as e:
            raise ScriptSpawnError(self.name, self.spec.command, e) from e

        with self._process_lock:
            self._process = process
        if self._stop_event.is_set():
            self._interrupt()
        return process

    def _release(self, process: subprocess.Popen) -> None:
        with self._process_lock:
            if self._process is process:
                self._process = None

    def _run_to_completion(self) -> bytes:
        """Run the command once and return everything it wrote to stdout."""
        process = self._launch()
        try:
            stdout, _ = process.communicate()
        finally:
            self._release(process)
        return stdout

    def _emit(self, message: str) -> None:
        if self._stop_event.is_set():
            return
        self.sender.send(self.position, message)
        self._updates_sent += 1

    def _interrupt(self) -> None:
        with self._process_lock:
            process = self._process
        if process is not None and process.poll() is None:
            process.kill()

    def _handle_error(self, error: Exception) -> bool:
        if isinstance(error, ScriptSpawnError):
            self.sender.fail(error)
            return False
        return True

    def _cleanup(self) -> None:
        self._interrupt()
        self.sender.close()

    def is_healthy(self) -> bool:
        """Healthy while no cycle has failed."""
        return self._error_count == 0
