"""
Streaming Runner Module for Admiral

Keeps an item's command running and posts every line it prints.
"""

from statusline.channel import Sender
from statusline.models import ItemSpec

from .script_runner import ScriptRunner, clean_output

DEFAULT_RESTART_DELAY = 0.01


class StreamingRunner(ScriptRunner):
    """
    Reads the command's stdout line by line, one update per line.

    When the stream ends the process is reaped and, after
    ``restart_delay`` seconds, started again.
    """

    def __init__(
        self,
        spec: ItemSpec,
        sender: Sender,
        restart_delay: float = DEFAULT_RESTART_DELAY,
        **_options,
    ):
        super().__init__(spec, sender, interval=restart_delay)
        self.restarts = 0

    def _work_cycle(self) -> None:
        process = self._launch()
        try:
            for raw in process.stdout:
                self._emit(clean_output(raw))
            process.stdout.close()
            returncode = process.wait()
        finally:
            self._release(process)

        self.restarts += 1
        self.logger.debug(
            f"{self.name} exited with status {returncode}, restarting in "
            f"{self.interval}s"
        )
