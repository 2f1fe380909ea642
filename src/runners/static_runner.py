"""
Static Runner Module for Admiral

Runs an item's command once and reports its output.
"""

from statusline.channel import Sender
from statusline.models import ItemSpec

from .script_runner import ScriptRunner, clean_output


class StaticRunner(ScriptRunner):
    """Executes the command a single time, then the thread ends."""

    def __init__(self, spec: ItemSpec, sender: Sender, **_options):
        super().__init__(spec, sender)
        self.run_once = True

    def _work_cycle(self) -> None:
        self._emit(clean_output(self._run_to_completion()))
