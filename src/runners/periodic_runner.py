"""
Periodic Runner Module for Admiral

Reruns an item's command on a fixed interval.
"""

from statusline.channel import Sender
from statusline.models import ItemSpec

from .script_runner import ScriptRunner, clean_output


class PeriodicRunner(ScriptRunner):
    """
    Runs the command to completion, posts the whole output as one update,
    then waits ``spec.interval`` seconds before the next run.

    A slow command delays only this item's next update.
    """

    def __init__(self, spec: ItemSpec, sender: Sender, **_options):
        super().__init__(spec, sender, interval=spec.interval)

    def _work_cycle(self) -> None:
        self._emit(clean_output(self._run_to_completion()))
