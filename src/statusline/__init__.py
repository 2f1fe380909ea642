"""
Status Line Package

Fan-in channel and aggregator that merge item outputs into one line.

Core Components:
    - ItemSpec, Policy, Update: Shared data types
    - UpdateChannel, Sender: Many-producer, single-consumer update queue
    - Aggregator, LineState: Line state owner and print loop
"""

from .aggregator import DEFAULT_SETTLE_DELAY, Aggregator, LineState
from .channel import ScriptSpawnError, Sender, UpdateChannel
from .models import ItemSpec, Policy, Update

__all__ = [
    "Aggregator",
    "DEFAULT_SETTLE_DELAY",
    "ItemSpec",
    "LineState",
    "Policy",
    "ScriptSpawnError",
    "Sender",
    "Update",
    "UpdateChannel",
]
