"""
Update Channel

Unbounded many-producer, single-consumer conduit carrying updates from the
script runners to the aggregator. Each runner owns a ``Sender``; the consumer
sees end-of-stream once every sender has been closed and the queue drained.
"""

import logging
import queue
import threading
from typing import Optional

from .models import Update


class ScriptSpawnError(RuntimeError):
    """Raised in the consumer when a runner could not launch its command."""

    def __init__(self, name: str, command: str, cause: BaseException):
        super().__init__(f"Failed to run {command} for {name}: {cause}")
        self.name = name
        self.command = command
        self.cause = cause


class _EndOfStream:
    """Marker queued when the last sender closes."""


class _Failure:
    """Fatal error delivered by a sender."""

    def __init__(self, error: BaseException):
        self.error = error


class Sender:
    """Producer handle for an ``UpdateChannel``."""

    def __init__(self, channel: "UpdateChannel"):
        self._channel = channel
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, position: int, message: str) -> None:
        """Post an update. Never blocks."""
        if self._closed:
            raise RuntimeError("Cannot send on a closed sender")
        self._channel._queue.put(Update(position=position, message=message))

    def fail(self, error: BaseException) -> None:
        """Hand a fatal error to the consumer."""
        self._channel._queue.put(_Failure(error))

    def close(self) -> None:
        """Release this handle. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._channel._release()


class UpdateChannel:
    """Fan-in queue of ``Update`` objects."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._queue: "queue.SimpleQueue" = queue.SimpleQueue()
        self._count_lock = threading.Lock()
        self._open_senders = 0
        self._issued = 0
        self._finished = False

    def sender(self) -> Sender:
        """Create a new producer handle."""
        with self._count_lock:
            if self._finished:
                raise RuntimeError("Channel already reached end-of-stream")
            self._open_senders += 1
            self._issued += 1
        return Sender(self)

    @property
    def open_senders(self) -> int:
        with self._count_lock:
            return self._open_senders

    def close(self) -> None:
        """
        Mark the channel finished if no sender was ever issued.

        Lets a consumer of an empty configuration terminate.
        """
        with self._count_lock:
            if self._issued or self._finished:
                return
            self._finished = True
        self._queue.put(_EndOfStream())

    def _release(self) -> None:
        with self._count_lock:
            self._open_senders -= 1
            if self._open_senders > 0:
                return
            self._finished = True
        self.logger.debug("All senders closed")
        self._queue.put(_EndOfStream())

    def receive(self, timeout: Optional[float] = None) -> Optional[Update]:
        """
        Wait for the next update.

        Args:
            timeout: Seconds to wait, or None to block indefinitely

        Returns:
            The next Update, or None at end-of-stream

        Raises:
            queue.Empty: If the timeout expires with nothing pending
            Exception: The error a sender delivered with ``fail``
        """
        return self._unwrap(self._queue.get(timeout=timeout))

    def receive_nowait(self) -> Optional[Update]:
        """Return the next pending update, or None if nothing is pending."""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        if isinstance(item, _EndOfStream):
            # Put the marker back so the blocking receive still sees it.
            self._queue.put(item)
            return None
        return self._unwrap(item)

    def _unwrap(self, item) -> Optional[Update]:
        if isinstance(item, _EndOfStream):
            return None
        if isinstance(item, _Failure):
            raise item.error
        return item
