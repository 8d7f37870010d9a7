"""
Filesystem event subscription.

Wraps a watchdog observer with a recursive schedule on the project root.
Native notifications (inotify, FSEvents, ReadDirectoryChangesW) are
normalized into FsEvent values in the observer thread and handed to the
dispatcher through an unbounded, ordered EventChannel.

Key Components:
- FsEvent / EventKind: normalized change notification.
- EventChannel: single-producer/single-consumer FIFO between threads.
- ChannelEventHandler: watchdog handler feeding the channel.
- EventWatcher: owns the observer and exposes receive().
"""

import enum
import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from filewatcher.errors import ChannelClosed, EventDeliveryError, WatchSubscriptionError

log = logging.getLogger(__name__)


class EventKind(enum.Enum):
    CREATE = "create"
    MODIFY = "modify"
    REMOVE = "remove"
    OTHER = "other"


_KINDS = {
    EVENT_TYPE_CREATED: EventKind.CREATE,
    EVENT_TYPE_MODIFIED: EventKind.MODIFY,
    EVENT_TYPE_DELETED: EventKind.REMOVE,
    # A rename touches both names, like a modify of each.
    EVENT_TYPE_MOVED: EventKind.MODIFY,
}


@dataclass(frozen=True)
class FsEvent:
    """One normalized filesystem notification."""

    kind: EventKind
    paths: Tuple[str, ...]

    def __post_init__(self):
        if not self.paths:
            raise ValueError("FsEvent requires at least one path")

    @classmethod
    def from_watchdog(cls, event: FileSystemEvent) -> "FsEvent":
        kind = _KINDS.get(event.event_type, EventKind.OTHER)
        paths = [os.fsdecode(event.src_path)]
        dest_path = getattr(event, "dest_path", None)
        if event.event_type == EVENT_TYPE_MOVED and dest_path:
            paths.append(os.fsdecode(dest_path))
        return cls(kind, tuple(paths))


ChannelItem = Union[FsEvent, EventDeliveryError]

_CLOSED = object()


class EventChannel:
    """
    Unbounded FIFO carrying FsEvent values from the observer thread to
    the dispatcher. send() never blocks; items queue up while the
    consumer is busy running a command.
    """

    def __init__(self):
        self._queue = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: ChannelItem) -> bool:
        """Enqueue an item. Returns False if the channel is already closed."""
        with self._lock:
            if self._closed:
                return False
            self._queue.put(item)
            return True

    def close(self):
        """Close the channel. Items already sent are still delivered."""
        with self._lock:
            if not self._closed:
                self._closed = True
                self._queue.put(_CLOSED)

    def receive(self, timeout: Optional[float] = None) -> ChannelItem:
        """
        Return the next item in send order.

        Raises:
            queue.Empty: If nothing arrives within ``timeout``.
            ChannelClosed: Once every item sent before close() was received.
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Keep the marker so later receivers see the channel closed too.
            self._queue.put(_CLOSED)
            raise ChannelClosed("event channel closed")
        return item

    def pending(self) -> int:
        return self._queue.qsize()


class ChannelEventHandler(FileSystemEventHandler):
    """Normalizes every watchdog event and pushes it into a channel."""

    def __init__(self, channel: EventChannel):
        self.channel = channel

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            fs_event = FsEvent.from_watchdog(event)
        except Exception as e:
            self.channel.send(EventDeliveryError(f"Malformed event {event!r}: {e}"))
            return
        log.debug(f"{fs_event.kind.value}: {', '.join(fs_event.paths)}")
        self.channel.send(fs_event)


class EventWatcher:
    """
    Recursive watch on a directory tree.

    Uses the platform's native observer and falls back to polling when
    the native one cannot start (inotify watch limit, unsupported
    filesystem). ``poll=True`` skips the native observer.
    """

    def __init__(self, root_dir, poll: bool = False, poll_interval: float = 1.0):
        self.root_dir = Path(root_dir)
        self.poll = poll
        self.poll_interval = poll_interval
        self.channel = EventChannel()
        self.observer = None
        self._stopping = False

    def _start_observer(self, observer):
        handler = ChannelEventHandler(self.channel)
        observer.schedule(handler, str(self.root_dir), recursive=True)
        observer.start()
        return observer

    def start(self) -> "EventWatcher":
        """
        Establish the recursive subscription.

        Raises:
            WatchSubscriptionError: If neither the native nor the polling
                observer can watch the root.
        """
        if not self.root_dir.is_dir():
            raise WatchSubscriptionError(f"Cannot watch {self.root_dir}: not a directory")

        if not self.poll:
            try:
                self.observer = self._start_observer(Observer())
                log.debug(f"Using {type(self.observer).__name__} for {self.root_dir}")
                return self
            except OSError as e:
                log.warning(f"Native file watching unavailable ({e}); falling back to polling")

        try:
            self.observer = self._start_observer(PollingObserver(timeout=self.poll_interval))
        except OSError as e:
            raise WatchSubscriptionError(f"Cannot watch {self.root_dir}: {e}") from e
        log.debug(f"Polling {self.root_dir} every {self.poll_interval}s")
        return self

    def is_alive(self) -> bool:
        return self.observer is not None and self.observer.is_alive()

    def receive(self, timeout: Optional[float] = None) -> ChannelItem:
        """
        Return the next event or delivery error.

        Raises:
            queue.Empty: If nothing arrives within ``timeout``.
            ChannelClosed: After stop(), or once the observer has died.
        """
        try:
            return self.channel.receive(timeout=timeout)
        except queue.Empty:
            if self.observer is not None and not self._stopping and not self.observer.is_alive():
                log.error("File watcher stopped unexpectedly")
                self.channel.close()
                return self.channel.receive(timeout=timeout)
            raise

    def stop(self):
        """Stop the observer and close the channel. Safe to call twice."""
        if self._stopping:
            return
        self._stopping = True
        if self.observer is not None:
            self.observer.stop()
            if self.observer.is_alive():
                self.observer.join(timeout=5.0)
        self.channel.close()

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
