"""
Dispatcher: the watch loop.

Pulls events from the watcher one at a time, checks their paths against
the glob pattern and runs the command in the project root on the first
match. Commands never overlap: the loop waits for each run to finish, and
events arriving meanwhile stay queued in the channel and are handled in
order afterwards.
"""

import enum
import logging
import queue
import threading
import time
from pathlib import Path, PurePath
from typing import Optional

from filewatcher.command import CommandSpec
from filewatcher.errors import ChannelClosed, CommandSpawnError, EventDeliveryError
from filewatcher.matcher import Matcher
from filewatcher.watcher import EventKind, FsEvent

log = logging.getLogger(__name__)

TRIGGER_KINDS = frozenset({EventKind.CREATE, EventKind.MODIFY, EventKind.REMOVE})


class DispatcherState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


def relativize(path, root) -> PurePath:
    """Return ``path`` relative to ``root``, or unchanged if it lies outside."""
    path = PurePath(path)
    try:
        return path.relative_to(root)
    except ValueError:
        return path


class Dispatcher:
    """
    Consumes events from ``source`` and runs ``command`` on matches.

    Attributes:
        root: Project root; relativization base and command working dir.
        matcher: Compiled glob pattern.
        command: Parsed command to run.
        source: Anything with ``receive(timeout)`` raising queue.Empty on
            timeout and ChannelClosed at the end (EventWatcher, EventChannel).
        debounce: Seconds of quiet to wait after a match before running.
            0 runs immediately for every matching event.
        poll_interval: How often the loop wakes up to check for stop().
        state: DispatcherState.IDLE or DispatcherState.RUNNING.
        runs: Number of commands started so far.
    """

    def __init__(
        self,
        root,
        matcher: Matcher,
        command: CommandSpec,
        source,
        debounce: float = 0.0,
        poll_interval: float = 0.5,
    ):
        self.root = Path(root)
        self.matcher = matcher
        self.command = command
        self.source = source
        self.debounce = debounce
        self.poll_interval = poll_interval
        self.state = DispatcherState.IDLE
        self.runs = 0
        self.stop_event = threading.Event()

    def first_match(self, event: FsEvent) -> Optional[str]:
        """Return the first path of ``event`` that should trigger a run."""
        if event.kind not in TRIGGER_KINDS:
            return None
        for path in event.paths:
            if self.matcher.is_match(relativize(path, self.root)):
                return path
        return None

    def run_command(self) -> None:
        """Run the command once and log the outcome. Never raises for command failures."""
        self.state = DispatcherState.RUNNING
        self.runs += 1
        log.info(f"▶️ Running command: {self.command}")
        try:
            outcome = self.command.execute(self.root)
        except CommandSpawnError as e:
            log.error(f"❌ Error during command run: {e}")
        else:
            if outcome.success:
                log.info("✅ Command completed successfully")
            else:
                log.error(f"❌ Command {outcome.describe()}")
        finally:
            self.state = DispatcherState.IDLE

    def handle(self, item) -> bool:
        """
        Process one item from the source.

        Returns:
            True if the item triggered a command run.
        """
        if isinstance(item, EventDeliveryError):
            log.warning(f"Watcher error: {item}")
            return False
        path = self.first_match(item)
        if path is None:
            return False
        log.info(f"🔄 Match detected: {path}")
        if self.debounce > 0:
            self._settle()
        self.run_command()
        return True

    def _settle(self) -> None:
        """Discard further events until ``debounce`` seconds pass without any."""
        coalesced = 0
        deadline = time.monotonic() + self.debounce
        while not self.stop_event.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                item = self.source.receive(timeout=remaining)
            except queue.Empty:
                break
            except ChannelClosed:
                # Closing is seen again by the main loop after this run.
                break
            if isinstance(item, EventDeliveryError):
                log.warning(f"Watcher error: {item}")
                continue
            coalesced += 1
            deadline = time.monotonic() + self.debounce
        if coalesced:
            log.debug(f"Coalesced {coalesced} events within {self.debounce}s")

    def run(self) -> int:
        """
        Process events until the source is exhausted or stop() is called.

        Returns:
            The number of commands started.
        """
        log.debug("Dispatcher loop started")
        while not self.stop_event.is_set():
            try:
                item = self.source.receive(timeout=self.poll_interval)
            except queue.Empty:
                continue
            except ChannelClosed:
                log.info("Event stream ended")
                break
            self.handle(item)
        log.debug(f"Dispatcher loop finished after {self.runs} runs")
        return self.runs

    def stop(self) -> None:
        """Ask the loop to exit at its next wake-up."""
        self.stop_event.set()
