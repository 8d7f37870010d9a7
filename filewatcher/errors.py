"""
Exception hierarchy for file-watcher.

ConfigError, RootNotFound and WatchSubscriptionError are fatal and abort
the process before the watch loop starts. The remaining errors are
confined to the single event or command they arose from.
"""


class FileWatcherError(Exception):
    """Base class for all file-watcher errors."""


class ConfigError(FileWatcherError):
    """Invalid configuration: bad config file, glob pattern or command."""


class InvalidPattern(ConfigError):
    """Raised when a glob pattern cannot be compiled."""

    def __init__(self, pattern, reason):
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class EmptyCommand(ConfigError):
    """Raised when a command string contains no words."""

    def __init__(self):
        super().__init__("Empty command provided")


class CommandParseError(ConfigError):
    """Raised when a command string has unbalanced quoting or escapes."""

    def __init__(self, command, reason):
        super().__init__(f"Could not parse command '{command}': {reason}")
        self.command = command
        self.reason = reason


class RootNotFound(FileWatcherError):
    """Raised when no ancestor directory contains a marker file."""

    def __init__(self, start_dir, marker_names):
        super().__init__(
            f"Could not locate project root from {start_dir}. "
            f"Searched for files: {list(marker_names)}"
        )
        self.start_dir = start_dir
        self.marker_names = tuple(marker_names)


class WatchSubscriptionError(FileWatcherError):
    """Raised when the filesystem watch cannot be established."""


class EventDeliveryError(FileWatcherError):
    """A single filesystem notification could not be delivered or normalized."""


class CommandSpawnError(FileWatcherError):
    """Raised when the command process cannot be started."""

    def __init__(self, program, cause):
        super().__init__(f"Failed to start '{program}': {cause}")
        self.program = program
        self.cause = cause


class ChannelClosed(FileWatcherError):
    """Raised by a receiver once the event source is exhausted."""
