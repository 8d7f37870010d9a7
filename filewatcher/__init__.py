"""
file-watcher: run a command whenever matching files change.

Finds the project root by walking up to the nearest directory holding a
marker file, watches that tree for filesystem changes and runs the
configured command in the root each time a changed path matches the
glob pattern.
"""

__version__ = "0.3.0"
