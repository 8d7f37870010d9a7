"""Startup banner."""

from rich.console import Console
from rich.table import Table

from filewatcher import __version__


def render_banner(config, root=None) -> Table:
    """Build the startup table summarizing ``config`` and the detected root."""
    table = Table(title=f"file-watcher {__version__}", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("🎯 File pattern", config.pattern)
    table.add_row("🛠 Command", config.command)
    table.add_row("📂 Root-marker files", ", ".join(config.root_files))
    if root is not None:
        table.add_row("📁 Project root", str(root))
    if config.debounce:
        table.add_row("⏱ Debounce", f"{config.debounce}s")
    if config.poll:
        table.add_row("🔁 Mode", "polling")
    return table


def show(config, root=None, console=None):
    """Print the banner for ``config`` to ``console`` (stdout by default)."""
    console = console or Console()
    console.print(render_banner(config, root))
