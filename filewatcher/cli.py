import logging
import os

import click

from filewatcher import __version__, banner
from filewatcher import config as config_module
from filewatcher.command import CommandSpec
from filewatcher.dispatcher import Dispatcher
from filewatcher.errors import ConfigError, FileWatcherError
from filewatcher.logger import setup_logger
from filewatcher.matcher import compile_pattern
from filewatcher.root import resolve_project_root
from filewatcher.watcher import EventWatcher

log = logging.getLogger(__name__)


def run(watch_config, start_dir=None):
    """
    Resolve the project root, start watching and dispatch until the event
    stream ends or the user interrupts.

    Returns:
        int: Process exit status. 1 if startup failed, 0 otherwise.
    """
    log.info("🚀 file-watcher started…")
    log.info(f"🎯 File pattern: {watch_config.pattern}")
    log.info(f"🛠 Command: {watch_config.command}")
    log.info(f"📂 Root-marker files: {','.join(watch_config.root_files)}")

    try:
        command = CommandSpec.parse(watch_config.command)
        root = resolve_project_root(start_dir or os.getcwd(), watch_config.root_files)
        log.info(f"📁 Project root detected at: {root}")
        matcher = compile_pattern(watch_config.pattern)
        if watch_config.banner:
            banner.show(watch_config, root)
        watcher = EventWatcher(root, poll=watch_config.poll).start()
    except FileWatcherError as e:
        log.error(f"❌ {e}")
        return 1

    log.info("👀 Watching files under project root…")
    dispatcher = Dispatcher(root, matcher, command, watcher, debounce=watch_config.debounce)
    try:
        dispatcher.run()
    except KeyboardInterrupt:
        log.info("Stopping watcher...")
    finally:
        watcher.stop()
    return 0


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--file-type", "pattern", default=None, help='Glob pattern to watch, e.g. "_*.scss" or "src/**/*.ts".')
@click.option("--command", "command", default=None, help='Command to run on change, e.g. "yarn scss".')
@click.option(
    "--root-files",
    default=None,
    help="Comma-separated marker files identifying the project root. [default: package.json,Cargo.toml]",
)
@click.option("--config", "-c", "config_path", default=None, help="Path to a TOML or YAML configuration file.")
@click.option("--debounce", type=float, default=None, help="Seconds of quiet to wait after a match before running.")
@click.option("--poll", is_flag=True, help="Use polling instead of native filesystem notifications.")
@click.option("--log-dir", default=None, help="Also write logs to file-watcher.log in this directory.")
@click.option("--no-banner", is_flag=True, help="Do not print the startup banner.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="file-watcher")
@click.pass_context
def main(ctx, pattern, command, root_files, config_path, debounce, poll, log_dir, no_banner, debug):
    """
    file-watcher: run a command in the project root whenever files
    matching a glob pattern change.
    """
    try:
        cfg = config_module.load_config(config_path)
        watch_config = config_module.build_watch_config(
            cfg,
            pattern=pattern,
            command=command,
            root_files=root_files,
            debounce=debounce,
            poll=True if poll else None,
            log_dir=log_dir,
            debug=debug,
            banner=False if no_banner else None,
        )
    except ConfigError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    setup_logger(log_dir=watch_config.log_dir, level=watch_config.log_level)
    ctx.exit(run(watch_config))


if __name__ == "__main__":
    main()
