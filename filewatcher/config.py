import os
from dataclasses import dataclass
from typing import Optional, Tuple

import toml
import yaml

from filewatcher.errors import ConfigError

DEFAULT_CONFIG_PATH = "./.file-watcher.toml"
ENV_CONFIG_DIR_VAR = "FILEWATCHER_CONFIG_DIR"
DEFAULT_ROOT_FILES = ("package.json", "Cargo.toml")


@dataclass(frozen=True)
class WatchConfig:
    """Settings for one watcher run. Built once at startup, never mutated."""

    pattern: str
    command: str
    root_files: Tuple[str, ...] = DEFAULT_ROOT_FILES
    debounce: float = 0.0
    poll: bool = False
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    banner: bool = True


def parse_root_files(value) -> Tuple[str, ...]:
    """
    Normalize root marker names from a comma separated string or a list.

    Entries are stripped and empty ones dropped; order is kept.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    return tuple(item.strip() for item in items if item.strip())


def _read_file(config_path):
    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.endswith((".yaml", ".yml")):
            return yaml.safe_load(f) or {}
        return toml.load(f)


def load_config(cli_config_path=None):
    """
    Load configuration from a TOML or YAML file.

    Precedence:
      1. cli_config_path if provided.
      2. Environment variable FILEWATCHER_CONFIG_DIR (looking for config.toml).
      3. ./.file-watcher.toml, only if it exists.

    Returns:
        dict: The configuration settings, empty if no file applies.

    Raises:
        ConfigError: If a requested file is missing or cannot be parsed.
    """
    if cli_config_path:
        config_path = cli_config_path
    elif os.environ.get(ENV_CONFIG_DIR_VAR):
        config_path = os.path.join(os.environ[ENV_CONFIG_DIR_VAR], "config.toml")
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH
    else:
        return {}

    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        config_data = _read_file(config_path)
    except (toml.TomlDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error parsing configuration file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading configuration file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    config_data["__config_path__"] = config_path
    return config_data


def _section(cfg, name):
    section = cfg.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Configuration section [{name}] must be a table")
    return section


def build_watch_config(
    cfg,
    pattern=None,
    command=None,
    root_files=None,
    debounce=None,
    poll=None,
    log_dir=None,
    debug=False,
    banner=None,
) -> WatchConfig:
    """
    Merge command line values over the loaded configuration file.

    Keyword arguments left as None fall back to the file, then to the
    defaults.

    Raises:
        ConfigError: If no pattern or command is given, no root marker
            remains, or debounce is negative.
    """
    watch = _section(cfg, "watch")
    logging_cfg = _section(cfg, "logging")
    banner_cfg = _section(cfg, "banner")

    pattern = pattern if pattern is not None else watch.get("file_type")
    command = command if command is not None else watch.get("command")
    if not pattern:
        raise ConfigError("No file pattern given (--file-type or watch.file_type)")
    if command is None:
        raise ConfigError("No command given (--command or watch.command)")

    if root_files is None:
        root_files = watch.get("root_files", DEFAULT_ROOT_FILES)
    markers = parse_root_files(root_files)
    if not markers:
        raise ConfigError("At least one root marker file name is required")

    if debounce is None:
        debounce = watch.get("debounce", 0.0)
    try:
        debounce = float(debounce)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid debounce value: {debounce!r}") from e
    if debounce < 0:
        raise ConfigError("Debounce must not be negative")

    log_level = "DEBUG" if debug else str(logging_cfg.get("level", "INFO")).upper()
    if log_dir is None and logging_cfg.get("log_dir"):
        # Relative log dirs in a config file are relative to that file.
        config_dir = os.path.dirname(cfg.get("__config_path__", ""))
        log_dir = os.path.join(config_dir, logging_cfg["log_dir"])

    return WatchConfig(
        pattern=str(pattern),
        command=str(command),
        root_files=markers,
        debounce=debounce,
        poll=bool(poll) if poll is not None else bool(watch.get("poll", False)),
        log_level=log_level,
        log_dir=log_dir,
        banner=banner if banner is not None else bool(banner_cfg.get("show", True)),
    )
