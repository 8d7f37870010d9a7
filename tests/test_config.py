import os

import pytest
import toml
import yaml

from filewatcher import config
from filewatcher.errors import ConfigError


def test_load_config(tmp_path):
    # Create a temporary config file.
    config_data = {
        "watch": {"file_type": "**/*.scss", "command": "yarn scss"},
        "logging": {"level": "DEBUG"},
    }
    config_file = tmp_path / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(config_data, f)

    loaded_config = config.load_config(str(config_file))
    assert loaded_config["watch"]["file_type"] == "**/*.scss"
    assert loaded_config["logging"]["level"] == "DEBUG"
    assert loaded_config["__config_path__"] == str(config_file)


def test_load_yaml_config(tmp_path):
    yaml_file = tmp_path / "file-watcher.yaml"
    with open(yaml_file, "w") as f:
        yaml.dump({"watch": {"command": "make", "root_files": ["Makefile"]}}, f)

    loaded_config = config.load_config(str(yaml_file))
    assert loaded_config["watch"]["root_files"] == ["Makefile"]


def test_load_config_from_env_dir(tmp_path, monkeypatch):
    with open(tmp_path / "config.toml", "w") as f:
        toml.dump({"watch": {"command": "cargo build"}}, f)
    monkeypatch.setenv(config.ENV_CONFIG_DIR_VAR, str(tmp_path))

    assert config.load_config()["watch"]["command"] == "cargo build"


def test_load_config_default_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(config.ENV_CONFIG_DIR_VAR, raising=False)
    assert config.load_config() == {}

    with open(tmp_path / ".file-watcher.toml", "w") as f:
        toml.dump({"watch": {"file_type": "*.rs"}}, f)
    assert config.load_config()["watch"]["file_type"] == "*.rs"


def test_missing_explicit_config(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        config.load_config(str(tmp_path / "nope.toml"))


def test_invalid_toml(tmp_path):
    bad = tmp_path / "bad.toml"
    bad.write_text("[watch\ncommand = ")
    with pytest.raises(ConfigError, match="Error parsing"):
        config.load_config(str(bad))


@pytest.mark.parametrize(
    "value, expected",
    [
        ("package.json,Cargo.toml", ("package.json", "Cargo.toml")),
        (" package.json , ,composer.json ", ("package.json", "composer.json")),
        (["Makefile", " go.mod "], ("Makefile", "go.mod")),
        ("", ()),
        (None, ()),
    ],
)
def test_parse_root_files(value, expected):
    assert config.parse_root_files(value) == expected


def test_build_watch_config_defaults():
    watch_config = config.build_watch_config({}, pattern="*.scss", command="yarn scss")
    assert watch_config.root_files == ("package.json", "Cargo.toml")
    assert watch_config.debounce == 0.0
    assert watch_config.poll is False
    assert watch_config.log_level == "INFO"
    assert watch_config.log_dir is None
    assert watch_config.banner is True


def test_cli_values_override_file():
    cfg = {
        "watch": {"file_type": "*.css", "command": "make", "root_files": "Makefile", "debounce": 1.5},
        "logging": {"level": "warning"},
        "banner": {"show": False},
    }
    watch_config = config.build_watch_config(cfg, pattern="*.scss", root_files="package.json", debug=True)
    assert watch_config.pattern == "*.scss"
    assert watch_config.command == "make"
    assert watch_config.root_files == ("package.json",)
    assert watch_config.debounce == 1.5
    assert watch_config.log_level == "DEBUG"
    assert watch_config.banner is False


def test_log_dir_relative_to_config_file(tmp_path):
    cfg = {
        "__config_path__": str(tmp_path / "config.toml"),
        "watch": {"file_type": "*", "command": "true"},
        "logging": {"log_dir": "logs"},
    }
    assert config.build_watch_config(cfg).log_dir == os.path.join(str(tmp_path), "logs")


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"command": "make"}, "No file pattern"),
        ({"pattern": "*.c"}, "No command"),
        ({"pattern": "*.c", "command": "make", "root_files": " , "}, "root marker"),
        ({"pattern": "*.c", "command": "make", "debounce": -1}, "negative"),
        ({"pattern": "*.c", "command": "make", "debounce": "soon"}, "Invalid debounce"),
    ],
)
def test_build_watch_config_errors(kwargs, message):
    with pytest.raises(ConfigError, match=message):
        config.build_watch_config({}, **kwargs)


def test_watch_config_is_immutable():
    watch_config = config.build_watch_config({}, pattern="*.scss", command="yarn scss")
    with pytest.raises(AttributeError):
        watch_config.pattern = "*.css"


def test_config_path_is_a_directory(tmp_path):
    with pytest.raises(ConfigError, match="Error reading"):
        config.load_config(str(tmp_path))


def test_config_not_utf8(tmp_path):
    bad = tmp_path / "config.toml"
    bad.write_bytes(b"\xff\xfe[watch]")
    with pytest.raises(ConfigError, match="Error parsing"):
        config.load_config(str(bad))
