import os
from pathlib import PurePath

import pytest

from filewatcher.errors import ConfigError, InvalidPattern
from filewatcher.matcher import compile_pattern

posix_only = pytest.mark.skipif(os.sep != "/", reason="POSIX path conventions")


@pytest.mark.parametrize(
    "pattern, path, expected",
    [
        ("*.scss", "app.scss", True),
        ("*.scss", "src/app.scss", False),
        ("**/*.scss", "src/app.scss", True),
        ("**/*.scss", "app.scss", True),
        ("**/*.scss", "a/b/c/app.scss", True),
        ("_*.scss", "_vars.scss", True),
        ("_*.scss", "vars.scss", False),
        ("src/**/*.ts", "src/index.ts", True),
        ("src/**/*.ts", "src/a/b/index.ts", True),
        ("src/**/*.ts", "lib/index.ts", False),
        ("src/**", "src/a/b.txt", True),
        ("**", "anything/at/all.txt", True),
        ("file?.txt", "file1.txt", True),
        ("file?.txt", "file10.txt", False),
        ("?", "/", False),
        ("[abc].py", "b.py", True),
        ("[abc].py", "d.py", False),
        ("[a-c].py", "c.py", True),
        ("[!a-c].py", "d.py", True),
        ("[!a-c].py", "a.py", False),
        ("[^a-c].py", "a.py", False),
        ("a[!x]b", "a/b", False),
        ("*.{js,ts}", "main.ts", True),
        ("*.{js,ts}", "main.js", True),
        ("*.{js,ts}", "main.py", False),
        ("src/*.ts", "src/index.ts", True),
        ("src/*.ts", "src/deep/index.ts", False),
        ("a**b", "axxb", True),
        ("a**b", "a/b", False),
        ("*.scss", "app.scss.bak", False),
    ],
)
@posix_only
def test_is_match(pattern, path, expected):
    assert compile_pattern(pattern).is_match(path) is expected


@pytest.mark.parametrize(
    "pattern, path, expected",
    [
        ("{**/*.scss,*.css}", "a/b/c.scss", True),
        ("{**/*.scss,*.css}", "c.scss", True),
        ("{**/*.scss,*.css}", "main.css", True),
        ("{**/*.scss,*.css}", "a/main.css", False),
        ("{*.css,**/*.scss}", "a/b/c.scss", True),
        ("{src/**,lib/*.py}", "src/a/b.txt", True),
        ("{src/**,lib/*.py}", "lib/x/y.py", False),
        ("{**,x}", "any/where.txt", True),
        ("{a**b,c}", "a/b", False),
    ],
)
@posix_only
def test_globstar_inside_alternation(pattern, path, expected):
    assert compile_pattern(pattern).is_match(path) is expected


@posix_only
def test_escaped_metacharacters_are_literal():
    matcher = compile_pattern(r"\*.txt")
    assert matcher.is_match("*.txt")
    assert not matcher.is_match("a.txt")


@posix_only
def test_case_sensitive_on_posix():
    assert not compile_pattern("*.SCSS").is_match("app.scss")


def test_accepts_path_objects():
    assert compile_pattern("**/*.py").is_match(PurePath("pkg", "mod.py"))


def test_absolute_paths_match_with_globstar():
    path = os.path.join(os.path.abspath(os.sep), "elsewhere", "style.scss")
    assert compile_pattern("**/*.scss").is_match(path)


@pytest.mark.parametrize("pattern", ["[abc", "*.{js,ts", "{a,{b,c}}", "trailing\\", "[z-a]"])
@posix_only
def test_invalid_patterns(pattern):
    with pytest.raises(InvalidPattern) as excinfo:
        compile_pattern(pattern)
    assert excinfo.value.pattern == pattern
    assert isinstance(excinfo.value, ConfigError)


def test_matching_is_deterministic():
    matcher = compile_pattern("**/*.scss")
    results = {matcher.is_match("src/app.scss") for _ in range(10)}
    assert results == {True}
    assert compile_pattern("**/*.scss").is_match("src/app.scss") == matcher.is_match("src/app.scss")
