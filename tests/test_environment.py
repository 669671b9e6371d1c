"""Tests for the template environment."""

import logging
from pathlib import Path

from minelaunch import __version__
from minelaunch.core.environment import Environment, default_environment


def test_get_set_remove():
    env = Environment()
    assert env.get("x") is None
    env.set("x", "1")
    assert env.get("x") == "1"
    assert "x" in env
    env.remove("x")
    assert env.get("x") is None
    env.remove("x")


def test_resolve_substitutes_every_occurrence():
    env = Environment({"a": "A", "b": "B"})
    assert env.resolve("${a}-${b}-${a}") == "A-B-A"


def test_resolve_without_placeholders_is_unchanged():
    env = Environment({"a": "A"})
    text = "-Xmx2G --demo $a {a} $"
    assert env.resolve(text) == text
    assert env.resolve(env.resolve(text)) == text


def test_unset_key_resolves_empty_with_one_warning(caplog):
    env = Environment()
    with caplog.at_level(logging.WARNING, logger="minelaunch.core.environment"):
        assert env.resolve("${x}") == ""
    assert len(caplog.records) == 1
    assert "x" in caplog.records[0].getMessage()


def test_partial_resolution():
    env = Environment({"natives_directory": "/tmp/natives"})
    assert env.resolve("-Djava.library.path=${natives_directory} -cp ${classpath}") == \
        "-Djava.library.path=/tmp/natives -cp "


def test_copy_is_independent():
    env = Environment({"a": "1"})
    other = env.copy()
    other.set("a", "2")
    assert env.get("a") == "1"


def test_default_environment(tmp_path: Path):
    env = default_environment(tmp_path, "Steve")
    assert env.get("launcher_name") == "minelaunch"
    assert env.get("launcher_version") == __version__
    assert env.get("game_directory") == str(tmp_path)
    assert env.get("auth_player_name") == "Steve"
    assert default_environment(tmp_path).get("auth_player_name") is None
