import logging

import pytest

from servman.utils import logging as logging_utils


@pytest.fixture(autouse=True)
def _restore_levels():
    root = logging.getLogger()
    transport = logging.getLogger("urllib3")
    levels = root.level, transport.level
    yield
    root.setLevel(levels[0])
    transport.setLevel(levels[1])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("warning", logging.WARNING), (" 10 ", 10), (logging.ERROR, logging.ERROR), ("nonsense", logging.INFO), ("", logging.INFO)],
)
def test_parse_level(raw, expected):
    assert logging_utils.parse_level(raw) == expected


def test_configure_root_uses_default_without_env():
    assert logging_utils.configure_root("warning", environ={}) == logging.WARNING
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_explicit_env_level_beats_debug_flag():
    env = {"SERVMAN_LOG_LEVEL": "error", "SERVMAN_DEBUG": "1"}

    assert logging_utils.configure_root(logging.DEBUG, environ=env) == logging.ERROR
    assert not logging_utils.env_forces_debug(env)


def test_debug_flag_overrides_settings_preference():
    env = {"SERVMAN_DEBUG_LOGGING": "yes"}

    assert logging_utils.env_forces_debug(env)
    assert logging_utils.apply_debug_preference(False, environ=env) == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.DEBUG


def test_debug_preference_without_env():
    assert logging_utils.apply_debug_preference(True, environ={}) == logging.DEBUG
    assert logging_utils.apply_debug_preference(False, environ={}) == logging.INFO
    assert logging_utils.resolve_env_level({}) is None
