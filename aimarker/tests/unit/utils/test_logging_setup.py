import logging

import pytest

from aimarker.utils import logging as log_setup


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


@pytest.mark.parametrize(
    "env,expected",
    [
        ({}, logging.WARNING),
        ({"AIMARKER_DEBUG": "yes"}, logging.DEBUG),
        ({"AIMARKER_LOG_LEVEL": "error", "AIMARKER_DEBUG": "1"}, logging.ERROR),
        ({"AIMARKER_LOG_LEVEL": "15"}, 15),
        ({"AIMARKER_LOG_LEVEL": "chatty"}, logging.INFO),
    ],
)
def test_configure_root_honours_environment(restore_root_level, env, expected):
    effective = log_setup.configure_root("warning", env=env)

    assert effective == expected
    assert restore_root_level.level == expected


def test_module_exposes_only_root_setup():
    assert not hasattr(log_setup, "level_name")
    assert not hasattr(log_setup, "resolve_env_level")
