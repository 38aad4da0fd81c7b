"""Config 模块测试。

测试 SHELLRUN_* 环境变量解析。
"""

from __future__ import annotations

import os
from unittest import mock

import pytest

from shellrun import ProcessRunner
from shellrun.config import (
    DEFAULT_KILL_TIMEOUT,
    DEFAULT_MAX_LINE_SIZE,
    DEFAULT_TERM_TIMEOUT,
    Settings,
    get_settings,
    load_settings,
    reload_settings,
)

SHELLRUN_VARS = (
    "SHELLRUN_MAX_LINE_SIZE",
    "SHELLRUN_TERM_TIMEOUT",
    "SHELLRUN_KILL_TIMEOUT",
    "SHELLRUN_LOG_DEBUG",
    "SHELLRUN_LOG_FILE",
)


@pytest.fixture
def clean_env():
    """不含任何 SHELLRUN_* 变量的环境。"""
    env = {k: v for k, v in os.environ.items() if k not in SHELLRUN_VARS}
    with mock.patch.dict(os.environ, env, clear=True):
        yield


class TestDefaults:
    """测试未设置任何变量时的默认值。"""

    def test_defaults(self, clean_env):
        settings = load_settings()

        assert settings.max_line_size == DEFAULT_MAX_LINE_SIZE == 65536
        assert settings.term_timeout == DEFAULT_TERM_TIMEOUT
        assert settings.kill_timeout == DEFAULT_KILL_TIMEOUT
        assert settings.log_debug is False
        assert settings.log_file is None


class TestMaxLineSize:
    """测试 SHELLRUN_MAX_LINE_SIZE 解析。"""

    def test_valid(self, clean_env):
        with mock.patch.dict(os.environ, {"SHELLRUN_MAX_LINE_SIZE": "1024"}):
            assert load_settings().max_line_size == 1024

    @pytest.mark.parametrize("value", ["0", "-5", "abc", ""])
    def test_invalid_falls_back(self, clean_env, value: str):
        with mock.patch.dict(os.environ, {"SHELLRUN_MAX_LINE_SIZE": value}):
            assert load_settings().max_line_size == DEFAULT_MAX_LINE_SIZE


class TestTimeouts:
    """测试清理超时解析。"""

    def test_valid(self, clean_env):
        with mock.patch.dict(
            os.environ,
            {"SHELLRUN_TERM_TIMEOUT": "5", "SHELLRUN_KILL_TIMEOUT": "0.5"},
        ):
            settings = load_settings()

        assert settings.term_timeout == 5.0
        assert settings.kill_timeout == 0.5

    def test_clamped(self, clean_env):
        with mock.patch.dict(
            os.environ,
            {"SHELLRUN_TERM_TIMEOUT": "1000", "SHELLRUN_KILL_TIMEOUT": "0"},
        ):
            settings = load_settings()

        assert settings.term_timeout == 60.0
        assert settings.kill_timeout == 0.1

    def test_invalid_falls_back(self, clean_env):
        with mock.patch.dict(os.environ, {"SHELLRUN_TERM_TIMEOUT": "soon"}):
            assert load_settings().term_timeout == DEFAULT_TERM_TIMEOUT


class TestLogDebug:
    """测试调试日志配置。"""

    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", "on"])
    def test_truthy_values(self, clean_env, value: str):
        with mock.patch.dict(os.environ, {"SHELLRUN_LOG_DEBUG": value}):
            settings = load_settings()

        assert settings.log_debug is True
        assert settings.log_file is not None
        assert settings.log_file.endswith(".log")

    @pytest.mark.parametrize("value", ["false", "0", "no", "off", ""])
    def test_falsy_values(self, clean_env, value: str):
        with mock.patch.dict(os.environ, {"SHELLRUN_LOG_DEBUG": value}):
            settings = load_settings()

        assert settings.log_debug is False
        assert settings.log_file is None

    def test_explicit_log_file(self, clean_env, tmp_path):
        log_file = str(tmp_path / "run.log")
        with mock.patch.dict(
            os.environ,
            {"SHELLRUN_LOG_DEBUG": "1", "SHELLRUN_LOG_FILE": log_file},
        ):
            assert load_settings().log_file == log_file


class TestGlobalSettings:
    """测试延迟加载的全局实例。"""

    def test_get_settings_cached(self, clean_env):
        reload_settings()

        assert get_settings() is get_settings()

    def test_reload_picks_up_changes(self, clean_env):
        with mock.patch.dict(os.environ, {"SHELLRUN_MAX_LINE_SIZE": "123"}):
            assert reload_settings().max_line_size == 123
        assert reload_settings().max_line_size == DEFAULT_MAX_LINE_SIZE

    def test_runner_from_settings(self):
        settings = Settings(max_line_size=10, term_timeout=0.2, kill_timeout=0.1)

        runner = ProcessRunner.from_settings(settings)

        assert runner.max_line_size == 10
        assert runner.term_timeout == 0.2
        assert runner.kill_timeout == 0.1

    def test_repr(self):
        assert "max_line_size=65536" in repr(Settings())
