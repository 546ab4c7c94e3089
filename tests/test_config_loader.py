"""Tests for settings loading and the process-wide debug level."""

from pathlib import Path

import pytest

from aws_core.config_loader import (
    ConfigError,
    get_debug_level,
    load_settings,
    set_debug_level,
    settings_from_env,
)
from aws_core.models import USER_AGENT


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "aws-core.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadSettings:
    def test_full_file(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "region: eu-west-1\nmax_attempts: 5\ndebug_level: 1\n"
            "user_agent: tool/2.0\ntimeout: 7.5\n",
        )

        settings = load_settings(path)

        assert settings.region == "eu-west-1"
        assert settings.max_attempts == 5
        assert settings.debug_level == 1
        assert settings.user_agent == "tool/2.0"
        assert settings.timeout == 7.5

    def test_defaults(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)

        settings = load_settings(_write(tmp_path, ""))

        assert settings.region == "us-east-1"
        assert settings.max_attempts == 3
        assert settings.debug_level is None
        assert settings.user_agent == USER_AGENT

    def test_env_substitution(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TEST_REGION", "ap-southeast-2")

        settings = load_settings(_write(tmp_path, "region: ${TEST_REGION}\n"))

        assert settings.region == "ap-southeast-2"

    def test_unset_env_var(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("TEST_UNSET_VAR", raising=False)

        with pytest.raises(ConfigError, match="TEST_UNSET_VAR"):
            load_settings(_write(tmp_path, "region: ${TEST_UNSET_VAR}\n"))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(_write(tmp_path, "region: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(_write(tmp_path, "- a\n- b\n"))

    def test_zero_attempts_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid config structure"):
            load_settings(_write(tmp_path, "max_attempts: 0\n"))

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_settings(_write(tmp_path, "retries: 4\n"))


class TestSettingsFromEnv:
    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")
        monkeypatch.setenv("AWS_CORE_MAX_ATTEMPTS", "4")
        monkeypatch.setenv("AWS_CORE_DEBUG_LEVEL", "2")

        settings = settings_from_env()

        assert settings.region == "us-west-2"
        assert settings.max_attempts == 4
        assert settings.debug_level == 2

    def test_invalid_value(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_CORE_MAX_ATTEMPTS", "many")

        with pytest.raises(ConfigError, match="environment"):
            settings_from_env()


class TestDebugLevel:
    def test_default_zero(self) -> None:
        assert get_debug_level() == 0

    def test_set_and_reset(self) -> None:
        set_debug_level(3)
        try:
            assert get_debug_level() == 3
        finally:
            set_debug_level(0)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            set_debug_level(-1)
