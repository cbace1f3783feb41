"""Tests for configuration loading and validation."""

import pytest

from fusebill.config import (
    Config,
    ConfigValidationError,
    FusebillConfig,
    create_default_config,
    load_config,
)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config.fusebill.mode == "staging"
        assert config.fusebill.token == ""
        assert config.fusebill.timeout == 5

    def test_reads_yaml_values(self, config_file):
        config = load_config(config_file)

        assert config.fusebill.mode == "production"
        assert config.fusebill.token == "file-token"
        assert config.fusebill.username == "billing@example.com"
        assert config.fusebill.password == "file-password"
        assert config.fusebill.timeout == 10

    def test_environment_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("FUSEBILL_MODE", "staging")
        monkeypatch.setenv("FUSEBILL_TOKEN", "env-token")
        monkeypatch.setenv("FUSEBILL_PASSWORD", "env-password")
        monkeypatch.setenv("FUSEBILL_TIMEOUT", "2.5")

        config = load_config(config_file)

        assert config.fusebill.mode == "staging"
        assert config.fusebill.token == "env-token"
        assert config.fusebill.username == "billing@example.com"
        assert config.fusebill.password == "env-password"
        assert config.fusebill.timeout == 2.5

    def test_invalid_timeout_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FUSEBILL_TIMEOUT", "soon")

        with pytest.raises(ConfigValidationError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.fusebill.mode == "staging"


class TestValidate:
    """Tests for Config.validate."""

    def test_valid_config(self):
        config = Config(fusebill=FusebillConfig(mode="production", token="tok"))
        assert config.validate() == []

    def test_unknown_mode(self):
        config = Config(fusebill=FusebillConfig(mode="sandbox", token="tok"))
        errors = config.validate()
        assert len(errors) == 1
        assert "fusebill.mode" in errors[0]

    def test_non_positive_timeout(self):
        config = Config(fusebill=FusebillConfig(token="tok", timeout=0))
        assert "fusebill.timeout must be positive" in config.validate()

    def test_requires_some_credentials(self):
        config = Config()
        assert config.validate() == [
            "fusebill.token or fusebill.username/password is required"
        ]

    def test_login_alone_is_enough(self):
        config = Config(fusebill=FusebillConfig(username="u", password="p"))
        assert config.validate() == []
        assert config.fusebill.has_login() is True
        assert config.fusebill.has_token() is False

    def test_repr_hides_secrets(self):
        text = repr(FusebillConfig(token="tok-secret", password="pw-secret"))
        assert "tok-secret" not in text
        assert "pw-secret" not in text


def test_default_config_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    create_default_config(path)

    config = load_config(path)

    assert config.fusebill.mode == "staging"
    assert config.fusebill.timeout == 5
    assert config.fusebill.token == ""
