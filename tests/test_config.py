"""
Tests for handler configuration.
"""

import json

import pytest

from notification_handler.exceptions import ConfigurationError
from notification_handler.models.config import (
    ConsoleConfig,
    EventIdConfig,
    HandlerConfig,
    create_default_config,
    load_config,
    save_config,
)


class TestHandlerConfig:
    """Test configuration defaults."""

    def test_defaults(self):
        config = HandlerConfig.default()
        assert config.default_ids.generic == "notification.Event"
        assert config.default_ids.error == "notification.Error"
        assert config.default_ids.exception == "notification.Exception"
        assert config.console.stderr is False
        assert config.console.show_data is True
        assert config.chain_global_hooks is True


class TestLoadSave:
    """Test reading and writing configuration files."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "handler.json"
        config = HandlerConfig(
            default_ids=EventIdConfig(generic="app.Event"),
            console=ConsoleConfig(stderr=True),
            chain_global_hooks=False,
        )

        save_config(config, path)

        assert load_config(path) == config

    def test_partial_file(self, tmp_path):
        path = tmp_path / "handler.json"
        path.write_text(json.dumps({"console": {"show_data": False}}))

        config = load_config(path)

        assert config.console.show_data is False
        assert config.console.stderr is False
        assert config.default_ids == EventIdConfig()

    def test_create_default_config(self, tmp_path):
        path = tmp_path / "handler.json"
        create_default_config(path)
        assert load_config(path) == HandlerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "handler.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_unknown_option(self, tmp_path):
        path = tmp_path / "handler.json"
        path.write_text(json.dumps({"console": {"colour": "red"}}))
        with pytest.raises(ConfigurationError, match="colour"):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "handler.json"
        path.write_text(json.dumps({"default_ids": "app"}))
        with pytest.raises(ConfigurationError):
            load_config(path)
