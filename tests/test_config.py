#!/usr/bin/env python3
"""
Tests for configuration management module.
"""

import json
import pytest
from unittest.mock import patch

from pydantic import ValidationError

from mcgraph.config import DEFAULTS, Config, ConfigManager, get_config, get_config_manager


# ============================================================================
# Config Model Tests
# ============================================================================

class TestConfig:
    """Tests for Config model."""

    def test_create_empty_config(self):
        """Test creating config with all defaults."""
        cfg = Config()
        assert cfg.llm is None
        assert cfg.typing_speed is None
        assert cfg.request_timeout is None
        assert cfg.model_path is None

    def test_create_config_with_values(self):
        """Test creating config with specific values."""
        cfg = Config(llm="claude", typing_speed=8, request_timeout=30)
        assert cfg.llm == "claude"
        assert cfg.typing_speed == 8
        assert cfg.request_timeout == 30.0

    def test_get_falls_back_to_defaults(self):
        """Unset values come from DEFAULTS."""
        cfg = Config()
        assert cfg.get("llm") == DEFAULTS["llm"] == "openai"
        assert cfg.get("typing_speed") == 4
        assert cfg.get("typing_interval_ms") == 20
        assert cfg.get("thinking_interval_ms") == 200
        assert cfg.get("assistant_name") == "McGraph"

    def test_get_with_value(self):
        cfg = Config(typing_speed=2)
        assert cfg.get("typing_speed") == 2

    def test_get_unknown_key(self):
        """Test get with unknown key returns default."""
        cfg = Config()
        assert cfg.get("unknown_key") is None
        assert cfg.get("unknown_key", "default") == "default"

    def test_default_request_timeout_is_none(self):
        """No timeout unless configured."""
        assert Config().get("request_timeout") is None

    def test_llm_name_is_normalized(self):
        assert Config(llm=" Claude ").llm == "claude"

    def test_unknown_llm_rejected(self):
        with pytest.raises(ValidationError, match="unknown provider"):
            Config(llm="bard")

    def test_log_level_is_normalized(self):
        assert Config(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError, match="unknown log level"):
            Config(log_level="chatty")

    @pytest.mark.parametrize("field, value", [
        ("typing_speed", 0),
        ("typing_interval_ms", 0),
        ("thinking_interval_ms", -5),
        ("max_tokens", 0),
        ("request_timeout", 0),
        ("assistant_name", ""),
    ])
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Config(**{field: value})


# ============================================================================
# ConfigManager Tests
# ============================================================================

@pytest.fixture
def config_file(tmp_path):
    """Point ConfigManager at a temporary directory."""
    config_dir = tmp_path / ".mcgraph"
    config_dir.mkdir()
    path = config_dir / "config.json"
    with patch.object(ConfigManager, "CONFIG_DIR", config_dir):
        with patch.object(ConfigManager, "CONFIG_FILE", path):
            yield path


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_nonexistent_config(self, config_file):
        """Test loading config when file doesn't exist (without creating)."""
        cfg = ConfigManager().load(create_if_missing=False)
        assert cfg.llm is None
        assert not config_file.exists()

    def test_load_creates_default_config(self, config_file):
        """Test that load creates default config file if missing."""
        cfg = ConfigManager().load(create_if_missing=True)
        assert cfg.llm is None
        assert config_file.exists()
        data = json.loads(config_file.read_text())
        assert data["llm"] == "openai"
        assert "model_path" in data

    def test_default_file_loads_as_defaults(self, config_file):
        """A freshly created file has no customized settings."""
        mgr = ConfigManager()
        mgr.load()
        mgr2 = ConfigManager()
        assert mgr2.list_settings() == {}
        assert mgr2.get("llm") == "openai"

    def test_save_and_load_config(self, config_file):
        """Test saving and loading config."""
        ConfigManager().save(Config(llm="gemini", typing_speed=6))

        loaded = ConfigManager().load()
        assert loaded.llm == "gemini"
        assert loaded.typing_speed == 6

    def test_save_preserves_unknown_keys(self, config_file):
        """Keys written by hand survive a save."""
        config_file.write_text(json.dumps({"_comment": "mine", "llm": "openai"}))
        ConfigManager().save(Config(llm="claude"))

        data = json.loads(config_file.read_text())
        assert data["_comment"] == "mine"
        assert data["llm"] == "claude"

    def test_set_value(self, config_file):
        """Test setting a config value."""
        ConfigManager().set("llm", "deepseek")
        assert ConfigManager().load().llm == "deepseek"

    def test_set_coerces_strings(self, config_file):
        """Values from the command line are validated against field types."""
        mgr = ConfigManager()
        mgr.set("typing_speed", "10")
        mgr.set("request_timeout", "2.5")
        loaded = ConfigManager().load()
        assert loaded.typing_speed == 10
        assert loaded.request_timeout == 2.5

    def test_set_preserves_other_values(self, config_file):
        """Test that setting one value preserves other existing values."""
        ConfigManager().set("llm", "claude")
        ConfigManager().set("typing_speed", 2)
        ConfigManager().set("assistant_name", "Graph")

        final = ConfigManager().load(create_if_missing=False)
        assert final.llm == "claude"
        assert final.typing_speed == 2
        assert final.assistant_name == "Graph"

    def test_set_unknown_key_raises(self, config_file):
        """Test that setting unknown key raises ValueError."""
        with pytest.raises(ValueError, match="Unknown config key"):
            ConfigManager().set("unknown_key", "value")

    def test_set_invalid_value_raises(self, config_file):
        with pytest.raises(ValueError, match="Invalid value for typing_speed"):
            ConfigManager().set("typing_speed", "fast")

    def test_set_zero_typing_speed_rejected(self, config_file):
        """A speed that could never finish revealing a reply is refused up front."""
        mgr = ConfigManager()
        with pytest.raises(ValueError, match="Invalid value for typing_speed"):
            mgr.set("typing_speed", "0")
        assert ConfigManager().get("typing_speed") == 4

    def test_set_llm_normalizes_case(self, config_file):
        ConfigManager().set("llm", "Gemini")
        assert json.loads(config_file.read_text())["llm"] == "gemini"

    def test_unset_value(self, config_file):
        """Test unsetting a config value."""
        mgr = ConfigManager()
        mgr.set("llm", "claude")
        mgr.set("typing_speed", 2)
        mgr.unset("llm")

        loaded = ConfigManager().load()
        assert loaded.llm is None
        assert loaded.typing_speed == 2
        assert ConfigManager().get("llm") == "openai"

    def test_unset_unknown_key_raises(self, config_file):
        with pytest.raises(ValueError, match="Unknown config key"):
            ConfigManager().unset("nope")

    def test_list_settings(self, config_file):
        """Test listing non-default settings."""
        mgr = ConfigManager()
        mgr.set("llm", "claude")
        mgr.set("typing_speed", 4)  # Same as default

        assert mgr.list_settings() == {"llm": "claude"}

    def test_reset(self, config_file):
        """Test resetting config to defaults."""
        mgr = ConfigManager()
        mgr.set("llm", "claude")
        assert config_file.exists()

        mgr.reset()
        assert not config_file.exists()
        assert mgr.load().llm is None

    def test_load_invalid_json(self, config_file):
        """Test loading invalid JSON returns defaults."""
        config_file.write_text("not valid json")
        cfg = ConfigManager().load()
        assert cfg.llm is None

    def test_load_invalid_schema(self, config_file):
        """Test loading invalid schema returns defaults."""
        config_file.write_text('{"typing_speed": "not a number"}')
        cfg = ConfigManager().load()
        assert cfg.typing_speed is None


# ============================================================================
# Singleton Tests
# ============================================================================

class TestSingleton:
    """Tests for singleton functions."""

    def test_get_config_manager_returns_same_instance(self, config_file):
        import mcgraph.config.config as config_module

        config_module._manager = None
        try:
            assert get_config_manager() is get_config_manager()
        finally:
            config_module._manager = None

    def test_get_config_returns_config(self, config_file):
        import mcgraph.config.config as config_module

        config_module._manager = None
        try:
            assert isinstance(get_config(), Config)
        finally:
            config_module._manager = None


# ============================================================================
# Test Runner
# ============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
