import logging

from layout_builder.config import ConfigManager


def test_is_a_singleton():
    assert ConfigManager() is ConfigManager()


def test_reset_drops_cached_instance():
    first = ConfigManager()
    ConfigManager.reset()
    assert ConfigManager() is not first


def test_packaged_defaults_are_loaded():
    cfg = ConfigManager()
    layout = cfg.get_layout_defaults()
    assert layout["default_content"]["row"] == "New row"
    assert cfg.get("layout", "undo.max_history") == 50
    assert cfg.get("layout", "editor.editable") is True
    assert cfg.get_logging_config()["version"] == 1


def test_dotted_lookup_default():
    assert ConfigManager().get("layout", "editor.missing", "fallback") == "fallback"
    assert ConfigManager().get("nope", "a.b") is None


def test_user_overrides_merge_per_key(isolated_config):
    (isolated_config / "layout_defaults.yml").write_text("undo:\n  max_history: 5\n", encoding="utf-8")
    ConfigManager.reset()
    cfg = ConfigManager()
    assert cfg.get("layout", "undo.max_history") == 5
    assert cfg.get("layout", "default_content.column") == "New column"


def test_invalid_user_file_is_ignored(isolated_config, caplog):
    (isolated_config / "layout_defaults.yml").write_text("undo: [unclosed\n", encoding="utf-8")
    ConfigManager.reset()
    with caplog.at_level(logging.ERROR):
        cfg = ConfigManager()
    assert cfg.get("layout", "undo.max_history") == 50
    assert "Could not parse user config" in caplog.text


def test_non_mapping_user_file_is_ignored(isolated_config):
    (isolated_config / "logging.yml").write_text("- just\n- a list\n", encoding="utf-8")
    ConfigManager.reset()
    assert ConfigManager().get_logging_config()["version"] == 1
