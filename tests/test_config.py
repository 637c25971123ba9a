# tests/test_config.py
import json

from ghost_complete.utils.config_manager import ConfigRegistry, GroupConfig, clean_params


def test_unconfigured_group_gets_defaults():
    reg = ConfigRegistry()
    cfg = reg.resolve("nobody")
    assert cfg == GroupConfig()
    assert cfg.max_words == 300 and cfg.max_suggestions == 5
    assert cfg.storage_sync_delay == 0.6 and cfg.idle_cleanup_delay == 2.0


def test_partial_override_keeps_other_defaults():
    reg = ConfigRegistry()
    reg.set_group_config("g", {"MAX_WORDS": 50, "max-suggestions": "3"})
    cfg = reg.resolve("g")
    assert cfg.max_words == 50
    assert cfg.max_suggestions == 3
    assert cfg.max_patterns == 100
    assert reg.resolve("") == GroupConfig()


def test_overrides_accumulate():
    reg = ConfigRegistry()
    reg.set_group_config("g", {"max_words": 10})
    reg.set_group_config("g", {"max_total": 4})
    cfg = reg.get_group_config("g")
    assert (cfg.max_words, cfg.max_total) == (10, 4)


def test_bad_values_and_unknown_keys_are_dropped():
    out = clean_params({"max_words": "lots", "colour": "red", "max_total": True,
                        "debounce_delay": -1, "max_stable": 0})
    assert out == {"max_stable": 1}


def test_classes_merge():
    reg = ConfigRegistry(GroupConfig(classes={"list": "base-list"}))
    reg.set_group_config("g", classes={"item": "my-item"})
    assert reg.resolve("g").classes == {"list": "base-list", "item": "my-item"}


def test_apply_json_ignores_malformed_input():
    reg = ConfigRegistry()
    assert reg.apply_json("g", "{not json", "[]") == GroupConfig()
    reg.apply_json("g", '{"MAX_PATTERNS": 7}', '{"list": "x"}')
    cfg = reg.resolve("g")
    assert cfg.max_patterns == 7
    assert cfg.classes == {"list": "x"}


def test_eviction_ceiling():
    assert GroupConfig(max_words=10).eviction_ceiling() == 8
    assert GroupConfig(max_words=1).eviction_ceiling() == 1
    assert GroupConfig(max_words=10, stable_words=50).eviction_ceiling() == 10
    assert GroupConfig(max_words=300).eviction_ceiling() == 240


def test_save_and_load_round_trip(tmp_path):
    path = str(tmp_path / "conf" / "config.json")
    reg = ConfigRegistry()
    reg.set_group_config("search", {"max_words": 42})
    reg.save(path)

    other = ConfigRegistry()
    other.load(path)
    assert other.resolve("search").max_words == 42
    assert other.groups() == ["search"]
    assert other.resolve("") == GroupConfig()


def test_load_missing_or_broken_file_changes_nothing(tmp_path):
    reg = ConfigRegistry()
    reg.load(str(tmp_path / "absent.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf8")
    reg.load(str(broken))
    assert reg.groups() == []
    assert reg.resolve("") == GroupConfig()


def test_load_default_section(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default": {"MIN_WORD_LENGTH": 2}}), encoding="utf8")
    reg = ConfigRegistry()
    reg.load(str(path))
    assert reg.resolve("anything").min_word_length == 2


def test_reset():
    reg = ConfigRegistry()
    reg.set_group_config("a", {"max_words": 3})
    reg.set_group_config("b", {"max_words": 4})
    reg.reset("a")
    assert reg.groups() == ["b"]
    reg.reset()
    assert reg.groups() == []


def test_ui_only_fields_are_carried_through():
    reg = ConfigRegistry()
    cfg = reg.set_group_config("g", {"DEBOUNCE_DELAY": "0.3"}, {"item": "hint"})
    assert cfg.debounce_delay == 0.3
    assert cfg.as_dict()["debounce_delay"] == 0.3
    assert cfg.as_dict()["classes"] == {"item": "hint"}
