"""설정 로더 테스트."""

import json

from config import load_config


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "missing.json")
    assert config["editor"]["max_history"] == 50
    assert config["export"]["format"] == "png"
    assert config["layer"]["color"] == "#fbbf24"


def test_user_values_are_deep_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"export": {"quality": 0.5}, "backdrop": {"mode": "blur"}}),
                    encoding="utf-8")
    config = load_config(path)
    assert config["export"] == {"format": "png", "quality": 0.5}
    assert config["backdrop"]["mode"] == "blur"
    assert config["backdrop"]["blur_radius"] == 12


def test_returned_config_is_independent(tmp_path):
    first = load_config(tmp_path / "missing.json")
    first["editor"]["max_history"] = 1
    assert load_config(tmp_path / "missing.json")["editor"]["max_history"] == 50
